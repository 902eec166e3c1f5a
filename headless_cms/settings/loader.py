import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from headless_cms.settings.models import Settings

CONFIG_PATH_ENV = "CMS_CONFIG_PATH"
DATA_DIR_ENV = "CMS_DATA_DIR"
DEFAULT_CONFIG_PATH = "cms.yaml"


def resolve_config_path(path: Path | str | None = None) -> Path:
    if path is not None:
        return Path(path)
    return Path(os.environ.get(CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH))


def load_settings(path: Path | str | None = None) -> Settings:
    """
    Load and validate the settings file.
    Raises FileNotFoundError if file missing.
    Raises ValueError if the YAML or the schema is invalid.

    When CMS_DATA_DIR is set, the database file is placed in that directory.
    """
    config_path = resolve_config_path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Settings file not found at: {config_path}")

    with open(config_path) as f:
        content = f.read()

    try:
        data = yaml.safe_load(content) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML syntax in settings file: {e}") from e

    try:
        settings = Settings.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Settings validation failed:\n{e}") from e

    data_dir = os.environ.get(DATA_DIR_ENV)
    if data_dir:
        db_name = Path(settings.database.path).name
        settings.database.path = str(Path(data_dir) / db_name)

    return settings
