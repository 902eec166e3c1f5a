"""
Settings file loading and validation.
"""

from pathlib import Path

import pytest

from headless_cms.settings.loader import load_settings, resolve_config_path


def write_config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "cms.yaml"
    path.write_text(body)
    return path


class TestLoadSettings:
    def test_valid_file(self, tmp_path: Path) -> None:
        path = write_config(
            tmp_path,
            """
database:
  path: ./var/site.db
plugins:
  directories: [./plugins, ./extra]
logging:
  level: debug
api:
  default_page_size: 50
""",
        )

        settings = load_settings(path)

        assert settings.database.path == "./var/site.db"
        assert settings.plugins.directories == ["./plugins", "./extra"]
        assert settings.logging.level == "DEBUG"
        assert settings.api.default_page_size == 50

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(write_config(tmp_path, ""))
        assert settings.database.migrations_dir == "migrations"
        assert settings.plugins.directories == []

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_settings(write_config(tmp_path, "database: [unclosed"))

    @pytest.mark.parametrize(
        "body",
        [
            "logging:\n  level: LOUD\n",
            "api:\n  default_page_size: 0\n",
            "unexpected: true\n",
        ],
    )
    def test_schema_violations(self, tmp_path: Path, body: str) -> None:
        with pytest.raises(ValueError, match="Settings validation failed"):
            load_settings(write_config(tmp_path, body))


class TestEnvironment:
    def test_config_path_from_environment(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setenv("CMS_CONFIG_PATH", str(tmp_path / "other.yaml"))
        assert resolve_config_path() == tmp_path / "other.yaml"

    def test_explicit_path_wins(self, monkeypatch) -> None:
        monkeypatch.setenv("CMS_CONFIG_PATH", "/elsewhere.yaml")
        assert resolve_config_path("local.yaml") == Path("local.yaml")

    def test_data_dir_relocates_database(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setenv("CMS_DATA_DIR", str(tmp_path / "data"))
        settings = load_settings(write_config(tmp_path, "database:\n  path: ./x/site.db\n"))
        assert settings.database.path == str(tmp_path / "data" / "site.db")
