"""
Command line entry point.
"""

from pathlib import Path

import pytest

from headless_cms.adapters.sqlite.repos import SQLiteContentTypeRepo
from headless_cms.cli import main
from headless_cms.components.content_types import (
    CreateContentTypeInput,
    FieldDefinition,
    run_create,
)
from headless_cms.components.rules import RuleRegistries

PROJECT_ROOT = Path(__file__).resolve().parents[2]


@pytest.fixture
def config(tmp_path: Path) -> Path:
    path = tmp_path / "cms.yaml"
    path.write_text(
        f"""
database:
  path: {tmp_path / "db" / "cms.db"}
  migrations_dir: {PROJECT_ROOT / "migrations"}
plugins:
  directories: [{PROJECT_ROOT / "plugins"}]
"""
    )
    return path


def test_migrate_creates_database(config: Path, tmp_path: Path, capsys) -> None:
    main(["--config", str(config), "migrate"])
    assert (tmp_path / "db" / "cms.db").exists()
    assert "Database ready" in capsys.readouterr().out


def test_rules_lists_builtin_and_plugin_rules(config: Path, capsys) -> None:
    main(["--config", str(config), "rules"])
    out = capsys.readouterr().out
    assert "TruncateByLength [text] (truncationLength:integer)" in out
    assert "NumericRangeRule [numeric] (min:number?, max:number?)" in out
    assert "Slugify" in out


def test_publish_latest_draft(config: Path, tmp_path: Path, capsys) -> None:
    main(["--config", str(config), "migrate"])
    repo = SQLiteContentTypeRepo(str(tmp_path / "db" / "cms.db"), RuleRegistries.build())
    run_create(
        CreateContentTypeInput(name="page", fields=[FieldDefinition(name="body", type="markdown")]),
        repo=repo,
        registries=RuleRegistries.build(),
    ).unwrap()

    main(["--config", str(config), "publish", "page"])

    assert "Published 'page' as version 1." in capsys.readouterr().out


def test_publish_without_draft_exits(config: Path) -> None:
    main(["--config", str(config), "migrate"])
    with pytest.raises(SystemExit) as exc:
        main(["--config", str(config), "publish", "missing"])
    assert exc.value.code == 1


def test_missing_config_exits(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["--config", str(tmp_path / "absent.yaml"), "rules"])
    assert exc.value.code == 1
