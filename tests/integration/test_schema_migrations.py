import sqlite3
from pathlib import Path

import pytest

from headless_cms.adapters.sqlite.migrator import SQLiteMigrator

MIGRATIONS_DIR = str(Path(__file__).resolve().parents[2] / "migrations")


@pytest.fixture
def temp_db_path(tmp_path):
    return str(tmp_path / "test_db.sqlite")


def table_names(db_path: str) -> set[str]:
    conn = sqlite3.connect(db_path)
    try:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
        return {r[0] for r in rows}
    finally:
        conn.close()


def test_migrator_creates_content_schema(temp_db_path):
    applied = SQLiteMigrator(temp_db_path, MIGRATIONS_DIR).run_migrations()

    assert applied == ["0001_content_schema.sql"]
    assert {
        "_migrations",
        "content_types",
        "fields",
        "field_rules",
        "rule_parameters",
        "content_items",
        "content_item_values",
    } <= table_names(temp_db_path)


def test_migrator_is_idempotent(temp_db_path):
    migrator = SQLiteMigrator(temp_db_path, MIGRATIONS_DIR)
    migrator.run_migrations()
    assert migrator.run_migrations() == []


def test_down_section_is_not_applied(tmp_path, temp_db_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "0001_sample.sql").write_text(
        "CREATE TABLE sample (id TEXT);\n-- Down\nDROP TABLE sample;\n"
    )

    SQLiteMigrator(temp_db_path, str(migrations)).run_migrations()

    assert "sample" in table_names(temp_db_path)


def test_failed_migration_raises(tmp_path, temp_db_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "0001_broken.sql").write_text("CREATE TABLE oops (\n")

    with pytest.raises(RuntimeError, match="0001_broken.sql"):
        SQLiteMigrator(temp_db_path, str(migrations)).run_migrations()


def test_only_one_live_published_version_per_name(temp_db_path):
    SQLiteMigrator(temp_db_path, MIGRATIONS_DIR).run_migrations()
    conn = sqlite3.connect(temp_db_path)
    insert = (
        "INSERT INTO content_types (id, name, status, version, created_at, is_deleted) "
        "VALUES (?, 'article', 'published', ?, '2026-01-01T00:00:00+00:00', 0)"
    )
    try:
        conn.execute(insert, ("a", 1))
        with pytest.raises(sqlite3.IntegrityError):
            conn.execute(insert, ("b", 2))
    finally:
        conn.close()
