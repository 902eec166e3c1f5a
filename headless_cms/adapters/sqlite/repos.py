import json
import logging
import sqlite3
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from headless_cms.components.rules.codec import encode_parameters
from headless_cms.components.rules.component import RuleRegistries
from headless_cms.components.rules.models import RuleParameterRecord, RuleRecord
from headless_cms.domain.content_items import ContentItem, FieldValue
from headless_cms.domain.content_types import ContentType, ContentTypeStatus
from headless_cms.domain.fields import Field
from headless_cms.domain.rules import Rule

logger = logging.getLogger(__name__)

_SORT_COLUMNS = {"name": "name", "version": "version", "created_at": "created_at"}


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def _parse_dt(value: str | None) -> datetime | None:
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)


def _json_default(value: Any) -> Any:
    # Numeric field values may arrive as Decimal.
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class SQLiteContentTypeRepo:
    """
    Content type repository with a unit of work.

    ``add`` and ``soft_delete`` are staged in memory and written in one
    transaction by ``save_changes``. Rules are rebuilt through the registries
    when records are loaded, so an unknown rule type or bad stored parameter
    raises instead of being dropped.
    """

    def __init__(self, db_path: str, registries: RuleRegistries):
        self.db_path = db_path
        self.registries = registries
        self._staged: list[tuple[str, ContentType]] = []

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    # --- Hydration ---

    def _load_rule(self, conn: sqlite3.Connection, row: dict[str, Any]) -> Rule:
        param_rows = conn.execute(
            "SELECT key, value, value_type FROM rule_parameters WHERE rule_id = ? ORDER BY key",
            (row["id"],),
        ).fetchall()
        record = RuleRecord(
            id=UUID(row["id"]),
            field_id=UUID(row["field_id"]),
            type=row["type"],
            parameters=tuple(
                RuleParameterRecord(key=p["key"], value=p["value"], value_type=p["value_type"])
                for p in param_rows
            ),
        )
        if row["kind"] == "validation":
            return self.registries.validation.create_from_record(record)
        return self.registries.transformation.create_from_record(record)

    def _load_fields(self, conn: sqlite3.Connection, content_type_id: str) -> list[Field]:
        field_rows = conn.execute(
            "SELECT * FROM fields WHERE content_type_id = ? ORDER BY position ASC",
            (content_type_id,),
        ).fetchall()

        fields = []
        for f_row in field_rows:
            loaded = Field(
                id=UUID(f_row["id"]),
                name=f_row["name"],
                type=f_row["type"],
                is_required=bool(f_row["is_required"]),
            )
            rule_rows = conn.execute(
                "SELECT * FROM field_rules WHERE field_id = ? ORDER BY position ASC",
                (f_row["id"],),
            ).fetchall()
            rules = [self._load_rule(conn, r) for r in rule_rows]
            loaded.set_validation_rules(
                r for r, row in zip(rules, rule_rows, strict=True) if row["kind"] == "validation"
            )
            loaded.set_transformation_rules(
                r
                for r, row in zip(rules, rule_rows, strict=True)
                if row["kind"] == "transformation"
            )
            fields.append(loaded)
        return fields

    def _row_to_content_type(self, conn: sqlite3.Connection, row: dict[str, Any]) -> ContentType:
        content_type = ContentType(
            id=UUID(row["id"]),
            name=row["name"],
            status=row["status"],
            version=row["version"],
            created_at=_parse_dt(row["created_at"]) or datetime.now(UTC),
            is_deleted=bool(row["is_deleted"]),
            deleted_at=_parse_dt(row["deleted_at"]),
        )
        for f in self._load_fields(conn, row["id"]):
            content_type.fields[f.id] = f
        return content_type

    def _fetch_one(self, query: str, params: tuple[Any, ...]) -> ContentType | None:
        conn = self._get_conn()
        try:
            row = conn.execute(query, params).fetchone()
            if not row:
                return None
            return self._row_to_content_type(conn, row)
        finally:
            conn.close()

    # --- Queries ---

    def get_by_id(self, content_type_id: UUID, include_deleted: bool = False) -> ContentType | None:
        query = "SELECT * FROM content_types WHERE id = ?"
        if not include_deleted:
            query += " AND is_deleted = 0"
        return self._fetch_one(query, (str(content_type_id),))

    def get_latest_draft(self, name: str) -> ContentType | None:
        return self._fetch_one(
            """
            SELECT * FROM content_types
            WHERE name = ? AND is_deleted = 0
            ORDER BY version DESC, seq DESC
            LIMIT 1
            """,
            (name,),
        )

    def get_latest_published(self, name: str) -> ContentType | None:
        return self._fetch_one(
            """
            SELECT * FROM content_types
            WHERE name = ? AND status = 'published' AND is_deleted = 0
            ORDER BY version DESC, seq DESC
            LIMIT 1
            """,
            (name,),
        )

    def get_max_published_version(self, name: str) -> int | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                """
                SELECT MAX(version) AS v FROM content_types
                WHERE name = ? AND status = 'published'
                """,
                (name,),
            ).fetchone()
            return row["v"]
        finally:
            conn.close()

    def list(
        self,
        *,
        status: ContentTypeStatus | None = None,
        name_contains: str | None = None,
        sort_by: str = "name",
        descending: bool = False,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[ContentType], int]:
        where = ["is_deleted = 0"]
        params: list[Any] = []
        if status:
            where.append("status = ?")
            params.append(status)
        if name_contains:
            where.append("name LIKE ?")
            params.append(f"%{name_contains}%")
        clause = " AND ".join(where)

        column = _SORT_COLUMNS.get(sort_by)
        if column is None:
            raise ValueError(f"Unsupported sort key '{sort_by}'")
        direction = "DESC" if descending else "ASC"

        conn = self._get_conn()
        try:
            total = conn.execute(
                f"SELECT COUNT(*) AS n FROM content_types WHERE {clause}", params
            ).fetchone()["n"]
            rows = conn.execute(
                f"""
                SELECT * FROM content_types WHERE {clause}
                ORDER BY {column} {direction}, version DESC, seq DESC
                LIMIT ? OFFSET ?
                """,
                [*params, limit, offset],
            ).fetchall()
            return [self._row_to_content_type(conn, r) for r in rows], total
        finally:
            conn.close()

    # --- Unit of work ---

    def add(self, content_type: ContentType) -> None:
        self._staged.append(("add", content_type))

    def soft_delete(self, content_type: ContentType) -> None:
        self._staged.append(("soft_delete", content_type))

    def rollback(self) -> None:
        self._staged.clear()

    def _insert_rules(
        self,
        conn: sqlite3.Connection,
        field_id: UUID,
        kind: str,
        rules: tuple[Rule, ...],
        start: int,
    ) -> None:
        for position, rule in enumerate(rules, start=start):
            record = RuleRecord(type=rule.type, field_id=field_id)
            conn.execute(
                "INSERT INTO field_rules (id, field_id, kind, type, position) VALUES (?, ?, ?, ?, ?)",
                (str(record.id), str(field_id), kind, rule.type, position),
            )
            for param in encode_parameters(rule.type, rule.parameters):
                conn.execute(
                    """
                    INSERT INTO rule_parameters (rule_id, key, value, value_type)
                    VALUES (?, ?, ?, ?)
                    """,
                    (str(record.id), param.key, param.value, param.value_type),
                )

    def _insert(self, conn: sqlite3.Connection, content_type: ContentType) -> None:
        conn.execute(
            """
            INSERT INTO content_types (id, name, status, version, created_at, is_deleted, deleted_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(content_type.id),
                content_type.name,
                content_type.status,
                content_type.version,
                content_type.created_at.isoformat(),
                int(content_type.is_deleted),
                content_type.deleted_at.isoformat() if content_type.deleted_at else None,
            ),
        )
        for position, f in enumerate(content_type.fields.values()):
            conn.execute(
                """
                INSERT INTO fields (id, content_type_id, name, type, is_required, position)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (str(f.id), str(content_type.id), f.name, f.type, int(f.is_required), position),
            )
            self._insert_rules(conn, f.id, "transformation", f.transformation_rules, 0)
            self._insert_rules(
                conn, f.id, "validation", f.validation_rules, len(f.transformation_rules)
            )

    def save_changes(self) -> None:
        """Write every staged change in one transaction."""
        if not self._staged:
            return
        staged, self._staged = self._staged, []
        deleted_at = datetime.now(UTC)
        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
            for action, content_type in staged:
                if action == "soft_delete":
                    cursor = conn.execute(
                        """
                        UPDATE content_types SET is_deleted = 1, deleted_at = ?
                        WHERE id = ? AND is_deleted = 0
                        """,
                        (deleted_at.isoformat(), str(content_type.id)),
                    )
                    if cursor.rowcount != 1:
                        raise RuntimeError(
                            f"Content type {content_type.id} was already retired or removed"
                        )
                else:
                    self._insert(conn, content_type)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

        for action, content_type in staged:
            if action == "soft_delete":
                content_type.soft_delete(deleted_at)
        logger.debug("Committed %d content type change(s)", len(staged))


class SQLiteContentItemRepo:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def save(self, item: ContentItem) -> ContentItem:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO content_items (id, content_type_id, title, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title=excluded.title,
                    updated_at=excluded.updated_at
                """,
                (
                    str(item.id),
                    str(item.content_type_id),
                    item.title,
                    item.created_at.isoformat(),
                    item.updated_at.isoformat(),
                ),
            )
            conn.execute(
                "DELETE FROM content_item_values WHERE content_item_id = ?", (str(item.id),)
            )
            for field_id, stored in item.values.items():
                conn.execute(
                    """
                    INSERT INTO content_item_values
                    (content_item_id, field_id, value_json, updated_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (
                        str(item.id),
                        str(field_id),
                        json.dumps(stored.value, default=_json_default),
                        stored.updated_at.isoformat(),
                    ),
                )
            conn.commit()
            return item
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _row_to_item(self, conn: sqlite3.Connection, row: dict[str, Any]) -> ContentItem:
        value_rows = conn.execute(
            "SELECT * FROM content_item_values WHERE content_item_id = ?", (row["id"],)
        ).fetchall()

        return ContentItem(
            id=UUID(row["id"]),
            title=row["title"],
            content_type_id=UUID(row["content_type_id"]),
            values={
                UUID(v["field_id"]): FieldValue(
                    value=json.loads(v["value_json"]),
                    updated_at=_parse_dt(v["updated_at"]) or datetime.now(UTC),
                )
                for v in value_rows
            },
            created_at=_parse_dt(row["created_at"]) or datetime.now(UTC),
            updated_at=_parse_dt(row["updated_at"]) or datetime.now(UTC),
        )

    def get_by_id(self, item_id: UUID) -> ContentItem | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM content_items WHERE id = ?", (str(item_id),)
            ).fetchone()
            if not row:
                return None
            return self._row_to_item(conn, row)
        finally:
            conn.close()

    def list(
        self, content_type_id: UUID, *, limit: int = 20, offset: int = 0
    ) -> tuple[list[ContentItem], int]:
        conn = self._get_conn()
        try:
            total = conn.execute(
                "SELECT COUNT(*) AS n FROM content_items WHERE content_type_id = ?",
                (str(content_type_id),),
            ).fetchone()["n"]
            rows = conn.execute(
                """
                SELECT * FROM content_items WHERE content_type_id = ?
                ORDER BY created_at ASC, id ASC
                LIMIT ? OFFSET ?
                """,
                (str(content_type_id), limit, offset),
            ).fetchall()
            return [self._row_to_item(conn, r) for r in rows], total
        finally:
            conn.close()
