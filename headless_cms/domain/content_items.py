"""
Content item entity.

Values are keyed by field id and written only through the field service,
so every stored value has passed its field's transform and validate steps.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4


@dataclass(frozen=True)
class FieldValue:
    value: Any
    updated_at: datetime


@dataclass(eq=False)
class ContentItem:
    title: str
    content_type_id: UUID
    id: UUID = field(default_factory=uuid4)
    values: dict[UUID, FieldValue] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def get_value(self, field_id: UUID) -> Any:
        stored = self.values.get(field_id)
        return stored.value if stored is not None else None

    def store_value(self, field_id: UUID, value: Any, when: datetime | None = None) -> None:
        now = when or datetime.now(UTC)
        self.values[field_id] = FieldValue(value=value, updated_at=now)
        self.updated_at = now
