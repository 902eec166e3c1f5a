"""
Content type entity and its lifecycle state machine.

Lifecycle: draft -> published -> retired. Publishing never mutates a draft;
it materialises a new published record. Retirement is a soft delete that
keeps the record for content items created against it.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from headless_cms.domain.fields import Field

ContentTypeStatus = Literal["draft", "published"]
LifecycleState = Literal["draft", "published", "retired"]

LIFECYCLE_TRANSITIONS: dict[LifecycleState, set[LifecycleState]] = {
    "draft": {"published", "retired"},
    "published": {"retired"},
    "retired": set(),
}


def can_transition(from_state: LifecycleState, to_state: LifecycleState) -> bool:
    return to_state in LIFECYCLE_TRANSITIONS.get(from_state, set())


@dataclass(eq=False)
class ContentType:
    """A named, versioned schema made of fields keyed by field id."""

    name: str
    status: ContentTypeStatus = "draft"
    version: int = 1
    id: UUID = field(default_factory=uuid4)
    fields: dict[UUID, Field] = field(default_factory=dict)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    is_deleted: bool = False
    deleted_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Content type name must not be empty.")
        if self.version < 1:
            raise ValueError("Content type version must be at least 1.")

    @classmethod
    def draft(
        cls,
        name: str,
        fields: Iterable[Field],
        version: int = 1,
        created_at: datetime | None = None,
    ) -> ContentType:
        content_type = cls(name=name, status="draft", version=version)
        if created_at is not None:
            content_type.created_at = created_at
        for f in fields:
            content_type.add_field(f)
        return content_type

    @property
    def lifecycle_state(self) -> LifecycleState:
        if self.is_deleted:
            return "retired"
        return self.status

    def add_field(self, new_field: Field) -> None:
        if any(f.name == new_field.name for f in self.fields.values()):
            raise ValueError(f"Field '{new_field.name}' already exists in '{self.name}'.")
        self.fields[new_field.id] = new_field

    def has_field(self, field_id: UUID) -> bool:
        return field_id in self.fields

    def get_field(self, field_id: UUID) -> Field | None:
        return self.fields.get(field_id)

    def get_field_by_name(self, name: str) -> Field | None:
        for f in self.fields.values():
            if f.name == name:
                return f
        return None

    def soft_delete(self, when: datetime | None = None) -> None:
        if not can_transition(self.lifecycle_state, "retired"):
            raise ValueError(f"Content type '{self.name}' v{self.version} is already retired.")
        self.is_deleted = True
        self.deleted_at = when or datetime.now(UTC)

    def publish_as(self, version: int, when: datetime | None = None) -> ContentType:
        """
        Build the published record for this draft at ``version``.

        The draft itself is left untouched.
        """
        if not can_transition(self.lifecycle_state, "published"):
            raise ValueError(
                f"Cannot publish content type '{self.name}' from state '{self.lifecycle_state}'."
            )
        published = ContentType(
            name=self.name,
            status="published",
            version=version,
            created_at=when or datetime.now(UTC),
        )
        for f in self.fields.values():
            published.add_field(f.copy_structure())
        return published
