"""
Content items component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

TITLE_REQUIRED = "Content item title is required."
CONTENT_TYPE_ID_REQUIRED = "ContentTypeId is required."
VALUES_REQUIRED = "Values field is empty."
UNKNOWN_FIELD = "Command has unknown field"
INVALID_LIMIT = "Limit must be at least 1."
INVALID_OFFSET = "Offset must not be negative."


@dataclass(frozen=True)
class CreateContentItemInput:
    """Input for creating a content item from raw field values keyed by field id."""

    title: str
    content_type_id: UUID | None
    values: dict[UUID, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class GetContentItemInput:
    content_item_id: UUID


@dataclass(frozen=True)
class SetFieldValueInput:
    """Input for setting one field value on a stored content item."""

    content_item_id: UUID
    field_id: UUID
    value: Any


@dataclass(frozen=True)
class ListContentItemsInput:
    """Input for paging through the items of one content type, oldest first."""

    content_type_id: UUID
    limit: int = 20
    offset: int = 0


@dataclass(frozen=True)
class ContentItemView:
    """A content item with its values keyed by field name."""

    id: UUID
    title: str
    content_type_id: UUID
    content_type_name: str
    content_type_version: int
    values: dict[str, Any]
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class ContentItemSummary:
    id: UUID
    title: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class ContentItemPage:
    """A page of item summaries plus the unpaged total."""

    items: list[ContentItemSummary]
    total: int
    limit: int
    offset: int
