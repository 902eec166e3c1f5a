"""
Content items component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from headless_cms.domain.content_items import ContentItem
from headless_cms.domain.content_types import ContentType


class ContentItemRepoPort(Protocol):
    """Repository interface for content item persistence."""

    def get_by_id(self, item_id: UUID) -> ContentItem | None:
        ...

    def save(self, item: ContentItem) -> ContentItem:
        """Insert or update an item and all of its values."""
        ...

    def list(
        self, content_type_id: UUID, *, limit: int = 20, offset: int = 0
    ) -> tuple[list[ContentItem], int]:
        """List items of one content type, oldest first. Returns (items, total_count)."""
        ...


class ContentTypeLookupPort(Protocol):
    """Read-only access to content type schemas."""

    def get_by_id(self, content_type_id: UUID, include_deleted: bool = False) -> ContentType | None:
        ...


class TimePort(Protocol):
    def now_utc(self) -> datetime:
        ...
