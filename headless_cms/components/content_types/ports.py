"""
Content types component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from headless_cms.domain.content_types import ContentType, ContentTypeStatus


class ContentTypeRepoPort(Protocol):
    """
    Repository interface for content type persistence.

    ``soft_delete`` and ``add`` are staged and become visible together on
    ``save_changes``; ``rollback`` discards whatever is staged.
    """

    def get_by_id(self, content_type_id: UUID, include_deleted: bool = False) -> ContentType | None:
        """Get a content type by ID. Retired records only when asked."""
        ...

    def get_latest_draft(self, name: str) -> ContentType | None:
        """Get the most recent live revision of ``name``."""
        ...

    def get_latest_published(self, name: str) -> ContentType | None:
        """Get the live published version of ``name``."""
        ...

    def get_max_published_version(self, name: str) -> int | None:
        """Highest version ever published for ``name``, retired records included."""
        ...

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
        """List live content types. Returns (items, total_count)."""
        ...

    def soft_delete(self, content_type: ContentType) -> None:
        """Stage retirement of a content type."""
        ...

    def add(self, content_type: ContentType) -> None:
        """Stage a new content type record."""
        ...

    def save_changes(self) -> None:
        """Commit staged changes atomically."""
        ...

    def rollback(self) -> None:
        """Discard staged changes."""
        ...


class AuthorizationPort(Protocol):
    """Decides whether the current caller may perform an action."""

    def is_allowed(self, action: str, resource: str) -> bool:
        ...


class TimePort(Protocol):
    def now_utc(self) -> datetime:
        ...
