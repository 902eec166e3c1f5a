from datetime import UTC, datetime, timedelta
from uuid import UUID

import pytest

from headless_cms.components.rules import RuleRegistries
from headless_cms.domain.content_items import ContentItem
from headless_cms.domain.content_types import ContentType

# --- In-memory collaborators ---


class FixedClock:
    """Clock that advances one second per reading."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def now_utc(self) -> datetime:
        value = self.current
        self.current = self.current + timedelta(seconds=1)
        return value


class InMemoryContentTypeRepo:
    """Content type repository with a staged unit of work."""

    def __init__(self) -> None:
        self.records: list[ContentType] = []
        self.staged: list[tuple[str, ContentType]] = []
        self.commits = 0
        self.rollbacks = 0
        self.fail_on_save = False

    def seed(self, *content_types: ContentType) -> None:
        self.records.extend(content_types)

    def _live(self, name: str) -> list[ContentType]:
        return [ct for ct in self.records if ct.name == name and not ct.is_deleted]

    def _latest(self, candidates: list[ContentType]) -> ContentType | None:
        if not candidates:
            return None
        order = {id(ct): i for i, ct in enumerate(self.records)}
        return max(candidates, key=lambda ct: (ct.version, order[id(ct)]))

    def get_by_id(self, content_type_id: UUID, include_deleted: bool = False) -> ContentType | None:
        for ct in self.records:
            if ct.id == content_type_id and (include_deleted or not ct.is_deleted):
                return ct
        return None

    def get_latest_draft(self, name: str) -> ContentType | None:
        return self._latest(self._live(name))

    def get_latest_published(self, name: str) -> ContentType | None:
        return self._latest([ct for ct in self._live(name) if ct.status == "published"])

    def get_max_published_version(self, name: str) -> int | None:
        versions = [
            ct.version for ct in self.records if ct.name == name and ct.status == "published"
        ]
        return max(versions, default=None)

    def list(
        self,
        *,
        status=None,
        name_contains=None,
        sort_by="name",
        descending=False,
        limit=20,
        offset=0,
    ) -> tuple[list[ContentType], int]:
        items = [ct for ct in self.records if not ct.is_deleted]
        if status:
            items = [ct for ct in items if ct.status == status]
        if name_contains:
            items = [ct for ct in items if name_contains in ct.name]
        items.sort(key=lambda ct: getattr(ct, sort_by), reverse=descending)
        return items[offset : offset + limit], len(items)

    def add(self, content_type: ContentType) -> None:
        self.staged.append(("add", content_type))

    def soft_delete(self, content_type: ContentType) -> None:
        self.staged.append(("soft_delete", content_type))

    def save_changes(self) -> None:
        if self.fail_on_save:
            raise RuntimeError("database unavailable")
        for action, ct in self.staged:
            if action == "add":
                self.records.append(ct)
            else:
                ct.soft_delete()
        self.staged.clear()
        self.commits += 1

    def rollback(self) -> None:
        self.staged.clear()
        self.rollbacks += 1


class InMemoryContentItemRepo:
    def __init__(self) -> None:
        self.items: dict[UUID, ContentItem] = {}

    def get_by_id(self, item_id: UUID) -> ContentItem | None:
        return self.items.get(item_id)

    def save(self, item: ContentItem) -> ContentItem:
        self.items[item.id] = item
        return item

    def list(
        self, content_type_id: UUID, *, limit: int = 20, offset: int = 0
    ) -> tuple[list[ContentItem], int]:
        matching = sorted(
            (i for i in self.items.values() if i.content_type_id == content_type_id),
            key=lambda i: (i.created_at, str(i.id)),
        )
        return matching[offset : offset + limit], len(matching)


# --- Fixtures ---


@pytest.fixture
def now() -> datetime:
    """Fixed 'now' time for testing."""
    return datetime(2026, 6, 15, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def clock(now: datetime) -> FixedClock:
    return FixedClock(now)


@pytest.fixture
def registries() -> RuleRegistries:
    """Registries holding only the built-in rules."""
    return RuleRegistries.build()


@pytest.fixture
def type_repo() -> InMemoryContentTypeRepo:
    return InMemoryContentTypeRepo()


@pytest.fixture
def item_repo() -> InMemoryContentItemRepo:
    return InMemoryContentItemRepo()
