"""
Publish workflow: version numbering, supersession and failure handling.
"""

from __future__ import annotations

from datetime import datetime

import pytest

from headless_cms.adapters.authorization import StaticAuthorization
from headless_cms.components.content_types import (
    DeleteContentTypeInput,
    PublishContentTypeInput,
    run,
    run_delete,
    run_publish,
)
from headless_cms.domain.content_types import ContentType
from headless_cms.domain.fields import Field


def draft(name: str = "article", version: int = 1) -> ContentType:
    return ContentType.draft(name, [Field(name="title", type="text")], version=version)


class TestFirstPublish:
    def test_brand_new_draft_becomes_version_one(self, type_repo, clock, now: datetime) -> None:
        type_repo.seed(draft())

        result = run_publish(PublishContentTypeInput(name="article"), repo=type_repo, time=clock)

        assert result.success
        published = result.unwrap()
        assert published.version == 1
        assert published.status == "published"
        assert published.created_at == now
        assert type_repo.commits == 1

    def test_draft_stays_addressable(self, type_repo, clock) -> None:
        pending = draft()
        type_repo.seed(pending)

        run_publish(PublishContentTypeInput(name="article"), repo=type_repo, time=clock)

        assert type_repo.get_by_id(pending.id) is pending
        assert pending.status == "draft"


class TestSupersession:
    def test_prior_published_version_is_retired(self, type_repo, clock) -> None:
        first = draft().publish_as(1)
        type_repo.seed(draft(), first, draft(version=2))

        result = run_publish(PublishContentTypeInput(name="article"), repo=type_repo, time=clock)

        assert result.success
        assert result.unwrap().version == 2
        assert first.lifecycle_state == "retired"
        assert type_repo.get_latest_published("article") is result.value

    def test_only_one_live_published_version(self, type_repo, clock) -> None:
        type_repo.seed(draft())
        run_publish(PublishContentTypeInput(name="article"), repo=type_repo, time=clock)
        type_repo.seed(draft(version=2))
        run_publish(PublishContentTypeInput(name="article"), repo=type_repo, time=clock)

        live = [
            ct for ct in type_repo.records if ct.status == "published" and not ct.is_deleted
        ]
        assert [ct.version for ct in live] == [2]

    def test_new_version_follows_previous_publication(self, type_repo, clock) -> None:
        type_repo.seed(draft().publish_as(4), draft(version=5))
        result = run_publish(PublishContentTypeInput(name="article"), repo=type_repo, time=clock)
        assert result.unwrap().version == 5

    def test_deleted_publication_number_not_reused(self, type_repo, clock) -> None:
        type_repo.seed(draft())
        first = run_publish(
            PublishContentTypeInput(name="article"), repo=type_repo, time=clock
        ).unwrap()
        run_delete(DeleteContentTypeInput(first.id), repo=type_repo)
        type_repo.seed(draft(version=2))

        result = run_publish(PublishContentTypeInput(name="article"), repo=type_repo, time=clock)

        assert result.unwrap().version == 2
        assert type_repo.get_latest_published("article") is result.value


class TestRejections:
    def test_no_draft_is_not_found(self, type_repo) -> None:
        result = run_publish(PublishContentTypeInput(name="missing"), repo=type_repo)
        assert result.error is not None
        assert result.error.kind == "not_found"

    def test_already_published_is_conflict(self, type_repo, clock) -> None:
        type_repo.seed(draft())
        run_publish(PublishContentTypeInput(name="article"), repo=type_repo, time=clock)
        records_before = len(type_repo.records)

        result = run_publish(PublishContentTypeInput(name="article"), repo=type_repo, time=clock)

        assert result.error is not None
        assert result.error.kind == "conflict"
        assert len(type_repo.records) == records_before

    def test_forbidden_when_not_allowed(self, type_repo) -> None:
        type_repo.seed(draft())
        result = run_publish(
            PublishContentTypeInput(name="article"),
            repo=type_repo,
            authorization=StaticAuthorization(set()),
        )
        assert result.error is not None
        assert result.error.kind == "forbidden"
        assert type_repo.commits == 0


class TestUnitOfWork:
    def test_failed_save_rolls_back_and_raises(self, type_repo, clock) -> None:
        first = draft().publish_as(1)
        type_repo.seed(first, draft(version=2))
        type_repo.fail_on_save = True

        with pytest.raises(RuntimeError):
            run_publish(PublishContentTypeInput(name="article"), repo=type_repo, time=clock)

        assert type_repo.rollbacks == 1
        assert type_repo.staged == []
        assert first.lifecycle_state == "published"


class TestDispatch:
    def test_run_routes_publish_input(self, type_repo) -> None:
        type_repo.seed(draft())
        assert run(PublishContentTypeInput(name="article"), repo=type_repo).success

    def test_run_rejects_unknown_input(self, type_repo) -> None:
        with pytest.raises(ValueError):
            run("publish", repo=type_repo)  # type: ignore[arg-type]
