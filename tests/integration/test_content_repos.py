import sqlite3
from datetime import UTC, datetime
from decimal import Decimal
from pathlib import Path
from uuid import uuid4

import pytest

from headless_cms.adapters.sqlite.migrator import SQLiteMigrator
from headless_cms.adapters.sqlite.repos import SQLiteContentItemRepo, SQLiteContentTypeRepo
from headless_cms.components.content_items import (
    CreateContentItemInput,
    GetContentItemInput,
    run_create as create_item,
    run_get as get_item,
)
from headless_cms.components.content_types import (
    CreateContentTypeInput,
    DeleteContentTypeInput,
    FieldDefinition,
    PublishContentTypeInput,
    run_create,
    run_delete,
    run_publish,
)
from headless_cms.components.rules import RuleDefinition, RuleNotRegisteredError
from headless_cms.domain.content_items import ContentItem

MIGRATIONS_DIR = str(Path(__file__).resolve().parents[2] / "migrations")


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "test.db")


@pytest.fixture
def repo(db_path, registries):
    SQLiteMigrator(db_path, MIGRATIONS_DIR).run_migrations()
    return SQLiteContentTypeRepo(db_path, registries)


@pytest.fixture
def item_store(db_path, repo):
    return SQLiteContentItemRepo(db_path)


def article_input(max_length: int = 12) -> CreateContentTypeInput:
    return CreateContentTypeInput(
        name="article",
        fields=[
            FieldDefinition(
                name="title",
                type="text",
                is_required=True,
                validation_rules=[
                    RuleDefinition("MaximumLengthValidationRule", {"max-length": max_length}),
                    RuleDefinition("RegexRule", {"regex": "^[A-Z]"}),
                ],
                transformation_rules=[
                    RuleDefinition("Trim"),
                    RuleDefinition("TruncateByLength", {"truncationLength": 20}),
                ],
            ),
            FieldDefinition(
                name="rating",
                type="numeric",
                validation_rules=[RuleDefinition("NumericRangeRule", {"max": 5})],
            ),
        ],
    )


def create_draft(repo, registries, max_length: int = 12):
    return run_create(article_input(max_length), repo=repo, registries=registries).unwrap()


class TestContentTypeRoundTrip:
    def test_fields_and_rules_survive_storage(self, repo, registries):
        draft = create_draft(repo, registries)

        loaded = repo.get_by_id(draft.id)

        assert loaded is not None
        assert loaded.name == "article"
        assert loaded.status == "draft"
        assert [f.name for f in loaded.fields.values()] == ["title", "rating"]
        title = loaded.get_field_by_name("title")
        assert title is not None
        assert title.is_required
        assert [r.type for r in title.transformation_rules] == ["Trim", "TruncateByLength"]
        assert [r.type for r in title.validation_rules] == [
            "MaximumLengthValidationRule",
            "RegexRule",
        ]
        assert title.validation_rules[0].parameters == {"max-length": 12}
        rating = loaded.get_field_by_name("rating")
        assert rating is not None
        assert rating.validation_rules[0].parameters == {"min": None, "max": 5.0}

    def test_loaded_rules_behave_like_authored_ones(self, repo, registries):
        draft = create_draft(repo, registries)
        title = repo.get_by_id(draft.id).get_field_by_name("title")

        assert title.apply_transformers("  Hello  ") == "Hello"
        assert title.validate("lowercase title").errors == [
            "Maximum length is 12.",
            "Value does not match pattern '^[A-Z]'.",
        ]

    def test_unknown_stored_rule_raises_on_load(self, repo, registries, db_path):
        draft = create_draft(repo, registries)
        conn = sqlite3.connect(db_path)
        conn.execute("UPDATE field_rules SET type = 'RetiredRule' WHERE type = 'RegexRule'")
        conn.commit()
        conn.close()

        with pytest.raises(RuleNotRegisteredError):
            repo.get_by_id(draft.id)


class TestPublishing:
    def test_publish_retires_previous_version(self, repo, registries):
        create_draft(repo, registries)
        first = run_publish(PublishContentTypeInput("article"), repo=repo).unwrap()
        create_draft(repo, registries, max_length=30)

        second = run_publish(PublishContentTypeInput("article"), repo=repo).unwrap()

        assert (first.version, second.version) == (1, 2)
        assert repo.get_by_id(first.id) is None
        retired = repo.get_by_id(first.id, include_deleted=True)
        assert retired is not None
        assert retired.lifecycle_state == "retired"
        latest = repo.get_latest_published("article")
        assert latest is not None
        assert latest.id == second.id
        title = latest.get_field_by_name("title")
        assert title.validation_rules[0].parameters == {"max-length": 30}

    def test_second_publish_without_new_draft_conflicts(self, repo, registries):
        create_draft(repo, registries)
        run_publish(PublishContentTypeInput("article"), repo=repo)

        result = run_publish(PublishContentTypeInput("article"), repo=repo)

        assert result.error is not None
        assert result.error.kind == "conflict"

    def test_new_draft_numbered_after_publication(self, repo, registries):
        create_draft(repo, registries)
        run_publish(PublishContentTypeInput("article"), repo=repo)
        assert create_draft(repo, registries).version == 2

    def test_versions_keep_increasing_after_delete(self, repo, registries):
        create_draft(repo, registries)
        first = run_publish(PublishContentTypeInput("article"), repo=repo).unwrap()
        run_delete(DeleteContentTypeInput(first.id), repo=repo).unwrap()

        assert repo.get_max_published_version("article") == 1
        assert create_draft(repo, registries).version == 2
        second = run_publish(PublishContentTypeInput("article"), repo=repo).unwrap()

        assert second.version == 2
        assert repo.get_max_published_version("article") == 2
        assert repo.get_max_published_version("author") is None

    def test_stale_retirement_rolls_back_whole_unit(self, repo, registries, db_path):
        create_draft(repo, registries)
        published = run_publish(PublishContentTypeInput("article"), repo=repo).unwrap()
        stale = repo.get_by_id(published.id)
        repo.soft_delete(published)
        repo.save_changes()

        draft = create_draft(repo, registries)
        repo.add(draft.publish_as(9))
        repo.soft_delete(stale)
        with pytest.raises(RuntimeError):
            repo.save_changes()

        conn = sqlite3.connect(db_path)
        count = conn.execute("SELECT COUNT(*) FROM content_types WHERE version = 9").fetchone()[0]
        conn.close()
        assert count == 0


class TestListing:
    def test_filters_sorts_and_counts(self, repo, registries):
        create_draft(repo, registries)
        run_publish(PublishContentTypeInput("article"), repo=repo)
        run_create(
            CreateContentTypeInput(
                name="author", fields=[FieldDefinition(name="name", type="text")]
            ),
            repo=repo,
            registries=registries,
        )

        published, total = repo.list(status="published")
        assert total == 1
        assert [ct.name for ct in published] == ["article"]

        everything, total = repo.list(sort_by="name", descending=True)
        assert total == 3
        assert everything[0].name == "author"

    def test_rejects_unknown_sort_key(self, repo):
        with pytest.raises(ValueError):
            repo.list(sort_by="id; DROP TABLE content_types")


class TestContentItems:
    def test_item_round_trip(self, repo, registries, item_store):
        create_draft(repo, registries)
        article = run_publish(PublishContentTypeInput("article"), repo=repo).unwrap()
        title_id = article.get_field_by_name("title").id
        rating_id = article.get_field_by_name("rating").id

        item = create_item(
            CreateContentItemInput("Post", article.id, {title_id: "  Hello  ", rating_id: 3}),
            items=item_store,
            content_types=repo,
        ).unwrap()

        loaded = item_store.get_by_id(item.id)
        assert loaded is not None
        assert loaded.get_value(title_id) == "Hello"
        assert loaded.get_value(rating_id) == 3
        assert loaded.created_at.tzinfo == UTC

        view = get_item(GetContentItemInput(item.id), items=item_store, content_types=repo).unwrap()
        assert view.values == {"title": "Hello", "rating": 3}

    def test_missing_item(self, item_store):
        assert item_store.get_by_id(uuid4()) is None

    def test_resave_replaces_values(self, repo, registries, item_store):
        create_draft(repo, registries)
        article = run_publish(PublishContentTypeInput("article"), repo=repo).unwrap()
        title_id = article.get_field_by_name("title").id
        item = create_item(
            CreateContentItemInput("Post", article.id, {title_id: "Hello"}),
            items=item_store,
            content_types=repo,
        ).unwrap()

        item.store_value(title_id, "Goodbye", datetime(2026, 7, 1, tzinfo=UTC))
        item_store.save(item)

        assert item_store.get_by_id(item.id).get_value(title_id) == "Goodbye"

    def test_decimal_value_stored_as_number(self, repo, registries, item_store):
        create_draft(repo, registries)
        article = run_publish(PublishContentTypeInput("article"), repo=repo).unwrap()
        title_id = article.get_field_by_name("title").id
        rating_id = article.get_field_by_name("rating").id

        item = create_item(
            CreateContentItemInput(
                "Post", article.id, {title_id: "Hello", rating_id: Decimal("4.5")}
            ),
            items=item_store,
            content_types=repo,
        ).unwrap()

        assert item_store.get_by_id(item.id).get_value(rating_id) == 4.5

    def test_list_pages_items_of_one_type(self, repo, registries, item_store):
        create_draft(repo, registries)
        article = run_publish(PublishContentTypeInput("article"), repo=repo).unwrap()
        title_id = article.get_field_by_name("title").id
        for day, title in enumerate(("First", "Second", "Third"), start=1):
            item = ContentItem(
                title=title,
                content_type_id=article.id,
                created_at=datetime(2026, 7, day, tzinfo=UTC),
            )
            item.store_value(title_id, title, datetime(2026, 7, day, tzinfo=UTC))
            item_store.save(item)

        items, total = item_store.list(article.id, limit=2, offset=1)

        assert total == 3
        assert [i.title for i in items] == ["Second", "Third"]
        assert items[0].get_value(title_id) == "Second"
        assert item_store.list(uuid4()) == ([], 0)
