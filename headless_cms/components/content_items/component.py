"""
Content items component - the field value service and item entry points.

Every value stored on an item passes through its field's pipeline:
transform first, then validate the transformed value, then store it. A
failure at any step leaves the item untouched.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from headless_cms.domain.content_items import ContentItem
from headless_cms.domain.content_types import ContentType
from headless_cms.domain.results import (
    Error,
    MultiFieldValidationResult,
    Result,
    ValidationResult,
)

from .models import (
    CONTENT_TYPE_ID_REQUIRED,
    INVALID_LIMIT,
    INVALID_OFFSET,
    TITLE_REQUIRED,
    UNKNOWN_FIELD,
    VALUES_REQUIRED,
    ContentItemPage,
    ContentItemSummary,
    ContentItemView,
    CreateContentItemInput,
    GetContentItemInput,
    ListContentItemsInput,
    SetFieldValueInput,
)
from .ports import ContentItemRepoPort, ContentTypeLookupPort, TimePort

logger = logging.getLogger(__name__)


class ContentItemFieldService:
    """Applies a field's transform and validate pipeline when setting a value."""

    def __init__(self, time: TimePort | None = None) -> None:
        self._time = time

    def now(self) -> datetime:
        return self._time.now_utc() if self._time is not None else datetime.now(UTC)

    def set_value(
        self,
        item: ContentItem,
        content_type: ContentType,
        field_id: UUID,
        raw_value: Any,
    ) -> Result[ContentItem]:
        target = content_type.get_field(field_id)
        if target is None:
            return Result.fail(
                Error.not_found(f"Field {field_id} not found in content type '{content_type.name}'.")
            )
        if item.content_type_id != content_type.id:
            return Result.fail(
                Error.conflict(
                    f"Content item {item.id} does not belong to content type {content_type.id}."
                )
            )

        try:
            transformed = target.apply_transformers(raw_value)
        except Exception:
            logger.exception("Transformation of field '%s' failed", target.name)
            return Result.fail(
                Error.infrastructure(f"Transformation of field '{target.name}' failed.")
            )

        try:
            validation = target.validate(transformed)
        except Exception:
            logger.exception("Validation of field '%s' failed unexpectedly", target.name)
            return Result.fail(
                Error.infrastructure(f"Validation of field '{target.name}' failed unexpectedly.")
            )

        if validation.is_invalid:
            return Result.field_validation_failure(validation)

        item.store_value(field_id, transformed, self.now())
        return Result.ok(item)


def run_create(
    inp: CreateContentItemInput,
    *,
    items: ContentItemRepoPort,
    content_types: ContentTypeLookupPort,
    time: TimePort | None = None,
) -> Result[ContentItem]:
    """
    Create a content item, validating every field before anything is stored.

    Field failures from all fields are returned together. Required fields
    missing from the input are reported as missing.
    """
    validation = MultiFieldValidationResult()
    if not inp.title or not inp.title.strip():
        validation.add_error("Title", TITLE_REQUIRED)
    if inp.content_type_id is None:
        validation.add_error("ContentTypeId", CONTENT_TYPE_ID_REQUIRED)
    if not inp.values:
        validation.add_error("Values", VALUES_REQUIRED)
    if validation.is_invalid:
        return Result.multi_field_validation_failure(validation)

    content_type = content_types.get_by_id(inp.content_type_id)  # type: ignore[arg-type]
    if content_type is None:
        return Result.fail(Error.not_found("Content type not found."))

    for field_id in inp.values:
        if not content_type.has_field(field_id):
            logger.warning(
                "Content item for '%s' has unknown field %s", content_type.name, field_id
            )
            return Result.fail(Error.conflict(UNKNOWN_FIELD))

    service = ContentItemFieldService(time)
    now = service.now()
    item = ContentItem(
        title=inp.title,
        content_type_id=content_type.id,
        created_at=now,
        updated_at=now,
    )

    failures = MultiFieldValidationResult()
    for field_id, target in content_type.fields.items():
        if field_id not in inp.values and not target.is_required:
            continue
        result = service.set_value(item, content_type, field_id, inp.values.get(field_id))
        if result.is_validation_failure:
            for name, errors in result.field_errors.items():
                failures.add(ValidationResult(name, errors))
        elif not result.success:
            return result

    if failures.is_invalid:
        logger.info(
            "Content item for '%s' failed validation: %s", content_type.name, failures.to_dict()
        )
        return Result.multi_field_validation_failure(failures)

    items.save(item)
    logger.info("Created content item %s of type '%s'", item.id, content_type.name)
    return Result.ok(item)


def run_get(
    inp: GetContentItemInput,
    *,
    items: ContentItemRepoPort,
    content_types: ContentTypeLookupPort,
) -> Result[ContentItemView]:
    item = items.get_by_id(inp.content_item_id)
    if item is None:
        return Result.fail(Error.not_found(f"Content item with id {inp.content_item_id} not found"))

    content_type = content_types.get_by_id(item.content_type_id, include_deleted=True)
    if content_type is None:
        logger.error(
            "Content item %s references missing content type %s", item.id, item.content_type_id
        )
        return Result.fail(
            Error.infrastructure(f"Content type {item.content_type_id} of item {item.id} is missing.")
        )

    values: dict[str, Any] = {}
    for field_id, stored in item.values.items():
        target = content_type.get_field(field_id)
        if target is None:
            logger.error("Content item %s has a value for unknown field %s", item.id, field_id)
            return Result.fail(
                Error.infrastructure(f"Field {field_id} of content item {item.id} is missing.")
            )
        values[target.name] = stored.value

    return Result.ok(
        ContentItemView(
            id=item.id,
            title=item.title,
            content_type_id=content_type.id,
            content_type_name=content_type.name,
            content_type_version=content_type.version,
            values=values,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )
    )


def run_set_value(
    inp: SetFieldValueInput,
    *,
    items: ContentItemRepoPort,
    content_types: ContentTypeLookupPort,
    time: TimePort | None = None,
) -> Result[ContentItem]:
    """Set one field value on a stored item and persist it on success."""
    item = items.get_by_id(inp.content_item_id)
    if item is None:
        return Result.fail(Error.not_found(f"Content item with id {inp.content_item_id} not found"))

    content_type = content_types.get_by_id(item.content_type_id, include_deleted=True)
    if content_type is None:
        return Result.fail(
            Error.infrastructure(f"Content type {item.content_type_id} of item {item.id} is missing.")
        )

    result = ContentItemFieldService(time).set_value(item, content_type, inp.field_id, inp.value)
    if not result.success:
        return result

    items.save(item)
    logger.info("Updated field %s of content item %s", inp.field_id, item.id)
    return Result.ok(item)


def run_list(
    inp: ListContentItemsInput,
    *,
    items: ContentItemRepoPort,
    content_types: ContentTypeLookupPort,
) -> Result[ContentItemPage]:
    """Page through the items of one content type."""
    logger.info(
        "Listing content items for content type %s (limit=%d, offset=%d)",
        inp.content_type_id,
        inp.limit,
        inp.offset,
    )

    validation = MultiFieldValidationResult()
    if inp.limit < 1:
        validation.add_error("Limit", INVALID_LIMIT)
    if inp.offset < 0:
        validation.add_error("Offset", INVALID_OFFSET)
    if validation.is_invalid:
        return Result.multi_field_validation_failure(validation)

    content_type = content_types.get_by_id(inp.content_type_id, include_deleted=True)
    if content_type is None:
        return Result.fail(
            Error.not_found(f"Content type with id {inp.content_type_id} doesn't exist")
        )

    page, total = items.list(inp.content_type_id, limit=inp.limit, offset=inp.offset)
    logger.info(
        "Retrieved %d content items (total %d) for content type %s",
        len(page),
        total,
        inp.content_type_id,
    )
    return Result.ok(
        ContentItemPage(
            items=[
                ContentItemSummary(
                    id=item.id,
                    title=item.title,
                    created_at=item.created_at,
                    updated_at=item.updated_at,
                )
                for item in page
            ],
            total=total,
            limit=inp.limit,
            offset=inp.offset,
        )
    )


def run(
    inp: CreateContentItemInput
    | GetContentItemInput
    | ListContentItemsInput
    | SetFieldValueInput,
    *,
    items: ContentItemRepoPort,
    content_types: ContentTypeLookupPort,
    time: TimePort | None = None,
) -> Result[Any]:
    """Dispatch ``inp`` to the matching entry point."""
    if isinstance(inp, CreateContentItemInput):
        return run_create(inp, items=items, content_types=content_types, time=time)
    if isinstance(inp, GetContentItemInput):
        return run_get(inp, items=items, content_types=content_types)
    if isinstance(inp, ListContentItemsInput):
        return run_list(inp, items=items, content_types=content_types)
    if isinstance(inp, SetFieldValueInput):
        return run_set_value(inp, items=items, content_types=content_types, time=time)
    raise ValueError(f"Unknown input type: {type(inp)}")
