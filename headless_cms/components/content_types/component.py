"""
Content types component - authoring, publishing, queries and deletion.

Publishing promotes the latest draft of a name to a new published record,
numbered one past the previous publication, and retires that previous
publication in the same unit of work.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from headless_cms.components.rules.component import RuleRegistries, RuleRegistry
from headless_cms.components.rules.models import RuleDefinition
from headless_cms.domain.content_types import ContentType, can_transition
from headless_cms.domain.fields import FIELD_TYPES, Field, supports_capability
from headless_cms.domain.results import (
    Error,
    MultiFieldValidationResult,
    Result,
    ValidationResult,
)
from headless_cms.domain.rules import (
    InvalidParametersError,
    Rule,
    RuleNotRegisteredError,
    TransformationRule,
    ValidationRule,
)

from .models import (
    FIELD_NAME_REQUIRED,
    FIELDS_REQUIRED,
    INVALID_FIELD_TYPE,
    NAME_REQUIRED,
    ContentTypePage,
    CreateContentTypeInput,
    DeleteContentTypeInput,
    FieldDefinition,
    GetContentTypeInput,
    ListContentTypesInput,
    PublishContentTypeInput,
    unknown_transformation_rule,
    unknown_validation_rule,
)
from .ports import AuthorizationPort, ContentTypeRepoPort, TimePort

logger = logging.getLogger(__name__)

INITIAL_VERSION = 1


def _denied(authorization: AuthorizationPort | None, action: str, resource: str) -> bool:
    return authorization is not None and not authorization.is_allowed(action, resource)


def _now(time: TimePort | None) -> datetime | None:
    return time.now_utc() if time is not None else None


def _next_version(repo: ContentTypeRepoPort, name: str) -> int:
    # Retired publications count, so numbers are never reused.
    highest = repo.get_max_published_version(name)
    return highest + 1 if highest is not None else INITIAL_VERSION


# --- Authoring ---


def _build_rules(
    definitions: list[RuleDefinition],
    registry: RuleRegistry[Any],
    field_def: FieldDefinition,
    result: ValidationResult,
    unknown_message: Callable[[str, str], str],
) -> list[Rule]:
    rules: list[Rule] = []
    for definition in definitions:
        try:
            rule = registry.create(definition.type, definition.parameters)
        except RuleNotRegisteredError:
            result.add_error(unknown_message(definition.type, field_def.name))
            continue
        except InvalidParametersError as e:
            result.add_error(f"{e} (field '{field_def.name}')")
            continue
        if field_def.type in FIELD_TYPES and not supports_capability(
            field_def.type, rule.required_capability
        ):
            result.add_error(
                f"Rule '{definition.type}' requires {rule.required_capability} values "
                f"and cannot be used on {field_def.type} field '{field_def.name}'."
            )
            continue
        rules.append(rule)
    return rules


def _build_fields(
    inp: CreateContentTypeInput, registries: RuleRegistries
) -> tuple[list[Field], MultiFieldValidationResult]:
    """Validate the request and build its fields, collecting every problem."""
    validation = MultiFieldValidationResult()

    if not inp.name or not inp.name.strip():
        validation.add_error("Name", NAME_REQUIRED)

    if not inp.fields:
        validation.add_error("Fields", FIELDS_REQUIRED)
        return [], validation

    fields: list[Field] = []
    seen_names: set[str] = set()
    for field_def in inp.fields:
        if not field_def.name or not field_def.name.strip():
            validation.add_error("Fields", FIELD_NAME_REQUIRED)
            continue

        field_result = ValidationResult(field_def.name)
        if field_def.name in seen_names:
            field_result.add_error(f"Duplicate field name '{field_def.name}'.")
        seen_names.add(field_def.name)

        if field_def.type not in FIELD_TYPES:
            field_result.add_error(INVALID_FIELD_TYPE)

        validation_rules = _build_rules(
            field_def.validation_rules,
            registries.validation,
            field_def,
            field_result,
            unknown_validation_rule,
        )
        transformation_rules = _build_rules(
            field_def.transformation_rules,
            registries.transformation,
            field_def,
            field_result,
            unknown_transformation_rule,
        )

        validation.add(field_result)
        if field_result.is_invalid:
            continue

        new_field = Field(
            name=field_def.name,
            type=field_def.type,  # type: ignore[arg-type]
            is_required=field_def.is_required,
        )
        new_field.set_validation_rules(r for r in validation_rules if isinstance(r, ValidationRule))
        new_field.set_transformation_rules(
            r for r in transformation_rules if isinstance(r, TransformationRule)
        )
        fields.append(new_field)

    return fields, validation


def run_create(
    inp: CreateContentTypeInput,
    *,
    repo: ContentTypeRepoPort,
    registries: RuleRegistries,
    authorization: AuthorizationPort | None = None,
    time: TimePort | None = None,
) -> Result[ContentType]:
    """Author a new draft content type."""
    logger.info("Creating content type '%s'", inp.name)

    if _denied(authorization, "content_type:create", inp.name):
        logger.warning("Authorization failed for creating content type '%s'", inp.name)
        return Result.fail(Error.forbidden("Forbidden"))

    fields, validation = _build_fields(inp, registries)
    if validation.is_invalid:
        logger.warning(
            "Validation failed for content type '%s': %s", inp.name, validation.to_dict()
        )
        return Result.multi_field_validation_failure(validation)

    version = _next_version(repo, inp.name)

    content_type = ContentType.draft(inp.name, fields, version=version, created_at=_now(time))
    logger.info(
        "Creating content type '%s' version %d with %d fields",
        content_type.name,
        version,
        len(fields),
    )

    try:
        repo.add(content_type)
        repo.save_changes()
    except Exception:
        repo.rollback()
        raise

    logger.info("Created content type with ID=%s", content_type.id)
    return Result.ok(content_type)


# --- Publishing ---


def run_publish(
    inp: PublishContentTypeInput,
    *,
    repo: ContentTypeRepoPort,
    authorization: AuthorizationPort | None = None,
    time: TimePort | None = None,
) -> Result[ContentType]:
    """
    Publish the latest draft of a content type.

    Fails with not_found when no draft exists and with conflict when the
    latest revision is not a draft. The previous publication, if any, is
    retired in the same unit of work that stores the new one.
    """
    logger.info("Publishing content type '%s'", inp.name)

    if _denied(authorization, "content_type:publish", inp.name):
        logger.warning("Authorization failed for publishing content type '%s'", inp.name)
        return Result.fail(Error.forbidden("Forbidden"))

    draft = repo.get_latest_draft(inp.name)
    if draft is None:
        logger.warning("No draft found for content type '%s'", inp.name)
        return Result.fail(Error.not_found(f"Content type draft '{inp.name}' not found."))

    logger.debug(
        "Found draft content type '%s' with ID %s and version %d",
        draft.name,
        draft.id,
        draft.version,
    )

    if draft.status != "draft" or not can_transition(draft.lifecycle_state, "published"):
        logger.warning(
            "Content type '%s' version %d is %s, not a draft",
            draft.name,
            draft.version,
            draft.lifecycle_state,
        )
        return Result.fail(
            Error.conflict(f"Content type '{draft.name}' has no unpublished draft.")
        )

    previous = repo.get_latest_published(inp.name)
    new_version = _next_version(repo, inp.name)

    if previous is not None:
        logger.info(
            "Found previous published version %d for content type '%s'. New version will be %d",
            previous.version,
            inp.name,
            new_version,
        )
    else:
        logger.info(
            "No previous published version found for content type '%s'. This will be version %d",
            inp.name,
            new_version,
        )

    published = draft.publish_as(new_version, _now(time))

    try:
        if previous is not None:
            repo.soft_delete(previous)
        repo.add(published)
        repo.save_changes()
    except Exception:
        logger.exception("Publishing content type '%s' failed; rolling back", inp.name)
        repo.rollback()
        raise

    logger.info(
        "Successfully published content type '%s' with ID %s and version %d",
        published.name,
        published.id,
        published.version,
    )
    return Result.ok(published)


# --- Queries ---


def run_get(
    inp: GetContentTypeInput,
    *,
    repo: ContentTypeRepoPort,
    authorization: AuthorizationPort | None = None,
) -> Result[ContentType]:
    if _denied(authorization, "content_type:read", str(inp.content_type_id)):
        return Result.fail(Error.forbidden("Forbidden"))

    content_type = repo.get_by_id(inp.content_type_id)
    if content_type is None:
        return Result.fail(
            Error.not_found(f"Content type with id {inp.content_type_id} not found")
        )
    return Result.ok(content_type)


def run_list(
    inp: ListContentTypesInput,
    *,
    repo: ContentTypeRepoPort,
    authorization: AuthorizationPort | None = None,
) -> Result[ContentTypePage]:
    if _denied(authorization, "content_type:list", "*"):
        return Result.fail(Error.forbidden("Forbidden"))

    items, total = repo.list(
        status=inp.status,
        name_contains=inp.name_contains,
        sort_by=inp.sort_by,
        descending=inp.descending,
        limit=inp.limit,
        offset=inp.offset,
    )
    return Result.ok(ContentTypePage(items=items, total=total, limit=inp.limit, offset=inp.offset))


# --- Deletion ---


def run_delete(
    inp: DeleteContentTypeInput,
    *,
    repo: ContentTypeRepoPort,
    authorization: AuthorizationPort | None = None,
) -> Result[ContentType]:
    """Soft-delete a content type record."""
    logger.info("Deleting content type %s", inp.content_type_id)

    content_type = repo.get_by_id(inp.content_type_id)
    if content_type is None:
        logger.warning("Content type not found for deletion: %s", inp.content_type_id)
        return Result.fail(
            Error.not_found(f"Content type with id {inp.content_type_id} not found")
        )

    if _denied(authorization, "content_type:delete", content_type.name):
        logger.warning("Authorization failed for deleting content type '%s'", content_type.name)
        return Result.fail(Error.forbidden("Forbidden"))

    try:
        repo.soft_delete(content_type)
        repo.save_changes()
    except Exception:
        repo.rollback()
        raise

    logger.info(
        "Deleted content type %s ('%s' v%d)",
        content_type.id,
        content_type.name,
        content_type.version,
    )
    return Result.ok(content_type)


def run(
    inp: CreateContentTypeInput
    | PublishContentTypeInput
    | GetContentTypeInput
    | ListContentTypesInput
    | DeleteContentTypeInput,
    *,
    repo: ContentTypeRepoPort,
    registries: RuleRegistries | None = None,
    authorization: AuthorizationPort | None = None,
    time: TimePort | None = None,
) -> Result[Any]:
    """Dispatch ``inp`` to the matching entry point."""
    if isinstance(inp, CreateContentTypeInput):
        if registries is None:
            raise ValueError("Rule registries are required to create a content type")
        return run_create(
            inp, repo=repo, registries=registries, authorization=authorization, time=time
        )
    if isinstance(inp, PublishContentTypeInput):
        return run_publish(inp, repo=repo, authorization=authorization, time=time)
    if isinstance(inp, GetContentTypeInput):
        return run_get(inp, repo=repo, authorization=authorization)
    if isinstance(inp, ListContentTypesInput):
        return run_list(inp, repo=repo, authorization=authorization)
    if isinstance(inp, DeleteContentTypeInput):
        return run_delete(inp, repo=repo, authorization=authorization)
    raise ValueError(f"Unknown input type: {type(inp)}")
