"""
Content types component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal
from uuid import UUID

from headless_cms.components.rules.models import RuleDefinition
from headless_cms.domain.content_types import ContentType, ContentTypeStatus

ContentTypeSortKey = Literal["name", "version", "created_at"]

# --- Messages ---

NAME_REQUIRED = "Name is required."
FIELDS_REQUIRED = "Fields field is empty."
FIELD_NAME_REQUIRED = "Field name is required."
INVALID_FIELD_TYPE = "Invalid field type."


def unknown_validation_rule(rule_type: str, field_name: str) -> str:
    return f"Unknown validation rule type '{rule_type}' in field '{field_name}'."


def unknown_transformation_rule(rule_type: str, field_name: str) -> str:
    return f"Unknown transformation rule type '{rule_type}' in field '{field_name}'."


# --- Input Models ---


@dataclass(frozen=True)
class FieldDefinition:
    """A field as described by an authoring request."""

    name: str
    type: str
    is_required: bool = False
    validation_rules: list[RuleDefinition] = field(default_factory=list)
    transformation_rules: list[RuleDefinition] = field(default_factory=list)


@dataclass(frozen=True)
class CreateContentTypeInput:
    """Input for authoring a new draft content type."""

    name: str
    fields: list[FieldDefinition] = field(default_factory=list)


@dataclass(frozen=True)
class PublishContentTypeInput:
    """Input for publishing the latest draft of a content type."""

    name: str


@dataclass(frozen=True)
class GetContentTypeInput:
    content_type_id: UUID


@dataclass(frozen=True)
class ListContentTypesInput:
    """Input for listing live content types."""

    status: ContentTypeStatus | None = None
    name_contains: str | None = None
    sort_by: ContentTypeSortKey = "name"
    descending: bool = False
    limit: int = 20
    offset: int = 0


@dataclass(frozen=True)
class DeleteContentTypeInput:
    content_type_id: UUID


# --- Output Models ---


@dataclass(frozen=True)
class ContentTypePage:
    """A page of content types plus the unpaged total."""

    items: list[ContentType]
    total: int
    limit: int
    offset: int
