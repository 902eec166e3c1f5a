from datetime import datetime
from typing import Any, Literal
from uuid import UUID

from pydantic import BaseModel

from headless_cms.domain.content_types import ContentType
from headless_cms.domain.fields import Field
from headless_cms.domain.rules import Rule

# --- Shared Enums/Types ---
FieldType = Literal["text", "richtext", "markdown", "numeric", "boolean"]
ContentTypeStatus = Literal["draft", "published"]
LifecycleState = Literal["draft", "published", "retired"]
ParameterValue = str | int | float | bool | None


# --- Rules ---
class RuleDefinitionModel(BaseModel):
    type: str
    parameters: dict[str, ParameterValue] = {}


class RuleResponse(BaseModel):
    type: str
    parameters: dict[str, Any]

    @classmethod
    def from_rule(cls, rule: Rule) -> "RuleResponse":
        return cls(type=rule.type, parameters=dict(rule.parameters))


class ParameterSpecResponse(BaseModel):
    name: str
    kind: str
    required: bool
    default: Any = None
    description: str = ""


class RuleTypeResponse(BaseModel):
    type: str
    kind: Literal["validation", "transformation"]
    capability: str
    description: str
    parameters: list[ParameterSpecResponse]


# --- Content Types ---
class FieldCreateModel(BaseModel):
    # Plain str so unknown types are reported with the other field errors.
    name: str = ""
    type: str
    is_required: bool = False
    validation_rules: list[RuleDefinitionModel] = []
    transformation_rules: list[RuleDefinitionModel] = []


class ContentTypeCreateRequest(BaseModel):
    name: str = ""
    fields: list[FieldCreateModel] = []


class FieldResponse(BaseModel):
    id: UUID
    name: str
    type: FieldType
    is_required: bool
    validation_rules: list[RuleResponse]
    transformation_rules: list[RuleResponse]

    @classmethod
    def from_field(cls, f: Field) -> "FieldResponse":
        return cls(
            id=f.id,
            name=f.name,
            type=f.type,
            is_required=f.is_required,
            validation_rules=[RuleResponse.from_rule(r) for r in f.validation_rules],
            transformation_rules=[RuleResponse.from_rule(r) for r in f.transformation_rules],
        )


class ContentTypeResponse(BaseModel):
    id: UUID
    name: str
    status: ContentTypeStatus
    lifecycle_state: LifecycleState
    version: int
    created_at: datetime
    deleted_at: datetime | None = None
    fields: list[FieldResponse]

    @classmethod
    def from_content_type(cls, content_type: ContentType) -> "ContentTypeResponse":
        return cls(
            id=content_type.id,
            name=content_type.name,
            status=content_type.status,
            lifecycle_state=content_type.lifecycle_state,
            version=content_type.version,
            created_at=content_type.created_at,
            deleted_at=content_type.deleted_at,
            fields=[FieldResponse.from_field(f) for f in content_type.fields.values()],
        )


class ContentTypeListResponse(BaseModel):
    items: list[ContentTypeResponse]
    total: int
    limit: int
    offset: int


# --- Content Items ---
class ContentItemCreateRequest(BaseModel):
    title: str = ""
    content_type_id: UUID | None = None
    values: dict[UUID, Any] = {}


class FieldValueUpdateRequest(BaseModel):
    value: Any = None


class ContentItemResponse(BaseModel):
    id: UUID
    title: str
    content_type_id: UUID
    content_type_name: str
    content_type_version: int
    values: dict[str, Any]
    created_at: datetime
    updated_at: datetime


class ContentItemSummaryResponse(BaseModel):
    id: UUID
    title: str
    created_at: datetime
    updated_at: datetime


class ContentItemListResponse(BaseModel):
    items: list[ContentItemSummaryResponse]
    total: int
    limit: int
    offset: int
