from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from headless_cms.adapters.clock import SystemClock
from headless_cms.adapters.sqlite.repos import SQLiteContentTypeRepo
from headless_cms.api.deps import (
    get_authorization,
    get_clock,
    get_content_type_repo,
    get_rule_registries,
    get_settings,
)
from headless_cms.api.errors import raise_for_failure
from headless_cms.api.schemas import (
    ContentTypeCreateRequest,
    ContentTypeListResponse,
    ContentTypeResponse,
    ContentTypeStatus,
)
from headless_cms.components.content_types import (
    AuthorizationPort,
    CreateContentTypeInput,
    DeleteContentTypeInput,
    FieldDefinition,
    GetContentTypeInput,
    ListContentTypesInput,
    PublishContentTypeInput,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_publish,
)
from headless_cms.components.rules import RuleDefinition, RuleRegistries
from headless_cms.settings.models import Settings

router = APIRouter()


@router.post("", response_model=ContentTypeResponse, status_code=201)
def create_content_type(
    request: ContentTypeCreateRequest,
    repo: SQLiteContentTypeRepo = Depends(get_content_type_repo),
    registries: RuleRegistries = Depends(get_rule_registries),
    authorization: AuthorizationPort = Depends(get_authorization),
    clock: SystemClock = Depends(get_clock),
) -> ContentTypeResponse:
    """Create a draft content type."""
    inp = CreateContentTypeInput(
        name=request.name,
        fields=[
            FieldDefinition(
                name=f.name,
                type=f.type,
                is_required=f.is_required,
                validation_rules=[
                    RuleDefinition(type=r.type, parameters=dict(r.parameters))
                    for r in f.validation_rules
                ],
                transformation_rules=[
                    RuleDefinition(type=r.type, parameters=dict(r.parameters))
                    for r in f.transformation_rules
                ],
            )
            for f in request.fields
        ],
    )
    result = run_create(
        inp, repo=repo, registries=registries, authorization=authorization, time=clock
    )
    raise_for_failure(result)
    return ContentTypeResponse.from_content_type(result.unwrap())


@router.get("", response_model=ContentTypeListResponse)
def list_content_types(
    status: ContentTypeStatus | None = None,
    name: str | None = None,
    sort_by: Literal["name", "version", "created_at"] = "name",
    descending: bool = False,
    limit: int | None = Query(default=None, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    repo: SQLiteContentTypeRepo = Depends(get_content_type_repo),
    authorization: AuthorizationPort = Depends(get_authorization),
    settings: Settings = Depends(get_settings),
) -> ContentTypeListResponse:
    """List live content types."""
    inp = ListContentTypesInput(
        status=status,
        name_contains=name,
        sort_by=sort_by,
        descending=descending,
        limit=limit or settings.api.default_page_size,
        offset=offset,
    )
    result = run_list(inp, repo=repo, authorization=authorization)
    raise_for_failure(result)
    page = result.unwrap()
    return ContentTypeListResponse(
        items=[ContentTypeResponse.from_content_type(ct) for ct in page.items],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@router.get("/{content_type_id}", response_model=ContentTypeResponse)
def get_content_type(
    content_type_id: UUID,
    repo: SQLiteContentTypeRepo = Depends(get_content_type_repo),
    authorization: AuthorizationPort = Depends(get_authorization),
) -> ContentTypeResponse:
    result = run_get(
        GetContentTypeInput(content_type_id=content_type_id), repo=repo, authorization=authorization
    )
    raise_for_failure(result)
    return ContentTypeResponse.from_content_type(result.unwrap())


@router.delete("/{content_type_id}", response_model=ContentTypeResponse)
def delete_content_type(
    content_type_id: UUID,
    repo: SQLiteContentTypeRepo = Depends(get_content_type_repo),
    authorization: AuthorizationPort = Depends(get_authorization),
) -> ContentTypeResponse:
    """Retire a content type. The record stays available to existing items."""
    result = run_delete(
        DeleteContentTypeInput(content_type_id=content_type_id),
        repo=repo,
        authorization=authorization,
    )
    raise_for_failure(result)
    return ContentTypeResponse.from_content_type(result.unwrap())


@router.post("/{name}/publish", response_model=ContentTypeResponse)
def publish_content_type(
    name: str,
    repo: SQLiteContentTypeRepo = Depends(get_content_type_repo),
    authorization: AuthorizationPort = Depends(get_authorization),
    clock: SystemClock = Depends(get_clock),
) -> ContentTypeResponse:
    """Publish the latest draft of ``name`` as its next version."""
    result = run_publish(
        PublishContentTypeInput(name=name), repo=repo, authorization=authorization, time=clock
    )
    raise_for_failure(result)
    return ContentTypeResponse.from_content_type(result.unwrap())
