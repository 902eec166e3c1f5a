from uuid import UUID

from fastapi import APIRouter, Depends, Query

from headless_cms.adapters.clock import SystemClock
from headless_cms.adapters.sqlite.repos import SQLiteContentItemRepo, SQLiteContentTypeRepo
from headless_cms.api.deps import (
    get_clock,
    get_content_item_repo,
    get_content_type_repo,
    get_settings,
)
from headless_cms.api.errors import raise_for_failure
from headless_cms.api.schemas import (
    ContentItemCreateRequest,
    ContentItemListResponse,
    ContentItemResponse,
    ContentItemSummaryResponse,
    FieldValueUpdateRequest,
)
from headless_cms.components.content_items import (
    ContentItemView,
    CreateContentItemInput,
    GetContentItemInput,
    ListContentItemsInput,
    SetFieldValueInput,
    run_create,
    run_get,
    run_list,
    run_set_value,
)
from headless_cms.settings.models import Settings

router = APIRouter()


def _load_view(
    item_id: UUID,
    items: SQLiteContentItemRepo,
    content_types: SQLiteContentTypeRepo,
) -> ContentItemResponse:
    result = run_get(
        GetContentItemInput(content_item_id=item_id), items=items, content_types=content_types
    )
    raise_for_failure(result)
    view: ContentItemView = result.unwrap()
    return ContentItemResponse(
        id=view.id,
        title=view.title,
        content_type_id=view.content_type_id,
        content_type_name=view.content_type_name,
        content_type_version=view.content_type_version,
        values=view.values,
        created_at=view.created_at,
        updated_at=view.updated_at,
    )


@router.post("", response_model=ContentItemResponse, status_code=201)
def create_content_item(
    request: ContentItemCreateRequest,
    items: SQLiteContentItemRepo = Depends(get_content_item_repo),
    content_types: SQLiteContentTypeRepo = Depends(get_content_type_repo),
    clock: SystemClock = Depends(get_clock),
) -> ContentItemResponse:
    """Create a content item; every field error is reported in one response."""
    inp = CreateContentItemInput(
        title=request.title,
        content_type_id=request.content_type_id,
        values=dict(request.values),
    )
    result = run_create(inp, items=items, content_types=content_types, time=clock)
    raise_for_failure(result)
    return _load_view(result.unwrap().id, items, content_types)


@router.get("", response_model=ContentItemListResponse)
def list_content_items(
    content_type_id: UUID,
    limit: int | None = Query(default=None, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    items: SQLiteContentItemRepo = Depends(get_content_item_repo),
    content_types: SQLiteContentTypeRepo = Depends(get_content_type_repo),
    settings: Settings = Depends(get_settings),
) -> ContentItemListResponse:
    """List the items of one content type, oldest first."""
    inp = ListContentItemsInput(
        content_type_id=content_type_id,
        limit=limit or settings.api.default_page_size,
        offset=offset,
    )
    result = run_list(inp, items=items, content_types=content_types)
    raise_for_failure(result)
    page = result.unwrap()
    return ContentItemListResponse(
        items=[
            ContentItemSummaryResponse(
                id=s.id, title=s.title, created_at=s.created_at, updated_at=s.updated_at
            )
            for s in page.items
        ],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@router.get("/{item_id}", response_model=ContentItemResponse)
def get_content_item(
    item_id: UUID,
    items: SQLiteContentItemRepo = Depends(get_content_item_repo),
    content_types: SQLiteContentTypeRepo = Depends(get_content_type_repo),
) -> ContentItemResponse:
    return _load_view(item_id, items, content_types)


@router.put("/{item_id}/fields/{field_id}", response_model=ContentItemResponse)
def set_field_value(
    item_id: UUID,
    field_id: UUID,
    request: FieldValueUpdateRequest,
    items: SQLiteContentItemRepo = Depends(get_content_item_repo),
    content_types: SQLiteContentTypeRepo = Depends(get_content_type_repo),
    clock: SystemClock = Depends(get_clock),
) -> ContentItemResponse:
    """Set one field value through its transform and validate pipeline."""
    inp = SetFieldValueInput(content_item_id=item_id, field_id=field_id, value=request.value)
    result = run_set_value(inp, items=items, content_types=content_types, time=clock)
    raise_for_failure(result)
    return _load_view(item_id, items, content_types)
