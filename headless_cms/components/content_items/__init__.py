"""
Content items component - field value pipeline and item entry points.
"""

from .component import (
    ContentItemFieldService,
    run,
    run_create,
    run_get,
    run_list,
    run_set_value,
)
from .models import (
    ContentItemPage,
    ContentItemSummary,
    ContentItemView,
    CreateContentItemInput,
    GetContentItemInput,
    ListContentItemsInput,
    SetFieldValueInput,
)
from .ports import ContentItemRepoPort, ContentTypeLookupPort, TimePort

__all__ = [
    # Service
    "ContentItemFieldService",
    # Entry points
    "run",
    "run_create",
    "run_get",
    "run_list",
    "run_set_value",
    # Models
    "ContentItemPage",
    "ContentItemSummary",
    "ContentItemView",
    "CreateContentItemInput",
    "GetContentItemInput",
    "ListContentItemsInput",
    "SetFieldValueInput",
    # Ports
    "ContentItemRepoPort",
    "ContentTypeLookupPort",
    "TimePort",
]
