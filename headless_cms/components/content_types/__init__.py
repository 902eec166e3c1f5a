"""
Content types component - draft authoring and the publish state machine.
"""

from .component import (
    run,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_publish,
)
from .models import (
    ContentTypePage,
    CreateContentTypeInput,
    DeleteContentTypeInput,
    FieldDefinition,
    GetContentTypeInput,
    ListContentTypesInput,
    PublishContentTypeInput,
)
from .ports import AuthorizationPort, ContentTypeRepoPort, TimePort

__all__ = [
    # Entry points
    "run",
    "run_create",
    "run_delete",
    "run_get",
    "run_list",
    "run_publish",
    # Input models
    "CreateContentTypeInput",
    "DeleteContentTypeInput",
    "FieldDefinition",
    "GetContentTypeInput",
    "ListContentTypesInput",
    "PublishContentTypeInput",
    # Output models
    "ContentTypePage",
    # Ports
    "AuthorizationPort",
    "ContentTypeRepoPort",
    "TimePort",
]
