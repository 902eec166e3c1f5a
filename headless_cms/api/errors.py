"""
Translate core Results into HTTP errors.
"""

import logging
from typing import Any

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from headless_cms.domain.results import Error, Result
from headless_cms.domain.rules import RuleRegistryError

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[str, int] = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_409_CONFLICT,
    "forbidden": status.HTTP_403_FORBIDDEN,
    "unauthorized": status.HTTP_401_UNAUTHORIZED,
    "validation": status.HTTP_400_BAD_REQUEST,
    "infrastructure": status.HTTP_500_INTERNAL_SERVER_ERROR,
}

INTERNAL_ERROR_DETAIL = "Internal server error."


def status_for(error: Error) -> int:
    return STATUS_BY_KIND.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)


def raise_for_failure(result: Result[Any]) -> None:
    """Raise the HTTPException matching a failed result; no-op on success."""
    if result.error is None:
        return

    code = status_for(result.error)
    if result.is_validation_failure:
        detail: Any = {"message": result.error.message, "errors": result.field_errors}
    elif code >= 500:
        logger.error("Operation failed: %s", result.error.message)
        detail = INTERNAL_ERROR_DETAIL
    else:
        detail = result.error.message

    headers = {"WWW-Authenticate": "Bearer"} if code == status.HTTP_401_UNAUTHORIZED else None
    raise HTTPException(status_code=code, detail=detail, headers=headers)


async def rule_registry_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Stored schemas referencing rules this process cannot build.
    logger.error("Rule configuration error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": INTERNAL_ERROR_DETAIL},
    )


def install_error_handlers(app: Any) -> None:
    app.add_exception_handler(RuleRegistryError, rule_registry_error_handler)
