"""
Error rendering.

Operation failures arrive as ``OperationResult`` error codes, auth
failures as ``ToolkitError`` exceptions raised from dependencies; both
end up as :class:`~toolkit.api.schemas.common.ProblemDetail` JSON.
"""

from __future__ import annotations

from fastapi import Request
from fastapi.responses import JSONResponse

from toolkit.api.schemas.common import ProblemDetail
from toolkit.core.errors import (
    AuthError,
    BrowserPageError,
    BrowserTimeoutError,
    BrowserUnavailableError,
    ToolkitError,
    ValidationError,
)
from toolkit.core.logging import get_logger

logger = get_logger(__name__)

ERROR_CODE_TO_STATUS: dict[str, int] = {
    "NOT_FOUND": 404,
    "VALIDATION_FAILED": 400,
    "UNAUTHORIZED": 401,
    "TIMEOUT": 504,
    "UNAVAILABLE": 503,
    "INTERNAL": 500,
}

# Seconds a client should wait before retrying a retryable failure
RETRY_AFTER_SECONDS = 5


def status_for_error_code(code: str) -> int:
    return ERROR_CODE_TO_STATUS.get(code, 500)


def code_for_exception(exc: ToolkitError) -> str:
    """The operation error code equivalent to *exc*."""
    if isinstance(exc, AuthError):
        return "UNAUTHORIZED"
    if isinstance(exc, (ValidationError, BrowserPageError)):
        return "VALIDATION_FAILED"
    if isinstance(exc, BrowserTimeoutError):
        return "TIMEOUT"
    if isinstance(exc, BrowserUnavailableError):
        return "UNAVAILABLE"
    return "INTERNAL"


def problem_response(
    *,
    code: str,
    title: str,
    detail: str = "",
    instance: str = "",
    retryable: bool = False,
) -> JSONResponse:
    """Render a problem document; the status comes from *code*."""
    status = status_for_error_code(code)
    body = ProblemDetail(title=title, status=status, code=code, detail=detail, instance=instance)
    headers = {"Retry-After": str(RETRY_AFTER_SECONDS)} if retryable else None
    return JSONResponse(status_code=status, content=body.model_dump(), headers=headers)


async def toolkit_error_handler(request: Request, exc: ToolkitError) -> JSONResponse:
    """Render a ``ToolkitError`` raised outside an operation (auth, database)."""
    code = code_for_exception(exc)
    if code == "INTERNAL":
        logger.error("request_failed", path=request.url.path, **exc.to_dict())
    else:
        logger.info("request_rejected", path=request.url.path, code=code, reason=exc.message)
    return problem_response(code=code, title=exc.message, instance=str(request.url), retryable=exc.retryable)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: 500, with the exception text only in debug mode."""
    logger.exception("unhandled_exception", path=request.url.path)
    return problem_response(
        code="INTERNAL",
        title="Internal Server Error",
        detail=str(exc) if request.app.state.settings.debug else "An unexpected error occurred.",
        instance=str(request.url),
    )
