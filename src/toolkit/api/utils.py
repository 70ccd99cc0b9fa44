"""Glue between ``OperationResult`` and HTTP responses."""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

from toolkit.api.middleware.errors import problem_response
from toolkit.ops.result import OperationResult


def as_dict(obj: Any) -> dict[str, Any]:
    """Dataclass instance or dict -> plain dict for a response schema."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    return dict(obj)


def problem_from_result(result: OperationResult, request: Request) -> JSONResponse:
    """Problem response for a failed result; the message becomes the title."""
    error = result.error
    if error is None:
        return problem_response(code="INTERNAL", title="Operation failed", instance=str(request.url))
    return problem_response(
        code=error.code,
        title=error.message,
        instance=str(request.url),
        retryable=error.retryable,
    )
