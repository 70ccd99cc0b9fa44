"""
Response envelopes shared by every router.

Successful calls return :class:`SuccessResponse`; failures return an
RFC 7807 :class:`ProblemDetail` with the operation's error code as the
``code`` extension member.  ``POST /browser/screenshot`` is the one
exception and answers with raw ``image/png``.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ProblemDetail(BaseModel):
    """RFC 7807 problem document.

    ``title`` carries the message clients match on (``"Schedule not
    found"``, ``"Invalid payload"``, ``"Invalid project id"``); ``code`` is
    one of ``NOT_FOUND``, ``VALIDATION_FAILED``, ``UNAUTHORIZED``,
    ``TIMEOUT``, ``UNAVAILABLE`` or ``INTERNAL``.

    Example:
        {
            "type": "about:blank",
            "title": "Schedule not found",
            "status": 404,
            "code": "NOT_FOUND",
            "detail": "",
            "instance": "http://localhost:3000/api/fcm/7"
        }
    """

    type: str = Field(default="about:blank")
    title: str
    status: int
    code: str = Field(default="INTERNAL", description="Machine-readable error code")
    detail: str = ""
    instance: str = Field(default="", description="URL of the failing request")


class SuccessResponse(BaseModel, Generic[T]):
    data: T
    elapsed_ms: float = Field(default=0.0, description="Time spent in the operation")
    warnings: list[str] = Field(default_factory=list, description="Non-fatal problems with the request")
