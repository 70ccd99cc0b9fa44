"""Per-request bookkeeping.

For every request:

- take ``X-Request-ID`` from the client (or mint one), expose it as
  ``request.state.request_id`` and bind it into the structlog context
- time the request and report ``X-Process-Time-Ms``
- emit one ``request_completed`` log line

Health-check requests are logged at debug level; compose polls them constantly.
"""

from __future__ import annotations

import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from toolkit.core.logging import bind_context, get_logger, unbind_context

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time-Ms"
_QUIET_PREFIX = "/health"


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        bind_context(request_id=request_id)
        try:
            response = await call_next(request)
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            log = logger.debug if request.url.path.startswith(_QUIET_PREFIX) else logger.info
            log(
                "request_completed",
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=elapsed_ms,
            )
        finally:
            unbind_context("request_id")

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[PROCESS_TIME_HEADER] = str(elapsed_ms)
        return response
