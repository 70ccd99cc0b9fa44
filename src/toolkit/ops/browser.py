"""
Browser operations.

Thin wrappers over :class:`~toolkit.browser.BrowserSession` that
validate the target URL and translate browser errors into
``OperationResult`` codes.  ``session`` is ``None`` when browser
support is disabled in settings.
"""

from __future__ import annotations

from urllib.parse import urlparse

from toolkit.browser.session import BrowserSession, PageSnapshot
from toolkit.core.errors import BrowserError, BrowserPageError, BrowserTimeoutError, BrowserUnavailableError
from toolkit.core.logging import get_logger
from toolkit.ops.requests import FetchPageRequest
from toolkit.ops.result import OperationResult, Stopwatch, start_timer

logger = get_logger(__name__)

_SCHEMES = ("http", "https")


def _check(session: BrowserSession | None, request: FetchPageRequest, timer: Stopwatch) -> OperationResult | None:
    if session is None:
        return timer.fail("UNAVAILABLE", "Browser support is disabled")
    parsed = urlparse(request.url or "")
    if parsed.scheme not in _SCHEMES or not parsed.netloc:
        return timer.fail("VALIDATION_FAILED", "url must be an absolute http(s) URL")
    if request.timeout_seconds is not None and request.timeout_seconds <= 0:
        return timer.fail("VALIDATION_FAILED", "timeout_seconds must be positive")
    return None


def _failure(exc: BrowserError, timer: Stopwatch) -> OperationResult:
    if isinstance(exc, BrowserTimeoutError):
        return timer.fail("TIMEOUT", exc.message)
    if isinstance(exc, BrowserUnavailableError):
        return timer.fail("UNAVAILABLE", exc.message, retryable=True)
    if isinstance(exc, BrowserPageError):
        return timer.fail("VALIDATION_FAILED", exc.message)
    logger.error("browser_action_failed", **exc.to_dict())
    return timer.fail("INTERNAL", exc.message)


def fetch_page(session: BrowserSession | None, request: FetchPageRequest) -> OperationResult[PageSnapshot]:
    """Load a page in the remote browser and return title + rendered HTML."""
    timer = start_timer()
    if (invalid := _check(session, request, timer)) is not None:
        return invalid
    try:
        snapshot = session.fetch_page(
            request.url,
            wait_for=request.wait_for,
            timeout_seconds=request.timeout_seconds,
        )
    except BrowserError as exc:
        return _failure(exc, timer)
    return timer.ok(snapshot)


def screenshot(session: BrowserSession | None, request: FetchPageRequest) -> OperationResult[bytes]:
    """Load a page in the remote browser and capture a PNG screenshot."""
    timer = start_timer()
    if (invalid := _check(session, request, timer)) is not None:
        return invalid
    try:
        png = session.screenshot(
            request.url,
            wait_for=request.wait_for,
            timeout_seconds=request.timeout_seconds,
        )
    except BrowserError as exc:
        return _failure(exc, timer)
    return timer.ok(png)


def browser_status(session: BrowserSession | None) -> OperationResult[dict]:
    """Report whether a browser session is open, without opening one."""
    timer = start_timer()
    if session is None:
        return timer.ok({"enabled": False, "connected": False, "session_id": None, "endpoint": None})
    return timer.ok({"enabled": True, **session.status()})
