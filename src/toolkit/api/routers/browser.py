"""
Remote browser router.

GET  /browser/status
POST /browser/page
POST /browser/screenshot

Page loads run on the shared Selenium session and are serialised, so
these are sync routes executed in the threadpool.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import Response

from toolkit.api.deps import Browser
from toolkit.api.schemas.browser import BrowserStatusSchema, PageBody, PageSchema
from toolkit.api.schemas.common import SuccessResponse
from toolkit.api.utils import as_dict, problem_from_result
from toolkit.ops import browser as browser_ops
from toolkit.ops.requests import FetchPageRequest

router = APIRouter(prefix="/browser")


def _request(body: PageBody) -> FetchPageRequest:
    return FetchPageRequest(url=body.url, wait_for=body.wait_for, timeout_seconds=body.timeout_seconds)


@router.get("/status", response_model=SuccessResponse[BrowserStatusSchema])
def browser_status(browser: Browser):
    """Whether a browser session is currently open. Never opens one."""
    result = browser_ops.browser_status(browser)
    return SuccessResponse(data=BrowserStatusSchema(**result.data), elapsed_ms=result.elapsed_ms)


@router.post("/page", response_model=SuccessResponse[PageSchema])
def fetch_page(browser: Browser, body: PageBody, request: Request):
    """Load *url* and return its title and rendered HTML.

    Raises:
        400 VALIDATION_FAILED: url is not an absolute http(s) URL.
        503 UNAVAILABLE: browser disabled or Selenium unreachable.
        504 TIMEOUT: page load or ``wait_for`` selector timed out.
    """
    result = browser_ops.fetch_page(browser, _request(body))
    if not result.success:
        return problem_from_result(result, request)
    return SuccessResponse(data=PageSchema(**as_dict(result.data)), elapsed_ms=result.elapsed_ms)


@router.post(
    "/screenshot",
    response_class=Response,
    responses={200: {"content": {"image/png": {}}}},
)
def screenshot(browser: Browser, body: PageBody, request: Request):
    """Load *url* and return a PNG screenshot of the viewport."""
    result = browser_ops.screenshot(browser, _request(body))
    if not result.success:
        return problem_from_result(result, request)
    return Response(
        content=result.data,
        media_type="image/png",
        headers={"X-Elapsed-Ms": str(round(result.elapsed_ms, 2))},
    )
