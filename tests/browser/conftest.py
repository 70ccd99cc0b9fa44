"""Fake WebDriver for browser tests (no Selenium server needed)."""

from __future__ import annotations

import pytest
from selenium.common.exceptions import (
    InvalidSessionIdException,
    NoSuchElementException,
    TimeoutException,
    WebDriverException,
)

PNG = b"\x89PNG\r\n\x1a\nfake"


class FakeDriver:
    """Just enough of ``WebDriver`` for BrowserSession."""

    instances = 0

    def __init__(self, *, fail_with: Exception | None = None, present: set[str] | None = None) -> None:
        FakeDriver.instances += 1
        self.session_id = f"session-{FakeDriver.instances}"
        self.fail_with = fail_with
        self.present = present or set()
        self.current_url = "about:blank"
        self.title = ""
        self.page_source = ""
        self.page_load_timeout = None
        self.visited: list[str] = []
        self.quit_called = False

    def set_page_load_timeout(self, seconds: float) -> None:
        self.page_load_timeout = seconds

    def get(self, url: str) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.visited.append(url)
        self.current_url = url
        self.title = f"Title of {url}"
        self.page_source = f"<html><body>{url}</body></html>"

    def find_element(self, by, value):
        if value in self.present:
            return object()
        raise NoSuchElementException(f"no {value}")

    def get_screenshot_as_png(self) -> bytes:
        return PNG

    def quit(self) -> None:
        self.quit_called = True


@pytest.fixture()
def fake_driver_cls():
    return FakeDriver


@pytest.fixture()
def dead_session_error():
    return InvalidSessionIdException("invalid session id")


@pytest.fixture()
def page_timeout_error():
    return TimeoutException("page load timed out")


@pytest.fixture()
def unresolvable_host_error():
    return WebDriverException("unknown error: net::ERR_NAME_NOT_RESOLVED\n  (Session info: chrome=120)")
