"""
Remote WebDriver session
========================

One long-lived Chrome session on the Selenium sidecar, shared by every
request:

- the session is created lazily on first use (the sidecar may still be
  starting when toolkit boots), with retries
- all use is serialised behind a lock, since a WebDriver session drives
  a single tab
- a session that died (sidecar restart, session timeout) is recreated
  once and the action retried; a page that fails to load leaves the
  session alone
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import urllib3
from retry import retry
from selenium import webdriver
from selenium.common.exceptions import (
    InvalidSessionIdException,
    NoSuchWindowException,
    TimeoutException,
    WebDriverException,
)
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver
from selenium.webdriver.support import expected_conditions as EC
from selenium.webdriver.support.ui import WebDriverWait

from toolkit.browser.options import chrome_options
from toolkit.core.errors import BrowserError, BrowserPageError, BrowserTimeoutError, BrowserUnavailableError
from toolkit.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DriverFactory = Callable[[], WebDriver]

# webdriver.Remote surfaces refused connections as urllib3 errors, not WebDriverException
_CONNECT_ERRORS = (WebDriverException, urllib3.exceptions.HTTPError, OSError)

# The session is gone (sidecar restart, idle timeout); anything else is about the page
_SESSION_LOST = (InvalidSessionIdException, NoSuchWindowException, urllib3.exceptions.HTTPError, OSError)


def _first_line(exc: BaseException) -> str:
    text = getattr(exc, "msg", None) or str(exc) or type(exc).__name__
    return text.splitlines()[0]


@retry(exceptions=_CONNECT_ERRORS, tries=3, delay=2, backoff=2)
def create_remote_driver(endpoint: str) -> WebDriver:
    """Open a Chrome session on the Selenium endpoint, retrying on failure."""
    logger.info("browser_connecting", endpoint=endpoint)
    driver = webdriver.Remote(command_executor=endpoint, options=chrome_options())
    logger.info("browser_connected", session_id=driver.session_id)
    return driver


@dataclass(frozen=True)
class PageSnapshot:
    """Rendered state of a page after navigation."""

    url: str
    title: str
    source: str


class BrowserSession:
    """Shared, lazily created WebDriver session.

    Args:
        endpoint: Selenium endpoint, e.g. ``http://selenium:4444/wd/hub``.
        page_timeout_seconds: Default page-load and wait timeout.
        driver_factory: Override how the driver is created (tests).
    """

    def __init__(
        self,
        endpoint: str,
        *,
        page_timeout_seconds: float = 30.0,
        driver_factory: DriverFactory | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.page_timeout_seconds = page_timeout_seconds
        self._factory = driver_factory or (lambda: create_remote_driver(endpoint))
        self._driver: WebDriver | None = None
        self._lock = threading.Lock()

    # -- lifecycle ---------------------------------------------------------

    def _ensure_driver(self) -> WebDriver:
        if self._driver is None:
            try:
                self._driver = self._factory()
            except _CONNECT_ERRORS as exc:
                raise BrowserUnavailableError(
                    f"Could not create browser session at {self.endpoint}",
                    cause=exc,
                ) from exc
        return self._driver

    def _discard_driver(self) -> None:
        driver, self._driver = self._driver, None
        if driver is None:
            return
        try:
            driver.quit()
        except WebDriverException as exc:
            logger.debug("browser_quit_failed", error=exc.msg)

    def close(self) -> None:
        """Quit the session, if any."""
        with self._lock:
            if self._driver is not None:
                logger.info("browser_closing", session_id=self._driver.session_id)
            self._discard_driver()

    def _run(self, action: Callable[[WebDriver], T]) -> T:
        """Run *action* on the driver, recreating a lost session once."""
        with self._lock:
            try:
                return self._attempt(action, attempt=1)
            except _SESSION_LOST:
                self._discard_driver()
            try:
                return self._attempt(action, attempt=2)
            except _SESSION_LOST as exc:
                self._discard_driver()
                raise BrowserError(f"Browser session lost: {_first_line(exc)}", cause=exc) from exc

    def _attempt(self, action: Callable[[WebDriver], T], *, attempt: int) -> T:
        driver = self._ensure_driver()
        try:
            return action(driver)
        except TimeoutException as exc:
            raise BrowserTimeoutError("Timed out waiting for page", cause=exc) from exc
        except _SESSION_LOST as exc:
            logger.warning("browser_session_lost", attempt=attempt, error=_first_line(exc))
            raise
        except WebDriverException as exc:
            raise BrowserPageError(f"Page could not be loaded: {_first_line(exc)}", cause=exc) from exc

    # -- actions -------------------------------------------------------------

    def _navigate(self, driver: WebDriver, url: str, wait_for: str | None, timeout: float) -> None:
        driver.set_page_load_timeout(timeout)
        driver.get(url)
        if wait_for:
            WebDriverWait(driver, timeout).until(
                EC.presence_of_element_located((By.CSS_SELECTOR, wait_for))
            )

    def fetch_page(
        self,
        url: str,
        *,
        wait_for: str | None = None,
        timeout_seconds: float | None = None,
    ) -> PageSnapshot:
        """Navigate to *url* and return the rendered title and HTML."""
        timeout = timeout_seconds or self.page_timeout_seconds

        def _action(driver: WebDriver) -> PageSnapshot:
            self._navigate(driver, url, wait_for, timeout)
            return PageSnapshot(url=driver.current_url, title=driver.title, source=driver.page_source)

        return self._run(_action)

    def screenshot(
        self,
        url: str,
        *,
        wait_for: str | None = None,
        timeout_seconds: float | None = None,
    ) -> bytes:
        """Navigate to *url* and return a PNG screenshot of the viewport."""
        timeout = timeout_seconds or self.page_timeout_seconds

        def _action(driver: WebDriver) -> bytes:
            self._navigate(driver, url, wait_for, timeout)
            return driver.get_screenshot_as_png()

        return self._run(_action)

    def status(self) -> dict[str, Any]:
        """Connection state, without creating a session."""
        driver = self._driver
        return {
            "connected": driver is not None,
            "session_id": driver.session_id if driver is not None else None,
            "endpoint": self.endpoint,
        }
