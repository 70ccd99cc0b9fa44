"""
Remote browser automation against the Selenium standalone-chrome sidecar.
"""

from toolkit.browser.options import chrome_options
from toolkit.browser.session import BrowserSession, PageSnapshot, create_remote_driver

__all__ = ["BrowserSession", "PageSnapshot", "chrome_options", "create_remote_driver"]
