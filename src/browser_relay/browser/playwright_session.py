"""Playwright-powered browser session implementation."""

from __future__ import annotations

import logging
from typing import Any, Optional

from playwright.sync_api import Route, sync_playwright

from ..config import BrowserConfig
from .base import BrowserSession, BrowserSessionError, DisplayMode

LOGGER = logging.getLogger(__name__)


def is_blocked_request(resource_type: str, url: str, config: BrowserConfig) -> bool:
    """Return True for the tracking pings that should never reach the network."""

    return (
        resource_type == config.blocked_resource_type
        and config.blocked_url_fragment in url
    )


class PlaywrightBrowserSession(BrowserSession):
    """Browser session backed by sync Playwright and Chromium.

    Every method must be called from the thread that called :meth:`launch`.
    """

    def __init__(
        self,
        config: Optional[BrowserConfig] = None,
        mode: DisplayMode = DisplayMode.HEADLESS,
    ) -> None:
        self._config = config or BrowserConfig()
        self._mode = mode
        self._playwright = None
        self._browser = None
        self._context = None
        self._page = None

    @property
    def mode(self) -> DisplayMode:
        return self._mode

    @property
    def page(self) -> Any:
        if not self._page:
            raise BrowserSessionError("Browser session is not started")
        return self._page

    def launch(self) -> None:
        LOGGER.debug("Starting Playwright browser session in %s mode", self._mode.value)
        self._playwright = sync_playwright().start()
        try:
            self._browser = self._playwright.chromium.launch(
                headless=self._mode is DisplayMode.HEADLESS,
                args=list(self._config.launch_args),
            )
            viewport = {
                "width": self._config.viewport_width,
                "height": self._config.viewport_height,
            }
            self._context = self._browser.new_context(viewport=viewport)
            self._page = self._context.new_page()
            self._page.route("**/*", self._filter_request)
            self._page.set_viewport_size(viewport)
            self._page.goto(self._config.start_url)
        except Exception:
            self.close()
            raise
        LOGGER.info("Browser session ready at %s", self._config.start_url)

    def close(self) -> None:
        LOGGER.debug("Stopping Playwright browser session")
        try:
            if self._context:
                self._context.close()
        finally:
            try:
                if self._browser:
                    self._browser.close()
            finally:
                try:
                    if self._playwright:
                        self._playwright.stop()
                finally:
                    self._context = None
                    self._browser = None
                    self._playwright = None
                    self._page = None

    def screenshot(self) -> bytes:
        return self.page.screenshot(type=self._config.screenshot_type)

    def _filter_request(self, route: Route) -> None:
        request = route.request
        if is_blocked_request(request.resource_type, request.url, self._config):
            route.abort()
        else:
            route.continue_()
