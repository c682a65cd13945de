"""Playwright-backed browser capability.

One browser process per session. ``new_page`` always starts from a fresh
context, so it doubles as the recovery path when the current page stops
responding.
"""

from __future__ import annotations

from contextlib import suppress
from typing import TYPE_CHECKING

import structlog
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, Page, Playwright

    from storyscope.config import BrowserSettings

log = structlog.get_logger()


class PlaywrightBrowser:
    """Headless Chromium implementing BrowserProtocol."""

    def __init__(self, settings: BrowserSettings) -> None:
        self._settings = settings
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._context: BrowserContext | None = None

    async def _launch(self) -> Browser:
        if self._browser is None:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._settings.headless
            )
            log.info("browser_launched", headless=self._settings.headless)
        return self._browser

    async def new_page(self) -> Page:
        browser = await self._launch()
        if self._context is not None:
            with suppress(PlaywrightError):
                await self._context.close()
        self._context = await browser.new_context()
        page = await self._context.new_page()
        page.set_default_timeout(self._settings.timeout_ms)
        return page

    async def close(self) -> None:
        if self._browser is not None:
            with suppress(PlaywrightError):
                await self._browser.close()
        if self._playwright is not None:
            await self._playwright.stop()
        self._context = None
        self._browser = None
        self._playwright = None
        log.info("browser_closed")
