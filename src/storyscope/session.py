"""Storybook session: one connected site, one browser, one page.

Every operation that navigates the page runs its whole navigate-then-extract
sequence under the session lock, so concurrent tool calls observe the page
they loaded. FormatInfo is detected at most once per session; the navigation
cache lives and dies with the session.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog
from playwright.async_api import Error as PlaywrightError

from storyscope.cache import NavigationCache
from storyscope.detector import detect_format
from storyscope.discovery import discover_navigation
from storyscope.errors import ErrorCode, ExtractionError, StoryscopeError
from storyscope.extractor import (
    STORY_CODE_MAX_CHARS,
    extract_component_docs,
    extract_page_content,
)
from storyscope.full_navigation import (
    build_full_navigation,
    entries_from_tree,
    find_component,
)
from storyscope.index import index_entries
from storyscope.navigate import safe_navigate
from storyscope.search import search_entries
from storyscope.urls import ViewMode, clean_entry_id, is_docs_id, is_story_id, resolve_url

if TYPE_CHECKING:
    from storyscope.config import Settings
    from storyscope.models.storybook import (
        ComponentDocs,
        FormatInfo,
        FullComponent,
        FullNavigation,
        NavEntry,
        NavigationTree,
        PageContent,
    )
    from storyscope.protocols import BrowserProtocol, IndexSourceProtocol, PageProtocol

log = structlog.get_logger()

LIVENESS_SCRIPT = "() => true"


class StorybookSession:
    """Explicit per-connection state passed to every core operation."""

    def __init__(
        self,
        base_url: str,
        settings: Settings,
        browser: BrowserProtocol,
        index: IndexSourceProtocol,
    ) -> None:
        self.base_url = base_url
        self._settings = settings
        self._browser = browser
        self._index = index
        self._page: PageProtocol | None = None
        self._lock = asyncio.Lock()
        self._format_info: FormatInfo | None = None
        self.navigation = NavigationCache(
            self.discover_navigation,
            ttl_seconds=settings.cache.navigation_ttl_seconds,
        )

    @property
    def ready(self) -> bool:
        return self._page is not None

    @property
    def format_info(self) -> FormatInfo | None:
        return self._format_info

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Open the page and detect the site format."""
        async with self._lock:
            self._page = await self._browser.new_page()
        await self.detect_format()
        log.info("session_started", base_url=self.base_url)

    async def close(self) -> None:
        self._page = None
        self._format_info = None
        self.navigation.clear()
        await self._browser.close()
        log.info("session_closed", base_url=self.base_url)

    async def _ready_page(self) -> PageProtocol:
        """Return a responsive page, recreating context and page if needed.

        Caller must hold the session lock.
        """
        if self._page is None:
            raise StoryscopeError(
                code=ErrorCode.NOT_CONNECTED,
                message="Storybook session is closed.",
                suggestion="Call the connect tool to open a new session.",
                recoverable=True,
            )
        try:
            await self._page.evaluate(LIVENESS_SCRIPT)
        except Exception:
            log.warning("page_unresponsive_recreating", base_url=self.base_url, exc_info=True)
            self._page = await self._browser.new_page()
        return self._page

    async def _load(self, entry_id: str, mode: ViewMode, info: FormatInfo) -> PageProtocol:
        """Navigate to the iframe view of ``entry_id``. Caller must hold the lock."""
        url = resolve_url(self.base_url, entry_id, mode, info)
        page = await self._ready_page()
        browser_settings = self._settings.browser
        await safe_navigate(
            page,
            url,
            timeout_ms=browser_settings.timeout_ms,
            commit_settle_ms=browser_settings.commit_settle_ms,
        )
        await page.wait_for_timeout(browser_settings.content_settle_ms)
        return page

    # ------------------------------------------------------------------
    # Format and navigation
    # ------------------------------------------------------------------

    async def detect_format(self) -> FormatInfo:
        if self._format_info is not None:
            return self._format_info
        async with self._lock:
            if self._format_info is None:
                page = await self._ready_page()
                self._format_info = await detect_format(
                    page, self._index, self.base_url, self._settings.browser
                )
        return self._format_info

    async def discover_navigation(self) -> NavigationTree:
        info = await self.detect_format()
        async with self._lock:
            page = await self._ready_page()
            return await discover_navigation(
                page, self._index, self.base_url, info, self._settings.browser
            )

    async def navigation_tree(self, force_refresh: bool = False) -> NavigationTree:
        return await self.navigation.get_tree(force_refresh=force_refresh)

    async def search(self, query: str) -> list[NavEntry]:
        return search_entries(await self.navigation_tree(), query)

    async def full_navigation(self) -> FullNavigation:
        """Build the hierarchy from index.json, or from discovery when absent."""
        data = await self._index.fetch()
        if data is not None:
            entries = index_entries(data)
        else:
            log.info("full_navigation_from_discovery", base_url=self.base_url)
            entries = entries_from_tree(await self.navigation_tree())
        return build_full_navigation(entries)

    async def find_component(self, path: str) -> tuple[FullComponent | None, str | None]:
        return find_component(await self.full_navigation(), path)

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    async def get_page_content(self, entry_id: str, *, markdown: bool) -> PageContent | None:
        """Docs view content, or ``None`` if the page could not be evaluated."""
        info = await self.detect_format()
        async with self._lock:
            page = await self._load(entry_id, "docs", info)
            try:
                return await extract_page_content(page, markdown=markdown)
            except ExtractionError as exc:
                log.warning("extraction_failed", entry_id=entry_id, error=exc.message)
                return None

    async def get_story_content(self, entry_id: str) -> PageContent | None:
        """Story (or docs/color page) content with markdown, or ``None``."""
        info = await self.detect_format()
        mode: ViewMode = "docs" if is_docs_id(clean_entry_id(entry_id)) else "story"
        async with self._lock:
            page = await self._load(entry_id, mode, info)
            try:
                return await extract_page_content(
                    page, markdown=True, max_code_chars=STORY_CODE_MAX_CHARS
                )
            except ExtractionError as exc:
                log.warning("extraction_failed", entry_id=entry_id, error=exc.message)
                return None

    async def get_component_docs(self, entry_id: str) -> ComponentDocs | None:
        info = await self.detect_format()
        async with self._lock:
            page = await self._load(entry_id, "docs", info)
            try:
                return await extract_component_docs(page)
            except ExtractionError as exc:
                log.warning("extraction_failed", entry_id=entry_id, error=exc.message)
                return None

    async def screenshot(self, entry_id: str) -> bytes:
        """Full-page PNG of the story view (story ids) or docs view (anything else)."""
        info = await self.detect_format()
        mode: ViewMode = "story" if is_story_id(clean_entry_id(entry_id)) else "docs"
        async with self._lock:
            page = await self._load(entry_id, mode, info)
            try:
                return await page.screenshot(full_page=True)
            except PlaywrightError as exc:
                raise ExtractionError(page.url, exc) from exc
