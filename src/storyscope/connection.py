"""Connecting AppState to a Storybook site.

The session is created lazily on first use when a URL was configured at
startup, or eagerly by the connect tool. Reconnecting discards the previous
session together with its FormatInfo and navigation cache.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from playwright.async_api import Error as PlaywrightError

from storyscope.errors import ConfigurationError, ErrorCode, StoryscopeError
from storyscope.index import IndexClient
from storyscope.session import StorybookSession
from storyscope.urls import is_valid_storybook_url

if TYPE_CHECKING:
    from storyscope.state import AppState

log = structlog.get_logger()


async def _open_session(state: AppState, base_url: str) -> StorybookSession:
    browser = state.browser_factory(state.settings.browser)
    session = StorybookSession(
        base_url,
        state.settings,
        browser,
        IndexClient(state.http_client, base_url),
    )
    try:
        await session.start()
    except PlaywrightError as exc:
        await browser.close()
        raise StoryscopeError(
            code=ErrorCode.BROWSER_UNAVAILABLE,
            message=f"Could not start the browser for {base_url}: {exc}",
            suggestion="Install the browser with 'playwright install chromium' and retry.",
            recoverable=False,
        ) from exc
    except Exception:
        await browser.close()
        raise
    return session


async def get_session(state: AppState) -> StorybookSession:
    """Return the active session, opening it on first use."""
    if state.base_url is None:
        raise ConfigurationError(
            code=ErrorCode.NOT_CONNECTED,
            message="No Storybook URL configured.",
            suggestion="Call the connect tool with the url of a Storybook site first.",
            recoverable=True,
        )
    async with state.connect_lock:
        if state.session is None:
            state.session = await _open_session(state, state.base_url)
    return state.session


async def reconnect(state: AppState, url: str) -> StorybookSession:
    """Replace the current session with one connected to ``url``."""
    url = url.strip()
    if not is_valid_storybook_url(url):
        raise ConfigurationError(
            code=ErrorCode.INVALID_URL,
            message=f"Invalid Storybook URL: {url!r}",
            suggestion="Use a valid http or https Storybook URL.",
            recoverable=True,
        )
    async with state.connect_lock:
        await _close(state)
        state.base_url = url
        state.session = await _open_session(state, url)
    log.info("storybook_connected", base_url=url)
    return state.session


async def _close(state: AppState) -> None:
    if state.session is not None:
        session, state.session = state.session, None
        await session.close()


async def close_session(state: AppState) -> None:
    async with state.connect_lock:
        await _close(state)
