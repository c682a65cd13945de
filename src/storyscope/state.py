"""Application state container.

AppState is created once at server startup (inside the FastMCP lifespan context
manager) and injected into every tool handler via the MCP Context object. It
holds at most one StorybookSession; connecting to a new base URL replaces it.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from storyscope.browser import PlaywrightBrowser

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from storyscope.config import BrowserSettings, Settings
    from storyscope.protocols import BrowserProtocol
    from storyscope.session import StorybookSession


@dataclass
class AppState:
    """Holds all shared runtime state. Passed to every tool handler."""

    settings: Settings
    http_client: httpx.AsyncClient
    browser_factory: Callable[[BrowserSettings], BrowserProtocol] = PlaywrightBrowser
    base_url: str | None = None
    session: StorybookSession | None = None
    connect_lock: asyncio.Lock = field(default_factory=asyncio.Lock)
