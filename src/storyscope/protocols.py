"""Protocol interfaces for the capabilities the core consumes.

The session and the discovery/extraction code reference these protocols, not
Playwright directly. This allows:
- Tests to drive the core with an in-memory fake page
- The browser driver to be swapped without touching discovery or extraction
"""

from __future__ import annotations

from typing import Any, Protocol


class PageProtocol(Protocol):
    """The subset of a browser page the core uses."""

    @property
    def url(self) -> str: ...

    async def goto(self, url: str, *, wait_until: str, timeout: float) -> Any: ...

    async def evaluate(self, expression: str, arg: Any = None) -> Any: ...

    async def wait_for_timeout(self, timeout: float) -> None: ...

    async def screenshot(self, *, full_page: bool = False) -> bytes: ...


class BrowserProtocol(Protocol):
    """Owns the browser process and hands out a fresh page on request."""

    async def new_page(self) -> PageProtocol: ...

    async def close(self) -> None: ...


class IndexSourceProtocol(Protocol):
    """Interface for the ``index.json`` probe."""

    async def fetch(self) -> dict[str, Any] | None: ...
