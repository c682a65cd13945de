"""In-memory navigation cache.

Exactly one slot per session. An entry older than the TTL is treated as
absent and replaced wholesale by a fresh discovery; there is no partial
merge. Refreshes are not locked here: the loader is itself a serialised
page-using operation on the session.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

import structlog

from storyscope.models.cache import NavigationCacheEntry

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from storyscope.models.storybook import NavigationTree

log = structlog.get_logger()

DEFAULT_TTL_SECONDS = 5 * 60


class NavigationCache:
    """Holds the most recent NavigationTree with a freshness window."""

    def __init__(
        self,
        loader: Callable[[], Awaitable[NavigationTree]],
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._entry: NavigationCacheEntry | None = None

    def peek(self) -> NavigationCacheEntry | None:
        """Return the current entry if still fresh, without loading."""
        if self._entry is None:
            return None
        if self._clock() - self._entry.fetched_at > self._ttl_seconds:
            return None
        return self._entry

    async def get_tree(self, force_refresh: bool = False) -> NavigationTree:
        entry = None if force_refresh else self.peek()
        if entry is not None:
            log.debug("navigation_cache_hit", age_seconds=self._clock() - entry.fetched_at)
            return entry.tree

        log.info("navigation_cache_miss", forced=force_refresh, had_entry=self._entry is not None)
        tree = await self._loader()
        self._entry = NavigationCacheEntry(tree=tree, fetched_at=self._clock())
        return tree

    def clear(self) -> None:
        self._entry = None
