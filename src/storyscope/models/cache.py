from __future__ import annotations

from pydantic import BaseModel

from storyscope.models.storybook import NavigationTree


class NavigationCacheEntry(BaseModel):
    """The single cached discovery result of a session."""

    tree: NavigationTree
    fetched_at: float  # Clock reading (seconds) when discovery finished
