"""Entry search.

Pure business logic: a linear, case-insensitive substring filter over the
flat navigation list. No knowledge of the session or I/O.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from storyscope.models.storybook import NavEntry, NavigationTree


def search_entries(tree: NavigationTree, query: str) -> list[NavEntry]:
    """Return entries whose name or id contains ``query``, in navigation order."""
    needle = query.strip().lower()
    if not needle:
        return []
    return [
        entry
        for entry in tree.flat_list
        if needle in entry.name.lower() or needle in entry.id.lower()
    ]


def filter_by_category(entries: list[NavEntry], category: str | None) -> list[NavEntry]:
    """Keep entries whose id contains ``category`` (case-insensitive)."""
    if not category:
        return list(entries)
    needle = category.lower()
    return [entry for entry in entries if needle in entry.id.lower()]
