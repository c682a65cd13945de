"""Storybook URL resolution.

Pure functions: no I/O, no session state. Every content and screenshot
operation builds its iframe URL through ``resolve_url``.
"""

from __future__ import annotations

import re
from typing import Literal
from urllib.parse import urlparse

from storyscope.models.storybook import FormatInfo, StorybookVersion

ViewMode = Literal["story", "docs"]

DOCS_MARKER = "--docs"
COLOR_MARKER = "--color"

# Leading path prefixes an entry id may carry when copied from a manager URL.
_ID_PREFIXES = ("/story/", "/docs/", "/")


def is_valid_storybook_url(url: str | None) -> bool:
    """Return True for absolute http/https URLs with a host."""
    if not url or not isinstance(url, str):
        return False
    parsed = urlparse(url.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def clean_entry_id(entry_id: str) -> str:
    """Strip a leading ``/story/``, ``/docs/`` or ``/`` from an entry id."""
    cleaned = entry_id.strip()
    for prefix in _ID_PREFIXES:
        if cleaned.startswith(prefix):
            cleaned = cleaned[len(prefix) :]
    return cleaned


def storybook_root(base_url: str) -> str:
    """Return the site root: no query, no fragment, no ``index.html``, no trailing slash."""
    root = re.sub(r"[?#].*$", "", base_url.strip())
    root = re.sub(r"index\.html$", "", root)
    return root.rstrip("/")


def index_url(base_url: str) -> str:
    return f"{storybook_root(base_url)}/index.json"


def is_docs_id(entry_id: str) -> bool:
    return DOCS_MARKER in entry_id or COLOR_MARKER in entry_id


def is_story_id(entry_id: str) -> bool:
    """A story id names a single story: it has a ``--`` and is not a docs page."""
    return "--" in entry_id and DOCS_MARKER not in entry_id


def resolve_url(base_url: str, entry_id: str, mode: ViewMode, info: FormatInfo) -> str:
    """Build the iframe URL that renders ``entry_id`` on its own.

    Legacy ``/story/`` routed sites (and v5) take only the id. Newer sites take
    a ``viewMode``; docs mode ids without a docs/color marker get ``--docs``
    appended.
    """
    root = storybook_root(base_url)
    cleaned = clean_entry_id(entry_id)

    if info.uses_legacy_story_path or info.version == StorybookVersion.V5:
        return f"{root}/iframe.html?id={cleaned}"

    view_mode: ViewMode = "docs" if mode == "docs" or is_docs_id(cleaned) else "story"
    if view_mode == "docs" and not is_docs_id(cleaned):
        cleaned = f"{cleaned}{DOCS_MARKER}"
    return f"{root}/iframe.html?viewMode={view_mode}&id={cleaned}"
