"""Probe of the optional ``index.json`` manifest.

The index is advisory: every failure (network error, non-2xx, non-JSON body)
degrades to ``None`` and callers fall through to DOM discovery. All network
I/O goes through the shared httpx client owned by the server lifespan.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
import structlog
from pydantic import ValidationError

from storyscope.models.storybook import EntryKind, IndexEntry, StorybookVersion
from storyscope.urls import DOCS_MARKER, index_url

if TYPE_CHECKING:
    from storyscope.config import IndexSettings

log = structlog.get_logger()


def build_http_client(settings: IndexSettings) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    return httpx.AsyncClient(
        follow_redirects=True,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers={"User-Agent": "storyscope/1.0"},
        limits=httpx.Limits(
            max_connections=10,
            max_keepalive_connections=5,
        ),
    )


class IndexClient:
    """Fetches ``<root>/index.json`` for one Storybook site."""

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self._client = client
        self.url = index_url(base_url)

    async def fetch(self) -> dict[str, Any] | None:
        """Return the parsed index, or ``None`` if the site does not publish one."""
        try:
            response = await self._client.get(self.url)
        except httpx.HTTPError as exc:
            log.debug("index_fetch_failed", url=self.url, error=str(exc))
            return None

        content_type = response.headers.get("content-type", "")
        if not response.is_success or "application/json" not in content_type:
            log.debug(
                "index_unavailable",
                url=self.url,
                status_code=response.status_code,
                content_type=content_type,
            )
            return None

        try:
            data = response.json()
        except ValueError:
            log.debug("index_invalid_json", url=self.url)
            return None

        if not isinstance(data, dict):
            log.debug("index_unexpected_shape", url=self.url)
            return None

        log.info("index_fetched", url=self.url, entries=len(_raw_entries(data)))
        return data


def classify_index(data: dict[str, Any]) -> StorybookVersion:
    """Infer the Storybook major version from an index document.

    ``v: 5`` is the 7.x index format, ``v: 4`` the 6.x one. Older documents
    without a discriminant are recognised by their entries/stories container.
    """
    v = data.get("v")
    if v == 5:
        return StorybookVersion.V7
    if v == 4:
        return StorybookVersion.V6
    if data.get("entries") or data.get("stories"):
        return StorybookVersion.V6
    return StorybookVersion.UNKNOWN


def _raw_entries(data: dict[str, Any]) -> dict[str, Any]:
    raw = data.get("entries") or data.get("stories") or {}
    return raw if isinstance(raw, dict) else {}


def _entry_kind(entry_id: str, entry: dict[str, Any]) -> EntryKind | None:
    declared = entry.get("type")
    if declared is None:
        return EntryKind.DOCS if DOCS_MARKER in entry_id else EntryKind.STORY
    try:
        return EntryKind(declared)
    except ValueError:
        return None


def index_entries(data: dict[str, Any]) -> list[IndexEntry]:
    """Normalise the index into entries, in document order.

    Entries with an unrecognised ``type`` or malformed fields are skipped.
    """
    entries: list[IndexEntry] = []
    for entry_id, entry in _raw_entries(data).items():
        if not isinstance(entry, dict):
            continue
        kind = _entry_kind(entry_id, entry)
        if kind is None:
            continue
        try:
            parsed = IndexEntry(
                id=entry_id,
                name=entry.get("name") or entry_id.split("--")[-1] or entry_id,
                title=entry.get("title") or entry_id,
                kind=kind,
            )
        except ValidationError as exc:
            log.debug("index_entry_skipped", entry_id=entry_id, error=str(exc))
            continue
        entries.append(parsed)
    return entries
