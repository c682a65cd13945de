"""Storybook format and version detection.

Two independent signals are combined: the ``index.json`` probe and a live
look at the manager UI's routing. Each signal fails soft, so detection always
yields a best-effort FormatInfo.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from playwright.async_api import Error as PlaywrightError

from storyscope.errors import NavigationError
from storyscope.index import classify_index
from storyscope.models.storybook import FormatInfo, StorybookVersion
from storyscope.navigate import safe_navigate

if TYPE_CHECKING:
    from storyscope.config import BrowserSettings
    from storyscope.protocols import IndexSourceProtocol, PageProtocol

log = structlog.get_logger()

LEGACY_URL_MARKERS = ("path=/story/", "path=%2Fstory%2F")
LEGACY_LINK_MARKER = "/story/"
SIDEBAR_SAMPLE_SIZE = 5

SIDEBAR_LINKS_SCRIPT = """(limit) =>
  Array.from(document.querySelectorAll('a[href*="path="]'))
    .slice(0, limit)
    .map(link => link.getAttribute("href") || "")"""


def url_uses_legacy_story_path(url: str) -> bool:
    return any(marker in url for marker in LEGACY_URL_MARKERS)


async def detect_format(
    page: PageProtocol,
    index: IndexSourceProtocol,
    base_url: str,
    settings: BrowserSettings,
) -> FormatInfo:
    """Probe ``base_url`` once and classify its format."""
    has_index = False
    version = StorybookVersion.UNKNOWN
    legacy = False

    data = await index.fetch()
    if data is not None:
        has_index = True
        version = classify_index(data)

    try:
        await safe_navigate(
            page,
            base_url,
            timeout_ms=settings.timeout_ms,
            commit_settle_ms=settings.commit_settle_ms,
        )
        await page.wait_for_timeout(settings.content_settle_ms)
        legacy = url_uses_legacy_story_path(page.url)
        links = await page.evaluate(SIDEBAR_LINKS_SCRIPT, SIDEBAR_SAMPLE_SIZE) or []
        if any(LEGACY_LINK_MARKER in href for href in links if isinstance(href, str)):
            legacy = True
    except (NavigationError, PlaywrightError) as exc:
        log.warning("format_probe_failed", base_url=base_url, error=str(exc))

    if legacy and not has_index:
        version = StorybookVersion.V5

    info = FormatInfo(version=version, has_index=has_index, uses_legacy_story_path=legacy)
    log.info(
        "format_detected",
        base_url=base_url,
        version=info.version,
        has_index=info.has_index,
        uses_legacy_story_path=info.uses_legacy_story_path,
    )
    return info
