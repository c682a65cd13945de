"""Navigation discovery.

Drives the Storybook manager UI through an ordered table of DOM scans, then
tops up from ``index.json`` when the UI yielded too little. Entries are keyed
by id: the first source to report an id wins. Each scan step reports its own
result so one failing step never fails the whole discovery.

New Storybook variants are supported by adding a ``ScanRule`` to
``SCAN_RULES``, not by adding control flow.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from urllib.parse import unquote

import structlog

from storyscope.index import index_entries
from storyscope.models.storybook import (
    EntryKind,
    NavCategory,
    NavEntry,
    NavigationTree,
    StorybookVersion,
)
from storyscope.navigate import safe_navigate
from storyscope.urls import DOCS_MARKER, clean_entry_id

if TYPE_CHECKING:
    from collections.abc import Iterable

    from storyscope.config import BrowserSettings
    from storyscope.models.storybook import FormatInfo
    from storyscope.protocols import IndexSourceProtocol, PageProtocol

log = structlog.get_logger()

# Fewer entries than this from the primary scans triggers the legacy scan.
LEGACY_SCAN_THRESHOLD = 10
# Fewer entries than this from all scans triggers index augmentation.
INDEX_AUGMENT_THRESHOLD = 20

GROUP_PLACEHOLDER_PREFIX = "group-"
OTHER_CATEGORY = "other"

# (id prefix, category) checked in order before the ``--`` split.
CATEGORY_PREFIXES: tuple[tuple[str, str], ...] = (
    ("components-", "components"),
    ("getting-started-", "getting-started"),
)

_PATH_PARAM = re.compile(r"path=([^&]+)")

EXPAND_GROUPS_SCRIPT = """() => {
  const click = el => { try { el.click(); } catch (e) {} };
  document.querySelectorAll('button[aria-expanded="false"]').forEach(click);
  document.querySelectorAll('[data-nodetype="group"]').forEach(click);
}"""

ITEM_ID_SCRIPT = """() =>
  Array.from(document.querySelectorAll('[data-item-id]')).map(el => ({
    name: el.textContent?.trim() || "",
    id: el.getAttribute("data-item-id") || "",
  }))"""

PATH_LINK_SCRIPT = """() =>
  Array.from(document.querySelectorAll('a[href*="path="]')).map(el => ({
    name: el.textContent?.trim() || "",
    href: el.getAttribute("href") || "",
  }))"""

LEGACY_NAME_SCRIPT = """() =>
  Array.from(document.querySelectorAll('[data-name]')).map(el => ({
    name: el.getAttribute("data-name") || el.textContent?.trim() || "",
    href: el.href || "",
  }))"""


# ---------------------------------------------------------------------------
# Record parsing
# ---------------------------------------------------------------------------


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _kind_from_id(entry_id: str) -> EntryKind:
    return EntryKind.DOCS if DOCS_MARKER in entry_id else EntryKind.STORY


def entry_id_from_href(href: str) -> str | None:
    """Decode a manager link and return the entry id from its ``path`` parameter."""
    match = _PATH_PARAM.search(unquote(href))
    if match is None:
        return None
    return clean_entry_id(match.group(1)) or None


def parse_item_id_record(raw: dict[str, Any]) -> NavEntry | None:
    name, entry_id = _text(raw.get("name")), _text(raw.get("id"))
    if not name or not entry_id or entry_id.startswith(GROUP_PLACEHOLDER_PREFIX):
        return None
    return NavEntry(name=name, id=entry_id, kind=_kind_from_id(entry_id))


def parse_path_link_record(raw: dict[str, Any]) -> NavEntry | None:
    name = _text(raw.get("name"))
    entry_id = entry_id_from_href(_text(raw.get("href")))
    if not name or not entry_id:
        return None
    return NavEntry(name=name, id=entry_id, kind=_kind_from_id(entry_id))


def parse_legacy_name_record(raw: dict[str, Any]) -> NavEntry | None:
    name = _text(raw.get("name"))
    entry_id = entry_id_from_href(_text(raw.get("href")))
    if not name or not entry_id:
        return None
    return NavEntry(name=name, id=entry_id, kind=EntryKind.STORY)


# ---------------------------------------------------------------------------
# Rule table
# ---------------------------------------------------------------------------


def _always(found: int, legacy: bool) -> bool:
    return True


def _legacy_or_sparse(found: int, legacy: bool) -> bool:
    return legacy or found < LEGACY_SCAN_THRESHOLD


@dataclass(frozen=True)
class ScanRule:
    """One DOM scan: a script returning raw records and a parser for them."""

    name: str
    script: str
    parse: Callable[[dict[str, Any]], NavEntry | None]
    applies: Callable[[int, bool], bool] = _always


SCAN_RULES: tuple[ScanRule, ...] = (
    ScanRule("item_id", ITEM_ID_SCRIPT, parse_item_id_record),
    ScanRule("path_link", PATH_LINK_SCRIPT, parse_path_link_record),
    ScanRule("legacy_name", LEGACY_NAME_SCRIPT, parse_legacy_name_record, _legacy_or_sparse),
)


@dataclass
class StepResult:
    """Outcome of one discovery step: its entries, or the error that emptied it."""

    step: str
    entries: list[NavEntry] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def run_scan(page: PageProtocol, rule: ScanRule) -> StepResult:
    try:
        records = await page.evaluate(rule.script)
        entries = [
            entry
            for record in records or []
            if isinstance(record, dict) and (entry := rule.parse(record)) is not None
        ]
    except Exception as exc:
        log.warning("discovery_step_failed", step=rule.name, error=str(exc), exc_info=True)
        return StepResult(step=rule.name, error=str(exc))
    return StepResult(step=rule.name, entries=entries)


async def augment_from_index(index: IndexSourceProtocol) -> StepResult:
    data = await index.fetch()
    if data is None:
        return StepResult(step="index")
    try:
        entries = [
            NavEntry(name=entry.name, id=entry.id, kind=entry.kind)
            for entry in index_entries(data)
        ]
    except ValueError as exc:
        log.warning("discovery_step_failed", step="index", error=str(exc))
        return StepResult(step="index", error=str(exc))
    return StepResult(step="index", entries=entries)


# ---------------------------------------------------------------------------
# Categorisation
# ---------------------------------------------------------------------------


def categorize(entry_id: str) -> str:
    """Map an entry id to its category name. Depends on the id string only."""
    lowered = entry_id.lower()
    for prefix, category in CATEGORY_PREFIXES:
        if lowered.startswith(prefix):
            return category
    if "--" in lowered:
        return lowered.split("--", 1)[0] or OTHER_CATEGORY
    return OTHER_CATEGORY


def build_tree(entries: Iterable[NavEntry]) -> NavigationTree:
    """Deduplicate by id (first wins) and group into categories in first-seen order."""
    flat: dict[str, NavEntry] = {}
    for entry in entries:
        flat.setdefault(entry.id, entry)

    grouped: dict[str, list[NavEntry]] = {}
    for entry in flat.values():
        grouped.setdefault(categorize(entry.id), []).append(entry)

    return NavigationTree(
        categories=[NavCategory(name=name, entries=items) for name, items in grouped.items()],
        flat_list=list(flat.values()),
    )


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


async def expand_navigation(page: PageProtocol) -> None:
    """Click every collapsed toggle and group node once. Best effort."""
    try:
        await page.evaluate(EXPAND_GROUPS_SCRIPT)
    except Exception as exc:
        log.debug("discovery_expand_failed", error=str(exc))


async def discover_navigation(
    page: PageProtocol,
    index: IndexSourceProtocol,
    base_url: str,
    info: FormatInfo,
    settings: BrowserSettings,
) -> NavigationTree:
    """Discover every entry of the site at ``base_url``.

    Raises NavigationError if the manager UI cannot be loaded at all; scan
    failures only empty their own step.
    """
    await safe_navigate(
        page,
        base_url,
        timeout_ms=settings.timeout_ms,
        commit_settle_ms=settings.commit_settle_ms,
    )
    await page.wait_for_timeout(settings.render_settle_ms)
    await expand_navigation(page)
    await page.wait_for_timeout(settings.expand_settle_ms)

    legacy = info.uses_legacy_story_path or info.version == StorybookVersion.V5
    collected: dict[str, NavEntry] = {}
    steps: list[StepResult] = []

    for rule in SCAN_RULES:
        if not rule.applies(len(collected), legacy):
            continue
        result = await run_scan(page, rule)
        steps.append(result)
        for entry in result.entries:
            collected.setdefault(entry.id, entry)

    if len(collected) < INDEX_AUGMENT_THRESHOLD:
        result = await augment_from_index(index)
        steps.append(result)
        for entry in result.entries:
            collected.setdefault(entry.id, entry)

    log.info(
        "navigation_discovered",
        base_url=base_url,
        entries=len(collected),
        steps={step.step: len(step.entries) for step in steps},
        failed_steps=[step.step for step in steps if not step.ok],
    )
    return build_tree(collected.values())
