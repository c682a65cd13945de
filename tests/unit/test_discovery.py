"""Unit tests for storyscope.discovery."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
from fakes import BASE_URL, FakeIndex, FakePage
from playwright.async_api import Error as PlaywrightError

from storyscope.discovery import (
    ITEM_ID_SCRIPT,
    LEGACY_NAME_SCRIPT,
    PATH_LINK_SCRIPT,
    augment_from_index,
    build_tree,
    categorize,
    discover_navigation,
    entry_id_from_href,
    parse_item_id_record,
    parse_legacy_name_record,
    parse_path_link_record,
)
from storyscope.errors import NavigationError
from storyscope.models.storybook import EntryKind, FormatInfo, NavEntry, StorybookVersion

if TYPE_CHECKING:
    from storyscope.config import Settings

MODERN = FormatInfo(version=StorybookVersion.V7, has_index=True)
LEGACY = FormatInfo(version=StorybookVersion.V5, uses_legacy_story_path=True)


def _story(entry_id: str, name: str = "Story") -> NavEntry:
    return NavEntry(name=name, id=entry_id, kind=EntryKind.STORY)


def _item_records(count: int) -> list[dict[str, Any]]:
    return [{"name": f"Story {i}", "id": f"components-widget--story-{i}"} for i in range(count)]


# ---------------------------------------------------------------------------
# categorize / build_tree
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("entry_id", "category"),
    [
        ("components-button--basic", "components"),
        ("getting-started-intro--docs", "getting-started"),
        ("foo--bar", "foo"),
        ("standalone", "other"),
        ("Components-Card--Default", "components"),
        ("Foundations-Colors--palette", "foundations-colors"),
        ("--orphan", "other"),
    ],
)
def test_categorize(entry_id: str, category: str) -> None:
    assert categorize(entry_id) == category


def test_categorize_is_prefix_based() -> None:
    # "components-" inside the id does not make it a component
    assert categorize("legacy-components-button--basic") == "legacy-components-button"


class TestBuildTree:
    def test_duplicates_dropped_first_wins(self) -> None:
        tree = build_tree([_story("a--b", "First"), _story("a--b", "Second"), _story("c--d")])
        assert [e.id for e in tree.flat_list] == ["a--b", "c--d"]
        assert tree.flat_list[0].name == "First"

    def test_categories_in_first_seen_order(self) -> None:
        tree = build_tree(
            [
                _story("foo--one"),
                _story("components-button--basic"),
                _story("foo--two"),
                _story("standalone"),
            ]
        )
        assert [c.name for c in tree.categories] == ["foo", "components", "other"]
        assert [e.id for e in tree.categories[0].entries] == ["foo--one", "foo--two"]

    def test_deterministic(self) -> None:
        entries = [_story("foo--one"), _story("bar--two"), _story("foo--three")]
        assert build_tree(entries) == build_tree(entries)

    def test_empty(self) -> None:
        tree = build_tree([])
        assert tree.categories == []
        assert tree.flat_list == []


# ---------------------------------------------------------------------------
# Record parsing
# ---------------------------------------------------------------------------


class TestEntryIdFromHref:
    def test_story_path(self) -> None:
        assert entry_id_from_href("?path=/story/components-button--basic") == (
            "components-button--basic"
        )

    def test_encoded_path_with_more_params(self) -> None:
        href = "/?path=%2Fdocs%2Fcomponents-button--docs&args=size:large"
        assert entry_id_from_href(href) == "components-button--docs"

    def test_no_path_param(self) -> None:
        assert entry_id_from_href("https://github.com/storybookjs") is None

    def test_empty_path(self) -> None:
        assert entry_id_from_href("?path=/story/") is None


class TestParseRecords:
    def test_item_id_story(self) -> None:
        entry = parse_item_id_record({"name": " Basic ", "id": "components-button--basic"})
        assert entry == NavEntry(name="Basic", id="components-button--basic", kind=EntryKind.STORY)

    def test_item_id_docs(self) -> None:
        entry = parse_item_id_record({"name": "Docs", "id": "components-button--docs"})
        assert entry is not None
        assert entry.kind == EntryKind.DOCS

    def test_item_id_skips_group_placeholder(self) -> None:
        assert parse_item_id_record({"name": "Components", "id": "group-components"}) is None

    def test_item_id_requires_name(self) -> None:
        assert parse_item_id_record({"name": "", "id": "a--b"}) is None

    def test_path_link(self) -> None:
        entry = parse_path_link_record({"name": "Docs", "href": "?path=/docs/a--docs"})
        assert entry == NavEntry(name="Docs", id="a--docs", kind=EntryKind.DOCS)

    def test_legacy_defaults_to_story(self) -> None:
        entry = parse_legacy_name_record(
            {"name": "Overview", "href": "https://sb.example.com/?path=/story/intro--docs"}
        )
        assert entry is not None
        assert entry.kind == EntryKind.STORY

    def test_non_string_values_ignored(self) -> None:
        assert parse_item_id_record({"name": None, "id": 42}) is None


async def test_augment_from_index_absent() -> None:
    result = await augment_from_index(FakeIndex(None))
    assert result.ok
    assert result.entries == []


async def test_augment_from_index_names(sample_index: dict[str, Any]) -> None:
    result = await augment_from_index(FakeIndex(sample_index))
    names = {entry.id: entry.name for entry in result.entries}
    assert names["components-button--basic"] == "Basic"
    assert len(result.entries) == 4


async def test_augment_from_index_keeps_usable_entries(
    index_with_malformed_entry: dict[str, Any],
) -> None:
    result = await augment_from_index(FakeIndex(index_with_malformed_entry))
    assert result.ok
    assert [entry.id for entry in result.entries] == ["forms-input--one"]


# ---------------------------------------------------------------------------
# discover_navigation
# ---------------------------------------------------------------------------


class TestDiscoverNavigation:
    async def test_rich_ui_skips_legacy_scan_and_index(self, settings: Settings) -> None:
        page = FakePage({ITEM_ID_SCRIPT: _item_records(25)})
        index = FakeIndex({"v": 5, "entries": {}})

        tree = await discover_navigation(page, index, BASE_URL, MODERN, settings.browser)

        assert len(tree.flat_list) == 25
        assert LEGACY_NAME_SCRIPT not in page.evaluated
        assert index.calls == 0
        assert page.goto_calls[0][0] == BASE_URL

    async def test_sources_merged_without_duplicates(
        self, settings: Settings, sample_index: dict[str, Any]
    ) -> None:
        page = FakePage(
            {
                ITEM_ID_SCRIPT: [
                    {"name": "Basic", "id": "components-button--basic"},
                    {"name": "Components", "id": "group-components"},
                ],
                PATH_LINK_SCRIPT: [
                    {"name": "Basic again", "href": "?path=/story/components-button--basic"},
                    {"name": "Intro", "href": "?path=/docs/getting-started-intro--docs"},
                ],
            }
        )

        tree = await discover_navigation(
            page, FakeIndex(sample_index), BASE_URL, MODERN, settings.browser
        )

        ids = [entry.id for entry in tree.flat_list]
        assert ids == [
            "components-button--basic",
            "getting-started-intro--docs",
            "components-button--docs",
            "components-button--primary",
        ]
        assert len(ids) == len(set(ids))
        assert tree.flat_list[0].name == "Basic"
        # Sparse result triggered the legacy scan
        assert LEGACY_NAME_SCRIPT in page.evaluated

    async def test_failed_step_does_not_fail_discovery(self, settings: Settings) -> None:
        page = FakePage(
            {
                ITEM_ID_SCRIPT: PlaywrightError("Execution context was destroyed"),
                PATH_LINK_SCRIPT: [{"name": "Basic", "href": "?path=/story/a--basic"}],
            }
        )

        tree = await discover_navigation(page, FakeIndex(None), BASE_URL, MODERN, settings.browser)

        assert [entry.id for entry in tree.flat_list] == ["a--basic"]

    async def test_legacy_scan_runs_for_legacy_sites(self, settings: Settings) -> None:
        page = FakePage(
            {
                ITEM_ID_SCRIPT: _item_records(30),
                LEGACY_NAME_SCRIPT: [
                    {"name": "Extra", "href": "https://sb.example.com/?path=/story/extra--one"}
                ],
            }
        )

        tree = await discover_navigation(page, FakeIndex(None), BASE_URL, LEGACY, settings.browser)

        assert LEGACY_NAME_SCRIPT in page.evaluated
        assert tree.flat_list[-1].id == "extra--one"

    async def test_scan_returning_nothing(self, settings: Settings) -> None:
        tree = await discover_navigation(
            FakePage(), FakeIndex(None), BASE_URL, MODERN, settings.browser
        )
        assert tree.flat_list == []

    async def test_unreachable_site_raises(self, settings: Settings) -> None:
        page = FakePage()
        page.goto_errors["domcontentloaded"] = PlaywrightError("net::ERR_CONNECTION_REFUSED")
        with pytest.raises(NavigationError):
            await discover_navigation(page, FakeIndex(None), BASE_URL, MODERN, settings.browser)
