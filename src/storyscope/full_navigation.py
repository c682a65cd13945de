"""Hierarchical navigation: category → component → {docs, stories}."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from storyscope.models.storybook import (
    EntryKind,
    FullCategory,
    FullComponent,
    FullNavigation,
    IndexEntry,
    StoryEntry,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from storyscope.models.storybook import NavigationTree


@dataclass
class _ComponentSlot:
    docs: StoryEntry | None = None
    stories: list[StoryEntry] = field(default_factory=list)


def entries_from_tree(tree: NavigationTree) -> list[IndexEntry]:
    """Synthesise index records from discovered entries (title = name)."""
    return [
        IndexEntry(id=entry.id, name=entry.name, title=entry.name, kind=entry.kind)
        for entry in tree.flat_list
    ]


def split_title(title: str) -> tuple[str, str]:
    """``"Components/Forms/Input"`` → ``("Components", "Forms/Input")``.

    A single-segment title is both category and component.
    """
    parts = title.split("/")
    if len(parts) == 1:
        return parts[0], parts[0]
    return parts[0], "/".join(parts[1:])


def build_full_navigation(entries: Iterable[IndexEntry]) -> FullNavigation:
    tree: dict[str, dict[str, _ComponentSlot]] = {}
    for entry in entries:
        category, component = split_title(entry.title or entry.id)
        slot = tree.setdefault(category, {}).setdefault(component, _ComponentSlot())
        story_entry = StoryEntry(id=entry.id, name=entry.name, kind=entry.kind, title=entry.title)
        if entry.kind == EntryKind.DOCS:
            slot.docs = story_entry
        else:
            slot.stories.append(story_entry)

    categories: list[FullCategory] = []
    total_docs = total_stories = 0
    for category_name in sorted(tree):
        components: list[FullComponent] = []
        for component_name, slot in sorted(tree[category_name].items()):
            if slot.docs is not None:
                total_docs += 1
            total_stories += len(slot.stories)
            path = slot.docs.id if slot.docs else (slot.stories[0].id if slot.stories else "")
            components.append(
                FullComponent(name=component_name, path=path, docs=slot.docs, stories=slot.stories)
            )
        categories.append(FullCategory(name=category_name, components=components))

    return FullNavigation(
        categories=categories,
        total_docs=total_docs,
        total_stories=total_stories,
        total_entries=total_docs + total_stories,
    )


def find_component(
    navigation: FullNavigation, path: str
) -> tuple[FullComponent | None, str | None]:
    """Find the first component whose path contains ``path`` or whose name matches it.

    Returns ``(component, category name)`` or ``(None, None)``.
    """
    needle = path.lower()
    for category in navigation.categories:
        for component in category.components:
            if path in component.path or needle in component.name.lower():
                return component, category.name
    return None, None
