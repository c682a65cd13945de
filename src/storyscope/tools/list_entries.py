"""Tool handler for list.

Flat mode reads the session's navigation cache; ``full`` mode renders the
category → component hierarchy.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from storyscope.connection import get_session
from storyscope.models.tools import ListInput
from storyscope.search import filter_by_category

if TYPE_CHECKING:
    from storyscope.models.storybook import FullNavigation
    from storyscope.state import AppState


async def handle(category: str | None, full: bool, state: AppState) -> str:
    """Handle a list tool call."""
    log = structlog.get_logger().bind(tool="list", category=category, full=full)
    log.info("handler_called")

    validated = ListInput(category=category or None, full=full)
    session = await get_session(state)

    if validated.full:
        navigation = await session.full_navigation()
        return render_full(navigation, session.base_url, validated.category)

    tree = await session.navigation_tree()
    entries = filter_by_category(tree.flat_list, validated.category)
    log.info("list_complete", count=len(entries))

    lines = [
        "# Storybook Navigation",
        "",
        f"**URL:** {session.base_url}",
        f"**Total:** {len(entries)}",
        "",
    ]
    lines += [f"- {entry.name}: `{entry.id}`" for entry in entries]
    return "\n".join(lines) + "\n"


def render_full(navigation: FullNavigation, base_url: str, category: str | None) -> str:
    lines = [
        "# Navigation",
        "",
        f"**URL:** {base_url}",
        f"**Total:** {navigation.total_docs} docs + {navigation.total_stories} stories",
        "",
    ]
    needle = category.lower() if category else None
    for cat in navigation.categories:
        if needle and needle not in cat.name.lower():
            continue
        lines += [f"## {cat.name}", ""]
        for component in cat.components:
            lines.append(f"### {component.name}")
            if component.docs is not None:
                lines.append(f"- **Docs**: `{component.docs.id}`")
            lines += [f"- {story.name}: `{story.id}`" for story in component.stories]
            lines.append("")
    return "\n".join(lines) + "\n"
