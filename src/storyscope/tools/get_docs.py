"""Tool handler for get_docs.

Routes by the shape of the path: ``full`` looks the component up in the
hierarchy, story ids load the story view, anything else loads the docs view.
A page that loads but cannot be evaluated yields a "could not load" text
result rather than an error.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import structlog

from storyscope.connection import get_session
from storyscope.errors import ErrorCode, NavigationError, StoryscopeError
from storyscope.models.tools import GetDocsInput
from storyscope.urls import clean_entry_id, is_story_id

if TYPE_CHECKING:
    from storyscope.models.storybook import CodeBlock, PageContent
    from storyscope.session import StorybookSession
    from storyscope.state import AppState


async def handle(path: str, full: bool, format: str, state: AppState) -> str:
    """Handle a get_docs tool call."""
    log = structlog.get_logger().bind(tool="get_docs", path=path, full=full, format=format)
    log.info("handler_called")

    try:
        validated = GetDocsInput(path=path, full=full, format=format)
    except ValueError as exc:
        raise StoryscopeError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a component path or story id, and format 'markdown' or 'structured'.",
            recoverable=False,
        ) from exc

    session = await get_session(state)

    if validated.full:
        return await _component_overview(session, validated.path)

    if is_story_id(clean_entry_id(validated.path)):
        content = await session.get_story_content(validated.path)
        if content is None:
            return unavailable(validated.path)
        return render_markdown(content, validated.path, code_heading="Code")

    markdown = validated.format == "markdown"
    content = await session.get_page_content(validated.path, markdown=markdown)
    if content is None:
        return unavailable(validated.path)
    if markdown:
        return render_markdown(content, validated.path, code_heading="Code Examples")
    return json.dumps(content.model_dump(mode="json", exclude={"markdown"}), indent=2)


def unavailable(path: str) -> str:
    return f"Could not load: {path}. The page was reachable but its content could not be read."


def _code_fences(blocks: list[CodeBlock]) -> list[str]:
    return [f"```{block.language}\n{block.code}\n```\n" for block in blocks]


def render_markdown(content: PageContent, path: str, *, code_heading: str) -> str:
    parts = [f"# {content.title or path}\n"]
    if content.markdown:
        parts.append(content.markdown + "\n")
    if content.code_blocks:
        parts.append(f"## {code_heading}\n")
        parts += _code_fences(content.code_blocks)
    return "\n".join(parts)


async def _component_overview(session: StorybookSession, path: str) -> str:
    log = structlog.get_logger().bind(tool="get_docs", path=path)
    component, category = await session.find_component(path)
    if component is None:
        raise StoryscopeError(
            code=ErrorCode.ENTRY_NOT_FOUND,
            message=f"Could not find: {path}",
            suggestion="Use search or list to find the component id first.",
            recoverable=False,
        )

    parts = [f"# {component.name}\n", f"**Category:** {category}\n"]
    if component.docs is not None:
        parts.append(f"**Docs:** `{component.docs.id}`\n")
    if component.stories:
        lines = [f"## Stories ({len(component.stories)})", ""]
        lines += [f"- {story.name}: `{story.id}`" for story in component.stories]
        parts.append("\n".join(lines) + "\n")

    if component.docs is not None:
        try:
            docs = await session.get_component_docs(component.docs.id)
        except NavigationError as exc:
            log.warning("component_examples_unavailable", error=exc.message)
            docs = None
        if docs is not None and docs.examples:
            parts.append(f"## Examples ({len(docs.examples)})\n")
            for example in docs.examples:
                parts.append(f"### {example.title}\n\n```\n{example.code}\n```\n")
    return "\n".join(parts)
