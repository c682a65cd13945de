"""Tool handler for search."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from storyscope.connection import get_session
from storyscope.errors import ErrorCode, StoryscopeError
from storyscope.models.tools import SearchInput

if TYPE_CHECKING:
    from storyscope.state import AppState


async def handle(query: str, state: AppState) -> str:
    """Handle a search tool call."""
    log = structlog.get_logger().bind(tool="search", query=query)
    log.info("handler_called")

    try:
        validated = SearchInput(query=query)
    except ValueError as exc:
        raise StoryscopeError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a non-empty component name or id fragment (max 500 chars).",
            recoverable=False,
        ) from exc

    session = await get_session(state)
    results = await session.search(validated.query)
    log.info("search_complete", match_count=len(results))

    if not results:
        return f'No results for "{validated.query}"'
    lines = [f'# Search: "{validated.query}"', "", f"Found {len(results)}:", ""]
    lines += [f"- **{entry.name}** ({entry.kind}): `{entry.id}`" for entry in results]
    return "\n".join(lines) + "\n"
