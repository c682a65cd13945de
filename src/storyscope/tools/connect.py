"""Tool handler for connect.

Validates the URL, replaces the session when one is given, and reports the
connection status with the detected Storybook format. No MCP or FastMCP
imports; server.py handles the MCP wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from storyscope.connection import reconnect
from storyscope.errors import ConfigurationError, ErrorCode
from storyscope.models.tools import ConnectInput

if TYPE_CHECKING:
    from storyscope.state import AppState


async def handle(url: str | None, state: AppState) -> str:
    """Handle a connect tool call."""
    log = structlog.get_logger().bind(tool="connect", url=url)
    log.info("handler_called")

    try:
        validated = ConnectInput(url=url)
    except ValueError as exc:
        raise ConfigurationError(
            code=ErrorCode.INVALID_URL,
            message=str(exc),
            suggestion="Use a valid http or https Storybook URL.",
            recoverable=True,
        ) from exc

    if validated.url is not None:
        await reconnect(state, validated.url)

    if state.base_url is None:
        return "Not connected. Provide a URL to connect."
    return render_status(state)


def render_status(state: AppState) -> str:
    session = state.session
    lines = [f"Connected to: {state.base_url}", f"Ready: {session is not None and session.ready}"]
    info = session.format_info if session is not None else None
    if info is not None:
        lines += [
            "",
            "Storybook Info:",
            f"- Version: {info.version}",
            f"- Has index.json: {str(info.has_index).lower()}",
            f"- Uses /story/ paths: {str(info.uses_legacy_story_path).lower()}",
        ]
    return "\n".join(lines)
