"""Tool handler for screenshot. Returns raw PNG bytes; server.py wraps them."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from storyscope.connection import get_session
from storyscope.errors import ErrorCode, StoryscopeError
from storyscope.models.tools import ScreenshotInput

if TYPE_CHECKING:
    from storyscope.state import AppState


async def handle(path: str, state: AppState) -> bytes:
    """Handle a screenshot tool call."""
    log = structlog.get_logger().bind(tool="screenshot", path=path)
    log.info("handler_called")

    try:
        validated = ScreenshotInput(path=path)
    except ValueError as exc:
        raise StoryscopeError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a component path or story id.",
            recoverable=False,
        ) from exc

    session = await get_session(state)
    png = await session.screenshot(validated.path)
    log.info("screenshot_complete", size=len(png))
    return png
