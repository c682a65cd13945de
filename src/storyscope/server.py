"""MCP server entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Create AppState via the FastMCP lifespan context manager
- Register tools
- Run the stdio transport
"""

from __future__ import annotations

import json
import logging
import sys
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Literal

import structlog
from mcp.server.fastmcp import Context, FastMCP, Image
from mcp.types import CallToolResult, TextContent

import storyscope.tools.connect as t_connect
import storyscope.tools.get_docs as t_get_docs
import storyscope.tools.list_entries as t_list
import storyscope.tools.screenshot as t_screenshot
import storyscope.tools.search as t_search
from storyscope import __version__
from storyscope.config import Settings
from storyscope.connection import close_session
from storyscope.errors import StoryscopeError
from storyscope.index import build_http_client
from storyscope.state import AppState
from storyscope.urls import is_valid_storybook_url

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # Logs go to stderr; stdout is reserved for the MCP JSON-RPC stream
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


def _initial_base_url(settings: Settings) -> str | None:
    url = (settings.storybook.url or "").strip() or None
    if url is not None and not is_valid_storybook_url(url):
        log.warning("storybook_url_ignored", url=url, reason="not_http_or_https")
        return None
    return url


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncGenerator[AppState, None]:
    """Create and tear down all shared resources for the server's lifetime."""
    settings = Settings()
    _setup_logging(settings)

    http_client = build_http_client(settings.index)
    state = AppState(
        settings=settings,
        http_client=http_client,
        base_url=_initial_base_url(settings),
    )

    log.info("server_started", version=__version__, storybook_url=state.base_url)

    try:
        yield state
    finally:
        await close_session(state)
        await http_client.aclose()
        log.info("server_stopping")


# ---------------------------------------------------------------------------
# FastMCP instance and tool registration
# ---------------------------------------------------------------------------

mcp = FastMCP("storyscope", lifespan=lifespan)
# FastMCP doesn't expose a version kwarg, so set it on the underlying Server
# so the MCP initialize handshake reports our version, not the SDK's.
mcp._mcp_server.version = __version__  # pyright: ignore[reportPrivateUsage]


def _serialise_tool_error(error: StoryscopeError) -> CallToolResult:
    """Convert a StoryscopeError to the MCP tool error result envelope."""
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(error.to_dict()))],
        isError=True,
    )


def _tool_error(tool: str, exc: StoryscopeError) -> CallToolResult:
    log.warning(
        "tool_error",
        tool=tool,
        code=exc.code,
        message=exc.message,
        recoverable=exc.recoverable,
    )
    return _serialise_tool_error(exc)


@mcp.tool()
async def connect(ctx: Context, url: str | None = None) -> object:
    """Connect to a Storybook URL and return connection status.

    Required before other tools unless a URL was configured at startup.
    Call without a url to see the current status.
    """
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_connect.handle(url, state)
    except StoryscopeError as exc:
        return _tool_error("connect", exc)
    except Exception:
        log.error("tool_unexpected_error", tool="connect", exc_info=True)
        raise


@mcp.tool(name="list")
async def list_entries(ctx: Context, category: str | None = None, full: bool = False) -> object:
    """List components and stories in the Storybook navigation.

    Set full to get the category → component hierarchy with every story.
    """
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_list.handle(category, full, state)
    except StoryscopeError as exc:
        return _tool_error("list", exc)
    except Exception:
        log.error("tool_unexpected_error", tool="list", exc_info=True)
        raise


@mcp.tool()
async def search(query: str, ctx: Context) -> object:
    """Search for components and stories by name or id."""
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_search.handle(query, state)
    except StoryscopeError as exc:
        return _tool_error("search", exc)
    except Exception:
        log.error("tool_unexpected_error", tool="search", exc_info=True)
        raise


@mcp.tool()
async def get_docs(
    path: str,
    ctx: Context,
    full: bool = False,
    format: Literal["structured", "markdown"] = "markdown",
) -> object:
    """Get documentation, code examples, and content for a component or story.

    path is a component path or story id, e.g. 'components-button' or
    'components-button--basic'. Set full to list every story of the component.
    """
    state: AppState = ctx.request_context.lifespan_context
    try:
        return await t_get_docs.handle(path, full, format, state)
    except StoryscopeError as exc:
        return _tool_error("get_docs", exc)
    except Exception:
        log.error("tool_unexpected_error", tool="get_docs", exc_info=True)
        raise


@mcp.tool()
async def screenshot(path: str, ctx: Context) -> object:
    """Take a full-page screenshot of a component or story."""
    state: AppState = ctx.request_context.lifespan_context
    try:
        return Image(data=await t_screenshot.handle(path, state), format="png")
    except StoryscopeError as exc:
        return _tool_error("screenshot", exc)
    except Exception:
        log.error("tool_unexpected_error", tool="screenshot", exc_info=True)
        raise


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    mcp.run()


if __name__ == "__main__":
    main()
