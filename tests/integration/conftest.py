"""Integration test fixtures.

Provides a fully wired AppState whose browser is an in-memory FakeBrowser
and whose index.json probe is served by respx.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any

import httpx
import pytest
import respx
from fakes import INDEX_URL, FakeBrowser, FakePage

from storyscope.discovery import ITEM_ID_SCRIPT
from storyscope.extractor import PAGE_CONTENT_SCRIPT
from storyscope.state import AppState

if TYPE_CHECKING:
    from storyscope.config import Settings

PAGE_CONTENT = {
    "headings": ["Button"],
    "codeBlocks": [{"className": "language-jsx", "code": "<Button />"}],
    "html": "<h1>Button</h1><p>Buttons trigger actions.</p><p>Name</p>",
}


@pytest.fixture()
def subprocess_env() -> dict[str, str]:
    """Baseline env for subprocess-based MCP tests: no Storybook configured."""
    env = os.environ.copy()
    env.pop("STORYSCOPE__STORYBOOK__URL", None)
    env["STORYSCOPE__LOGGING__LEVEL"] = "WARNING"
    return env


@pytest.fixture()
def page() -> FakePage:
    return FakePage(
        {
            ITEM_ID_SCRIPT: [
                {"name": "Basic", "id": "components-button--basic"},
                {"name": "Docs", "id": "components-button--docs"},
            ],
            PAGE_CONTENT_SCRIPT: PAGE_CONTENT,
        }
    )


@pytest.fixture()
def browser(page: FakePage) -> FakeBrowser:
    return FakeBrowser(page)


@pytest.fixture()
def storybook_index(sample_index: dict[str, Any]) -> respx.MockRouter:
    """Serve the sample index.json; tests may re-mock the ``index`` route."""
    with respx.mock(assert_all_called=False) as router:
        router.get(INDEX_URL, name="index").mock(
            return_value=httpx.Response(200, json=sample_index)
        )
        yield router


@pytest.fixture()
async def app_state(
    settings: Settings, browser: FakeBrowser, storybook_index: respx.MockRouter
) -> AppState:
    """AppState with no session yet; tests connect explicitly or lazily."""
    async with httpx.AsyncClient() as client:
        yield AppState(
            settings=settings,
            http_client=client,
            browser_factory=lambda _settings: browser,
        )
