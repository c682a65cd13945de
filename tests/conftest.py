"""Shared test fixtures for the storyscope test suite."""

from __future__ import annotations

from typing import Any

import pytest

from storyscope.config import Settings


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        browser={
            "timeout_ms": 1_000,
            "render_settle_ms": 0,
            "expand_settle_ms": 0,
            "content_settle_ms": 0,
            "commit_settle_ms": 0,
        }
    )


@pytest.fixture()
def sample_index() -> dict[str, Any]:
    """A Storybook 7 style index.json document."""
    return {
        "v": 5,
        "entries": {
            "components-button--docs": {
                "id": "components-button--docs",
                "title": "Components/Button",
                "name": "Docs",
                "type": "docs",
            },
            "components-button--basic": {
                "id": "components-button--basic",
                "title": "Components/Button",
                "name": "Basic",
                "type": "story",
            },
            "components-button--primary": {
                "id": "components-button--primary",
                "title": "Components/Button",
                "name": "Primary",
                "type": "story",
            },
            "getting-started-intro--docs": {
                "id": "getting-started-intro--docs",
                "title": "Getting Started/Intro",
                "name": "Docs",
                "type": "docs",
            },
        },
    }


@pytest.fixture()
def index_with_malformed_entry() -> dict[str, Any]:
    """One usable entry next to entries whose fields have the wrong types."""
    return {
        "v": 5,
        "entries": {
            "forms-input--one": {"type": "story", "title": "Forms/Input", "name": "One"},
            "forms-input--two": {"type": "story", "title": "Forms/Input", "name": 2},
            "forms-input--three": {"type": "story", "title": ["Forms"], "name": "Three"},
        },
    }
