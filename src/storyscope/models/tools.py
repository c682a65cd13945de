"""Input models for tool handlers.

Validation failures surface as ``ValueError`` and are translated to
``INVALID_INPUT`` errors by the handlers.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, field_validator


class ConnectInput(BaseModel):
    url: str | None = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        from storyscope.urls import is_valid_storybook_url

        v = v.strip()
        if not is_valid_storybook_url(v):
            raise ValueError("url must be a valid http or https URL")
        return v


class ListInput(BaseModel):
    category: str | None = None
    full: bool = False


class SearchInput(BaseModel):
    query: str

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("query must not be empty")
        if len(v) > 500:
            raise ValueError("query must not exceed 500 characters")
        return v


class EntryPathInput(BaseModel):
    path: str

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("path must not be empty")
        if len(v) > 1000:
            raise ValueError("path must not exceed 1000 characters")
        return v


class GetDocsInput(EntryPathInput):
    full: bool = False
    format: Literal["structured", "markdown"] = "markdown"


class ScreenshotInput(EntryPathInput):
    pass
