from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    NOT_CONNECTED = "NOT_CONNECTED"
    INVALID_URL = "INVALID_URL"
    INVALID_INPUT = "INVALID_INPUT"
    NAVIGATION_FAILED = "NAVIGATION_FAILED"
    CONTENT_UNAVAILABLE = "CONTENT_UNAVAILABLE"
    ENTRY_NOT_FOUND = "ENTRY_NOT_FOUND"
    BROWSER_UNAVAILABLE = "BROWSER_UNAVAILABLE"


class StoryscopeError(Exception):
    """Raised by tool handlers and the session for expected failure conditions.

    Caught by server.py and serialised into the MCP error response, so the
    agent receives a structured error with a suggestion instead of a traceback.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }


class ConfigurationError(StoryscopeError):
    """No usable Storybook base URL for an operation that needs one."""


class NavigationError(StoryscopeError):
    """The browser could not load a URL with any load-completion strategy."""

    def __init__(self, url: str, cause: BaseException | None = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(
            code=ErrorCode.NAVIGATION_FAILED,
            message=f"Failed to navigate to {url}{detail}",
            suggestion="Check that the Storybook site is reachable and try again.",
            recoverable=True,
        )
        self.url = url


class ExtractionError(StoryscopeError):
    """The page loaded but in-page evaluation failed."""

    def __init__(self, url: str, cause: BaseException | None = None) -> None:
        detail = f": {cause}" if cause is not None else ""
        super().__init__(
            code=ErrorCode.CONTENT_UNAVAILABLE,
            message=f"Could not extract content from {url}{detail}",
            suggestion="The page may still be rendering or is not a docs/story page.",
            recoverable=True,
        )
        self.url = url
