"""Page loading with escalating completion criteria.

Different Storybook builds block indefinitely on different readiness
signals, so a load is tried against each criterion in turn before falling
back to a bare commit plus a fixed settle delay.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from storyscope.errors import NavigationError

if TYPE_CHECKING:
    from storyscope.protocols import PageProtocol

log = structlog.get_logger()

LOAD_STRATEGIES: tuple[str, ...] = ("domcontentloaded", "load", "networkidle")


def is_retryable_navigation_error(exc: BaseException) -> bool:
    """Timeouts and aborted requests move on to the next strategy."""
    if isinstance(exc, PlaywrightTimeoutError):
        return True
    message = str(exc)
    return "net::ERR_ABORTED" in message or "Timeout" in message


async def safe_navigate(
    page: PageProtocol,
    url: str,
    *,
    timeout_ms: float,
    commit_settle_ms: float,
) -> None:
    """Load ``url`` or raise NavigationError.

    Any other failure aborts immediately. If every strategy times out, one
    last commit-only load is attempted; if that also fails the first error
    encountered is surfaced.
    """
    first_error: PlaywrightError | None = None

    for wait_until in LOAD_STRATEGIES:
        try:
            await page.goto(url, wait_until=wait_until, timeout=timeout_ms)
            return
        except PlaywrightError as exc:
            if not is_retryable_navigation_error(exc):
                log.warning("navigate_failed", url=url, wait_until=wait_until, error=str(exc))
                raise NavigationError(url, exc) from exc
            if first_error is None:
                first_error = exc
            log.debug("navigate_strategy_failed", url=url, wait_until=wait_until, error=str(exc))

    try:
        await page.goto(url, wait_until="commit", timeout=timeout_ms)
        await page.wait_for_timeout(commit_settle_ms)
    except PlaywrightError as exc:
        cause = first_error or exc
        log.warning("navigate_failed", url=url, wait_until="commit", error=str(cause))
        raise NavigationError(url, cause) from cause
    log.info("navigate_commit_fallback", url=url)
