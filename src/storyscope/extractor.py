"""Content extraction from rendered docs and story pages.

The page evaluation only collects raw material (heading texts, code elements,
denoised body markup); every selection rule runs here in Python. Markdown is
produced with html2text and then passed through ``MARKDOWN_CLEANUP_RULES``.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

import html2text
import structlog

from storyscope.errors import ExtractionError
from storyscope.models.storybook import (
    CodeBlock,
    ComponentDocs,
    ComponentExample,
    PageContent,
)

if TYPE_CHECKING:
    from storyscope.protocols import PageProtocol

log = structlog.get_logger()

# Code block size ceilings.
COMPONENT_EXAMPLE_MAX_CHARS = 2_000
STORY_CODE_MAX_CHARS = 5_000

DEFAULT_CODE_LANGUAGE = "html"

# Elements Storybook injects while a story is loading or has failed.
NOISE_SELECTORS: tuple[str, ...] = (".sb-errordisplay", ".sb-preparing-story")

_PLACEHOLDER_TITLES = ("No Preview",)
_PLACEHOLDER_TITLE_FRAGMENTS = ("Sorry, but",)

_LANGUAGE_CLASS = re.compile(r"language-(\w+)")

# (pattern, replacement) applied in order. Label lines are ArgsTable headers
# and copy buttons that html2text emits as standalone lines.
MARKDOWN_CLEANUP_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^Name[ \t]*$", re.MULTILINE), ""),
    (re.compile(r"^Description[ \t]*$", re.MULTILINE), ""),
    (re.compile(r"^Default[ \t]*$", re.MULTILINE), ""),
    (re.compile(r"^Control[ \t]*$", re.MULTILINE), ""),
    (re.compile(r"^Copy[ \t]*$", re.MULTILINE), ""),
    (re.compile(r"# No Preview.*?(?=# [A-Z])", re.DOTALL), ""),
    (re.compile(r"\n{4,}"), "\n\n\n"),
)

PAGE_CONTENT_SCRIPT = """(noiseSelectors) => {
  const headings = Array.from(document.querySelectorAll("h1")).map(h => h.textContent?.trim() || "");
  const codeBlocks = Array.from(document.querySelectorAll("pre code")).map(el => ({
    className: el.className || "",
    code: el.textContent?.trim() || "",
  }));
  const body = document.body.cloneNode(true);
  noiseSelectors.forEach(sel => body.querySelectorAll(sel).forEach(el => el.remove()));
  return { headings, codeBlocks, html: body.innerHTML };
}"""


def pick_title(headings: list[str]) -> str:
    """Return the first non-empty heading that is not a placeholder."""
    for text in headings:
        text = text.strip()
        if not text or text in _PLACEHOLDER_TITLES:
            continue
        if any(fragment in text for fragment in _PLACEHOLDER_TITLE_FRAGMENTS):
            continue
        return text
    return ""


def code_language(class_name: str) -> str:
    match = _LANGUAGE_CLASS.search(class_name)
    return match.group(1) if match else DEFAULT_CODE_LANGUAGE


def numbered_code_blocks(
    raw_blocks: list[dict[str, Any]], max_chars: int | None
) -> list[tuple[int, CodeBlock]]:
    """Pair each kept block with its 1-based position among all code elements.

    Empty blocks, and blocks of ``max_chars`` or more when a ceiling is given,
    are dropped without renumbering the rest.
    """
    blocks: list[tuple[int, CodeBlock]] = []
    for position, raw in enumerate(raw_blocks, start=1):
        code = (raw.get("code") or "").strip()
        if not code or (max_chars is not None and len(code) >= max_chars):
            continue
        language = code_language(raw.get("className") or "")
        blocks.append((position, CodeBlock(language=language, code=code)))
    return blocks


def collect_code_blocks(
    raw_blocks: list[dict[str, Any]], max_chars: int | None
) -> list[CodeBlock]:
    """Keep non-empty blocks shorter than ``max_chars`` (no ceiling if None)."""
    return [block for _, block in numbered_code_blocks(raw_blocks, max_chars)]


def html_to_markdown(html: str) -> str:
    converter = html2text.HTML2Text()
    converter.body_width = 0  # No hard wrapping
    converter.ignore_images = True
    converter.unicode_snob = True
    return converter.handle(html)


def clean_markdown(markdown: str) -> str:
    """Remove Storybook UI noise lines; prose is never touched."""
    cleaned = markdown
    for pattern, replacement in MARKDOWN_CLEANUP_RULES:
        cleaned = pattern.sub(replacement, cleaned)
    return cleaned.strip()


async def _snapshot(page: PageProtocol) -> dict[str, Any]:
    try:
        raw = await page.evaluate(PAGE_CONTENT_SCRIPT, list(NOISE_SELECTORS))
    except Exception as exc:
        raise ExtractionError(page.url, exc) from exc
    if not isinstance(raw, dict):
        raise ExtractionError(page.url)
    return raw


async def extract_page_content(
    page: PageProtocol,
    *,
    markdown: bool,
    max_code_chars: int | None = None,
) -> PageContent:
    """Extract structured content from the currently loaded page.

    Docs pages keep every code block; story content passes
    ``STORY_CODE_MAX_CHARS``. Raises ExtractionError if the in-page
    evaluation fails.
    """
    raw = await _snapshot(page)
    html = raw.get("html") or ""
    content = PageContent(
        title=pick_title(raw.get("headings") or []),
        code_blocks=collect_code_blocks(raw.get("codeBlocks") or [], max_code_chars),
        html=html,
    )
    if markdown:
        content.markdown = clean_markdown(html_to_markdown(html))
    log.debug(
        "page_content_extracted",
        url=page.url,
        title=content.title,
        code_blocks=len(content.code_blocks),
    )
    return content


async def extract_component_docs(page: PageProtocol) -> ComponentDocs:
    """Summarise a loaded docs page as its name plus short examples.

    Examples are titled by their position among all code elements on the page.
    """
    raw = await _snapshot(page)
    numbered = numbered_code_blocks(raw.get("codeBlocks") or [], COMPONENT_EXAMPLE_MAX_CHARS)
    return ComponentDocs(
        name=pick_title(raw.get("headings") or []),
        examples=[
            ComponentExample(title=f"Example {position}", code=block.code)
            for position, block in numbered
        ],
    )
