from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, computed_field


class StorybookVersion(StrEnum):
    V5 = "v5"
    V6 = "v6"
    V7 = "v7"
    UNKNOWN = "unknown"


class EntryKind(StrEnum):
    STORY = "story"
    DOCS = "docs"


class FormatInfo(BaseModel):
    """Format flags detected once per session. Immutable after detection."""

    model_config = ConfigDict(frozen=True)

    version: StorybookVersion = StorybookVersion.UNKNOWN
    has_index: bool = False
    uses_legacy_story_path: bool = False

    @computed_field  # type: ignore[prop-decorator]
    @property
    def uses_iframe_docs(self) -> bool:
        return not self.uses_legacy_story_path and self.has_index


class NavEntry(BaseModel):
    """Single navigable entry. ``id`` is the unique key across discovery sources."""

    model_config = ConfigDict(frozen=True)

    name: str
    id: str
    kind: EntryKind


class NavCategory(BaseModel):
    name: str
    entries: list[NavEntry] = []


class NavigationTree(BaseModel):
    categories: list[NavCategory] = []
    flat_list: list[NavEntry] = []


class IndexEntry(BaseModel):
    """Normalised record from index.json (or synthesised from a NavEntry)."""

    id: str
    name: str
    title: str
    kind: EntryKind


class StoryEntry(BaseModel):
    id: str
    name: str
    kind: EntryKind
    title: str  # Slash-delimited hierarchy, e.g. "Components/Button"


class FullComponent(BaseModel):
    name: str
    path: str
    docs: StoryEntry | None = None
    stories: list[StoryEntry] = []


class FullCategory(BaseModel):
    name: str
    components: list[FullComponent] = []


class FullNavigation(BaseModel):
    categories: list[FullCategory] = []
    total_docs: int = 0
    total_stories: int = 0
    total_entries: int = 0


class CodeBlock(BaseModel):
    language: str
    code: str


class PageContent(BaseModel):
    """Content extracted from a rendered docs or story page."""

    title: str = ""
    description: str = ""
    sections: list[str] = []
    code_blocks: list[CodeBlock] = []
    tables: list[str] = []
    html: str = ""
    markdown: str | None = None  # Only set when markdown was requested


class ComponentExample(BaseModel):
    title: str
    code: str


class ComponentDocs(BaseModel):
    """Short summary of a component docs page: its name and small examples."""

    name: str = ""
    description: str = ""
    examples: list[ComponentExample] = []
