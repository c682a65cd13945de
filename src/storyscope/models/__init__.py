from __future__ import annotations

from storyscope.models.cache import NavigationCacheEntry
from storyscope.models.storybook import (
    CodeBlock,
    ComponentDocs,
    ComponentExample,
    EntryKind,
    FormatInfo,
    FullCategory,
    FullComponent,
    FullNavigation,
    IndexEntry,
    NavCategory,
    NavEntry,
    NavigationTree,
    PageContent,
    StorybookVersion,
    StoryEntry,
)
from storyscope.models.tools import (
    ConnectInput,
    GetDocsInput,
    ListInput,
    ScreenshotInput,
    SearchInput,
)

__all__ = [
    # storybook
    "StorybookVersion",
    "EntryKind",
    "FormatInfo",
    "NavEntry",
    "NavCategory",
    "NavigationTree",
    "IndexEntry",
    "StoryEntry",
    "FullComponent",
    "FullCategory",
    "FullNavigation",
    "CodeBlock",
    "PageContent",
    "ComponentExample",
    "ComponentDocs",
    # cache
    "NavigationCacheEntry",
    # tools
    "ConnectInput",
    "ListInput",
    "SearchInput",
    "GetDocsInput",
    "ScreenshotInput",
]
