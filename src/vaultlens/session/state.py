"""Interaction state slices for a browsing session.

Browse position, active view and clipboard are independent of each other:
any combination is valid, and each slice changes only through its own
transitions. Browse state is immutable; transitions return a new value.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Sequence

from vaultlens.projection import split_segments
from vaultlens.records import ALL_CATEGORIES, CATEGORIES


class ViewMode(str, Enum):
    """Which projection of the vault is active."""

    BROWSER = "browser"
    DUPLICATES = "duplicates"
    SMART_DEDUP = "smartdup"
    HISTORY = "history"
    SNAPSHOTS = "snapshots"
    TIMELINE = "timeline"


@dataclass(frozen=True, slots=True)
class BrowseState:
    """Folder position, search query and category filter.

    Attributes:
        current_path: Folder segments the browser is rooted at.
        search_query: Active name search; empty in browse mode.
        category: Active category filter or ``"all"``.
    """

    current_path: tuple[str, ...] = ()
    search_query: str = ""
    category: str = ALL_CATEGORIES

    def __post_init__(self) -> None:
        if self.category != ALL_CATEGORIES and self.category not in CATEGORIES:
            raise ValueError(f"Unknown category filter: {self.category!r}")

    @property
    def searching(self) -> bool:
        return bool(self.search_query)

    @property
    def location(self) -> str:
        """Current folder as a ``/``-joined string, ``/`` at the root."""
        return "/" + "/".join(self.current_path)

    def enter(self, name: str) -> "BrowseState":
        """Descend into the child folder ``name`` and leave search mode."""
        return replace(self, current_path=(*self.current_path, name), search_query="")

    def up(self) -> "BrowseState":
        """Move to the parent folder; a no-op at the root."""
        return replace(self, current_path=self.current_path[:-1])

    def go_to(self, segments: Sequence[str] | str) -> "BrowseState":
        """Jump to an absolute location given as segments or a path string."""
        if isinstance(segments, str):
            segments = split_segments(segments)
        return replace(self, current_path=tuple(segments), search_query="")

    def search(self, query: str) -> "BrowseState":
        """Switch to search mode, or back to browse mode for an empty query."""
        return replace(self, search_query=query.strip())

    def filter(self, category: str) -> "BrowseState":
        """Apply a category filter."""
        return replace(self, category=category)


__all__ = ["BrowseState", "ViewMode"]
