"""Pure projections of a vault snapshot for one browse state."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from vaultlens.projection import (
    BrowserNode,
    DuplicateGroup,
    TimelineBucket,
    build_timeline,
    group_duplicates,
    project_hierarchy,
)
from vaultlens.projection.timeline import TimelineMode, UnknownPlacement
from vaultlens.records import FileRecord, filter_by_category

from .state import BrowseState


@dataclass(frozen=True, slots=True)
class VaultView:
    """Every derived view for one snapshot and browse state.

    Attributes:
        state: Browse state the view was computed for.
        records: Category-filtered records.
        nodes: Browser listing (or search results).
        duplicates: Exact-duplicate groups within the filtered set.
        timeline: Date buckets within the filtered set.
    """

    state: BrowseState
    records: tuple[FileRecord, ...]
    nodes: tuple[BrowserNode, ...]
    duplicates: tuple[DuplicateGroup, ...]
    timeline: tuple[TimelineBucket, ...]


def build_view(
    records: Sequence[FileRecord],
    state: BrowseState,
    *,
    timeline_mode: TimelineMode = "modified",
    unknown_placement: UnknownPlacement = "lexical",
) -> VaultView:
    """Recompute every projection from scratch for ``state``."""
    filtered = filter_by_category(records, state.category)
    return VaultView(
        state=state,
        records=tuple(filtered),
        nodes=tuple(project_hierarchy(filtered, state.current_path, state.search_query)),
        duplicates=tuple(group_duplicates(filtered)),
        timeline=tuple(
            build_timeline(filtered, timeline_mode, unknown_placement=unknown_placement)
        ),
    )


__all__ = ["VaultView", "build_view"]
