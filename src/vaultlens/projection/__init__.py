"""Read-only views derived from the decoded record set."""

from .browser import BrowserNode, project_hierarchy, split_segments
from .duplicates import DuplicateGroup, group_duplicates, reclaimable_bytes
from .similarity import (
    SimilarityGroup,
    SmartDedupIndex,
    describe_threshold,
    resolve_similarity,
    threshold_to_max_distance,
)
from .timeline import UNKNOWN_DATE, TimelineBucket, build_timeline

__all__ = [
    "BrowserNode",
    "DuplicateGroup",
    "SimilarityGroup",
    "SmartDedupIndex",
    "TimelineBucket",
    "UNKNOWN_DATE",
    "build_timeline",
    "describe_threshold",
    "group_duplicates",
    "project_hierarchy",
    "reclaimable_bytes",
    "resolve_similarity",
    "split_segments",
    "threshold_to_max_distance",
]
