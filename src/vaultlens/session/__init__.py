"""Browsing session: interaction state, cache coordination and clipboard."""

from .clipboard import ClipboardCoordinator, ClipboardError, ClipboardItem, ClipboardState
from .coordinator import ActionOutcome, VaultCache, VaultCoordinator, default_snapshot_name
from .state import BrowseState, ViewMode
from .view import VaultView, build_view

__all__ = [
    "ActionOutcome",
    "BrowseState",
    "ClipboardCoordinator",
    "ClipboardError",
    "ClipboardItem",
    "ClipboardState",
    "VaultCache",
    "VaultCoordinator",
    "VaultView",
    "ViewMode",
    "build_view",
    "default_snapshot_name",
]
