"""Cut and paste of a single file or folder within one session.

The clipboard lives only in memory. It holds at most one item, and pasting
always resolves to a move command; there is no copy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from vaultlens.projection import BrowserNode

from .coordinator import ActionOutcome, VaultCoordinator

LOGGER = logging.getLogger(__name__)


class ClipboardError(RuntimeError):
    """Raised for clipboard transitions that are not allowed in the current state."""


class ClipboardState(str, Enum):
    EMPTY = "empty"
    CUT = "cut"
    PASTING = "pasting"


@dataclass(frozen=True, slots=True)
class ClipboardItem:
    """Item held for a pending move.

    Files are moved by hash, folders by path.
    """

    name: str
    is_folder: bool
    path: str = ""
    hash: Optional[str] = None
    folder_path: Optional[str] = None

    @classmethod
    def from_node(cls, node: BrowserNode) -> "ClipboardItem":
        if node.is_folder:
            if not node.folder_path:
                raise ClipboardError(f"Folder {node.name!r} has no resolvable path.")
            return cls(
                name=node.name, is_folder=True, path=node.path, folder_path=node.folder_path
            )
        if not node.hash:
            raise ClipboardError(f"File {node.name!r} has no hash.")
        return cls(name=node.name, is_folder=False, path=node.path, hash=node.hash)


class ClipboardCoordinator:
    """Track the held item and turn a confirmed paste into a move."""

    def __init__(self, coordinator: VaultCoordinator) -> None:
        self._coordinator = coordinator
        self._item: Optional[ClipboardItem] = None
        self._state = ClipboardState.EMPTY

    @property
    def item(self) -> Optional[ClipboardItem]:
        return self._item

    @property
    def state(self) -> ClipboardState:
        return self._state

    def cut(self, item: ClipboardItem | BrowserNode) -> ClipboardItem:
        """Hold ``item``, replacing anything already held."""
        if isinstance(item, BrowserNode):
            item = ClipboardItem.from_node(item)
        self._item = item
        self._state = ClipboardState.CUT
        LOGGER.debug("Cut %s", item.name)
        return item

    def begin_paste(self) -> ClipboardItem:
        """Start asking for a destination for the held item.

        Raises:
            ClipboardError: If nothing is held.
        """
        if self._item is None:
            raise ClipboardError("Nothing to paste.")
        self._state = ClipboardState.PASTING
        return self._item

    def cancel(self) -> None:
        self._item = None
        self._state = ClipboardState.EMPTY

    async def confirm_paste(self, destination: str) -> Optional[ActionOutcome]:
        """Move the held item to ``destination``.

        A blank destination sends nothing and returns ``None``. On success the
        clipboard is emptied; on failure the item stays held so the paste can
        be retried.

        Raises:
            ClipboardError: If nothing is held.
        """
        if self._item is None:
            raise ClipboardError("Nothing to paste.")
        if not destination.strip():
            return None

        item = self._item
        self._state = ClipboardState.PASTING
        if item.is_folder:
            outcome = await self._coordinator.move(
                destination, folder_path=item.folder_path or item.path
            )
        else:
            outcome = await self._coordinator.move(destination, file_hash=item.hash)

        if outcome.ok:
            self.cancel()
        return outcome


__all__ = ["ClipboardCoordinator", "ClipboardError", "ClipboardItem", "ClipboardState"]
