"""Folder hierarchy projection over a flat record set."""

from __future__ import annotations

import re
from typing import Iterable, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from vaultlens.records import FileRecord

_SEPARATORS = re.compile(r"[\\/]")

FOLDER_KEY_PREFIX = "dir-"


class BrowserNode(BaseModel):
    """One entry of a projected listing: a file leaf or a synthesized folder.

    Attributes:
        name: Display name (file name or folder segment).
        is_folder: Whether the node aggregates records below it.
        hash: Content hash of the leaf record; ``None`` for folders.
        path: Full path of the record that produced the node.
        category: Category of that record.
        folder_path: Segment path through the folder, ``None`` for files. It starts
            with ``/`` when the record path is absolute, because the backend
            resolves folder commands against absolute paths as it stores them.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    is_folder: bool
    hash: Optional[str] = None
    path: str
    category: str
    folder_path: Optional[str] = None


def split_segments(path: str) -> list[str]:
    """Split ``path`` on ``/`` or ``\\``, discarding empty segments."""
    return [segment for segment in _SEPARATORS.split(path) if segment]


def project_hierarchy(
    records: Iterable[FileRecord],
    current_path: Sequence[str],
    search_query: str = "",
) -> list[BrowserNode]:
    """Project records into a one-level listing or a flat search result.

    Args:
        records: Decoded and category-filtered records.
        current_path: Folder segments the listing is rooted at.
        search_query: When non-empty, switch to name search and ignore
            ``current_path``.

    Returns:
        list[BrowserNode]: Folders first, then files, otherwise in first-seen order.
    """
    if search_query:
        return _search(records, search_query)

    prefix = list(current_path)
    depth = len(prefix)
    nodes: dict[tuple[str, ...], BrowserNode] = {}
    for record in records:
        parts = split_segments(record.path)
        if len(parts) <= depth or parts[:depth] != prefix:
            continue
        name = parts[depth]
        if len(parts) > depth + 1:
            key: tuple[str, ...] = (FOLDER_KEY_PREFIX + name,)
            if key not in nodes:
                nodes[key] = BrowserNode(
                    name=name,
                    is_folder=True,
                    path=record.path,
                    category=record.category,
                    folder_path=_join_folder(record.path, parts[: depth + 1]),
                )
        else:
            # Leaves stay distinct per path so same-content copies are all listed.
            nodes.setdefault((record.hash, record.path), _file_node(record, name=name))

    return sorted(nodes.values(), key=lambda node: 0 if node.is_folder else 1)


def _search(records: Iterable[FileRecord], query: str) -> list[BrowserNode]:
    needle = query.lower()
    nodes: dict[str, BrowserNode] = {}
    for record in records:
        if needle in record.name.lower() and record.hash not in nodes:
            nodes[record.hash] = _file_node(record, name=record.name)
    return list(nodes.values())


def _file_node(record: FileRecord, *, name: str) -> BrowserNode:
    return BrowserNode(
        name=name,
        is_folder=False,
        hash=record.hash,
        path=record.path,
        category=record.category,
    )


def _join_folder(path: str, segments: Sequence[str]) -> str:
    joined = "/".join(segments)
    if path.startswith("/"):
        return "/" + joined
    return joined


__all__ = ["BrowserNode", "FOLDER_KEY_PREFIX", "project_hierarchy", "split_segments"]
