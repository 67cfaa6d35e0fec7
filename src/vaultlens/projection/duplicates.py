"""Exact-duplicate grouping by content hash."""

from __future__ import annotations

from typing import Iterable

from vaultlens.records import FileRecord

DuplicateGroup = tuple[FileRecord, ...]


def group_duplicates(records: Iterable[FileRecord]) -> list[DuplicateGroup]:
    """Group records sharing a hash, keeping only groups of two or more.

    Groups appear in the order their hash was first seen.
    """
    by_hash: dict[str, list[FileRecord]] = {}
    for record in records:
        by_hash.setdefault(record.hash, []).append(record)
    return [tuple(members) for members in by_hash.values() if len(members) > 1]


def reclaimable_bytes(groups: Iterable[DuplicateGroup]) -> int:
    """Return the bytes freed by keeping one copy of every duplicate group."""
    return sum(group[0].size * (len(group) - 1) for group in groups)


__all__ = ["DuplicateGroup", "group_duplicates", "reclaimable_bytes"]
