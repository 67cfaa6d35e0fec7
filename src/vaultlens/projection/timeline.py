"""Chronological bucketing of vault records."""

from __future__ import annotations

import re
from datetime import date
from typing import Iterable, Literal

from pydantic import BaseModel, ConfigDict

from vaultlens.records import FileRecord
from vaultlens.records.formatting import format_long_date

UNKNOWN_DATE = "Unknown Date"

TimelineMode = Literal["modified", "indexed"]
UnknownPlacement = Literal["lexical", "last"]

_DATE_KEY = re.compile(r"(\d{4}-\d{2}-\d{2})")


class TimelineBucket(BaseModel):
    """Records sharing one date key.

    Attributes:
        date_key: ``YYYY-MM-DD`` or :data:`UNKNOWN_DATE`.
        display_label: Long-form label shown to the user.
        files: Records in the bucket, in input order.
    """

    model_config = ConfigDict(frozen=True)

    date_key: str
    display_label: str
    files: tuple[FileRecord, ...]


def date_key_for(record: FileRecord, mode: TimelineMode) -> str:
    """Return the bucket key for ``record`` under ``mode``.

    Indexing times are not available client-side, so ``indexed`` mode always
    yields :data:`UNKNOWN_DATE`.
    """
    if mode == "modified" and record.modified_raw:
        match = _DATE_KEY.search(record.modified_raw)
        if match:
            return match.group(1)
    return UNKNOWN_DATE


def display_label_for(date_key: str) -> str:
    """Return the long date label for ``date_key``."""
    if date_key == UNKNOWN_DATE:
        return UNKNOWN_DATE
    try:
        return format_long_date(date.fromisoformat(date_key))
    except ValueError:
        return date_key


def build_timeline(
    records: Iterable[FileRecord],
    mode: TimelineMode = "modified",
    *,
    unknown_placement: UnknownPlacement = "lexical",
) -> list[TimelineBucket]:
    """Partition records into date buckets sorted newest first.

    Keys are compared as plain strings. With ``unknown_placement="lexical"``
    the sentinel sorts by that same comparison, which puts it ahead of every
    ISO date; ``"last"`` moves it to the end.

    Args:
        records: Category-filtered records.
        mode: ``modified`` to bucket by modification date, ``indexed`` otherwise.
        unknown_placement: Placement rule for the unknown-date bucket.

    Returns:
        list[TimelineBucket]: Buckets covering every input record exactly once.
    """
    if mode not in ("modified", "indexed"):
        raise ValueError(f"Unknown timeline mode: {mode!r}")

    buckets: dict[str, list[FileRecord]] = {}
    for record in records:
        buckets.setdefault(date_key_for(record, mode), []).append(record)

    keys = sorted(buckets, reverse=True)
    if unknown_placement == "last" and UNKNOWN_DATE in buckets:
        keys.remove(UNKNOWN_DATE)
        keys.append(UNKNOWN_DATE)

    return [
        TimelineBucket(
            date_key=key,
            display_label=display_label_for(key),
            files=tuple(buckets[key]),
        )
        for key in keys
    ]


__all__ = [
    "TimelineBucket",
    "TimelineMode",
    "UNKNOWN_DATE",
    "UnknownPlacement",
    "build_timeline",
    "date_key_for",
    "display_label_for",
]
