"""Decode raw ``(hash, payload)`` vault pairs into typed file records.

Decoding is total: every pair yields either :class:`Decoded` or
:class:`Malformed`, and :func:`decode_records` keeps only the former. A single
corrupt payload never prevents the rest of the vault from being shown.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence, Union

from pydantic import ValidationError

from .categories import category_for_path
from .models import CATEGORIES, FileRecord

LOGGER = logging.getLogger(__name__)

ALL_CATEGORIES = "all"

RawPair = Sequence[Any]


@dataclass(frozen=True, slots=True)
class Decoded:
    """A payload that decoded into a record."""

    record: FileRecord


@dataclass(frozen=True, slots=True)
class Malformed:
    """A payload that could not be decoded.

    Attributes:
        hash: Key of the offending pair, when one was present.
        reason: Short explanation used for debug logging.
    """

    hash: str
    reason: str


DecodeResult = Union[Decoded, Malformed]


def decode_payload(file_hash: str, payload: str | bytes | Mapping[str, Any]) -> DecodeResult:
    """Decode a single vault payload.

    Args:
        file_hash: Content hash the backend stores the payload under.
        payload: JSON text (or an already-parsed mapping) with ``path``,
            ``size``, ``modified`` and ``category`` keys.

    Returns:
        DecodeResult: ``Decoded`` on success, ``Malformed`` otherwise.
    """
    if isinstance(payload, (str, bytes, bytearray)):
        try:
            data = json.loads(payload)
        except (ValueError, TypeError, RecursionError) as exc:
            return Malformed(hash=file_hash, reason=f"invalid JSON: {exc}")
    else:
        data = payload

    if not isinstance(data, Mapping):
        return Malformed(hash=file_hash, reason="payload is not an object")

    path = data.get("path")
    if not isinstance(path, str) or not path:
        return Malformed(hash=file_hash, reason="missing path")

    category = data.get("category")
    if not isinstance(category, str) or not category:
        category = category_for_path(path)
    elif category not in CATEGORIES:
        category = "other"

    modified = data.get("modified")
    try:
        record = FileRecord(
            path=path,
            size=data.get("size", 0),
            modified_raw="" if modified is None else str(modified),
            hash=file_hash,
            category=category,
        )
    except ValidationError as exc:
        return Malformed(hash=file_hash, reason=f"invalid fields: {exc.error_count()} error(s)")
    return Decoded(record=record)


def decode_pair(pair: RawPair) -> DecodeResult:
    """Decode one raw ``(hash, payload)`` pair, tolerating a malformed pair shape."""
    try:
        file_hash, payload = pair
    except (TypeError, ValueError):
        return Malformed(hash="", reason="pair is not a (hash, payload) tuple")
    if not isinstance(file_hash, str) or not file_hash:
        return Malformed(hash=str(file_hash), reason="missing hash")
    return decode_payload(file_hash, payload)


def decode_records(pairs: Iterable[RawPair]) -> list[FileRecord]:
    """Decode every well-formed pair, silently dropping malformed ones.

    Two payloads that resolve to the same path keep the position of the first
    and the content of the last.

    Args:
        pairs: Raw pairs as returned by the backend's record listing.

    Returns:
        list[FileRecord]: Decoded records in backend order.
    """
    by_path: dict[str, FileRecord] = {}
    dropped = 0
    for pair in pairs:
        result = decode_pair(pair)
        if isinstance(result, Malformed):
            dropped += 1
            LOGGER.debug("Dropping malformed vault record %r: %s", result.hash, result.reason)
            continue
        by_path[result.record.path] = result.record
    if dropped:
        LOGGER.debug("Dropped %d malformed vault record(s).", dropped)
    return list(by_path.values())


def filter_by_category(records: Iterable[FileRecord], category: str) -> list[FileRecord]:
    """Return records in ``category``; ``"all"`` keeps everything.

    Raises:
        ValueError: If ``category`` is not a known category or ``"all"``.
    """
    if category == ALL_CATEGORIES:
        return list(records)
    if category not in CATEGORIES:
        raise ValueError(f"Unknown category filter: {category!r}")
    return [record for record in records if record.category == category]


__all__ = [
    "ALL_CATEGORIES",
    "DecodeResult",
    "Decoded",
    "Malformed",
    "decode_pair",
    "decode_payload",
    "decode_records",
    "filter_by_category",
]
