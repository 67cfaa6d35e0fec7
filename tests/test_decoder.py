"""Tests for decoding raw vault pairs into file records."""

from __future__ import annotations

import pytest
from conftest import make_pair

from vaultlens.records import (
    Decoded,
    Malformed,
    decode_pair,
    decode_payload,
    decode_records,
    filter_by_category,
    path_name,
)


def test_decode_payload_builds_record_with_derived_name() -> None:
    result = decode_payload(
        "h1",
        '{"path": "C:\\\\Users\\\\ana\\\\a.jpg", "size": 5, "modified": "2024-01-02", '
        '"category": "image"}',
    )

    assert isinstance(result, Decoded)
    record = result.record
    assert record.hash == "h1"
    assert record.name == "a.jpg"
    assert record.size == 5
    assert record.modified_raw == "2024-01-02"
    assert record.category == "image"


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("a/b/c.txt", "c.txt"),
        ("a\\b\\c.txt", "c.txt"),
        ("mixed/dir\\file.md", "file.md"),
        ("plain.txt", "plain.txt"),
    ],
)
def test_path_name_handles_both_separators(path: str, expected: str) -> None:
    assert path_name(path) == expected


def test_decode_payload_fills_missing_fields() -> None:
    result = decode_payload("h2", {"path": "docs/report.pdf", "size": 1})

    assert isinstance(result, Decoded)
    assert result.record.category == "document"
    assert result.record.modified_raw == ""


def test_decode_payload_maps_unknown_category_to_other() -> None:
    result = decode_payload("h3", {"path": "x.bin", "size": 1, "category": "spreadsheet"})

    assert isinstance(result, Decoded)
    assert result.record.category == "other"


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        "[1, 2, 3]",
        '{"size": 10}',
        '{"path": "", "size": 10}',
        '{"path": "a.txt", "size": -1}',
        '{"path": "a.txt", "size": "huge"}',
    ],
)
def test_decode_payload_reports_malformed(payload: str) -> None:
    result = decode_payload("bad", payload)

    assert isinstance(result, Malformed)
    assert result.hash == "bad"


def test_decode_pair_rejects_bad_shapes() -> None:
    assert isinstance(decode_pair(("only-one",)), Malformed)
    assert isinstance(decode_pair(None), Malformed)  # type: ignore[arg-type]
    assert isinstance(decode_pair(("", '{"path": "a", "size": 1}')), Malformed)


def test_decode_records_skips_malformed_without_raising() -> None:
    pairs = [
        make_pair("h1", "a/one.txt"),
        ("h2", "{broken"),
        make_pair("h3", "a/three.txt"),
        ("h4", "null"),
        ("h5",),
        ("h6", "[" * 200_000 + "]" * 200_000),
    ]

    records = decode_records(pairs)

    assert [record.hash for record in records] == ["h1", "h3"]
    assert len(records) <= len(pairs)


def test_decode_records_is_last_write_wins_per_path() -> None:
    pairs = [
        make_pair("old", "a/same.txt", size=1),
        make_pair("other", "a/other.txt"),
        make_pair("new", "a/same.txt", size=2),
    ]

    records = decode_records(pairs)

    assert [record.path for record in records] == ["a/same.txt", "a/other.txt"]
    assert records[0].hash == "new"
    assert records[0].size == 2


def test_filter_by_category() -> None:
    records = decode_records(
        [make_pair("h1", "a.jpg"), make_pair("h2", "b.mp3"), make_pair("h3", "c.jpg")]
    )

    assert filter_by_category(records, "all") == records
    assert [r.hash for r in filter_by_category(records, "image")] == ["h1", "h3"]
    assert filter_by_category(records, "video") == []
    with pytest.raises(ValueError):
        filter_by_category(records, "pictures")
