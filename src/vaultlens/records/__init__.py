"""Vault record models and decoding."""

from .categories import category_for_path, is_archive
from .decoder import (
    ALL_CATEGORIES,
    Decoded,
    DecodeResult,
    Malformed,
    decode_pair,
    decode_payload,
    decode_records,
    filter_by_category,
)
from .formatting import clean_modified, format_long_date, format_size, format_timestamp
from .models import (
    CATEGORIES,
    Category,
    DeletedEntry,
    FileProperties,
    FileRecord,
    FolderProperties,
    SimilarityTriple,
    SnapshotInfo,
    path_name,
)

__all__ = [
    "ALL_CATEGORIES",
    "CATEGORIES",
    "Category",
    "Decoded",
    "DecodeResult",
    "DeletedEntry",
    "FileProperties",
    "FileRecord",
    "FolderProperties",
    "Malformed",
    "SimilarityTriple",
    "SnapshotInfo",
    "category_for_path",
    "clean_modified",
    "decode_pair",
    "decode_payload",
    "decode_records",
    "filter_by_category",
    "format_long_date",
    "format_size",
    "format_timestamp",
    "is_archive",
    "path_name",
]
