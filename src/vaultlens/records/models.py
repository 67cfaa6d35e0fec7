"""Vault record data models."""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

Category = Literal["image", "video", "document", "audio", "archive", "executable", "other"]

CATEGORIES: tuple[str, ...] = (
    "image",
    "video",
    "document",
    "audio",
    "archive",
    "executable",
    "other",
)

_SEPARATORS = re.compile(r"[\\/]")


def path_name(path: str) -> str:
    """Return the final segment of ``path`` under either separator convention.

    Args:
        path: Path string using ``/`` or ``\\`` separators.

    Returns:
        str: Last segment, or the whole path when it has no usable segment.
    """
    return _SEPARATORS.split(path)[-1] or path


class FileRecord(BaseModel):
    """A decoded, immutable vault entry identified by its content hash.

    Attributes:
        path: Location of the file when it was indexed.
        size: File size in bytes.
        modified_raw: Backend-provided modification timestamp, unparsed.
        hash: Content hash; equal hashes imply identical content.
        category: Coarse file category.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    size: int = Field(ge=0)
    modified_raw: str = ""
    hash: str
    category: Category = "other"

    @computed_field  # type: ignore[prop-decorator]
    @property
    def name(self) -> str:
        """Final path segment."""
        return path_name(self.path)


class DeletedEntry(BaseModel):
    """History record describing a file removed from the vault.

    Attributes:
        hash: Content hash of the removed file.
        path: Path the file occupied.
        name: Display name.
        size: Size in bytes at deletion time.
        category: File category.
        deleted_at: Deletion time as seconds since the epoch.
        snapshot_name: Snapshot that recorded the deletion, or ``permanent``/``manual``.
    """

    hash: str
    path: str
    name: str
    size: int = 0
    category: str = "other"
    deleted_at: int
    snapshot_name: str

    @property
    def permanent(self) -> bool:
        """Whether the file is gone for good rather than sitting in the recycle bin."""
        return self.snapshot_name == "permanent"


class SnapshotInfo(BaseModel):
    """Summary of one indexing run persisted by the backend."""

    name: str
    timestamp: int
    file_count: int
    folder_path: str


class FileProperties(BaseModel):
    """Backend-reported properties for one file, including its on-disk state."""

    path: str
    name: str
    size: int
    hash: str
    modified: str
    category: str
    exists_on_disk: bool

    @property
    def ghost(self) -> bool:
        """Whether the file is indexed but missing from disk."""
        return not self.exists_on_disk


class FolderProperties(BaseModel):
    """Backend-reported aggregate properties for a folder."""

    path: str
    name: str
    file_count: int
    total_size: int
    exists_on_disk: bool

    @property
    def ghost(self) -> bool:
        """Whether the folder is indexed but missing from disk."""
        return not self.exists_on_disk


class SimilarityTriple(BaseModel):
    """Raw near-duplicate relation entry returned by the backend."""

    representative_hash: str
    member_hashes: list[str] = Field(default_factory=list)
    similarity_pct: float = Field(ge=0, le=100)


__all__ = [
    "CATEGORIES",
    "Category",
    "DeletedEntry",
    "FileProperties",
    "FileRecord",
    "FolderProperties",
    "SimilarityTriple",
    "SnapshotInfo",
    "path_name",
]
