"""Command surface the vault backend exposes to VaultLens."""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable

from vaultlens.records import (
    DeletedEntry,
    FileProperties,
    FolderProperties,
    SimilarityTriple,
    SnapshotInfo,
)

RawRecordPair = tuple[str, str]


@runtime_checkable
class VaultBackend(Protocol):
    """Asynchronous command interface of the vault backend.

    Every method may raise :class:`~vaultlens.backend.errors.BackendError`.
    Hashing, perceptual similarity, file system changes, recycle-bin handling,
    archive I/O and snapshot persistence all happen behind this boundary.
    """

    async def list_records(self) -> list[RawRecordPair]:
        """Return every ``(hash, payload)`` pair stored in the vault."""
        ...

    async def list_deleted(self) -> list[DeletedEntry]:
        """Return deletion history, newest first."""
        ...

    async def list_snapshots(self) -> list[SnapshotInfo]:
        """Return saved snapshots, newest first."""
        ...

    async def start_scan(self, folder_path: str, snapshot_name: str) -> str:
        """Index ``folder_path`` and save a snapshot; returns a status message."""
        ...

    async def add_file(self, path: str) -> str:
        """Index a single file; returns a status message."""
        ...

    async def check_exists(self, path: str) -> bool:
        """Return whether ``path`` exists on disk."""
        ...

    async def open_file(self, path: str) -> None:
        """Open ``path`` with the system default application."""
        ...

    async def open_file_with(self, path: str, app: str) -> None:
        """Open ``path`` with the named application."""
        ...

    async def delete_to_bin(self, file_hash: str, path: str) -> None:
        """Move a file to the recycle bin and drop it from the vault."""
        ...

    async def delete_folder_to_bin(self, folder_path: str) -> str:
        """Move a folder to the recycle bin; returns a status message."""
        ...

    async def delete_permanently(self, file_hash: str, path: str) -> None:
        """Irreversibly delete a file and drop it from the vault."""
        ...

    async def rename_file(self, file_hash: str, new_name: str) -> None:
        """Rename the file stored under ``file_hash``."""
        ...

    async def rename_folder(self, old_path: str, new_name: str) -> None:
        """Rename the folder at ``old_path``."""
        ...

    async def move_file(self, file_hash: str, destination_folder: str) -> str:
        """Move a file into ``destination_folder``; returns its new path."""
        ...

    async def move_folder(self, old_path: str, destination_parent: str) -> str:
        """Move a folder under ``destination_parent``; returns its new path."""
        ...

    async def file_properties(self, file_hash: str) -> FileProperties:
        """Return properties for the file stored under ``file_hash``."""
        ...

    async def folder_properties(self, folder_path: str) -> FolderProperties:
        """Return aggregate properties for ``folder_path``."""
        ...

    async def compress(self, paths: Sequence[str], output_path: str) -> str:
        """Write ``paths`` into a ZIP archive; returns a status message."""
        ...

    async def extract(self, zip_path: str, output_dir: str) -> str:
        """Extract a ZIP archive; returns a status message."""
        ...

    async def clear_vault(self) -> None:
        """Drop every record from the vault, keeping history and snapshots."""
        ...

    async def clear_history(self) -> None:
        """Drop every deletion record."""
        ...

    async def delete_snapshot(self, name: str, timestamp: int) -> None:
        """Drop one snapshot record."""
        ...

    async def find_similar_images(self, max_distance: int) -> list[SimilarityTriple]:
        """Return near-duplicate image groups within ``max_distance``."""
        ...

    async def verify_integrity(self) -> list[str]:
        """Return paths whose content no longer matches the indexed hash."""
        ...


__all__ = ["RawRecordPair", "VaultBackend"]
