"""Shared fixtures: an in-memory vault backend and record helpers."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Optional, Sequence

import pytest

from vaultlens.backend import CommandFailedError
from vaultlens.records import (
    DeletedEntry,
    FileProperties,
    FolderProperties,
    SimilarityTriple,
    SnapshotInfo,
    category_for_path,
    path_name,
)


def make_pair(
    file_hash: str,
    path: str,
    *,
    size: int = 100,
    modified: Optional[str] = "2024-05-01 10:00:00",
    category: Optional[str] = None,
) -> tuple[str, str]:
    """Return a raw ``(hash, payload)`` pair as the backend lists it."""
    payload: dict[str, Any] = {"path": path, "size": size}
    if modified is not None:
        payload["modified"] = modified
    if category is not None:
        payload["category"] = category
    return (file_hash, json.dumps(payload))


def env_with_home(tmp_path: Path) -> dict[str, str]:
    """Return environment variables pointing HOME to a temp directory."""
    env = {key: value for key, value in os.environ.items() if not key.startswith("VAULTLENS__")}
    env["HOME"] = str(tmp_path / "home")
    return env


class FakeBackend:
    """In-memory vault that records every command it receives.

    Commands listed in ``failures`` raise :class:`CommandFailedError` instead
    of running.
    """

    def __init__(
        self,
        pairs: Sequence[tuple[str, str]] = (),
        *,
        deleted: Sequence[DeletedEntry] = (),
        snapshots: Sequence[SnapshotInfo] = (),
    ) -> None:
        self.pairs: list[tuple[str, str]] = list(pairs)
        self.deleted: list[DeletedEntry] = list(deleted)
        self.snapshots: list[SnapshotInfo] = list(snapshots)
        self.similar: list[SimilarityTriple] = []
        self.corrupted: list[str] = []
        self.missing: set[str] = set()
        self.failures: dict[str, str] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def fail(self, command: str, message: str = "backend said no") -> None:
        self.failures[command] = message

    def called(self, command: str) -> list[tuple[Any, ...]]:
        return [args for name, args in self.calls if name == command]

    def _enter(self, command: str, *args: Any) -> None:
        self.calls.append((command, args))
        if command in self.failures:
            raise CommandFailedError(command, self.failures[command])

    def _paths(self) -> list[tuple[str, str]]:
        return [(file_hash, json.loads(payload)["path"]) for file_hash, payload in self.pairs]

    def _replace_path(self, index: int, new_path: str) -> None:
        file_hash, payload = self.pairs[index]
        data = json.loads(payload)
        data["path"] = new_path
        self.pairs[index] = (file_hash, json.dumps(data))

    def _remove(self, file_hash: str, path: str, snapshot_name: str) -> None:
        for index, (pair_hash, pair_path) in enumerate(self._paths()):
            if pair_hash == file_hash and pair_path == path:
                del self.pairs[index]
                self.deleted.insert(
                    0,
                    DeletedEntry(
                        hash=file_hash,
                        path=path,
                        name=path_name(path),
                        deleted_at=1_700_000_000,
                        snapshot_name=snapshot_name,
                    ),
                )
                return

    async def list_records(self) -> list[tuple[str, str]]:
        self._enter("list_records")
        return list(self.pairs)

    async def list_deleted(self) -> list[DeletedEntry]:
        self._enter("list_deleted")
        return list(self.deleted)

    async def list_snapshots(self) -> list[SnapshotInfo]:
        self._enter("list_snapshots")
        return list(self.snapshots)

    async def start_scan(self, folder_path: str, snapshot_name: str) -> str:
        self._enter("start_scan", folder_path, snapshot_name)
        self.snapshots.insert(
            0,
            SnapshotInfo(
                name=snapshot_name,
                timestamp=1_700_000_000,
                file_count=len(self.pairs),
                folder_path=folder_path,
            ),
        )
        return f"Indexed {len(self.pairs)} files."

    async def add_file(self, path: str) -> str:
        self._enter("add_file", path)
        self.pairs.append(make_pair(f"h-{path_name(path)}", path))
        return f"Added {path_name(path)}."

    async def check_exists(self, path: str) -> bool:
        self._enter("check_exists", path)
        return path not in self.missing

    async def open_file(self, path: str) -> None:
        self._enter("open_file", path)

    async def open_file_with(self, path: str, app: str) -> None:
        self._enter("open_file_with", path, app)

    async def delete_to_bin(self, file_hash: str, path: str) -> None:
        self._enter("delete_to_bin", file_hash, path)
        self._remove(file_hash, path, "manual")

    async def delete_folder_to_bin(self, folder_path: str) -> str:
        self._enter("delete_folder_to_bin", folder_path)
        prefix = folder_path.rstrip("/") + "/"
        doomed = [(h, p) for h, p in self._paths() if p.startswith(prefix)]
        for file_hash, path in doomed:
            self._remove(file_hash, path, "manual")
        return f"Moved {len(doomed)} files to Recycle Bin."

    async def delete_permanently(self, file_hash: str, path: str) -> None:
        self._enter("delete_permanently", file_hash, path)
        self._remove(file_hash, path, "permanent")

    async def rename_file(self, file_hash: str, new_name: str) -> None:
        self._enter("rename_file", file_hash, new_name)
        for index, (pair_hash, path) in enumerate(self._paths()):
            if pair_hash == file_hash:
                parent = path.rsplit("/", 1)[0]
                self._replace_path(index, f"{parent}/{new_name}")

    async def rename_folder(self, old_path: str, new_name: str) -> None:
        self._enter("rename_folder", old_path, new_name)
        parent = old_path.rsplit("/", 1)[0]
        self._move_prefix(old_path, f"{parent}/{new_name}")

    async def move_file(self, file_hash: str, destination_folder: str) -> str:
        self._enter("move_file", file_hash, destination_folder)
        new_path = ""
        for index, (pair_hash, path) in enumerate(self._paths()):
            if pair_hash == file_hash:
                new_path = f"{destination_folder.rstrip('/')}/{path_name(path)}"
                self._replace_path(index, new_path)
        return new_path

    async def move_folder(self, old_path: str, destination_parent: str) -> str:
        self._enter("move_folder", old_path, destination_parent)
        new_path = f"{destination_parent.rstrip('/')}/{path_name(old_path.rstrip('/'))}"
        self._move_prefix(old_path, new_path)
        return new_path

    def _move_prefix(self, old_path: str, new_path: str) -> None:
        prefix = old_path.rstrip("/") + "/"
        for index, (_, path) in enumerate(self._paths()):
            if path.startswith(prefix):
                self._replace_path(index, new_path.rstrip("/") + "/" + path[len(prefix) :])

    async def file_properties(self, file_hash: str) -> FileProperties:
        self._enter("file_properties", file_hash)
        for pair_hash, payload in self.pairs:
            if pair_hash == file_hash:
                data = json.loads(payload)
                return FileProperties(
                    path=data["path"],
                    name=path_name(data["path"]),
                    size=data.get("size", 0),
                    hash=file_hash,
                    modified=data.get("modified", ""),
                    category=category_for_path(data["path"]),
                    exists_on_disk=data["path"] not in self.missing,
                )
        raise CommandFailedError("get_file_properties", "File not found in vault")

    async def folder_properties(self, folder_path: str) -> FolderProperties:
        self._enter("folder_properties", folder_path)
        prefix = folder_path.rstrip("/") + "/"
        sizes = [
            json.loads(payload).get("size", 0)
            for _, payload in self.pairs
            if json.loads(payload)["path"].startswith(prefix)
        ]
        return FolderProperties(
            path=folder_path,
            name=path_name(folder_path.rstrip("/")),
            file_count=len(sizes),
            total_size=sum(sizes),
            exists_on_disk=folder_path not in self.missing,
        )

    async def compress(self, paths: Sequence[str], output_path: str) -> str:
        self._enter("compress", list(paths), output_path)
        return f"Compressed {len(paths)} item(s) into {path_name(output_path)}."

    async def extract(self, zip_path: str, output_dir: str) -> str:
        self._enter("extract", zip_path, output_dir)
        return f"Extracted to {output_dir}."

    async def clear_vault(self) -> None:
        self._enter("clear_vault")
        self.pairs = []

    async def clear_history(self) -> None:
        self._enter("clear_history")
        self.deleted = []

    async def delete_snapshot(self, name: str, timestamp: int) -> None:
        self._enter("delete_snapshot", name, timestamp)
        self.snapshots = [
            snap
            for snap in self.snapshots
            if not (snap.name == name and snap.timestamp == timestamp)
        ]

    async def find_similar_images(self, max_distance: int) -> list[SimilarityTriple]:
        self._enter("find_similar_images", max_distance)
        return list(self.similar)

    async def verify_integrity(self) -> list[str]:
        self._enter("verify_integrity")
        return list(self.corrupted)


SAMPLE_PAIRS = [
    make_pair("h-cat", "/home/ana/photos/cat.jpg", size=2048, modified="2024-06-14 09:00:00"),
    make_pair("h-cat", "/home/ana/backup/cat.jpg", size=2048, modified="2024-06-14 09:00:00"),
    make_pair("h-dog", "/home/ana/photos/dog.png", size=4096, modified="2024-06-13 18:30:00"),
    make_pair("h-notes", "/home/ana/notes.txt", size=12, modified=None),
    make_pair("h-song", "/home/ana/music/song.mp3", size=9000, modified="2023-12-31 23:59:59"),
]


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend(
        SAMPLE_PAIRS,
        snapshots=[
            SnapshotInfo(
                name="01-06-2024",
                timestamp=1_717_200_000,
                file_count=5,
                folder_path="/home/ana",
            )
        ],
    )
