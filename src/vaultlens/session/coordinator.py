"""Mutation coordinator owning the client-side vault cache.

The cache is a pure function of the last successful full fetch. Every
state-changing command is followed by a complete refetch of the record set
(and of history and snapshots where the command touches them); nothing is
patched locally. A failed command leaves the cache exactly as it was.

Actions are not serialized against each other: if two refetches overlap, the
one that resolves last becomes the cache.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from functools import cached_property, partial
from typing import Any, Awaitable, Callable, Optional, Sequence

from vaultlens.backend import BackendError, RawRecordPair, VaultBackend
from vaultlens.projection import SimilarityGroup, SmartDedupIndex
from vaultlens.projection.timeline import TimelineMode, UnknownPlacement
from vaultlens.records import (
    DeletedEntry,
    FileProperties,
    FileRecord,
    FolderProperties,
    SnapshotInfo,
    decode_records,
    is_archive,
)

from .state import BrowseState
from .view import VaultView, build_view

LOGGER = logging.getLogger(__name__)

Confirm = Callable[[str], bool]


def _decline(_prompt: str) -> bool:
    return False


def default_snapshot_name(today: Optional[date] = None) -> str:
    """Return the default snapshot name, the date as ``DD-MM-YYYY``."""
    return (today or date.today()).strftime("%d-%m-%Y")


@dataclass(frozen=True)
class VaultCache:
    """Last fetched backend state.

    Attributes:
        pairs: Raw ``(hash, payload)`` pairs from the record listing.
        deleted: Deletion history, newest first.
        snapshots: Snapshot records, newest first.
        records_fetched_at: When ``pairs`` was last replaced.
        history_fetched_at: When ``deleted`` and ``snapshots`` were last replaced.
    """

    pairs: tuple[RawRecordPair, ...] = ()
    deleted: tuple[DeletedEntry, ...] = ()
    snapshots: tuple[SnapshotInfo, ...] = ()
    records_fetched_at: Optional[datetime] = None
    history_fetched_at: Optional[datetime] = None

    @cached_property
    def records(self) -> list[FileRecord]:
        """Decoded records across all categories."""
        return decode_records(self.pairs)


@dataclass(slots=True)
class ActionOutcome:
    """Result of a coordinator action.

    Attributes:
        ok: Whether the backend accepted the command.
        message: Status line describing the outcome.
        value: Command result, when the command returns one.
        skipped: True when nothing was sent (declined confirmation or empty input).
        stale: True when the command succeeded but a follow-up refetch failed.
        ghost: True when a file is indexed but missing from disk.
    """

    ok: bool
    message: str
    value: Any = None
    skipped: bool = False
    stale: bool = False
    ghost: bool = False


@dataclass(slots=True)
class _Refetch:
    vault: bool = True
    history: bool = False


class VaultCoordinator:
    """Run backend commands and keep the cache consistent with the backend."""

    def __init__(self, backend: VaultBackend, *, confirm: Confirm | None = None) -> None:
        """Initialize the coordinator.

        Args:
            backend: Backend command interface.
            confirm: Callback asked before irreversible actions; declines by default.
        """
        self._backend = backend
        self._confirm = confirm or _decline
        self._cache = VaultCache()
        self.status = "Ready"

    @property
    def backend(self) -> VaultBackend:
        return self._backend

    @property
    def cache(self) -> VaultCache:
        return self._cache

    @property
    def records(self) -> list[FileRecord]:
        """Decoded records from the current cache, unfiltered."""
        return self._cache.records

    def view(
        self,
        state: BrowseState,
        *,
        timeline_mode: TimelineMode = "modified",
        unknown_placement: UnknownPlacement = "lexical",
    ) -> VaultView:
        """Return all projections of the current cache for ``state``."""
        return build_view(
            self._cache.records,
            state,
            timeline_mode=timeline_mode,
            unknown_placement=unknown_placement,
        )

    # Fetching ---------------------------------------------------------

    async def refresh_vault(self) -> bool:
        """Replace the cached record set with a fresh backend listing."""
        try:
            pairs = await self._backend.list_records()
        except BackendError as exc:
            self._report_error("list records", exc)
            return False
        self._cache = replace(
            self._cache,
            pairs=tuple(pairs),
            records_fetched_at=datetime.now(timezone.utc),
        )
        LOGGER.debug("Vault cache replaced with %d raw record(s).", len(pairs))
        return True

    async def refresh_history(self) -> bool:
        """Replace cached deletion history and snapshots."""
        try:
            deleted = await self._backend.list_deleted()
            snapshots = await self._backend.list_snapshots()
        except BackendError as exc:
            self._report_error("list history", exc)
            return False
        self._cache = replace(
            self._cache,
            deleted=tuple(deleted),
            snapshots=tuple(snapshots),
            history_fetched_at=datetime.now(timezone.utc),
        )
        return True

    async def refresh_all(self) -> bool:
        """Refetch records, history and snapshots."""
        vault_ok = await self.refresh_vault()
        history_ok = await self.refresh_history()
        return vault_ok and history_ok

    # Mutations --------------------------------------------------------

    async def index_folder(
        self, folder_path: str, snapshot_name: Optional[str] = None
    ) -> ActionOutcome:
        """Index ``folder_path`` and save a snapshot named ``snapshot_name``."""
        name = (snapshot_name or "").strip() or default_snapshot_name()
        self.status = "Indexing…"
        return await self._mutate(
            "index folder",
            lambda: self._backend.start_scan(folder_path, name),
            _Refetch(history=True),
            lambda result: result or f"Indexed {folder_path}.",
        )

    async def add_file(self, path: str) -> ActionOutcome:
        """Index a single file at ``path``."""
        return await self._mutate(
            "add file",
            lambda: self._backend.add_file(path),
            _Refetch(),
            lambda result: result or f"Added {path}.",
        )

    async def delete_to_bin(self, file_hash: str, path: str) -> ActionOutcome:
        """Send one copy of a file to the recycle bin.

        Args:
            file_hash: Content hash of the record.
            path: Path of the copy to remove; other copies stay indexed.

        Returns:
            ActionOutcome: Result of the command, with history refetched on success.
        """
        return await self._mutate(
            "move to recycle bin",
            lambda: self._backend.delete_to_bin(file_hash, path),
            _Refetch(history=True),
            lambda _: "Moved to Recycle Bin.",
        )

    async def delete_folder_to_bin(self, folder_path: str) -> ActionOutcome:
        """Send every indexed file under ``folder_path`` to the recycle bin."""
        return await self._mutate(
            "move folder to recycle bin",
            lambda: self._backend.delete_folder_to_bin(folder_path),
            _Refetch(history=True),
            lambda result: result or "Folder moved to Recycle Bin.",
        )

    async def permanent_delete(self, file_hash: str, path: str) -> ActionOutcome:
        """Irreversibly delete a file once the user confirms."""
        if not self._confirm(f"Permanently delete? Cannot be undone.\n\n{path}"):
            return self._skip("Permanent delete cancelled.")
        return await self._mutate(
            "permanent delete",
            lambda: self._backend.delete_permanently(file_hash, path),
            _Refetch(history=True),
            lambda _: "Permanently deleted.",
        )

    async def rename(
        self,
        *,
        new_name: str,
        file_hash: Optional[str] = None,
        folder_path: Optional[str] = None,
    ) -> ActionOutcome:
        """Rename a file (by hash) or a folder (by path); blank names are ignored."""
        name = new_name.strip()
        if not name:
            return self._skip("Rename needs a new name.")
        if folder_path is not None:
            call = partial(self._backend.rename_folder, folder_path, name)
        elif file_hash is not None:
            call = partial(self._backend.rename_file, file_hash, name)
        else:
            raise ValueError("rename needs either file_hash or folder_path")
        return await self._mutate("rename", call, _Refetch(), lambda _: "Renamed.")

    async def move(
        self,
        destination: str,
        *,
        file_hash: Optional[str] = None,
        folder_path: Optional[str] = None,
    ) -> ActionOutcome:
        """Move a file (by hash) or a folder (by path) to ``destination``."""
        target = destination.strip()
        if not target:
            return self._skip("Move needs a destination.")
        if folder_path is not None:
            call = partial(self._backend.move_folder, folder_path, target)
        elif file_hash is not None:
            call = partial(self._backend.move_file, file_hash, target)
        else:
            raise ValueError("move needs either file_hash or folder_path")
        return await self._mutate("move", call, _Refetch(), lambda result: f"Moved to: {result}")

    async def compress(self, paths: Sequence[str], output_path: str) -> ActionOutcome:
        """Pack ``paths`` into a ZIP archive at ``output_path``.

        Args:
            paths: Files and folders to include. An empty selection is skipped.
            output_path: Archive to create.

        Returns:
            ActionOutcome: Result of the command; records are refetched on success.
        """
        if not paths or not output_path.strip():
            return self._skip("Nothing to compress.")
        return await self._mutate(
            "compress",
            lambda: self._backend.compress(list(paths), output_path.strip()),
            _Refetch(),
            lambda result: result or f"Created {output_path}.",
        )

    async def extract(self, zip_path: str, output_dir: str) -> ActionOutcome:
        """Extract ``zip_path`` into ``output_dir``; non-archives are refused locally."""
        if not is_archive(zip_path):
            return self._fail("extract", f"{zip_path} is not an archive.")
        if not output_dir.strip():
            return self._skip("Extract needs an output folder.")
        return await self._mutate(
            "extract",
            lambda: self._backend.extract(zip_path, output_dir.strip()),
            _Refetch(),
            lambda result: result or f"Extracted to {output_dir}.",
        )

    async def clear_history(self) -> ActionOutcome:
        """Forget all deletion records once confirmed. Deleted files are not restored."""
        if not self._confirm("Clear all deletion records? This does not restore the files."):
            return self._skip("Clear history cancelled.")
        return await self._mutate(
            "clear history",
            self._backend.clear_history,
            _Refetch(history=True),
            lambda _: "Deletion history cleared.",
        )

    async def delete_snapshot(self, name: str, timestamp: int) -> ActionOutcome:
        """Remove a snapshot record once confirmed.

        Args:
            name: Snapshot name.
            timestamp: Snapshot creation time in epoch seconds; names may repeat.

        Returns:
            ActionOutcome: Result of the command, or a skipped outcome when declined.
        """
        prompt = (
            f'Delete snapshot record "{name}"?\n'
            "This only removes the record, not your actual files."
        )
        if not self._confirm(prompt):
            return self._skip("Snapshot delete cancelled.")
        return await self._mutate(
            "delete snapshot",
            lambda: self._backend.delete_snapshot(name, timestamp),
            _Refetch(history=True),
            lambda _: f'Snapshot "{name}" deleted.',
        )

    async def reset_vault(self) -> ActionOutcome:
        """Clear the whole index once confirmed, keeping history and snapshots."""
        if not self._confirm("Reset entire vault index? History & snapshots are preserved."):
            return self._skip("Reset cancelled.")
        return await self._mutate(
            "reset vault",
            self._backend.clear_vault,
            _Refetch(),
            lambda _: "Vault reset.",
        )

    # Queries ----------------------------------------------------------

    async def open_file(self, path: str) -> ActionOutcome:
        """Open ``path`` unless it is a ghost file."""
        try:
            exists = await self._backend.check_exists(path)
            if not exists:
                self.status = "Ghost file: not found on disk."
                LOGGER.info("Ghost file: %s", path)
                return ActionOutcome(ok=False, message=self.status, ghost=True)
            await self._backend.open_file(path)
        except BackendError as exc:
            return self._fail("open file", exc)
        self.status = f"Opened {path}."
        return ActionOutcome(ok=True, message=self.status)

    async def open_with(self, path: str, app: str) -> ActionOutcome:
        if not app.strip():
            return self._skip("Open with needs an application.")
        try:
            await self._backend.open_file_with(path, app.strip())
        except BackendError as exc:
            return self._fail("open with", exc)
        self.status = f"Opened {path} with {app.strip()}."
        return ActionOutcome(ok=True, message=self.status)

    async def file_properties(self, file_hash: str) -> ActionOutcome:
        try:
            properties: FileProperties = await self._backend.file_properties(file_hash)
        except BackendError as exc:
            return self._fail("file properties", exc)
        return ActionOutcome(
            ok=True, message=properties.path, value=properties, ghost=properties.ghost
        )

    async def folder_properties(self, folder_path: str) -> ActionOutcome:
        try:
            properties: FolderProperties = await self._backend.folder_properties(folder_path)
        except BackendError as exc:
            return self._fail("folder properties", exc)
        return ActionOutcome(
            ok=True, message=properties.path, value=properties, ghost=properties.ghost
        )

    async def verify_integrity(self) -> ActionOutcome:
        """Ask the backend which indexed files no longer match their hash."""
        self.status = "Verifying…"
        try:
            corrupted = await self._backend.verify_integrity()
        except BackendError as exc:
            return self._fail("verify integrity", exc)
        self.status = f"{len(corrupted)} file(s) changed since indexing."
        return ActionOutcome(ok=True, message=self.status, value=corrupted)

    async def scan_similar(
        self, index: SmartDedupIndex, threshold: Optional[int] = None
    ) -> ActionOutcome:
        """Run a near-duplicate scan against the cached records."""
        try:
            groups: list[SimilarityGroup] = await index.scan(
                self._backend, self._cache.records, threshold
            )
        except BackendError as exc:
            return self._fail("similarity scan", exc)
        self.status = f"{len(groups)} group(s) of similar images at {index.threshold}%."
        return ActionOutcome(ok=True, message=self.status, value=groups)

    # Internal helpers -------------------------------------------------

    async def _mutate(
        self,
        label: str,
        call: Callable[[], Awaitable[Any]],
        refetch: _Refetch,
        describe: Callable[[Any], str],
    ) -> ActionOutcome:
        try:
            result = await call()
        except BackendError as exc:
            return self._fail(label, exc)

        stale = False
        if refetch.vault and not await self.refresh_vault():
            stale = True
        if refetch.history and not await self.refresh_history():
            stale = True

        message = describe(result)
        if not stale:
            self.status = message
        LOGGER.info("%s succeeded: %s", label.capitalize(), message)
        return ActionOutcome(ok=True, message=message, value=result, stale=stale)

    def _fail(self, label: str, error: BackendError | str) -> ActionOutcome:
        self._report_error(label, error)
        return ActionOutcome(ok=False, message=self.status)

    def _skip(self, message: str) -> ActionOutcome:
        self.status = message
        return ActionOutcome(ok=False, message=message, skipped=True)

    def _report_error(self, label: str, error: BackendError | str) -> None:
        self.status = f"Error: {error}"
        LOGGER.warning("%s failed: %s", label.capitalize(), error)


__all__ = [
    "ActionOutcome",
    "Confirm",
    "VaultCache",
    "VaultCoordinator",
    "default_snapshot_name",
]
