"""JSON-RPC client for the vault backend.

Every command is a ``POST`` of ``{"command": name, "args": {...}}`` to the
configured endpoint. The backend answers ``{"ok": true, "result": ...}`` or
``{"ok": false, "error": "..."}``.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from vaultlens.records import (
    DeletedEntry,
    FileProperties,
    FolderProperties,
    SimilarityTriple,
    SnapshotInfo,
)

from .base import RawRecordPair
from .errors import BackendUnavailableError, CommandFailedError, ProtocolError

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_SCAN_TIMEOUT_SECONDS = 600.0

T = TypeVar("T")

_DELETED = TypeAdapter(list[DeletedEntry])
_SNAPSHOTS = TypeAdapter(list[SnapshotInfo])


class RpcVaultBackend:
    """Talk to the vault backend over HTTP JSON-RPC."""

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        scan_timeout: float = DEFAULT_SCAN_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            endpoint: URL of the backend command endpoint.
            timeout: Timeout in seconds for ordinary commands.
            scan_timeout: Timeout in seconds for indexing and similarity scans.
            transport: Optional transport override, used by tests.
        """
        self._endpoint = endpoint
        self._timeout = timeout
        self._scan_timeout = scan_timeout
        self._transport = transport

    @property
    def endpoint(self) -> str:
        """Return the configured command endpoint."""
        return self._endpoint

    async def invoke(
        self,
        command: str,
        args: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> Any:
        """Send ``command`` and return its ``result`` value.

        Args:
            command: Backend command name.
            args: Keyword arguments for the command.
            timeout: Per-call timeout override in seconds.

        Returns:
            Any: Decoded ``result`` member of the response envelope.

        Raises:
            BackendUnavailableError: If the request fails at the transport or HTTP level.
            ProtocolError: If the response is not a valid envelope.
            CommandFailedError: If the backend rejects the command.
        """
        request = {"command": command, "args": dict(args or {})}
        client_timeout = httpx.Timeout(timeout or self._timeout, connect=5.0)
        LOGGER.debug("Invoking backend command %s", command)
        try:
            async with httpx.AsyncClient(
                timeout=client_timeout, transport=self._transport
            ) as client:
                response = await client.post(self._endpoint, json=request)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise BackendUnavailableError(f"{command}: backend timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise BackendUnavailableError(
                f"{command}: backend returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.RequestError as exc:
            raise BackendUnavailableError(f"{command}: backend unreachable ({exc})") from exc

        try:
            envelope = response.json()
        except ValueError as exc:
            raise ProtocolError(f"{command}: response is not JSON") from exc

        if not isinstance(envelope, dict) or "ok" not in envelope:
            raise ProtocolError(f"{command}: response is missing the 'ok' flag")
        if not envelope["ok"]:
            message = str(envelope.get("error") or "command failed")
            LOGGER.debug("Backend rejected %s: %s", command, message)
            raise CommandFailedError(command, message)
        return envelope.get("result")

    # Queries ----------------------------------------------------------

    async def list_records(self) -> list[RawRecordPair]:
        result = await self.invoke("get_all_stored_files")
        if not isinstance(result, list):
            raise ProtocolError("get_all_stored_files: expected a list of pairs")
        # Pair shape is checked by the record decoder, which drops bad entries.
        return [tuple(item) if isinstance(item, list) else item for item in result]

    async def list_deleted(self) -> list[DeletedEntry]:
        return _validate(_DELETED, await self.invoke("get_deleted_files"), "get_deleted_files")

    async def list_snapshots(self) -> list[SnapshotInfo]:
        return _validate(_SNAPSHOTS, await self.invoke("get_snapshots"), "get_snapshots")

    async def check_exists(self, path: str) -> bool:
        result = await self.invoke("check_file_status", {"path": path})
        if not isinstance(result, bool):
            raise ProtocolError("check_file_status: expected a boolean")
        return result

    async def file_properties(self, file_hash: str) -> FileProperties:
        result = await self.invoke("get_file_properties", {"hash": file_hash})
        return _validate(TypeAdapter(FileProperties), result, "get_file_properties")

    async def folder_properties(self, folder_path: str) -> FolderProperties:
        result = await self.invoke("get_folder_properties", {"folder_path": folder_path})
        return _validate(TypeAdapter(FolderProperties), result, "get_folder_properties")

    async def find_similar_images(self, max_distance: int) -> list[SimilarityTriple]:
        result = await self.invoke(
            "find_similar_images",
            {"max_distance": max_distance},
            timeout=self._scan_timeout,
        )
        if not isinstance(result, list):
            raise ProtocolError("find_similar_images: expected a list of groups")
        triples: list[SimilarityTriple] = []
        for item in result:
            try:
                representative, members, similarity = item
                triples.append(
                    SimilarityTriple(
                        representative_hash=representative,
                        member_hashes=list(members),
                        similarity_pct=similarity,
                    )
                )
            except (TypeError, ValueError, ValidationError) as exc:
                raise ProtocolError(f"find_similar_images: malformed group {item!r}") from exc
        return triples

    async def verify_integrity(self) -> list[str]:
        result = await self.invoke("run_integrity_check", timeout=self._scan_timeout)
        return _validate(TypeAdapter(list[str]), result, "run_integrity_check")

    # Mutations --------------------------------------------------------

    async def start_scan(self, folder_path: str, snapshot_name: str) -> str:
        result = await self.invoke(
            "start_auto_scan",
            {"folder_path": folder_path, "snapshot_name": snapshot_name},
            timeout=self._scan_timeout,
        )
        return _message(result)

    async def add_file(self, path: str) -> str:
        return _message(await self.invoke("add_single_file", {"path": path}))

    async def open_file(self, path: str) -> None:
        await self.invoke("open_file", {"path": path})

    async def open_file_with(self, path: str, app: str) -> None:
        await self.invoke("open_file_with", {"path": path, "app": app})

    async def delete_to_bin(self, file_hash: str, path: str) -> None:
        await self.invoke("delete_to_bin", {"hash": file_hash, "path": path})

    async def delete_folder_to_bin(self, folder_path: str) -> str:
        return _message(await self.invoke("delete_folder_to_bin", {"folder_path": folder_path}))

    async def delete_permanently(self, file_hash: str, path: str) -> None:
        await self.invoke("delete_physical_file", {"hash": file_hash, "path": path})

    async def rename_file(self, file_hash: str, new_name: str) -> None:
        await self.invoke("rename_in_index", {"hash": file_hash, "new_name": new_name})

    async def rename_folder(self, old_path: str, new_name: str) -> None:
        await self.invoke("rename_folder", {"old_path": old_path, "new_name": new_name})

    async def move_file(self, file_hash: str, destination_folder: str) -> str:
        result = await self.invoke(
            "move_file", {"hash": file_hash, "destination_folder": destination_folder}
        )
        return _message(result)

    async def move_folder(self, old_path: str, destination_parent: str) -> str:
        result = await self.invoke(
            "move_folder", {"old_path": old_path, "destination_parent": destination_parent}
        )
        return _message(result)

    async def compress(self, paths: Sequence[str], output_path: str) -> str:
        result = await self.invoke(
            "compress_to_zip",
            {"paths": list(paths), "output_path": output_path},
            timeout=self._scan_timeout,
        )
        return _message(result)

    async def extract(self, zip_path: str, output_dir: str) -> str:
        result = await self.invoke(
            "extract_zip",
            {"zip_path": zip_path, "output_dir": output_dir},
            timeout=self._scan_timeout,
        )
        return _message(result)

    async def clear_vault(self) -> None:
        await self.invoke("clear_vault")

    async def clear_history(self) -> None:
        await self.invoke("clear_deleted_history")

    async def delete_snapshot(self, name: str, timestamp: int) -> None:
        await self.invoke("delete_snapshot", {"snapshot_name": name, "timestamp": timestamp})


def _validate(adapter: TypeAdapter[T], value: Any, command: str) -> T:
    try:
        return adapter.validate_python(value)
    except ValidationError as exc:
        raise ProtocolError(
            f"{command}: unexpected result shape ({exc.error_count()} error(s))"
        ) from exc


def _message(result: Any) -> str:
    return "" if result is None else str(result)


__all__ = ["DEFAULT_SCAN_TIMEOUT_SECONDS", "DEFAULT_TIMEOUT_SECONDS", "RpcVaultBackend"]
