"""Backend command boundary for VaultLens."""

from __future__ import annotations

from vaultlens.config import VaultLensConfig

from .base import RawRecordPair, VaultBackend
from .errors import BackendError, BackendUnavailableError, CommandFailedError, ProtocolError
from .rpc import RpcVaultBackend


def backend_from_config(config: VaultLensConfig) -> RpcVaultBackend:
    """Build the RPC backend client described by ``config``."""
    return RpcVaultBackend(
        config.backend.endpoint,
        timeout=config.backend.timeout_seconds,
        scan_timeout=config.backend.scan_timeout_seconds,
    )


__all__ = [
    "BackendError",
    "BackendUnavailableError",
    "CommandFailedError",
    "ProtocolError",
    "RawRecordPair",
    "RpcVaultBackend",
    "VaultBackend",
    "backend_from_config",
]
