"""Configuration models describing VaultLens settings."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

CategoryFilter = Literal[
    "all",
    "image",
    "video",
    "document",
    "audio",
    "archive",
    "executable",
    "other",
]


class VaultLensBaseModel(BaseModel):
    """Shared configuration for VaultLens Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class BackendSettings(VaultLensBaseModel):
    """Connection settings for the vault backend.

    Attributes:
        endpoint: URL of the backend's JSON-RPC command endpoint.
        timeout_seconds: Timeout applied to ordinary commands.
        scan_timeout_seconds: Timeout applied to indexing and similarity scans.
    """

    endpoint: str = "http://127.0.0.1:8765/rpc"
    timeout_seconds: float = 30.0
    scan_timeout_seconds: float = 600.0


class BrowserOptions(VaultLensBaseModel):
    """Defaults for the folder browser.

    Attributes:
        default_category: Category filter applied when none is given.
    """

    default_category: CategoryFilter = "all"


class TimelineOptions(VaultLensBaseModel):
    """Timeline bucketing preferences.

    Attributes:
        mode: Whether files are bucketed by modification or indexing date.
        unknown_placement: Where the "Unknown Date" bucket is placed.
    """

    mode: Literal["modified", "indexed"] = "modified"
    unknown_placement: Literal["lexical", "last"] = "lexical"


class SmartDedupOptions(VaultLensBaseModel):
    """Near-duplicate image scan settings.

    Attributes:
        threshold: Similarity percentage required to group two images.
    """

    threshold: int = Field(default=90, ge=70, le=99)


class LoggingSettings(VaultLensBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(VaultLensBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
        confirm_destructive: Whether irreversible commands prompt before running.
    """

    quiet_default: bool = False
    summary_default: bool = False
    confirm_destructive: bool = True


class VaultLensConfig(VaultLensBaseModel):
    """Top-level configuration struct for VaultLens.

    Attributes:
        backend: Backend connection settings.
        browser: Folder browser defaults.
        timeline: Timeline settings.
        smart_dedup: Near-duplicate scan settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    backend: BackendSettings = Field(default_factory=BackendSettings)
    browser: BrowserOptions = Field(default_factory=BrowserOptions)
    timeline: TimelineOptions = Field(default_factory=TimelineOptions)
    smart_dedup: SmartDedupOptions = Field(default_factory=SmartDedupOptions)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "CategoryFilter",
    "VaultLensBaseModel",
    "BackendSettings",
    "BrowserOptions",
    "TimelineOptions",
    "SmartDedupOptions",
    "LoggingSettings",
    "CLIOptions",
    "VaultLensConfig",
]
