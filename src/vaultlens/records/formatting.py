"""Human-readable formatting helpers for vault data."""

from __future__ import annotations

import re
from datetime import date, datetime

_MODIFIED_NOISE = re.compile(r"Some\(|\)")


def format_size(size: int) -> str:
    """Return ``size`` in bytes as a short B/KB/MB/GB string."""
    if size < 1024:
        return f"{size} B"
    if size < 1024**2:
        return f"{size / 1024:.1f} KB"
    if size < 1024**3:
        return f"{size / 1024**2:.2f} MB"
    return f"{size / 1024**3:.2f} GB"


def format_timestamp(seconds: int | float) -> str:
    """Return an epoch timestamp as a local date-time string."""
    return datetime.fromtimestamp(seconds).strftime("%Y-%m-%d %H:%M:%S")


def format_long_date(value: date) -> str:
    """Return ``value`` as a long day-month-year label such as ``14 June 2025``."""
    return f"{value.day} {value.strftime('%B')} {value.year}"


def clean_modified(raw: str) -> str:
    """Strip debug wrappers (``Some(...)``, ``SystemTime {``) from a raw timestamp."""
    return _MODIFIED_NOISE.sub("", raw).replace("SystemTime {", "", 1).strip()


__all__ = ["clean_modified", "format_long_date", "format_size", "format_timestamp"]
