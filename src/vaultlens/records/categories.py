"""Extension-based file categorisation."""

from __future__ import annotations

from .models import Category

_EXTENSION_CATEGORIES: dict[str, Category] = {}
for _category, _extensions in (
    ("image", ("jpg", "jpeg", "png", "gif", "webp", "bmp", "svg", "ico")),
    ("video", ("mp4", "mkv", "mov", "avi", "wmv", "webm", "flv")),
    ("document", ("pdf", "doc", "docx", "txt", "xlsx", "xls", "pptx", "csv", "md")),
    ("audio", ("mp3", "wav", "flac", "aac", "ogg", "m4a")),
    ("archive", ("zip", "rar", "7z", "tar", "gz", "bz2")),
    ("executable", ("exe", "msi", "dmg", "deb")),
):
    for _extension in _extensions:
        _EXTENSION_CATEGORIES[_extension] = _category  # type: ignore[assignment]


def category_for_path(path: str) -> Category:
    """Return the category implied by the extension of ``path``."""
    extension = path.rsplit(".", 1)[-1].lower() if "." in path else ""
    return _EXTENSION_CATEGORIES.get(extension, "other")


def is_archive(path: str) -> bool:
    """Return True when ``path`` names an archive the backend can extract."""
    return category_for_path(path) == "archive"


__all__ = ["category_for_path", "is_archive"]
