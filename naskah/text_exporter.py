"""Helpers for exporting generated documents to plain text or Markdown files."""
from __future__ import annotations

import re
from typing import Optional

EXPORT_FORMATS = ("txt", "md")

_UNSAFE_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*]')


class TextExportError(RuntimeError):
    """Raised when exporting data to a text file fails."""


def _clean(value: Optional[str]) -> str:
    """Return ``value`` stripped of leading/trailing whitespace."""

    if not value:
        return ""
    return str(value).strip()


def safe_filename(title: Optional[str], export_format: str) -> str:
    """Derive a download name from ``title`` with filesystem-unsafe characters replaced."""

    if export_format not in EXPORT_FORMATS:
        raise TextExportError(f"Unsupported export format: {export_format!r}")
    stem = _UNSAFE_FILENAME_CHARS.sub("_", _clean(title)) or "Dokumen"
    return f"{stem}.{export_format}"


def render_export(text: Optional[str]) -> str:
    """Return the UTF-8 text blob written for an export."""

    return _clean(text).rstrip() + "\n"


__all__ = ["EXPORT_FORMATS", "TextExportError", "render_export", "safe_filename"]
