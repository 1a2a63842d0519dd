"""Utility functions for CLI operations."""

from typing import Optional
from urllib.parse import unquote


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"


def format_usage(used: int, limit: int) -> str:
    """
    Format quota usage, e.g. "1.00 GiB / 5.00 GiB (20.0%)".
    """
    percent = (used / limit) * 100 if limit > 0 else 0.0
    return f"{format_file_size(used)} / {format_file_size(limit)} ({percent:.1f}%)"


def filename_from_disposition(header: Optional[str], default: str) -> str:
    """
    Extract the file name from a Content-Disposition header.

    Handles both RFC 5987 (filename*=UTF-8''...) and plain filename="..." forms.
    """
    if not header:
        return default

    for part in header.split(';'):
        part = part.strip()
        if part.lower().startswith("filename*="):
            value = part.split("=", 1)[1]
            if "''" in value:
                value = value.split("''", 1)[1]
            return unquote(value) or default
        if part.lower().startswith("filename="):
            return part.split("=", 1)[1].strip('"') or default

    return default
