"""Utility helper functions for the storage engine."""

import uuid
from datetime import datetime, timezone
from typing import Optional

from common.constants import DEFAULT_ROOT_PATH
from common.types import FileType


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """
    Current time as a timezone-aware UTC datetime.
    """
    return datetime.now(timezone.utc)


def classify_file_type(mime_type: str) -> FileType:
    """
    Map a mime-type to its FileType category.

    Prefix rules are checked before substring rules, so 'text/x-zip' is a
    DOCUMENT and 'application/zip' an ARCHIVE.

    Args:
        mime_type: Mime-type reported by the uploader (may be empty)

    Returns:
        FileType category
    """
    if mime_type.startswith("image/"):
        return FileType.IMAGE
    if mime_type.startswith("video/"):
        return FileType.VIDEO
    if mime_type.startswith("audio/"):
        return FileType.AUDIO
    if "pdf" in mime_type or "text" in mime_type or "document" in mime_type:
        return FileType.DOCUMENT
    if "zip" in mime_type or "rar" in mime_type or "7z" in mime_type:
        return FileType.ARCHIVE
    return FileType.UNKNOWN


def build_storage_key(root_path: Optional[str], name: str) -> str:
    """
    Join the configured root path and a file name into a logical storage key.

    Args:
        root_path: Config root path; DEFAULT_ROOT_PATH when unset or blank
        name: File name

    Returns:
        Key such as 'public/content/report.pdf'
    """
    prefix = (root_path or DEFAULT_ROOT_PATH).strip().rstrip("/")
    if not prefix:
        prefix = DEFAULT_ROOT_PATH
    return f"{prefix}/{name}"
