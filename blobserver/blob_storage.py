"""Manages stored objects on disk: read/write/delete with a recorded content type."""

import re
from pathlib import Path
from typing import Optional, Tuple

from blobserver.config import BLOB_STORAGE_PATH

BLOBS_DIR = Path(BLOB_STORAGE_PATH)

KEY_PATTERN = re.compile(r"^[A-Za-z0-9._-]{1,200}$")

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def is_valid_key(key: str) -> bool:
    """
    Check that a key is safe to use as a file name.

    Keys are 1-200 characters from [A-Za-z0-9._-] and may not be made of dots only.
    """
    return bool(KEY_PATTERN.match(key)) and key.strip(".") != ""


def ensure_blobs_directory() -> None:
    """Ensure blobs directory exists."""
    BLOBS_DIR.mkdir(parents=True, exist_ok=True)


def get_blob_path(key: str) -> Path:
    """
    Get file path for a blob.

    Args:
        key: Object key

    Returns:
        Path object for blob data file
    """
    return BLOBS_DIR / f"{key}.blob"


def get_content_type_path(key: str) -> Path:
    return BLOBS_DIR / f"{key}.type"


def write_blob(key: str, data: bytes, content_type: Optional[str] = None) -> int:
    """
    Write blob data to disk, replacing any existing object under the key.

    Args:
        key: Object key
        data: Raw object bytes
        content_type: MIME type to serve the object with

    Returns:
        Number of bytes written

    Raises:
        OSError: If write operation fails
    """
    ensure_blobs_directory()
    get_blob_path(key).write_bytes(data)
    get_content_type_path(key).write_text(content_type or DEFAULT_CONTENT_TYPE)
    return len(data)


def read_blob(key: str) -> Tuple[bytes, str]:
    """
    Read a blob and its content type.

    Returns:
        Tuple of (data, content_type)

    Raises:
        FileNotFoundError: If blob does not exist
    """
    data = get_blob_path(key).read_bytes()
    type_path = get_content_type_path(key)
    content_type = type_path.read_text().strip() if type_path.exists() else DEFAULT_CONTENT_TYPE
    return data, content_type or DEFAULT_CONTENT_TYPE


def delete_blob(key: str) -> bool:
    """
    Delete blob from disk.

    Returns:
        True if blob was deleted, False if it didn't exist
    """
    filepath = get_blob_path(key)
    get_content_type_path(key).unlink(missing_ok=True)
    if filepath.exists():
        filepath.unlink()
        return True
    return False
