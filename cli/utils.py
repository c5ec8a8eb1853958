"""Utility functions for CLI operations."""

import base64
import mimetypes
import re
from pathlib import Path

from cli.constants import TEXT_MIME_TYPES
from common.types import FileRecord, parse_data_url

_UNSAFE_NAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')


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


def sanitize_file_name(name: str) -> str:
    """
    Reduce a received file name to a safe single path component.

    Directory parts are dropped, reserved characters replaced and names made
    only of dots rejected, so a decoded file can never escape the output
    directory.
    """
    base = name.replace("\\", "/").rsplit("/", 1)[-1]
    base = _UNSAFE_NAME_CHARS.sub("_", base).strip().strip(".")
    return base or "download"


def is_text_mime(mime_type: str) -> bool:
    return mime_type.startswith("text/") or mime_type in TEXT_MIME_TYPES


def read_file_record(path: Path) -> FileRecord:
    """
    Read a local file into a FileRecord.

    Text-like files that decode as UTF-8 are kept as text; everything else
    becomes a base64 data-URL.

    Raises:
        FileNotFoundError: If the path does not exist
        IsADirectoryError: If the path is a directory
    """
    data = path.read_bytes()
    mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    last_modified_ms = int(path.stat().st_mtime * 1000)

    if is_text_mime(mime_type) or mime_type == "application/octet-stream":
        try:
            content = data.decode("utf-8")
        except UnicodeDecodeError:
            pass
        else:
            if mime_type == "application/octet-stream":
                mime_type = "text/plain"
            return FileRecord(
                name=path.name,
                content=content,
                size=len(data),
                mime_type=mime_type,
                last_modified_ms=last_modified_ms,
            )

    encoded = base64.b64encode(data).decode("ascii")
    return FileRecord(
        name=path.name,
        content=f"data:{mime_type};base64,{encoded}",
        size=len(data),
        mime_type=mime_type,
        last_modified_ms=last_modified_ms,
        is_binary=True,
    )


def unique_path(directory: Path, name: str) -> Path:
    """Return directory/name, adding a numeric suffix if the file exists."""
    candidate = directory / name
    stem, suffix = candidate.stem, candidate.suffix
    counter = 1
    while candidate.exists():
        candidate = directory / f"{stem} ({counter}){suffix}"
        counter += 1
    return candidate


def write_file_record(record: FileRecord, output_dir: Path) -> Path:
    """
    Write a decoded record under output_dir.

    Returns:
        Path of the written file
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    target = unique_path(output_dir, sanitize_file_name(record.name))

    if record.is_binary:
        _, data = parse_data_url(record.content)
        target.write_bytes(data)
    else:
        target.write_bytes(record.content.encode("utf-8"))

    return target
