"""Shared data type definitions (FileRecord, Envelope)."""

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from common.constants import ENCODING_BASE64, PERMITTED_ENCODINGS
from common.exceptions import ValidationError

DATA_URL_PATTERN = re.compile(
    r"^data:(?P<mime>[^;,]*)(?P<params>(?:;[^;,]*)*?);base64,(?P<payload>[A-Za-z0-9+/]*={0,2})$"
)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def is_data_url(content: str) -> bool:
    """Check whether content is a base64 data-URL."""
    return isinstance(content, str) and DATA_URL_PATTERN.match(content) is not None


def parse_data_url(content: str) -> Tuple[str, bytes]:
    """
    Split a base64 data-URL into its MIME type and raw bytes.

    Args:
        content: String of the form data:<mime>;base64,<payload>

    Returns:
        Tuple of (mime_type, decoded_bytes)

    Raises:
        ValidationError: If content is not a base64 data-URL
    """
    match = DATA_URL_PATTERN.match(content)
    if match is None:
        raise ValidationError("Content is not a base64 data-URL")
    try:
        data = base64.b64decode(match.group("payload"), validate=True)
    except binascii.Error as e:
        raise ValidationError(f"Data-URL payload is not valid base64: {e}")
    return match.group("mime") or "application/octet-stream", data


@dataclass(frozen=True)
class FileRecord:
    """
    One input or output file.

    Binary files carry their content as a data-URL; text files carry the
    literal text.
    """
    name: str
    content: str
    size: int
    mime_type: str = ""
    last_modified_ms: int = 0
    is_binary: bool = False
    path: Optional[str] = None

    def validate(self) -> None:
        """
        Check the record invariants.

        Raises:
            ValidationError: If any field is missing or malformed
        """
        if not isinstance(self.name, str) or not self.name:
            raise ValidationError("File name must be a non-empty string")
        if not isinstance(self.content, str):
            raise ValidationError(f"File {self.name!r}: content must be a string")
        if not _is_int(self.size) or self.size < 0:
            raise ValidationError(f"File {self.name!r}: size must be a non-negative integer")
        if not isinstance(self.mime_type, str):
            raise ValidationError(f"File {self.name!r}: type must be a string")
        if not _is_int(self.last_modified_ms) or self.last_modified_ms < 0:
            raise ValidationError(f"File {self.name!r}: lastModified must be a non-negative integer")
        if not isinstance(self.is_binary, bool):
            raise ValidationError(f"File {self.name!r}: isBinary must be a boolean")
        if self.path is not None and not isinstance(self.path, str):
            raise ValidationError(f"File {self.name!r}: path must be a string")
        if self.is_binary and not is_data_url(self.content):
            raise ValidationError(f"File {self.name!r}: binary content must be a base64 data-URL")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the wire dictionary."""
        obj = {
            "name": self.name,
            "content": self.content,
            "size": self.size,
            "type": self.mime_type,
            "lastModified": self.last_modified_ms,
            "isBinary": self.is_binary,
        }
        if self.path:
            obj["path"] = self.path
        return obj

    @classmethod
    def from_dict(cls, obj: Any) -> "FileRecord":
        """
        Deserialize and validate a wire dictionary.

        Raises:
            ValidationError: If the dictionary does not describe a valid file
        """
        if not isinstance(obj, dict):
            raise ValidationError("File entry must be an object")
        for key in ("name", "content", "size", "type", "lastModified"):
            if key not in obj:
                raise ValidationError(f"File entry is missing {key!r}")
        record = cls(
            name=obj["name"],
            content=obj["content"],
            size=obj["size"],
            mime_type=obj["type"],
            last_modified_ms=obj["lastModified"],
            is_binary=obj.get("isBinary", False),
            path=obj.get("path") or None,
        )
        record.validate()
        return record


@dataclass(frozen=True)
class Envelope:
    """
    The unit encoded into one transport string.
    """
    files: List[FileRecord]
    created_at_ms: int
    total_file_count: int
    total_byte_size: int
    encoding_kind: str = ENCODING_BASE64

    @classmethod
    def build(cls, files: List[FileRecord], created_at_ms: int) -> "Envelope":
        """Create an envelope whose totals are derived from the files."""
        return cls(
            files=list(files),
            created_at_ms=created_at_ms,
            total_file_count=len(files),
            total_byte_size=sum(f.size for f in files),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the wire dictionary."""
        return {
            "files": [f.to_dict() for f in self.files],
            "timestamp": self.created_at_ms,
            "metadata": {
                "totalFiles": self.total_file_count,
                "totalSize": self.total_byte_size,
                "encoding": self.encoding_kind,
            },
        }

    @classmethod
    def from_dict(cls, obj: Any) -> "Envelope":
        """
        Deserialize and structurally validate a wire dictionary.

        Raises:
            ValidationError: If the structure is not a valid envelope
        """
        if not isinstance(obj, dict):
            raise ValidationError("Decoded data is not an object")
        files = obj.get("files")
        if not isinstance(files, list):
            raise ValidationError("Decoded data has no 'files' array")
        timestamp = obj.get("timestamp")
        if not _is_int(timestamp):
            raise ValidationError("Decoded data has no integer 'timestamp'")
        metadata = obj.get("metadata")
        if not isinstance(metadata, dict):
            raise ValidationError("Decoded data has no 'metadata' object")
        total_files = metadata.get("totalFiles")
        total_size = metadata.get("totalSize")
        encoding = metadata.get("encoding")
        if not _is_int(total_files) or not _is_int(total_size):
            raise ValidationError("Metadata totals must be integers")
        if encoding not in PERMITTED_ENCODINGS:
            raise ValidationError(f"Unsupported encoding: {encoding!r}")

        records = [FileRecord.from_dict(entry) for entry in files]

        if total_files != len(records):
            raise ValidationError(
                f"Metadata declares {total_files} files but {len(records)} were found"
            )
        if total_size != sum(r.size for r in records):
            raise ValidationError("Metadata totalSize does not match the file sizes")

        return cls(
            files=records,
            created_at_ms=timestamp,
            total_file_count=total_files,
            total_byte_size=total_size,
            encoding_kind=encoding,
        )


@dataclass(frozen=True)
class Resolution:
    """
    Outcome of resolving a pasted string or URL.

    kind is "envelope" for decoded payloads and "direct-file" when the
    reference points at a single file to download as-is.
    """
    kind: str
    source: str
    envelope: Optional[Envelope] = None
    download_url: Optional[str] = None
    file_name: Optional[str] = None
