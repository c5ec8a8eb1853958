"""
Transport references and their prefixed wire form.

    InlineRef      -> <transport string>
    CacheRef       -> CACHE:<id>
    DbRowRef       -> DB:<id>
    BlobRef        -> BLOB:<url>
    DirectFileRef  -> FILE:<url>:<file_name>

FILE references split on the last colon, so URLs may contain colons but file
names may not. Base64 never contains ':', so an untagged string cannot be
mistaken for a tagged one.
"""

from dataclasses import dataclass
from typing import Union

from common.constants import (
    LEGACY_BLOB_TAGS,
    TAG_BLOB,
    TAG_CHUNK_CACHE,
    TAG_DATABASE_ROW,
    TAG_DIRECT_FILE,
)
from common.exceptions import ValidationError


@dataclass(frozen=True)
class InlineRef:
    payload: str
    kind = "inline"


@dataclass(frozen=True)
class CacheRef:
    cache_id: str
    kind = "chunk_cache"


@dataclass(frozen=True)
class DbRowRef:
    row_id: str
    kind = "database_row"


@dataclass(frozen=True)
class BlobRef:
    url: str
    kind = "object_storage"


@dataclass(frozen=True)
class DirectFileRef:
    url: str
    file_name: str
    kind = "direct_file"


TransportReference = Union[InlineRef, CacheRef, DbRowRef, BlobRef, DirectFileRef]


def format_reference(reference: TransportReference) -> str:
    """
    Serialize a reference to its wire string.

    Raises:
        ValidationError: If the reference cannot be represented unambiguously
    """
    if isinstance(reference, InlineRef):
        return reference.payload
    if isinstance(reference, CacheRef):
        return f"{TAG_CHUNK_CACHE}{reference.cache_id}"
    if isinstance(reference, DbRowRef):
        return f"{TAG_DATABASE_ROW}{reference.row_id}"
    if isinstance(reference, BlobRef):
        return f"{TAG_BLOB}{reference.url}"
    if isinstance(reference, DirectFileRef):
        if ":" in reference.file_name or not reference.file_name:
            raise ValidationError(
                f"Direct file name must be non-empty and contain no ':': {reference.file_name!r}"
            )
        return f"{TAG_DIRECT_FILE}{reference.url}:{reference.file_name}"
    raise ValidationError(f"Unknown reference type: {type(reference).__name__}")


def _has_path(url: str) -> bool:
    """True for scheme://host/path style URLs; a bare host:port has no path."""
    _, sep, rest = url.partition("//")
    return bool(sep) and "/" in rest


def parse_reference(text: str) -> TransportReference:
    """
    Parse a wire string into a reference.

    Tags are checked most specific first. Anything without a known tag is an
    inline transport string; this function never rejects unknown tags.

    Args:
        text: Wire string (surrounding whitespace is ignored)

    Returns:
        The parsed TransportReference
    """
    value = text.strip()

    if value.startswith(TAG_DIRECT_FILE):
        body = value[len(TAG_DIRECT_FILE):]
        url, sep, file_name = body.rpartition(":")
        if sep and file_name and "/" not in file_name and _has_path(url):
            return DirectFileRef(url=url, file_name=file_name)
        name = body.rsplit("/", 1)[-1] if _has_path(body) else ""
        return DirectFileRef(url=body, file_name=name or "download")

    if value.startswith(TAG_DATABASE_ROW):
        return DbRowRef(row_id=value[len(TAG_DATABASE_ROW):])

    for tag in (TAG_BLOB,) + LEGACY_BLOB_TAGS:
        if value.startswith(tag):
            return BlobRef(url=value[len(tag):])

    if value.startswith(TAG_CHUNK_CACHE):
        return CacheRef(cache_id=value[len(TAG_CHUNK_CACHE):])

    return InlineRef(payload=value)
