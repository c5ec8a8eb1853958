"""
Envelope codec: file records <-> JSON envelope <-> base64 transport string.

Pure functions. The transport string is the standard base64 encoding of the
UTF-8 bytes of the compact JSON envelope.
"""

import base64
import binascii
import json
import re
import time
from typing import List, Optional

from common.exceptions import DecodingError, EncodingError, ValidationError
from common.types import Envelope, FileRecord


_WHITESPACE = re.compile(r"[ \t\r\n\f\v]+")


def current_time_ms() -> int:
    return int(time.time() * 1000)


def encode_files(files: List[FileRecord], now_ms: Optional[int] = None) -> str:
    """
    Package files into a transport string.

    Args:
        files: Non-empty list of file records
        now_ms: Creation timestamp in milliseconds, defaults to the current time

    Returns:
        Base64 transport string

    Raises:
        ValidationError: If the list is empty or a record is invalid
        EncodingError: If the envelope cannot be serialized
    """
    if not files:
        raise ValidationError("At least one file is required")
    for record in files:
        if not isinstance(record, FileRecord):
            raise ValidationError(f"Expected FileRecord, got {type(record).__name__}")
        record.validate()

    created_at = current_time_ms() if now_ms is None else now_ms
    return encode_envelope(Envelope.build(files, created_at))


def envelope_to_bytes(envelope: Envelope) -> bytes:
    """
    Serialize an envelope to compact UTF-8 JSON bytes.

    Raises:
        EncodingError: If the envelope contains text that is not valid Unicode
    """
    try:
        text = json.dumps(envelope.to_dict(), ensure_ascii=False, separators=(",", ":"))
        return text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise EncodingError(f"Envelope contains invalid Unicode: {e.reason}")
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Envelope could not be serialized: {e}")


def envelope_from_bytes(raw: bytes) -> Envelope:
    """
    Parse UTF-8 JSON bytes into a validated envelope.

    Raises:
        DecodingError: If the bytes are not UTF-8 JSON
        ValidationError: If the JSON is not a valid envelope
    """
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodingError(f"Payload is not valid UTF-8: {e.reason}")
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodingError(f"Payload is not valid JSON: {e.msg}")
    return Envelope.from_dict(obj)


def encode_envelope(envelope: Envelope) -> str:
    """
    Encode an existing envelope into a transport string.
    """
    return base64.b64encode(envelope_to_bytes(envelope)).decode("ascii")


def strip_whitespace(transport: str) -> str:
    return _WHITESPACE.sub("", transport)


def decode_base64(transport: str) -> bytes:
    """
    Strictly decode a base64 string.

    Whitespace anywhere in the string is ignored, so a transport string that
    was line-wrapped on its way through a mail client still decodes.

    Raises:
        DecodingError: If the string is empty or contains non-alphabet characters
    """
    if not isinstance(transport, str):
        raise DecodingError("Transport string must be text")
    text = strip_whitespace(transport)
    if not text:
        raise DecodingError("Transport string is empty")
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodingError(f"Invalid base64 data: {e}")


def decode(transport: str) -> Envelope:
    """
    Decode a transport string back into an envelope.

    Args:
        transport: Base64 transport string (surrounding whitespace is ignored)

    Returns:
        The validated Envelope

    Raises:
        DecodingError: If the string is not base64, UTF-8 or JSON
        ValidationError: If the decoded JSON is not a valid envelope
    """
    return envelope_from_bytes(decode_base64(transport))
