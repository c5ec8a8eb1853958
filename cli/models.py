"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class EncodeCommand:
    """Encode local files into a shareable reference."""

    file_list: tuple[str, ...]
    durable: bool = False
    password: str | None = None
    command: Literal["encode"] = "encode"


@dataclass(frozen=True)
class TextCommand:
    """Encode typed text as a single text file."""

    text: str
    command: Literal["text"] = "text"


@dataclass(frozen=True)
class DecodeCommand:
    """Decode a reference, URL or pasted string into files."""

    reference: str
    output_dir: str | None = None
    password: str | None = None
    command: Literal["decode"] = "decode"


@dataclass(frozen=True)
class QRCommand:
    """Render a QR code for a reference."""

    reference: str
    output_path: str | None = None
    command: Literal["qr"] = "qr"


CommandRequest = EncodeCommand | TextCommand | DecodeCommand | QRCommand
