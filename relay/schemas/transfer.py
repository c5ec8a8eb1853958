"""Pydantic schemas for encode, decode and QR endpoints."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from common.types import FileRecord


class FileRecordModel(BaseModel):
    """One file in its wire form."""
    model_config = ConfigDict(populate_by_name=True)

    name: str
    content: str
    size: int
    type: str = ""
    last_modified: int = Field(0, alias="lastModified")
    is_binary: bool = Field(False, alias="isBinary")
    path: Optional[str] = None

    def to_record(self) -> FileRecord:
        return FileRecord(
            name=self.name,
            content=self.content,
            size=self.size,
            mime_type=self.type,
            last_modified_ms=self.last_modified,
            is_binary=self.is_binary,
            path=self.path or None,
        )

    @classmethod
    def from_record(cls, record: FileRecord) -> "FileRecordModel":
        return cls(
            name=record.name,
            content=record.content,
            size=record.size,
            type=record.mime_type,
            last_modified=record.last_modified_ms,
            is_binary=record.is_binary,
            path=record.path,
        )


class EncodeRequest(BaseModel):
    """Request model for encoding files."""
    files: List[FileRecordModel]
    require_durable: bool = False
    password: Optional[str] = None


class EncodeTextRequest(BaseModel):
    """Request model for encoding pasted text."""
    text: str
    name: str = "message.txt"
    require_durable: bool = False
    password: Optional[str] = None


class EncodeResponse(BaseModel):
    """Response model for encode operations."""
    reference: str
    tier: str
    durable: bool
    transport_length: int
    expires_at: Optional[int] = None
    share_url: str


class DecodeRequest(BaseModel):
    """Request model for decoding a pasted string or URL."""
    input: str
    password: Optional[str] = None
    consume: bool = False


class DecodeResponse(BaseModel):
    """Response model for decode operations."""
    kind: str
    source: str
    files: List[FileRecordModel] = []
    timestamp: Optional[int] = None
    total_files: int = 0
    total_size: int = 0
    download_url: Optional[str] = None
    file_name: Optional[str] = None


class DownloadRequest(BaseModel):
    """Request model for downloading one decoded file."""
    input: str
    index: int = 0
    password: Optional[str] = None


class QRRequest(BaseModel):
    """Request model for QR generation."""
    reference: str
    width: Optional[int] = None
    margin: Optional[int] = None


class QRResponse(BaseModel):
    """Response model for QR generation."""
    qr_code: str
    url: str
    error_correction: str
    mode: str


class DirectFileResponse(BaseModel):
    """Response model for direct file uploads."""
    reference: str
    url: str
    file_name: str
    size: int
