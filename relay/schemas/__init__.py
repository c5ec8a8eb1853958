"""Pydantic schemas for API requests and responses."""

from relay.schemas.transfer import (
    FileRecordModel,
    EncodeRequest,
    EncodeTextRequest,
    EncodeResponse,
    DecodeRequest,
    DecodeResponse,
    DownloadRequest,
    QRRequest,
    QRResponse,
    DirectFileResponse
)
from relay.schemas.common import ErrorResponse, HealthResponse

__all__ = [
    "FileRecordModel",
    "EncodeRequest",
    "EncodeTextRequest",
    "EncodeResponse",
    "DecodeRequest",
    "DecodeResponse",
    "DownloadRequest",
    "QRRequest",
    "QRResponse",
    "DirectFileResponse",
    "ErrorResponse",
    "HealthResponse"
]
