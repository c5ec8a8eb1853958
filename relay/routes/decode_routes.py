"""Decode and download API routes."""

from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse, Response

from common.exceptions import ValidationError
from common.types import Resolution
from relay.dependencies import get_transfer_service
from relay.resolver import KIND_DIRECT_FILE
from relay.schemas.transfer import DecodeRequest, DecodeResponse, DownloadRequest, FileRecordModel
from relay.services.transfer_service import TransferService

router = APIRouter(tags=["Decode"])


def _to_response(resolution: Resolution) -> DecodeResponse:
    if resolution.kind == KIND_DIRECT_FILE:
        return DecodeResponse(
            kind=resolution.kind,
            source=resolution.source,
            download_url=resolution.download_url,
            file_name=resolution.file_name,
        )

    envelope = resolution.envelope
    return DecodeResponse(
        kind=resolution.kind,
        source=resolution.source,
        files=[FileRecordModel.from_record(r) for r in envelope.files],
        timestamp=envelope.created_at_ms,
        total_files=envelope.total_file_count,
        total_size=envelope.total_byte_size,
    )


def content_disposition(file_name: str) -> str:
    fallback = file_name.encode("ascii", "replace").decode("ascii").replace('"', "_")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(file_name, safe='')}"


@router.post("/decode", response_model=DecodeResponse)
async def decode(
    request: DecodeRequest,
    service: TransferService = Depends(get_transfer_service)
):
    """
    Resolve a pasted string or scanned URL back into files.

    Parameters:
        - input: Wire reference, landing URL or raw transport string
        - password: Password for encrypted payloads
        - consume: Delete single-use data after reading it

    Returns:
        - kind: "envelope" or "direct-file"
        - files: Decoded file records (envelope only)
        - download_url, file_name: Target of a direct-file reference

    Raises:
        - 400: Decoded data is not a valid envelope
        - 404: Reference points at nothing
        - 410: Referenced data has expired
        - 422: Input is not decodable, or the password is wrong
        - 503: Storage backend unavailable
    """
    resolution = await service.decode_input(
        request.input,
        password=request.password,
        consume=request.consume,
    )
    return _to_response(resolution)


@router.get("/decode", response_model=DecodeResponse)
async def decode_landing(
    data: Optional[str] = Query(None, description="Inline transport string"),
    ref: Optional[str] = Query(None, description="Wire reference"),
    service: TransferService = Depends(get_transfer_service)
):
    """
    Landing endpoint embedded in QR codes.

    Exactly one of data or ref must be given.
    """
    if bool(data) == bool(ref):
        raise ValidationError("Provide exactly one of 'data' or 'ref'")

    # query decoding turns an unescaped '+' into a space; base64 has no spaces
    text = ref if ref else data.replace(" ", "+")
    resolution = await service.decode_input(text)
    return _to_response(resolution)


@router.get("/stream/{cache_id}", response_model=DecodeResponse)
async def decode_stream(
    cache_id: str,
    service: TransferService = Depends(get_transfer_service)
):
    """
    Resolve a short chunk cache id.

    Raises:
        - 404: Unknown id
        - 410: Cached data has expired
    """
    resolution = await service.decode_input(f"CACHE:{cache_id}")
    return _to_response(resolution)


@router.post("/download")
async def download(
    request: DownloadRequest,
    service: TransferService = Depends(get_transfer_service)
):
    """
    Download one decoded file as raw bytes.

    Parameters:
        - input: Wire reference, landing URL or raw transport string
        - index: Position of the file in the envelope (default 0)
        - password: Password for encrypted payloads

    Returns:
        File content with its MIME type and an attachment disposition.
        Direct-file references redirect to the stored file.
    """
    resolution = await service.decode_input(request.input, password=request.password)

    if resolution.kind == KIND_DIRECT_FILE:
        return RedirectResponse(resolution.download_url)

    files = resolution.envelope.files
    if not 0 <= request.index < len(files):
        raise ValidationError(f"File index {request.index} out of range (0-{len(files) - 1})")

    record = files[request.index]
    content, mime_type = service.extract_file(record)

    return Response(
        content=content,
        media_type=mime_type,
        headers={"Content-Disposition": content_disposition(record.name)},
    )
