"""Encode API routes."""

from fastapi import APIRouter, Depends

from relay.dependencies import get_transfer_service
from relay.schemas.transfer import EncodeRequest, EncodeResponse, EncodeTextRequest
from relay.services.transfer_service import EncodeResult, TransferService

router = APIRouter(prefix="/encode", tags=["Encode"])


def _to_response(result: EncodeResult, service: TransferService) -> EncodeResponse:
    return EncodeResponse(
        reference=result.wire,
        tier=result.tier.value,
        durable=result.durable,
        transport_length=result.transport_length,
        expires_at=result.expires_at_ms,
        share_url=service.qr_generator.embedded_text_for(result.reference),
    )


@router.post("", response_model=EncodeResponse)
async def encode_files(
    request: EncodeRequest,
    service: TransferService = Depends(get_transfer_service)
):
    """
    Encode files into a transport reference.

    Parameters:
        - files: File records (name, content, size, type, lastModified, isBinary, path)
        - require_durable: Skip the in-memory chunk cache tier
        - password: Optional password, encrypts the envelope

    Returns:
        - reference: Wire reference (raw payload for the inline tier)
        - tier: Selected storage tier
        - durable: Whether the reference survives a relay restart
        - share_url: URL to embed in a QR code

    Raises:
        - 400: Invalid files or password
        - 503: Storage backend unavailable
    """
    records = [f.to_record() for f in request.files]
    result = await service.encode_files(
        records,
        require_durable=request.require_durable,
        password=request.password,
    )
    return _to_response(result, service)


@router.post("/text", response_model=EncodeResponse)
async def encode_text(
    request: EncodeTextRequest,
    service: TransferService = Depends(get_transfer_service)
):
    """
    Encode pasted text as a single text/plain file.

    Raises:
        - 400: Empty text
        - 503: Storage backend unavailable
    """
    result = await service.encode_text(
        request.text,
        name=request.name,
        require_durable=request.require_durable,
        password=request.password,
    )
    return _to_response(result, service)
