"""QR code API routes."""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response

from relay.dependencies import get_transfer_service
from relay.qr import QROptions
from relay.schemas.transfer import QRRequest, QRResponse
from relay.services.transfer_service import TransferService

router = APIRouter(prefix="/qr", tags=["QR"])


@router.post("", response_model=QRResponse)
async def generate_qr(
    request: QRRequest,
    service: TransferService = Depends(get_transfer_service)
):
    """
    Render a QR code for a wire reference or raw transport string.

    Parameters:
        - reference: Wire reference or raw transport string
        - width: Image width in pixels (default 400)
        - margin: Quiet zone in modules (default 1)

    Returns:
        - qr_code: PNG as a data URL
        - url: Text embedded in the QR code
        - error_correction: "M" or "L"
        - mode: "inline", "reference" or "direct-download"

    Raises:
        - 413: Embedded text exceeds QR capacity
        - 422: Untagged input is not base64
    """
    defaults = QROptions()
    options = QROptions(
        width=request.width or defaults.width,
        margin=defaults.margin if request.margin is None else request.margin,
    )
    surface = await service.generate_shareable_qr(request.reference, options)

    return QRResponse(
        qr_code=surface.to_data_url(),
        url=surface.embedded_text,
        error_correction=surface.error_correction,
        mode=surface.mode,
    )


@router.get("")
async def generate_qr_image(
    data: str = Query(..., description="Wire reference or raw transport string"),
    service: TransferService = Depends(get_transfer_service)
):
    """
    Render a QR code and return it as image/png.
    """
    surface = await service.generate_shareable_qr(data.replace(" ", "+"))
    return Response(content=surface.image_png, media_type="image/png")
