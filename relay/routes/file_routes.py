"""Direct file upload API routes."""

from fastapi import APIRouter, Depends, File, UploadFile, status

from common.references import format_reference
from relay.dependencies import get_transfer_service
from relay.schemas.transfer import DirectFileResponse
from relay.services.transfer_service import TransferService

router = APIRouter(prefix="/files", tags=["Files"])


@router.post("/direct", response_model=DirectFileResponse, status_code=status.HTTP_201_CREATED)
async def upload_direct_file(
    file: UploadFile = File(...),
    service: TransferService = Depends(get_transfer_service)
):
    """
    Upload a single archive straight to object storage.

    Parameters:
        - file: File to upload (multipart/form-data)

    Returns:
        - reference: FILE:<url>:<file_name> wire reference
        - url: Direct download URL
        - file_name: Stored file name
        - size: File size in bytes

    Raises:
        - 400: Missing name, empty or oversized file
        - 503: Blob server unavailable
    """
    data = await file.read()
    reference = await service.upload_direct_file(file.filename or "", data, file.content_type)

    return DirectFileResponse(
        reference=format_reference(reference),
        url=reference.url,
        file_name=reference.file_name,
        size=len(data),
    )
