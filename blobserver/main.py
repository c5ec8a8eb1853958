"""Entry point for the Blob server.
Serves the object storage tier: PUT/GET/DELETE /blobs/{key} with files on disk.
"""

import asyncio
import time
import uuid

import uvicorn
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import Response

from blobserver import blob_storage
from blobserver.config import BLOB_PUBLIC_URL, BLOBSERVER_HOST, BLOBSERVER_PORT, MAX_OBJECT_BYTES
from common.logging_config import setup_logging

logger = setup_logging('blobserver')

app = FastAPI(
    title="QRDrop Blob Server",
    description="Object storage backing the relay's large-payload tier",
    version="1.0.0"
)


def _require_valid_key(key: str) -> None:
    if not blob_storage.is_valid_key(key):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Key must be 1-200 characters from [A-Za-z0-9._-]"
        )


def _public_url(request: Request, key: str) -> str:
    base = BLOB_PUBLIC_URL or str(request.base_url).rstrip("/")
    return f"{base}/blobs/{key}"


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    start_time = time.time()

    response = await call_next(request)

    duration = time.time() - start_time
    logger.info(
        f"{request.method} {request.url.path} status={response.status_code} "
        f"duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id
    return response


@app.on_event("startup")
async def startup_event():
    blob_storage.ensure_blobs_directory()
    logger.info(f"Blob server storing objects in {blob_storage.BLOBS_DIR}")


@app.put("/blobs/{key}")
async def put_blob(key: str, request: Request):
    """
    Store an object under a key.

    Parameters:
        - key: Object key
        - body: Raw object bytes
        - Content-Type header: Recorded and served back on GET

    Returns:
        - url: Public URL of the object
        - key: Object key
        - size: Stored size in bytes

    Raises:
        - 400: Invalid key
        - 413: Object too large
    """
    _require_valid_key(key)

    data = await request.body()
    if len(data) > MAX_OBJECT_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Object exceeds {MAX_OBJECT_BYTES} bytes"
        )

    content_type = request.headers.get("content-type")
    size = await asyncio.to_thread(blob_storage.write_blob, key, data, content_type)
    logger.info(f"Stored blob {key} ({size} bytes)")

    return {"url": _public_url(request, key), "key": key, "size": size}


@app.get("/blobs/{key}")
async def get_blob(key: str):
    """
    Fetch an object with its recorded content type.

    Raises:
        - 400: Invalid key
        - 404: Object not found
    """
    _require_valid_key(key)

    try:
        data, content_type = await asyncio.to_thread(blob_storage.read_blob, key)
    except FileNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Blob {key} not found")

    return Response(content=data, media_type=content_type)


@app.delete("/blobs/{key}")
async def delete_blob(key: str):
    """
    Delete an object.

    Returns:
        - deleted: False when nothing was stored under the key
    """
    _require_valid_key(key)

    deleted = await asyncio.to_thread(blob_storage.delete_blob, key)
    if deleted:
        logger.info(f"Deleted blob {key}")
    return {"deleted": deleted}


@app.get("/health")
async def health_check():
    """
    Health check endpoint.
    """
    return {"status": "healthy", "service": "blobserver"}


def main() -> None:
    """
    Start the Blob server with uvicorn.
    """
    uvicorn.run(
        "blobserver.main:app",
        host=BLOBSERVER_HOST,
        port=BLOBSERVER_PORT,
        log_level="info"
    )


if __name__ == "__main__":
    main()
