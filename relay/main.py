"""Entry point for the Relay service."""

import logging
import time
import uuid

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from common.exceptions import (
    BackendError,
    DecodingError,
    DecryptionError,
    EncodingError,
    ExpiredError,
    NotFoundError,
    PayloadTooLargeForQR,
    QRDropError,
    ValidationError,
)
from common.logging_config import setup_logging
from relay.background import BestEffortRunner
from relay.blob_client import BlobStoreClient
from relay.cleanup_task import ExpiredPayloadCleaner
from relay.config import (
    BACKEND_TIMEOUT_SECONDS,
    PAYLOAD_TTL_SECONDS,
    PUBLIC_BASE_URL,
    RELAY_HOST,
    RELAY_PORT,
    TIER_THRESHOLDS,
)
from relay.database import init_database
from relay.qr import QRGenerator
from relay.routes.decode_routes import router as decode_router
from relay.routes.encode_routes import router as encode_router
from relay.routes.file_routes import router as file_router
from relay.routes.qr_routes import router as qr_router
from relay.schemas.common import ErrorResponse, HealthResponse
from relay.services.transfer_service import TransferService
from relay.tiers import (
    BlobStorageAdapter,
    ChunkCache,
    ChunkCacheAdapter,
    DatabaseRowAdapter,
    InlineAdapter,
    Tier,
)

logger = setup_logging('relay')

app = FastAPI(
    title="QRDrop Relay",
    description="Encodes files into QR-shareable references and resolves them back",
    version="1.0.0"
)

cleanup_task = ExpiredPayloadCleaner()


def build_transfer_service(
    runner: BestEffortRunner,
    chunk_cache: ChunkCache,
    blob_client: BlobStoreClient
) -> TransferService:
    """
    Wire the tier adapters into a TransferService using the relay configuration.
    """
    adapters = {
        Tier.INLINE: InlineAdapter(TIER_THRESHOLDS.inline_max_chars),
        Tier.CHUNK_CACHE: ChunkCacheAdapter(chunk_cache),
        Tier.DATABASE_ROW: DatabaseRowAdapter(runner, PAYLOAD_TTL_SECONDS, BACKEND_TIMEOUT_SECONDS),
        Tier.OBJECT_STORAGE: BlobStorageAdapter(blob_client, runner),
    }
    return TransferService(
        adapters=adapters,
        qr_generator=QRGenerator(PUBLIC_BASE_URL),
        blob_client=blob_client,
        thresholds=TIER_THRESHOLDS,
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Middleware to log all HTTP requests and responses.
    """
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    start_time = time.time()

    logger.info(f"Request started: {request.method} {request.url.path} [request_id={request_id}]")

    response = await call_next(request)

    duration = time.time() - start_time

    logger.info(
        f"Request completed: {request.method} {request.url.path} "
        f"status={response.status_code} duration={duration:.3f}s [request_id={request_id}]"
    )

    response.headers["X-Request-ID"] = request_id

    return response


@app.on_event("startup")
async def startup_event():
    """
    Initialize database, tier adapters and background tasks on application startup.
    """
    logger.info("Relay service starting up...")

    init_database()
    logger.info("Database initialized")

    app.state.runner = BestEffortRunner()
    app.state.chunk_cache = ChunkCache()
    app.state.blob_client = BlobStoreClient()
    app.state.transfer_service = build_transfer_service(
        app.state.runner,
        app.state.chunk_cache,
        app.state.blob_client,
    )
    logger.info(
        f"Tier thresholds: inline<={TIER_THRESHOLDS.inline_max_chars} "
        f"chunk_cache<={TIER_THRESHOLDS.chunk_cache_max_chars} "
        f"database_row<={TIER_THRESHOLDS.database_row_max_chars}"
    )

    await cleanup_task.start()
    logger.info("Background cleanup task started")


@app.on_event("shutdown")
async def shutdown_event():
    """
    Cleanup resources on application shutdown.
    """
    logger.info("Relay service shutting down...")

    await cleanup_task.stop()
    logger.info("Cleanup task stopped")

    await app.state.runner.drain()
    app.state.chunk_cache.clear()
    await app.state.blob_client.close()
    logger.info("Background tasks drained, chunk cache cleared")


def _error_response(request: Request, exc: Exception, status_code: int, code: str, level: int = logging.WARNING):
    request_id = getattr(request.state, 'request_id', 'unknown')
    logger.log(
        level,
        f"{type(exc).__name__}: {exc} [request_id={request_id}] path={request.url.path}",
        exc_info=level >= logging.ERROR
    )
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(detail=str(exc), code=code).model_dump()
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR")


@app.exception_handler(EncodingError)
async def encoding_error_handler(request: Request, exc: EncodingError):
    return _error_response(request, exc, status.HTTP_400_BAD_REQUEST, "ENCODING_ERROR")


@app.exception_handler(DecryptionError)
async def decryption_error_handler(request: Request, exc: DecryptionError):
    return _error_response(request, exc, status.HTTP_422_UNPROCESSABLE_ENTITY, "DECRYPTION_FAILED")


@app.exception_handler(DecodingError)
async def decoding_error_handler(request: Request, exc: DecodingError):
    return _error_response(request, exc, status.HTTP_422_UNPROCESSABLE_ENTITY, "DECODING_ERROR")


@app.exception_handler(ExpiredError)
async def expired_error_handler(request: Request, exc: ExpiredError):
    return _error_response(request, exc, status.HTTP_410_GONE, "EXPIRED")


@app.exception_handler(NotFoundError)
async def not_found_error_handler(request: Request, exc: NotFoundError):
    return _error_response(request, exc, status.HTTP_404_NOT_FOUND, "NOT_FOUND")


@app.exception_handler(PayloadTooLargeForQR)
async def payload_too_large_handler(request: Request, exc: PayloadTooLargeForQR):
    return _error_response(
        request, exc, status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, "PAYLOAD_TOO_LARGE_FOR_QR"
    )


@app.exception_handler(BackendError)
async def backend_error_handler(request: Request, exc: BackendError):
    return _error_response(
        request, exc, status.HTTP_503_SERVICE_UNAVAILABLE, "BACKEND_UNAVAILABLE", logging.ERROR
    )


@app.exception_handler(QRDropError)
async def qrdrop_error_handler(request: Request, exc: QRDropError):
    return _error_response(
        request, exc, status.HTTP_500_INTERNAL_SERVER_ERROR, "INTERNAL_ERROR", logging.ERROR
    )


app.include_router(encode_router)
app.include_router(decode_router)
app.include_router(qr_router)
app.include_router(file_router)


@app.get("/")
async def root():
    """
    Root endpoint.
    """
    return {"service": "QRDrop Relay", "status": "running"}


@app.get("/health", response_model=HealthResponse)
async def health():
    """
    Health check endpoint.
    """
    return {"status": "healthy", "service": "relay"}


@app.get("/ready")
async def ready():
    """
    Readiness check endpoint.
    Verifies database and blob server connectivity.
    """
    from relay.database import get_db_connection

    try:
        with get_db_connection() as conn:
            conn.execute("SELECT 1")
        db_status = "ok"
    except Exception as e:
        db_status = f"error: {str(e)}"

    blob_client = getattr(app.state, "blob_client", None)
    if blob_client is not None and await blob_client.ping():
        blobserver_status = "ok"
    else:
        blobserver_status = "unreachable"

    chunk_cache = getattr(app.state, "chunk_cache", None)

    is_ready = db_status == "ok" and blobserver_status == "ok"
    status_code = status.HTTP_200_OK if is_ready else status.HTTP_503_SERVICE_UNAVAILABLE

    return JSONResponse(
        status_code=status_code,
        content={
            "ready": is_ready,
            "database": db_status,
            "blobserver": blobserver_status,
            "chunk_cache": chunk_cache.stats() if chunk_cache else None,
            "cleanup_running": cleanup_task.running
        }
    )


def main():
    """
    Run the Relay server.
    """
    uvicorn.run(
        "relay.main:app",
        host=RELAY_HOST,
        port=RELAY_PORT,
        log_level="info"
    )


if __name__ == "__main__":
    main()
