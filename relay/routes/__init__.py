"""API routes package."""

from relay.routes.decode_routes import router as decode_router
from relay.routes.encode_routes import router as encode_router
from relay.routes.file_routes import router as file_router
from relay.routes.qr_routes import router as qr_router

__all__ = ["decode_router", "encode_router", "file_router", "qr_router"]
