"""Service layer for business logic."""

from relay.services.transfer_service import EncodeResult, TransferService

__all__ = [
    "EncodeResult",
    "TransferService",
]
