"""Repository layer for data access."""

from relay.repositories.payload_repository import PayloadRepository, StoredPayload

__all__ = [
    "PayloadRepository",
    "StoredPayload",
]
