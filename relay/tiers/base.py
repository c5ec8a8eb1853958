"""Common contract for transport tier adapters."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from common.references import TransportReference
from relay.tiers.classifier import Tier


@dataclass(frozen=True)
class PayloadMeta:
    """Envelope totals stored alongside a payload."""
    file_count: int = 0
    total_size: int = 0


class TierAdapter(ABC):
    """
    Stores transport strings in one tier and fetches them back.

    Implementations raise NotFoundError, ExpiredError or BackendError and
    never let backend-specific exceptions escape.
    """

    tier: Tier

    @abstractmethod
    async def store(self, payload: str, meta: Optional[PayloadMeta] = None) -> TransportReference:
        """Persist a transport string and return a reference to it."""

    @abstractmethod
    async def retrieve(self, reference: TransportReference, consume: bool = False) -> str:
        """Return the transport string behind a reference."""

    async def expires_at_ms(self, reference: TransportReference) -> Optional[int]:
        """Expiry instant of a stored reference, or None when it never expires."""
        return None
