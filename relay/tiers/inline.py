"""Inline tier: the transport string is its own reference."""

from typing import Optional

from common.exceptions import ValidationError
from common.references import InlineRef, TransportReference
from relay.tiers.base import PayloadMeta, TierAdapter
from relay.tiers.classifier import Tier


class InlineAdapter(TierAdapter):
    tier = Tier.INLINE

    def __init__(self, max_chars: int):
        self.max_chars = max_chars

    async def store(self, payload: str, meta: Optional[PayloadMeta] = None) -> TransportReference:
        if len(payload) > self.max_chars:
            raise ValidationError(
                f"Payload of {len(payload)} characters exceeds the inline limit of {self.max_chars}"
            )
        return InlineRef(payload=payload)

    async def retrieve(self, reference: TransportReference, consume: bool = False) -> str:
        if not isinstance(reference, InlineRef):
            raise ValidationError(f"Inline tier cannot resolve {reference.kind} references")
        return reference.payload
