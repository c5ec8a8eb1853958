"""Database row tier backed by the encoded_payloads table."""

import asyncio
import logging
import sqlite3
from typing import Callable, Optional

from common.exceptions import BackendError, ExpiredError, NotFoundError, ValidationError
from common.references import DbRowRef, TransportReference
from relay.background import BestEffortRunner
from relay.repositories.payload_repository import PayloadRepository
from relay.tiers.base import PayloadMeta, TierAdapter
from relay.tiers.classifier import Tier
from relay.utils import current_time_ms, generate_uuid

logger = logging.getLogger(__name__)


class DatabaseRowAdapter(TierAdapter):
    """
    Stores transport strings as rows with a fixed TTL.

    Reads bump an access counter in the background; a failed bump never
    affects the read.
    """

    tier = Tier.DATABASE_ROW

    def __init__(
        self,
        runner: BestEffortRunner,
        ttl_seconds: int,
        timeout_seconds: float,
        clock: Callable[[], int] = current_time_ms
    ):
        self.runner = runner
        self.ttl_ms = ttl_seconds * 1000
        self.timeout_seconds = timeout_seconds
        self._clock = clock

    async def _call(self, func, *args):
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(func, *args),
                timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            raise BackendError(f"Database operation timed out after {self.timeout_seconds}s")
        except sqlite3.Error as e:
            raise BackendError(f"Database error: {e}")

    async def store(self, payload: str, meta: Optional[PayloadMeta] = None) -> TransportReference:
        meta = meta or PayloadMeta()
        payload_id = generate_uuid()
        now = self._clock()

        stored = await self._call(
            PayloadRepository.create_payload,
            payload_id,
            payload,
            meta.file_count,
            meta.total_size,
            now,
            now + self.ttl_ms
        )

        logger.info(f"Stored payload {stored.id} ({len(payload)} chars, {meta.file_count} files)")
        return DbRowRef(row_id=stored.id)

    async def retrieve(self, reference: TransportReference, consume: bool = False) -> str:
        if not isinstance(reference, DbRowRef):
            raise ValidationError(f"Database tier cannot resolve {reference.kind} references")

        stored = await self._call(PayloadRepository.get_by_id, reference.row_id)
        if stored is None:
            raise NotFoundError(f"Data {reference.row_id} not found")
        if stored.expires_at < self._clock():
            raise ExpiredError(f"Data {reference.row_id} has expired")

        if consume:
            self.runner.spawn(
                asyncio.to_thread(PayloadRepository.delete_payload, stored.id),
                f"delete payload {stored.id}"
            )
        else:
            self.runner.spawn(
                asyncio.to_thread(PayloadRepository.increment_access_count, stored.id),
                f"access count {stored.id}"
            )

        return stored.payload

    async def expires_at_ms(self, reference: TransportReference) -> Optional[int]:
        stored = await self._call(PayloadRepository.get_by_id, reference.row_id)
        return stored.expires_at if stored else None
