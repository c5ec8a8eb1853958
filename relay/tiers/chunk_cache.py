"""
In-process chunk cache tier.

Entries live in memory for a short TTL and are addressed by short
time-prefixed ids. The cache is lost on restart, so references from this
tier only work against the relay instance that issued them.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from common.constants import (
    CACHE_DEFAULT_TTL_SECONDS,
    CACHE_LONG_TTL_SECONDS,
    CACHE_LONG_TTL_THRESHOLD_CHARS,
)
from common.exceptions import ExpiredError, NotFoundError, ValidationError
from common.references import CacheRef, TransportReference
from relay.tiers.base import PayloadMeta, TierAdapter
from relay.tiers.classifier import Tier
from relay.utils import current_time_ms, generate_cache_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    payload: str
    created_at_ms: int
    expires_at_ms: int


class ChunkCache:
    """
    Thread-safe TTL map from cache id to transport string.

    Expired entries are swept lazily on every put and get; there is no
    background timer.
    """

    def __init__(
        self,
        clock: Callable[[], int] = current_time_ms,
        default_ttl_seconds: int = CACHE_DEFAULT_TTL_SECONDS,
        long_ttl_seconds: int = CACHE_LONG_TTL_SECONDS,
        long_ttl_threshold_chars: int = CACHE_LONG_TTL_THRESHOLD_CHARS
    ):
        """
        Initialize the cache.

        Args:
            clock: Returns the current time in milliseconds
            default_ttl_seconds: Lifetime of ordinary entries
            long_ttl_seconds: Lifetime of entries longer than long_ttl_threshold_chars
            long_ttl_threshold_chars: Payload length above which the long TTL applies
        """
        self._clock = clock
        self._default_ttl_ms = default_ttl_seconds * 1000
        self._long_ttl_ms = long_ttl_seconds * 1000
        self._long_ttl_threshold = long_ttl_threshold_chars
        self._lock = threading.Lock()
        self._entries: Dict[str, CacheEntry] = {}

    def ttl_ms_for(self, payload: str) -> int:
        if len(payload) > self._long_ttl_threshold:
            return self._long_ttl_ms
        return self._default_ttl_ms

    def put(self, payload: str) -> str:
        """
        Store a payload under a fresh id.

        Returns:
            The generated cache id
        """
        now = self._clock()
        entry = CacheEntry(
            payload=payload,
            created_at_ms=now,
            expires_at_ms=now + self.ttl_ms_for(payload),
        )

        with self._lock:
            self._sweep(now)
            cache_id = generate_cache_id(now)
            while cache_id in self._entries:
                cache_id = generate_cache_id(now)
            self._entries[cache_id] = entry

        logger.debug(f"Cached payload {cache_id} ({len(payload)} chars, expires {entry.expires_at_ms})")
        return cache_id

    def get(self, cache_id: str, consume: bool = False) -> str:
        """
        Fetch a payload by id.

        An entry is still readable at exactly its expiry instant.

        Raises:
            NotFoundError: If no entry exists for the id
            ExpiredError: If the entry exists but has expired (it is evicted)
        """
        now = self._clock()

        with self._lock:
            entry = self._entries.get(cache_id)
            if entry is not None and entry.expires_at_ms < now:
                del self._entries[cache_id]
                self._sweep(now)
                raise ExpiredError(f"Cached data {cache_id} has expired")

            self._sweep(now)

            if entry is None:
                raise NotFoundError(f"Cached data {cache_id} not found")

            if consume:
                del self._entries[cache_id]

        return entry.payload

    def peek(self, cache_id: str) -> Optional[CacheEntry]:
        with self._lock:
            return self._entries.get(cache_id)

    def _sweep(self, now: int) -> None:
        expired = [key for key, entry in self._entries.items() if entry.expires_at_ms < now]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Swept {len(expired)} expired cache entries")

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {"entries": len(self._entries)}

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class ChunkCacheAdapter(TierAdapter):
    tier = Tier.CHUNK_CACHE

    def __init__(self, cache: ChunkCache):
        self.cache = cache

    async def store(self, payload: str, meta: Optional[PayloadMeta] = None) -> TransportReference:
        return CacheRef(cache_id=self.cache.put(payload))

    async def retrieve(self, reference: TransportReference, consume: bool = False) -> str:
        if not isinstance(reference, CacheRef):
            raise ValidationError(f"Chunk cache cannot resolve {reference.kind} references")
        return self.cache.get(reference.cache_id, consume=consume)

    async def expires_at_ms(self, reference: TransportReference) -> Optional[int]:
        entry = self.cache.peek(reference.cache_id)
        return entry.expires_at_ms if entry else None
