"""Tests for the in-process chunk cache tier."""

import re

import pytest

from common.exceptions import ExpiredError, NotFoundError, ValidationError
from common.references import CacheRef, InlineRef
from relay.tiers.chunk_cache import ChunkCache, ChunkCacheAdapter

TEN_MINUTES_MS = 10 * 60 * 1000
THIRTY_MINUTES_MS = 30 * 60 * 1000


@pytest.fixture
def cache(clock):
    return ChunkCache(clock=clock)


class TestChunkCache:
    """Test TTL handling and lazy eviction."""

    def test_put_get(self, cache):
        cache_id = cache.put("payload")
        assert cache.get(cache_id) == "payload"
        assert cache.get(cache_id) == "payload"

    def test_id_format(self, cache, clock):
        cache_id = cache.put("payload")
        assert re.fullmatch(r"[0-9a-f]+-[0-9a-f]{8}", cache_id)
        assert cache_id.startswith(f"{clock.now_ms:x}-")

    def test_readable_at_expiry_instant(self, cache, clock):
        cache_id = cache.put("payload")
        clock.advance(TEN_MINUTES_MS)
        assert cache.get(cache_id) == "payload"

    def test_expired_after_ttl_then_evicted(self, cache, clock):
        """Expired entries raise once and are gone for good afterwards."""
        cache_id = cache.put("payload")
        clock.advance(TEN_MINUTES_MS + 1)

        with pytest.raises(ExpiredError):
            cache.get(cache_id)
        with pytest.raises(NotFoundError) as exc_info:
            cache.get(cache_id)
        assert not isinstance(exc_info.value, ExpiredError)

    def test_long_payloads_get_longer_ttl(self, cache, clock):
        short_id = cache.put("x" * 50_000)
        long_id = cache.put("x" * 50_001)

        assert cache.peek(short_id).expires_at_ms == clock.now_ms + TEN_MINUTES_MS
        assert cache.peek(long_id).expires_at_ms == clock.now_ms + THIRTY_MINUTES_MS

        clock.advance(TEN_MINUTES_MS + 1)
        assert cache.get(long_id) == "x" * 50_001

    def test_put_sweeps_expired_entries(self, cache, clock):
        old_id = cache.put("old")
        clock.advance(TEN_MINUTES_MS + 1)
        cache.put("new")

        assert cache.peek(old_id) is None
        assert cache.stats() == {"entries": 1}

    def test_consume_deletes_entry(self, cache):
        cache_id = cache.put("payload")
        assert cache.get(cache_id, consume=True) == "payload"
        with pytest.raises(NotFoundError):
            cache.get(cache_id)

    def test_unknown_id(self, cache):
        with pytest.raises(NotFoundError):
            cache.get("nope")

    def test_clear(self, cache):
        cache.put("a")
        cache.clear()
        assert cache.stats() == {"entries": 0}


class TestChunkCacheAdapter:
    """Test the adapter contract over the cache."""

    @pytest.mark.asyncio
    async def test_store_retrieve(self, cache, clock):
        adapter = ChunkCacheAdapter(cache)
        reference = await adapter.store("payload")

        assert isinstance(reference, CacheRef)
        assert await adapter.retrieve(reference) == "payload"
        assert await adapter.expires_at_ms(reference) == clock.now_ms + TEN_MINUTES_MS

    @pytest.mark.asyncio
    async def test_rejects_foreign_reference(self, cache):
        adapter = ChunkCacheAdapter(cache)
        with pytest.raises(ValidationError):
            await adapter.retrieve(InlineRef(payload="abc"))
