"""Transport tiers: classification and storage adapters."""

from relay.tiers.base import PayloadMeta, TierAdapter
from relay.tiers.blob_storage import BlobStorageAdapter
from relay.tiers.chunk_cache import ChunkCache, ChunkCacheAdapter
from relay.tiers.classifier import Tier, classify, promote_for_durability
from relay.tiers.database_row import DatabaseRowAdapter
from relay.tiers.inline import InlineAdapter

__all__ = [
    "PayloadMeta",
    "TierAdapter",
    "BlobStorageAdapter",
    "ChunkCache",
    "ChunkCacheAdapter",
    "Tier",
    "classify",
    "promote_for_durability",
    "DatabaseRowAdapter",
    "InlineAdapter",
]
