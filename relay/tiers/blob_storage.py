"""Object storage tier backed by the blob server."""

import logging
from typing import Callable, Optional

from common.constants import BLOB_MAX_BYTES
from common.exceptions import DecodingError, ValidationError
from common.references import BlobRef, TransportReference
from relay.background import BestEffortRunner
from relay.blob_client import BlobStoreClient
from relay.tiers.base import PayloadMeta, TierAdapter
from relay.tiers.classifier import Tier
from relay.utils import current_time_ms, generate_blob_key

logger = logging.getLogger(__name__)

CONTENT_TYPE = "application/octet-stream"


class BlobStorageAdapter(TierAdapter):
    tier = Tier.OBJECT_STORAGE

    def __init__(
        self,
        client: BlobStoreClient,
        runner: BestEffortRunner,
        max_bytes: int = BLOB_MAX_BYTES,
        clock: Callable[[], int] = current_time_ms
    ):
        self.client = client
        self.runner = runner
        self.max_bytes = max_bytes
        self._clock = clock

    async def store(self, payload: str, meta: Optional[PayloadMeta] = None) -> TransportReference:
        data = payload.encode("utf-8")
        if len(data) > self.max_bytes:
            raise ValidationError(
                f"Payload of {len(data)} bytes exceeds the storage limit of {self.max_bytes} bytes"
            )

        url = await self.client.upload(generate_blob_key(self._clock()), data, CONTENT_TYPE)
        return BlobRef(url=url)

    async def retrieve(self, reference: TransportReference, consume: bool = False) -> str:
        if not isinstance(reference, BlobRef):
            raise ValidationError(f"Object storage cannot resolve {reference.kind} references")

        data = await self.client.download(reference.url)

        if consume:
            self.runner.spawn(self.client.delete(reference.url), f"delete blob {reference.url}")

        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodingError(f"Stored object is not text: {e.reason}")
