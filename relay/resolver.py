"""Decode-side resolution of pasted strings and scanned URLs."""

import logging
from typing import Dict, Optional
from urllib.parse import parse_qs, urlparse

from common import codec
from common.crypto import decrypt_envelope
from common.references import (
    BlobRef,
    CacheRef,
    DbRowRef,
    DirectFileRef,
    InlineRef,
    TransportReference,
    parse_reference,
)
from common.types import Envelope, Resolution
from relay.tiers.base import TierAdapter
from relay.tiers.classifier import Tier

logger = logging.getLogger(__name__)

KIND_ENVELOPE = "envelope"
KIND_DIRECT_FILE = "direct-file"

_REFERENCE_TIERS = {
    CacheRef: Tier.CHUNK_CACHE,
    DbRowRef: Tier.DATABASE_ROW,
    BlobRef: Tier.OBJECT_STORAGE,
    InlineRef: Tier.INLINE,
}


def unwrap_url(text: str) -> str:
    """
    Reduce a relay landing URL to the reference it carries.

    ?ref=<wire> yields the wire reference, ?data=<transport> the raw
    transport string and /stream/<id> a cache reference. Anything else is
    returned unchanged.
    """
    if not text.startswith(("http://", "https://")):
        return text

    parsed = urlparse(text)
    params = parse_qs(parsed.query)

    if params.get("ref"):
        return params["ref"][0].strip()
    if params.get("data"):
        # parse_qs turns an unescaped '+' into a space; base64 has no spaces
        return params["data"][0].strip().replace(" ", "+")

    segments = [s for s in parsed.path.split("/") if s]
    if len(segments) == 2 and segments[0] == "stream":
        return f"CACHE:{segments[1]}"

    return text


class Resolver:
    """
    Turns any accepted input into a Resolution.

    Tags are sniffed most specific first (FILE, DB, BLOB and its legacy
    aliases, CACHE); untagged input is treated as the transport string
    itself. Error kinds from adapters and the codec propagate unchanged.
    """

    def __init__(self, adapters: Dict[Tier, TierAdapter]):
        self.adapters = adapters

    def parse(self, text: str) -> TransportReference:
        return parse_reference(unwrap_url(text.strip()))

    async def fetch_transport(self, reference: TransportReference, consume: bool = False) -> str:
        tier = _REFERENCE_TIERS[type(reference)]
        return await self.adapters[tier].retrieve(reference, consume=consume)

    async def resolve(
        self,
        text: str,
        password: Optional[str] = None,
        consume: bool = False
    ) -> Resolution:
        """
        Resolve a pasted string or scanned URL.

        Args:
            text: Wire reference, landing URL or raw transport string
            password: Password for encrypted payloads
            consume: Delete single-use data after reading it

        Returns:
            Resolution of kind "envelope" or "direct-file"

        Raises:
            DecodingError: If the payload is not base64/UTF-8/JSON
            ValidationError: If the decoded payload is not a valid envelope
            NotFoundError: If the reference points at nothing
            ExpiredError: If the referenced data has expired
            BackendError: If a storage backend fails
        """
        reference = self.parse(text)
        logger.info(f"Resolving {reference.kind} reference")

        if isinstance(reference, DirectFileRef):
            return Resolution(
                kind=KIND_DIRECT_FILE,
                source=reference.kind,
                download_url=reference.url,
                file_name=reference.file_name,
            )

        transport = await self.fetch_transport(reference, consume=consume)
        envelope = decode_transport(transport, password)

        return Resolution(
            kind=KIND_ENVELOPE,
            source=reference.kind,
            envelope=envelope,
        )


def decode_transport(transport: str, password: Optional[str] = None) -> Envelope:
    if password:
        return decrypt_envelope(transport, password)
    return codec.decode(transport)
