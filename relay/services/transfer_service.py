"""Transfer service: encode files into references and resolve them back."""

import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from common import codec
from common.constants import BLOB_MAX_BYTES, DEFAULT_THRESHOLDS, TierThresholds
from common.crypto import encrypt_envelope
from common.exceptions import DecodingError, ValidationError
from common.references import (
    DirectFileRef,
    InlineRef,
    TransportReference,
    format_reference,
)
from common.types import Envelope, FileRecord, Resolution, parse_data_url
from relay.blob_client import BlobStoreClient
from relay.qr import QRGenerator, QROptions, QRSurface
from relay.resolver import Resolver
from relay.tiers.base import PayloadMeta, TierAdapter
from relay.tiers.classifier import Tier, classify, promote_for_durability
from relay.utils import current_time_ms, generate_direct_file_key

logger = logging.getLogger(__name__)

MAX_FILENAME_LENGTH = 255
_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def _meta_for_transport(transport: str) -> PayloadMeta:
    """Describe a raw transport string; encrypted payloads stay opaque."""
    try:
        envelope = codec.decode(transport)
    except (DecodingError, ValidationError):
        return PayloadMeta()
    return PayloadMeta(file_count=envelope.total_file_count, total_size=envelope.total_byte_size)


@dataclass(frozen=True)
class EncodeResult:
    reference: TransportReference
    wire: str
    tier: Tier
    durable: bool
    transport_length: int
    expires_at_ms: Optional[int] = None


class TransferService:
    """
    Orchestrates the codec, the tier classifier, the adapters and the QR
    generator.
    """

    def __init__(
        self,
        adapters: Dict[Tier, TierAdapter],
        qr_generator: QRGenerator,
        blob_client: BlobStoreClient,
        thresholds: TierThresholds = DEFAULT_THRESHOLDS
    ):
        """
        Initialize the service.

        Args:
            adapters: One adapter per Tier
            qr_generator: Renders QR surfaces for references
            blob_client: Used for direct single-file uploads
            thresholds: Tier boundaries used by the classifier
        """
        missing = [tier for tier in Tier if tier not in adapters]
        if missing:
            raise ValueError(f"Missing adapters for tiers: {', '.join(t.value for t in missing)}")

        self.adapters = adapters
        self.qr_generator = qr_generator
        self.blob_client = blob_client
        self.thresholds = thresholds
        self.resolver = Resolver(adapters)

    async def _store(self, transport: str, meta: PayloadMeta, require_durable: bool = False) -> EncodeResult:
        tier = classify(transport, self.thresholds)
        if tier is Tier.INLINE and not self.qr_generator.fits(InlineRef(payload=transport)):
            # percent-encoding can push a short payload past QR capacity
            tier = Tier.CHUNK_CACHE
        if require_durable:
            tier = promote_for_durability(tier)

        adapter = self.adapters[tier]
        reference = await adapter.store(transport, meta)
        expires_at = await adapter.expires_at_ms(reference) if tier.requires_storage else None

        logger.info(
            f"Stored {len(transport)} chars in tier {tier.value} "
            f"({meta.file_count} files, {meta.total_size} bytes)"
        )

        return EncodeResult(
            reference=reference,
            wire=format_reference(reference),
            tier=tier,
            durable=tier.durable,
            transport_length=len(transport),
            expires_at_ms=expires_at,
        )

    async def encode_files(
        self,
        files: List[FileRecord],
        require_durable: bool = False,
        password: Optional[str] = None
    ) -> EncodeResult:
        """
        Encode files and store the transport string in the tier its size calls for.

        Args:
            files: Non-empty list of file records
            require_durable: Never use the non-durable chunk cache
            password: Encrypt the envelope with this password

        Returns:
            EncodeResult describing the stored reference

        Raises:
            ValidationError: If the input is invalid
            EncodingError: If the envelope cannot be serialized
            BackendError: If the selected backend fails
        """
        if password:
            if not files:
                raise ValidationError("At least one file is required")
            for record in files:
                record.validate()
            envelope = Envelope.build(files, current_time_ms())
            transport = encrypt_envelope(envelope, password)
        else:
            transport = codec.encode_files(files)

        meta = PayloadMeta(file_count=len(files), total_size=sum(f.size for f in files))
        return await self._store(transport, meta, require_durable=require_durable)

    async def encode_text(
        self,
        text: str,
        name: str = "message.txt",
        require_durable: bool = False,
        password: Optional[str] = None
    ) -> EncodeResult:
        """
        Encode pasted text as a single text/plain file.
        """
        if not isinstance(text, str) or not text:
            raise ValidationError("Text must not be empty")
        try:
            size = len(text.encode("utf-8"))
        except UnicodeEncodeError as e:
            raise ValidationError(f"Text contains invalid Unicode: {e.reason}")

        record = FileRecord(
            name=name,
            content=text,
            size=size,
            mime_type="text/plain",
            last_modified_ms=current_time_ms(),
        )
        return await self.encode_files([record], require_durable=require_durable, password=password)

    async def decode_input(
        self,
        text: str,
        password: Optional[str] = None,
        consume: bool = False
    ) -> Resolution:
        """
        Resolve a pasted string or scanned URL back into files.
        """
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("Nothing to decode")
        return await self.resolver.resolve(text, password=password, consume=consume)

    async def generate_shareable_qr(
        self,
        wire_or_transport: str,
        options: Optional[QROptions] = None
    ) -> QRSurface:
        """
        Render a QR code for a wire reference or a raw transport string.

        Raw transport strings above the inline ceiling, or whose landing URL
        would not fit in a QR symbol, are stored first and the QR code points
        at the stored reference.

        Raises:
            ValidationError: If the input is empty
            DecodingError: If an untagged input is not base64
            PayloadTooLargeForQR: If the embedded text does not fit
        """
        if not isinstance(wire_or_transport, str) or not wire_or_transport.strip():
            raise ValidationError("Nothing to render")

        reference = self.resolver.parse(wire_or_transport)

        if isinstance(reference, InlineRef):
            transport = codec.strip_whitespace(reference.payload)
            codec.decode_base64(transport)
            reference = InlineRef(payload=transport)
            if (len(transport) > self.thresholds.inline_max_chars
                    or not self.qr_generator.fits(reference)):
                result = await self._store(transport, _meta_for_transport(transport))
                reference = result.reference

        return self.qr_generator.generate(reference, options)

    async def upload_direct_file(
        self,
        file_name: str,
        data: bytes,
        content_type: Optional[str] = None
    ) -> DirectFileRef:
        """
        Upload a single archive straight to object storage, bypassing the envelope.

        Returns:
            DirectFileRef pointing at the uploaded file

        Raises:
            ValidationError: If the name is missing or the file is empty or too large
            BackendError: If the upload fails
        """
        if not file_name or len(file_name) > MAX_FILENAME_LENGTH:
            raise ValidationError(f"File name must be 1-{MAX_FILENAME_LENGTH} characters")
        if not data:
            raise ValidationError("File is empty")
        if len(data) > BLOB_MAX_BYTES:
            raise ValidationError(
                f"File of {len(data)} bytes exceeds the storage limit of {BLOB_MAX_BYTES} bytes"
            )

        safe_name = _UNSAFE_NAME_CHARS.sub("_", file_name).strip("._") or "download"
        key = generate_direct_file_key(current_time_ms(), safe_name)
        url = await self.blob_client.upload(key, data, content_type or "application/octet-stream")

        logger.info(f"Uploaded direct file {safe_name} ({len(data)} bytes)")
        return DirectFileRef(url=url, file_name=safe_name)

    @staticmethod
    def extract_file(record: FileRecord) -> Tuple[bytes, str]:
        """
        Materialise a decoded record as downloadable bytes.

        Returns:
            Tuple of (content_bytes, mime_type)
        """
        if record.is_binary:
            mime_type, data = parse_data_url(record.content)
            return data, record.mime_type or mime_type
        return record.content.encode("utf-8"), record.mime_type or "text/plain"
