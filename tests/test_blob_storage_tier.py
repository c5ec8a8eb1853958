"""Tests for the blob server client and the object storage tier."""

import httpx
import pytest

from common.exceptions import BackendError, DecodingError, NotFoundError, ValidationError
from common.references import BlobRef
from relay.background import BestEffortRunner
from relay.blob_client import BlobStoreClient
from relay.tiers.blob_storage import BlobStorageAdapter


@pytest.fixture
def runner():
    return BestEffortRunner()


class TestBlobStoreClient:
    """Test HTTP calls and retry behaviour."""

    @pytest.mark.asyncio
    async def test_upload_download_delete(self, blob_client, fake_blob_server):
        url = await blob_client.upload("k1.bin", b"hello", "text/plain")
        assert url == "http://blobs.test/blobs/k1.bin"

        assert await blob_client.download(url) == b"hello"
        assert await blob_client.delete(url) is True
        assert await blob_client.delete(url) is False

        methods = [method for method, _ in fake_blob_server.requests]
        assert methods == ["PUT", "GET", "DELETE", "DELETE"]

    @pytest.mark.asyncio
    async def test_download_missing_is_not_found(self, blob_client):
        with pytest.raises(NotFoundError):
            await blob_client.download("http://blobs.test/blobs/missing")

    @pytest.mark.asyncio
    async def test_network_errors_retried_then_backend_error(self):
        attempts = []

        def handler(request):
            attempts.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        client = BlobStoreClient(
            base_url="http://blobs.test",
            max_retries=3,
            backoff_base=0,
            transport=httpx.MockTransport(handler),
        )

        with pytest.raises(BackendError):
            await client.upload("k.bin", b"data")
        assert len(attempts) == 3

    @pytest.mark.asyncio
    async def test_transient_failure_recovers(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ReadTimeout("slow", request=request)
            return httpx.Response(200, content=b"ok")

        client = BlobStoreClient(
            base_url="http://blobs.test",
            max_retries=3,
            backoff_base=0,
            transport=httpx.MockTransport(handler),
        )

        assert await client.download("http://blobs.test/blobs/k") == b"ok"
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_server_error_is_backend_error(self):
        client = BlobStoreClient(
            base_url="http://blobs.test",
            transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom")),
        )
        with pytest.raises(BackendError):
            await client.upload("k.bin", b"data")

    @pytest.mark.asyncio
    async def test_ping(self, blob_client):
        assert await blob_client.ping() is True


class TestBlobStorageAdapter:
    """Test the object storage tier adapter."""

    @pytest.mark.asyncio
    async def test_store_retrieve(self, blob_client, runner, clock):
        adapter = BlobStorageAdapter(blob_client, runner, clock=clock)
        reference = await adapter.store("transport-string")

        assert isinstance(reference, BlobRef)
        assert reference.url.startswith(f"http://blobs.test/blobs/encoded-{clock.now_ms}-")
        assert await adapter.retrieve(reference) == "transport-string"
        assert await adapter.expires_at_ms(reference) is None

    @pytest.mark.asyncio
    async def test_consume_deletes_object(self, blob_client, fake_blob_server, runner):
        adapter = BlobStorageAdapter(blob_client, runner)
        reference = await adapter.store("transport-string")

        assert await adapter.retrieve(reference, consume=True) == "transport-string"
        await runner.drain()

        assert fake_blob_server.objects == {}
        with pytest.raises(NotFoundError):
            await adapter.retrieve(reference)

    @pytest.mark.asyncio
    async def test_oversized_payload_rejected(self, blob_client, fake_blob_server, runner):
        adapter = BlobStorageAdapter(blob_client, runner, max_bytes=4)
        with pytest.raises(ValidationError):
            await adapter.store("hello")
        assert fake_blob_server.requests == []

    @pytest.mark.asyncio
    async def test_non_text_object_is_decoding_error(self, blob_client, fake_blob_server, runner):
        fake_blob_server.objects["raw.bin"] = b"\xff\xfe"
        adapter = BlobStorageAdapter(blob_client, runner)

        with pytest.raises(DecodingError):
            await adapter.retrieve(BlobRef(url="http://blobs.test/blobs/raw.bin"))
