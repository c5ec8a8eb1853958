"""Shared pytest fixtures for all tests."""

import tempfile
from pathlib import Path
from typing import Generator

import httpx
import pytest

from cli.config import Config
from common.constants import TierThresholds
from common.types import FileRecord
from relay.background import BestEffortRunner
from relay.blob_client import BlobStoreClient
from relay.database import init_database
from relay.qr import QRGenerator
from relay.services.transfer_service import TransferService
from relay.tiers import (
    BlobStorageAdapter,
    ChunkCache,
    ChunkCacheAdapter,
    DatabaseRowAdapter,
    InlineAdapter,
    Tier,
)


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .qrdrop directory
    """
    config_dir = tmp_path / '.qrdrop'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance with retries disabled.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        Config instance with temp config file
    """
    config = Config(temp_config_dir / 'config.json')
    config.data['max_retries'] = 0
    return config


@pytest.fixture
def sample_file(tmp_path):
    """
    Create a sample file for testing encodes.

    Returns:
        Path to sample text file
    """
    file_path = tmp_path / 'test.txt'
    file_path.write_text('Sample content for testing')
    return file_path


@pytest.fixture
def multiple_sample_files(tmp_path):
    """
    Create multiple sample files for testing multi-file encodes.

    Returns:
        List of Paths to sample files
    """
    files = []
    for i in range(3):
        file_path = tmp_path / f'test{i}.txt'
        file_path.write_text(f'Sample content {i}')
        files.append(file_path)
    return files


@pytest.fixture
def test_db(monkeypatch) -> Generator[Path, None, None]:
    """
    Create a temporary relay database for each test.
    """
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        monkeypatch.setattr("relay.database.DATABASE_PATH", str(db_path))
        monkeypatch.setattr("relay.config.DATABASE_PATH", str(db_path))
        init_database()
        yield db_path


@pytest.fixture
def text_record():
    return FileRecord(
        name='hello.txt',
        content='Hello, world!',
        size=13,
        mime_type='text/plain',
        last_modified_ms=1_700_000_000_000,
    )


@pytest.fixture
def binary_record():
    # b'\x89PNG' as a data-URL
    return FileRecord(
        name='pixel.png',
        content='data:image/png;base64,iVBORw==',
        size=4,
        mime_type='image/png',
        last_modified_ms=1_700_000_000_000,
        is_binary=True,
    )


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, now_ms: int = 1_700_000_000_000):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture
def clock():
    return FakeClock()


class FakeBlobServer:
    """
    In-memory stand-in for the blob server's HTTP API, used as an
    httpx.MockTransport handler.
    """

    def __init__(self, base_url: str = "http://blobs.test"):
        self.base_url = base_url
        self.objects = {}
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path))

        if request.url.path == "/health":
            return httpx.Response(200, json={"status": "healthy", "service": "blobserver"})

        key = request.url.path.rsplit("/", 1)[-1]

        if request.method == "PUT":
            self.objects[key] = request.content
            return httpx.Response(200, json={
                "url": f"{self.base_url}/blobs/{key}",
                "key": key,
                "size": len(request.content),
            })
        if request.method == "GET":
            if key not in self.objects:
                return httpx.Response(404, json={"detail": f"Blob {key} not found"})
            return httpx.Response(200, content=self.objects[key])
        if request.method == "DELETE":
            return httpx.Response(200, json={"deleted": self.objects.pop(key, None) is not None})

        return httpx.Response(405)


@pytest.fixture
def fake_blob_server():
    return FakeBlobServer()


@pytest.fixture
def blob_client(fake_blob_server):
    """BlobStoreClient wired to the in-memory blob server, without retry delays."""
    return BlobStoreClient(
        base_url=fake_blob_server.base_url,
        max_retries=2,
        backoff_base=0,
        transport=httpx.MockTransport(fake_blob_server),
    )


SMALL_THRESHOLDS = TierThresholds(
    inline_max_chars=2000,
    chunk_cache_max_chars=60_000,
    database_row_max_chars=120_000,
)


@pytest.fixture
def transfer_service(test_db, clock, blob_client):
    """
    TransferService over a temporary database, an in-memory blob server and
    a hand-driven clock. The chunk cache ceiling is lowered so every tier is
    reachable with small payloads.
    """
    runner = BestEffortRunner()
    adapters = {
        Tier.INLINE: InlineAdapter(SMALL_THRESHOLDS.inline_max_chars),
        Tier.CHUNK_CACHE: ChunkCacheAdapter(ChunkCache(clock=clock)),
        Tier.DATABASE_ROW: DatabaseRowAdapter(runner, ttl_seconds=86400, timeout_seconds=5, clock=clock),
        Tier.OBJECT_STORAGE: BlobStorageAdapter(blob_client, runner, clock=clock),
    }
    return TransferService(
        adapters=adapters,
        qr_generator=QRGenerator("http://relay.test"),
        blob_client=blob_client,
        thresholds=SMALL_THRESHOLDS,
    )
