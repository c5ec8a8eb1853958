"""Tests for the blob server API and its disk storage."""

import pytest
from fastapi.testclient import TestClient

from blobserver import blob_storage
from blobserver.main import app


@pytest.fixture
def blobs_dir(tmp_path, monkeypatch):
    path = tmp_path / "blobs"
    monkeypatch.setattr(blob_storage, "BLOBS_DIR", path)
    return path


@pytest.fixture
def client(blobs_dir):
    return TestClient(app)


class TestBlobStorage:
    """Test disk operations."""

    def test_write_read_delete(self, blobs_dir):
        assert blob_storage.write_blob("k1", b"data", "text/plain") == 4
        assert blob_storage.read_blob("k1") == (b"data", "text/plain")

        assert blob_storage.delete_blob("k1") is True
        assert blob_storage.delete_blob("k1") is False
        with pytest.raises(FileNotFoundError):
            blob_storage.read_blob("k1")

    def test_default_content_type(self, blobs_dir):
        blob_storage.write_blob("k1", b"data")
        assert blob_storage.read_blob("k1")[1] == "application/octet-stream"

    def test_read_missing(self, blobs_dir):
        with pytest.raises(FileNotFoundError):
            blob_storage.read_blob("missing")

    @pytest.mark.parametrize("key,valid", [
        ("encoded-1-abc.bin", True),
        ("a", True),
        ("..", False),
        ("a/b", False),
        ("", False),
        ("x" * 201, False),
    ])
    def test_key_validation(self, key, valid):
        assert blob_storage.is_valid_key(key) is valid


class TestBlobEndpoints:
    """Test the HTTP API."""

    def test_put_get_delete(self, client):
        response = client.put("/blobs/k1.bin", content=b"hello", headers={"Content-Type": "text/plain"})
        assert response.status_code == 200
        data = response.json()
        assert data["key"] == "k1.bin"
        assert data["size"] == 5
        assert data["url"].endswith("/blobs/k1.bin")

        response = client.get("/blobs/k1.bin")
        assert response.status_code == 200
        assert response.content == b"hello"
        assert response.headers["content-type"].startswith("text/plain")

        assert client.delete("/blobs/k1.bin").json() == {"deleted": True}
        assert client.get("/blobs/k1.bin").status_code == 404

    def test_invalid_key(self, client):
        response = client.put("/blobs/bad key!", content=b"x")
        assert response.status_code == 400

    def test_too_large(self, client, monkeypatch):
        monkeypatch.setattr("blobserver.main.MAX_OBJECT_BYTES", 4)
        response = client.put("/blobs/k1", content=b"hello")
        assert response.status_code == 413

    def test_health(self, client):
        assert client.get("/health").json() == {"status": "healthy", "service": "blobserver"}
