"""Tests for Relay API endpoints."""

import base64

import httpx
import pytest
from fastapi.testclient import TestClient

from relay.blob_client import BlobStoreClient
from relay.dependencies import get_transfer_service
from relay.main import app
from relay.tiers import Tier


@pytest.fixture
def client(transfer_service):
    """Create FastAPI test client backed by the test TransferService."""
    app.dependency_overrides[get_transfer_service] = lambda: transfer_service
    yield TestClient(app)
    app.dependency_overrides.clear()


def text_file(name="hello.txt", content="Hi"):
    return {
        "name": name,
        "content": content,
        "size": len(content.encode("utf-8")),
        "type": "text/plain",
        "lastModified": 1,
    }


def encode(client, files, **extra):
    response = client.post("/encode", json={"files": files, **extra})
    assert response.status_code == 200, response.text
    return response.json()


def test_root_endpoint(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "running"
    assert "X-Request-ID" in response.headers


def test_health_endpoint(client):
    response = client.get("/health")
    assert response.json() == {"status": "healthy", "service": "relay"}


def test_ready_reports_blobserver(client, blob_client, monkeypatch):
    monkeypatch.setattr(app.state, "blob_client", blob_client, raising=False)

    response = client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["ready"] is True
    assert data["database"] == "ok"


class TestEncodeDecode:
    """Test the encode and decode endpoints."""

    def test_encode_then_decode(self, client):
        data = encode(client, [text_file()])
        assert data["tier"] == "inline"
        assert data["durable"] is True
        assert data["share_url"].startswith("http://relay.test/decode?data=")

        response = client.post("/decode", json={"input": data["reference"]})
        assert response.status_code == 200
        decoded = response.json()
        assert decoded["kind"] == "envelope"
        assert decoded["total_files"] == 1
        assert decoded["files"][0]["content"] == "Hi"
        assert decoded["files"][0]["lastModified"] == 1

    def test_encode_text(self, client):
        response = client.post("/encode/text", json={"text": "meet me at noon"})
        assert response.status_code == 200

        decoded = client.post("/decode", json={"input": response.json()["reference"]}).json()
        assert decoded["files"][0]["name"] == "message.txt"

    def test_chunk_cache_reference(self, client):
        data = encode(client, [text_file("big.txt", "x" * 20_000)])
        assert data["tier"] == "chunk_cache"
        assert data["durable"] is False
        assert data["expires_at"] is not None

        cache_id = data["reference"].split(":", 1)[1]
        response = client.get(f"/stream/{cache_id}")
        assert response.status_code == 200
        assert response.json()["files"][0]["name"] == "big.txt"

    def test_landing_url_with_data(self, client):
        data = encode(client, [text_file()])
        response = client.get("/decode", params={"data": data["reference"]})
        assert response.status_code == 200
        assert response.json()["total_files"] == 1

    def test_landing_url_requires_one_parameter(self, client):
        response = client.get("/decode")
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_empty_file_list_rejected(self, client):
        response = client.post("/encode", json={"files": []})
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestErrorMapping:
    """Each error kind maps to its own status and code."""

    def test_malformed_input(self, client):
        response = client.post("/decode", json={"input": "not-valid-base64!!"})
        assert response.status_code == 422
        assert response.json()["code"] == "DECODING_ERROR"

    def test_invalid_envelope(self, client):
        transport = base64.b64encode(b'{"hello": "world"}').decode()
        response = client.post("/decode", json={"input": transport})
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_unknown_cache_id(self, client):
        response = client.post("/decode", json={"input": "CACHE:18f-00000000"})
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_expired_cache_id(self, client, clock):
        data = encode(client, [text_file("big.txt", "x" * 20_000)])
        clock.advance(10 * 60 * 1000 + 1)

        response = client.post("/decode", json={"input": data["reference"]})
        assert response.status_code == 410
        assert response.json()["code"] == "EXPIRED"

    def test_wrong_password(self, client):
        data = encode(client, [text_file()], password="hunter22")
        response = client.post("/decode", json={"input": data["reference"], "password": "nope-nope"})
        assert response.status_code == 422
        assert response.json()["code"] == "DECRYPTION_FAILED"

    def test_backend_unavailable(self, client, transfer_service):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        transfer_service.adapters[Tier.OBJECT_STORAGE].client = BlobStoreClient(
            base_url="http://blobs.test",
            max_retries=1,
            backoff_base=0,
            transport=httpx.MockTransport(refuse),
        )

        response = client.post("/encode", json={"files": [text_file("huge.txt", "x" * 100_000)]})
        assert response.status_code == 503
        assert response.json()["code"] == "BACKEND_UNAVAILABLE"

    def test_qr_payload_too_large(self, client):
        response = client.post("/qr", json={"reference": "BLOB:http://b/" + "a" * 3000})
        assert response.status_code == 413
        assert response.json()["code"] == "PAYLOAD_TOO_LARGE_FOR_QR"


class TestDownload:
    """Test single-file downloads."""

    def test_download_text_file(self, client):
        data = encode(client, [text_file("notes é.txt", "hello")])
        response = client.post("/download", json={"input": data["reference"]})

        assert response.status_code == 200
        assert response.content == b"hello"
        assert response.headers["content-type"].startswith("text/plain")
        assert "filename*=UTF-8''notes%20%C3%A9.txt" in response.headers["content-disposition"]

    def test_download_binary_file(self, client):
        record = {
            "name": "pixel.png",
            "content": "data:image/png;base64,iVBORw==",
            "size": 4,
            "type": "image/png",
            "lastModified": 1,
            "isBinary": True,
        }
        data = encode(client, [record])
        response = client.post("/download", json={"input": data["reference"]})

        assert response.content == b"\x89PNG"
        assert response.headers["content-type"] == "image/png"

    def test_index_out_of_range(self, client):
        data = encode(client, [text_file()])
        response = client.post("/download", json={"input": data["reference"], "index": 3})
        assert response.status_code == 400

    def test_direct_file_redirects(self, client):
        response = client.post(
            "/download",
            json={"input": "FILE:http://b/blobs/x:archive.zip"},
            follow_redirects=False,
        )
        assert response.status_code == 307
        assert response.headers["location"] == "http://b/blobs/x"


class TestQR:
    """Test QR endpoints."""

    def test_qr_for_inline_reference(self, client):
        data = encode(client, [text_file()])
        response = client.post("/qr", json={"reference": data["reference"], "width": 300})

        assert response.status_code == 200
        qr = response.json()
        assert qr["qr_code"].startswith("data:image/png;base64,")
        assert qr["mode"] == "inline"
        assert qr["error_correction"] == "M"
        assert qr["url"] == data["share_url"]

    def test_qr_image(self, client):
        response = client.get("/qr", params={"data": "CACHE:18f-abcd1234"})
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content.startswith(b"\x89PNG")


def test_direct_file_upload(client, fake_blob_server):
    response = client.post("/files/direct", files={"file": ("report.pdf", b"%PDF-1.4", "application/pdf")})

    assert response.status_code == 201
    data = response.json()
    assert data["file_name"] == "report.pdf"
    assert data["size"] == 8
    assert data["reference"] == f"FILE:{data['url']}:report.pdf"
    assert len(fake_blob_server.objects) == 1
