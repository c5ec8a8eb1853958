"""HTTP client for the blob server (object storage tier)."""

import asyncio
import logging
from typing import Optional

import httpx

from common.exceptions import BackendError, NotFoundError
from relay.config import BACKEND_MAX_RETRIES, BACKEND_TIMEOUT_SECONDS, BLOBSERVER_URL

logger = logging.getLogger(__name__)


class BlobStoreClient:
    """
    Async client for the blob server's PUT/GET/DELETE /blobs API.

    Connection errors and timeouts are retried with exponential backoff;
    the final failure surfaces as BackendError.
    """

    def __init__(
        self,
        base_url: str = BLOBSERVER_URL,
        timeout: float = BACKEND_TIMEOUT_SECONDS,
        max_retries: int = BACKEND_MAX_RETRIES,
        backoff_base: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize client with lazy connection.

        Args:
            base_url: Blob server root URL
            timeout: Per-request timeout in seconds
            max_retries: Attempts for connection errors and timeouts
            backoff_base: Delay before the first retry, doubled each attempt
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request_with_retry(self, method: str, url: str, **kwargs) -> httpx.Response:
        """
        Send a request, retrying transient network failures.

        Raises:
            BackendError: If every attempt failed
        """
        client = self._ensure_client()
        last_error: Optional[Exception] = None

        for attempt in range(self.max_retries):
            try:
                return await client.request(method, url, **kwargs)
            except (httpx.TimeoutException, httpx.NetworkError) as e:
                last_error = e
                if attempt < self.max_retries - 1:
                    delay = self.backoff_base * (2 ** attempt)
                    logger.warning(
                        f"Blob server unreachable, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{self.max_retries}): {e}"
                    )
                    await asyncio.sleep(delay)
            except httpx.HTTPError as e:
                raise BackendError(f"Blob server request failed: {e}")

        raise BackendError(f"Blob server unavailable after {self.max_retries} attempts: {last_error}")

    async def upload(self, key: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        """
        Upload an object.

        Returns:
            Public URL of the stored object
        """
        response = await self._request_with_retry(
            "PUT",
            f"/blobs/{key}",
            content=data,
            headers={"Content-Type": content_type}
        )
        if response.status_code >= 400:
            raise BackendError(f"Blob upload failed with status {response.status_code}: {response.text}")

        url = response.json().get("url")
        if not url:
            raise BackendError("Blob server did not return a URL")

        logger.info(f"Uploaded blob {key} ({len(data)} bytes)")
        return url

    async def download(self, url: str) -> bytes:
        """
        Fetch an object by URL.

        Raises:
            NotFoundError: If the object does not exist
            BackendError: On any other failure
        """
        response = await self._request_with_retry("GET", url)
        if response.status_code == 404:
            raise NotFoundError(f"Blob not found: {url}")
        if response.status_code >= 400:
            raise BackendError(f"Blob download failed with status {response.status_code}")
        return response.content

    async def delete(self, url: str) -> bool:
        response = await self._request_with_retry("DELETE", url)
        if response.status_code == 404:
            return False
        if response.status_code >= 400:
            raise BackendError(f"Blob delete failed with status {response.status_code}")
        return bool(response.json().get("deleted", True))

    async def ping(self) -> bool:
        try:
            response = await self._ensure_client().get("/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False
