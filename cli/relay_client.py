"""HTTP client for communicating with the Relay service."""

import base64
import time
import uuid
from pathlib import Path
from typing import Optional

import httpx

from cli.config import Config
from cli.constants import MAX_FILE_SIZE, MAX_TOTAL_SIZE
from cli.utils import (
    format_file_size,
    read_file_record,
    sanitize_file_name,
    unique_path,
    write_file_record,
)
from common.logging_config import get_logger
from common.types import FileRecord

logger = get_logger(__name__)

ERROR_MESSAGES = {
    'EXPIRED': 'This data has expired. Ask the sender to regenerate the QR code.',
    'NOT_FOUND': 'Nothing was found for this reference. Ask the sender to regenerate the QR code.',
    'DECODING_ERROR': 'The input could not be decoded. Check the pasted text.',
    'VALIDATION_ERROR': 'The input is not valid. Check the pasted text.',
    'DECRYPTION_FAILED': 'Wrong password or corrupted data.',
    'ENCODING_ERROR': 'The files could not be encoded.',
    'PAYLOAD_TOO_LARGE_FOR_QR': 'Too large for a QR code. Encode it first to get a stored reference.',
    'BACKEND_UNAVAILABLE': 'Storage is currently unavailable. Please try again later.',
}


class RelayClient:
    """HTTP client for Relay API with retry logic and error handling."""

    def __init__(self, config: Config, transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize relay client.

        Args:
            config: Configuration instance
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout(),
            transport=transport
        )
        self.request_id = None
        logger.info(f"Initialized RelayClient [base_url={config.get_base_url()}]")

    def close(self) -> None:
        self.session.close()

    def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        max_retries: Optional[int] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Make HTTP request with retry logic on 5xx errors and network failures.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint path or absolute URL
            max_retries: Max retry attempts (uses config default if None)
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            HTTP response object

        Raises:
            ConnectionError: If max retries exceeded or connection fails
        """
        retry_config = self.config.get_retry_config()
        max_retries = max_retries if max_retries is not None else retry_config['max_retries']
        backoff = retry_config['retry_backoff_multiplier']

        last_exception = None

        self.request_id = str(uuid.uuid4())
        kwargs.setdefault('headers', {})
        kwargs['headers']['X-Request-ID'] = self.request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        for attempt in range(max_retries + 1):
            try:
                response = self.session.request(method, endpoint, **kwargs)

                logger.debug(
                    f"Response received: {method} {endpoint} status={response.status_code} "
                    f"[request_id={self.request_id}]"
                )

                if response.status_code >= 500 and attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Server error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} status={response.status_code}, retrying in {delay}s "
                        f"[request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue

                return response

            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                if attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s "
                        f"[request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue
                logger.error(
                    f"Network error (max retries exceeded): {method} {endpoint} error={e} "
                    f"[request_id={self.request_id}]"
                )
            except httpx.HTTPError as e:
                logger.error(
                    f"HTTP error: {method} {endpoint} error={type(e).__name__}: {e} "
                    f"[request_id={self.request_id}]"
                )
                raise ConnectionError(f"Request to relay failed: {type(e).__name__}: {e}")

        if isinstance(last_exception, httpx.TimeoutException):
            raise ConnectionError("Request timed out. Relay may be overloaded.")
        raise ConnectionError("Cannot connect to relay server. Is it running?")

    def _format_error(self, response: httpx.Response) -> str:
        """
        Map relay error codes to remediation messages.

        Args:
            response: HTTP response object

        Returns:
            User-friendly error message
        """
        try:
            error_data = response.json()
            detail = error_data.get('detail', 'Unknown error')
            code = error_data.get('code', 'UNKNOWN')
        except ValueError:
            detail = response.text or 'Unknown error'
            code = 'UNKNOWN'

        if code in ERROR_MESSAGES:
            return f"{ERROR_MESSAGES[code]} ({detail})"

        status_messages = {
            400: 'Bad request',
            404: 'Not found',
            410: 'Expired',
            413: 'Too large',
            422: 'Unprocessable input',
            500: 'Server error',
            503: 'Service unavailable',
        }
        message = status_messages.get(response.status_code, str(detail))
        return f"{message} (Code: {code})" if code != 'UNKNOWN' else message

    def _describe_encode(self, data: dict) -> str:
        lines = [
            "Encoded successfully!",
            f"Tier: {data['tier']}{'' if data['durable'] else ' (not durable: expires soon, this relay only)'}",
            f"Payload: {format_file_size(data['transport_length'])}",
        ]
        if data.get('expires_at'):
            expires = time.strftime('%Y-%m-%d %H:%M:%S', time.localtime(data['expires_at'] / 1000))
            lines.append(f"Expires: {expires}")
        lines.append(f"Reference: {data['reference']}")
        lines.append(f"Share URL: {data['share_url']}")
        return "\n".join(lines)

    def encode_files(self, file_paths: list[str], durable: bool = False, password: Optional[str] = None) -> str:
        """
        Read local files and encode them through the relay.

        Args:
            file_paths: Paths of files to encode
            durable: Skip the short-lived chunk cache tier
            password: Optional encryption password

        Returns:
            Formatted result message
        """
        records: list[FileRecord] = []
        total_size = 0
        for file_path in file_paths:
            path = Path(file_path).expanduser()
            if not path.is_file():
                return f"Error: File not found: {file_path}"
            try:
                size = path.stat().st_size
                if size > MAX_FILE_SIZE:
                    return (
                        f"Error: File too large: {file_path} ({format_file_size(size)}, "
                        f"limit {format_file_size(MAX_FILE_SIZE)})"
                    )
                total_size += size
                if total_size > MAX_TOTAL_SIZE:
                    return f"Error: Files exceed the total limit of {format_file_size(MAX_TOTAL_SIZE)}"
                records.append(read_file_record(path))
            except OSError as e:
                logger.error(f"Cannot read {file_path}: {e}")
                return f"Error: Cannot read file {file_path}: {e}"

        logger.info(f"Encoding {len(records)} files [durable={durable}]")
        try:
            response = self._request_with_retry(
                'POST',
                '/encode',
                json={
                    'files': [r.to_dict() for r in records],
                    'require_durable': durable,
                    'password': password,
                }
            )
        except ConnectionError as e:
            logger.error(f"Connection error during encode: {e}")
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Encode failed: {self._format_error(response)}"
        return self._describe_encode(response.json())

    def encode_text(self, text: str) -> str:
        """
        Encode typed text as message.txt.
        """
        try:
            response = self._request_with_retry('POST', '/encode/text', json={'text': text})
        except ConnectionError as e:
            logger.error(f"Connection error during text encode: {e}")
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Encode failed: {self._format_error(response)}"
        return self._describe_encode(response.json())

    def decode(self, reference: str, output_dir: Optional[str] = None, password: Optional[str] = None) -> str:
        """
        Resolve a reference and write the decoded files to disk.

        Args:
            reference: Wire reference, landing URL or raw transport string
            output_dir: Directory for decoded files (config default if None)
            password: Password for encrypted payloads

        Returns:
            Formatted result message listing written files
        """
        target_dir = Path(output_dir or self.config.get_output_dir()).expanduser()

        try:
            response = self._request_with_retry(
                'POST',
                '/decode',
                json={'input': reference, 'password': password}
            )
        except ConnectionError as e:
            logger.error(f"Connection error during decode: {e}")
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Decode failed: {self._format_error(response)}"

        data = response.json()

        if data['kind'] == 'direct-file':
            return self._download_direct(data['download_url'], data['file_name'], target_dir)

        written = []
        try:
            for entry in data['files']:
                record = FileRecord.from_dict(entry)
                path = write_file_record(record, target_dir)
                written.append(f"  {path} ({format_file_size(record.size)})")
        except OSError as e:
            logger.error(f"Cannot write decoded files to {target_dir}: {e}")
            return f"Error: Cannot write to {target_dir}: {e}"

        logger.info(f"Decoded {len(written)} files into {target_dir}")
        return "Decoded successfully!\n" + "\n".join(written)

    def _download_direct(self, url: str, file_name: str, target_dir: Path) -> str:
        try:
            response = self._request_with_retry('GET', url)
        except ConnectionError as e:
            return f"Error: {e}"

        if response.status_code != 200:
            return f"Download failed: {self._format_error(response)}"

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            path = unique_path(target_dir, sanitize_file_name(file_name))
            path.write_bytes(response.content)
        except OSError as e:
            logger.error(f"Cannot write {file_name} to {target_dir}: {e}")
            return f"Error: Cannot write to {target_dir}: {e}"
        return f"Downloaded successfully!\n  {path} ({format_file_size(len(response.content))})"

    def save_qr(self, reference: str, output_path: Optional[str] = None) -> str:
        """
        Render a QR code for a reference and save it as PNG.

        Returns:
            Formatted result message
        """
        try:
            response = self._request_with_retry('POST', '/qr', json={'reference': reference})
        except ConnectionError as e:
            logger.error(f"Connection error during QR generation: {e}")
            return f"Error: {e}"

        if response.status_code != 200:
            return f"QR generation failed: {self._format_error(response)}"

        data = response.json()
        _, _, encoded = data['qr_code'].partition('base64,')
        path = Path(output_path or 'qr.png').expanduser()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(base64.b64decode(encoded))
        except OSError as e:
            logger.error(f"Cannot save QR code to {path}: {e}")
            return f"Error: Cannot save QR code to {path}: {e}"

        return (
            f"QR code saved to {path}\n"
            f"Mode: {data['mode']} (error correction {data['error_correction']})\n"
            f"Embedded: {data['url']}"
        )
