"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
from cli.config import Config
from cli.models import DecodeCommand, EncodeCommand, QRCommand, TextCommand
from cli.relay_client import RelayClient

logger = get_logger(__name__)


_client: Optional[RelayClient] = None


def get_client() -> RelayClient:
    """
    Get or create global RelayClient instance.

    Returns:
        RelayClient instance
    """
    global _client
    if _client is None:
        logger.debug("Creating new RelayClient instance")
        config = Config(Path.home() / '.qrdrop' / 'config.json')
        _client = RelayClient(config)
    return _client


def handle_encode(cmd: EncodeCommand, client: Optional[RelayClient] = None) -> str:
    """
    Handle 'encode' command.

    Args:
        cmd: EncodeCommand with file_list, durable flag and optional password
        client: Optional RelayClient for dependency injection (testing)

    Returns:
        Success or error message
    """
    if client is None:
        client = get_client()
    return client.encode_files(list(cmd.file_list), durable=cmd.durable, password=cmd.password)


def handle_text(cmd: TextCommand, client: Optional[RelayClient] = None) -> str:
    """Handle 'text' command."""
    if client is None:
        client = get_client()
    return client.encode_text(cmd.text)


def handle_decode(cmd: DecodeCommand, client: Optional[RelayClient] = None) -> str:
    """
    Handle 'decode' command.

    Args:
        cmd: DecodeCommand with reference, optional output_dir and password
        client: Optional RelayClient for dependency injection (testing)

    Returns:
        Summary of written files or error message
    """
    if client is None:
        client = get_client()
    return client.decode(cmd.reference, output_dir=cmd.output_dir, password=cmd.password)


def handle_qr(cmd: QRCommand, client: Optional[RelayClient] = None) -> str:
    if client is None:
        client = get_client()
    return client.save_qr(cmd.reference, output_path=cmd.output_path)
