"""Utility helper functions for the Relay."""

import secrets
import time
import uuid


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def current_time_ms() -> int:
    return int(time.time() * 1000)


def generate_cache_id(now_ms: int) -> str:
    """
    Generate a short cache id: hex milliseconds plus 8 random hex digits.

    Args:
        now_ms: Current time in milliseconds

    Returns:
        Id such as "18f3a2b4c5d-9f1c2e3a"
    """
    return f"{now_ms:x}-{secrets.token_hex(4)}"


def generate_blob_key(now_ms: int) -> str:
    """
    Generate an object key for an uploaded transport string.
    """
    return f"encoded-{now_ms}-{secrets.token_hex(6)}.bin"


def generate_direct_file_key(now_ms: int, file_name: str) -> str:
    """
    Generate an object key for a directly uploaded file, keeping its name last.
    """
    prefix = f"direct-{now_ms}-{secrets.token_hex(4)}-"
    return prefix + file_name[:200 - len(prefix)]
