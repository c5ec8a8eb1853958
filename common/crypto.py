"""Optional password protection for envelopes (PBKDF2-HMAC-SHA256 + AES-256-GCM)."""

import base64
import os
from typing import Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from common.codec import decode_base64, envelope_from_bytes, envelope_to_bytes
from common.constants import (
    IV_SIZE_BYTES,
    MIN_PASSWORD_LENGTH,
    PBKDF2_ITERATIONS,
    SALT_SIZE_BYTES,
)
from common.exceptions import DecryptionError, ValidationError
from common.types import Envelope

KEY_SIZE_BYTES = 32
GCM_TAG_SIZE_BYTES = 16


def validate_password(password: str) -> None:
    """
    Raises:
        ValidationError: If the password is missing or too short
    """
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )


def derive_key(password: str, salt: bytes) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_SIZE_BYTES,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    return kdf.derive(password.encode("utf-8"))


def _split_blob(blob: bytes) -> Tuple[bytes, bytes, bytes]:
    header = SALT_SIZE_BYTES + IV_SIZE_BYTES
    if len(blob) < header + GCM_TAG_SIZE_BYTES:
        raise DecryptionError("Encrypted payload is too short")
    return blob[:SALT_SIZE_BYTES], blob[SALT_SIZE_BYTES:header], blob[header:]


def encrypt_envelope(envelope: Envelope, password: str) -> str:
    """
    Encrypt an envelope with a password.

    The output is base64(salt || iv || ciphertext), where ciphertext is the
    AES-GCM encryption (tag appended) of the envelope's UTF-8 JSON.

    Args:
        envelope: Envelope to protect
        password: Password of at least MIN_PASSWORD_LENGTH characters

    Returns:
        Base64 string usable as a transport string

    Raises:
        ValidationError: If the password is too short
        EncodingError: If the envelope cannot be serialized
    """
    validate_password(password)
    plaintext = envelope_to_bytes(envelope)

    salt = os.urandom(SALT_SIZE_BYTES)
    iv = os.urandom(IV_SIZE_BYTES)
    ciphertext = AESGCM(derive_key(password, salt)).encrypt(iv, plaintext, None)

    return base64.b64encode(salt + iv + ciphertext).decode("ascii")


def decrypt_envelope(text: str, password: str) -> Envelope:
    """
    Decrypt a password-protected transport string.

    Raises:
        ValidationError: If the password is too short, or the plaintext is
            not a valid envelope
        DecodingError: If the text is not base64
        DecryptionError: If the password is wrong or the data was tampered with
    """
    validate_password(password)
    salt, iv, ciphertext = _split_blob(decode_base64(text))

    try:
        plaintext = AESGCM(derive_key(password, salt)).decrypt(iv, ciphertext, None)
    except InvalidTag:
        raise DecryptionError("Incorrect password or corrupted data")

    return envelope_from_bytes(plaintext)
