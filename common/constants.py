"""Project-wide constants (tier thresholds, TTLs, QR limits, reference tags)."""

import os
from dataclasses import dataclass

from common.exceptions import ValidationError

ENCODING_BASE64 = "base64"
PERMITTED_ENCODINGS = (ENCODING_BASE64,)

# Transport strings are base64, so one character is one byte.
INLINE_MAX_CHARS: int = 2_000
CHUNK_CACHE_MAX_CHARS: int = 256 * 1024
DATABASE_ROW_MAX_CHARS: int = 2 * 1024 * 1024
BLOB_MAX_BYTES: int = 50 * 1024 * 1024

CACHE_DEFAULT_TTL_SECONDS: int = 10 * 60
CACHE_LONG_TTL_SECONDS: int = 30 * 60
CACHE_LONG_TTL_THRESHOLD_CHARS: int = 50_000

DB_ROW_TTL_SECONDS: int = 24 * 3600

# Version 40 byte-mode capacity per error-correction level.
QR_BYTE_CAPACITY = {
    "L": 2953,
    "M": 2331,
    "Q": 1663,
    "H": 1273,
}
QR_MAX_BYTES: int = QR_BYTE_CAPACITY["L"]
QR_ECC_CROSSOVER_CHARS: int = 1_000
QR_DEFAULT_WIDTH: int = 400
QR_DEFAULT_MARGIN: int = 1
QR_DARK_COLOR = "#00ff00"
QR_LIGHT_COLOR = "#000000"

TAG_DIRECT_FILE = "FILE:"
TAG_DATABASE_ROW = "DB:"
TAG_BLOB = "BLOB:"
TAG_CHUNK_CACHE = "CACHE:"
LEGACY_BLOB_TAGS = ("S3:", "SUPABASE:")

MIN_PASSWORD_LENGTH: int = 4
PBKDF2_ITERATIONS: int = 100_000
SALT_SIZE_BYTES: int = 16
IV_SIZE_BYTES: int = 12


@dataclass(frozen=True)
class TierThresholds:
    """
    Upper bounds (inclusive) of each storage tier, in transport characters.

    Anything above database_row_max_chars goes to object storage.
    """
    inline_max_chars: int = INLINE_MAX_CHARS
    chunk_cache_max_chars: int = CHUNK_CACHE_MAX_CHARS
    database_row_max_chars: int = DATABASE_ROW_MAX_CHARS

    def __post_init__(self):
        if not 0 <= self.inline_max_chars < self.chunk_cache_max_chars < self.database_row_max_chars:
            raise ValidationError(
                "Tier thresholds must be strictly ascending: "
                f"inline={self.inline_max_chars} "
                f"chunk_cache={self.chunk_cache_max_chars} "
                f"database_row={self.database_row_max_chars}"
            )

    @classmethod
    def from_env(cls) -> "TierThresholds":
        """
        Build thresholds from QRDROP_* environment variables, falling back to defaults.

        Returns:
            TierThresholds instance
        """
        return cls(
            inline_max_chars=int(os.environ.get("QRDROP_INLINE_MAX_CHARS", INLINE_MAX_CHARS)),
            chunk_cache_max_chars=int(os.environ.get("QRDROP_CHUNK_CACHE_MAX_CHARS", CHUNK_CACHE_MAX_CHARS)),
            database_row_max_chars=int(os.environ.get("QRDROP_DATABASE_ROW_MAX_CHARS", DATABASE_ROW_MAX_CHARS)),
        )


DEFAULT_THRESHOLDS = TierThresholds()
