"""Size-tier classification of transport strings."""

from enum import Enum
from typing import Union

from common.constants import DEFAULT_THRESHOLDS, TierThresholds
from common.exceptions import ValidationError


class Tier(str, Enum):
    """
    Storage tiers, ordered by ascending capacity.
    """
    INLINE = "inline"
    CHUNK_CACHE = "chunk_cache"
    DATABASE_ROW = "database_row"
    OBJECT_STORAGE = "object_storage"

    @property
    def durable(self) -> bool:
        """Whether a reference survives a relay restart and works on another device."""
        return self is not Tier.CHUNK_CACHE

    @property
    def requires_storage(self) -> bool:
        return self is not Tier.INLINE


def classify(
    transport_or_length: Union[str, int],
    thresholds: TierThresholds = DEFAULT_THRESHOLDS
) -> Tier:
    """
    Pick the storage tier for a transport string.

    Boundaries are inclusive on the lower tier: a length equal to a
    threshold stays in the smaller tier.

    Args:
        transport_or_length: Transport string, or its length in characters
        thresholds: Tier upper bounds

    Returns:
        The selected Tier

    Raises:
        ValidationError: If the length is negative or not an integer
    """
    if isinstance(transport_or_length, str):
        length = len(transport_or_length)
    elif isinstance(transport_or_length, int) and not isinstance(transport_or_length, bool):
        length = transport_or_length
    else:
        raise ValidationError(
            f"Expected a string or a length, got {type(transport_or_length).__name__}"
        )

    if length < 0:
        raise ValidationError(f"Length must be non-negative, got {length}")

    if length <= thresholds.inline_max_chars:
        return Tier.INLINE
    if length <= thresholds.chunk_cache_max_chars:
        return Tier.CHUNK_CACHE
    if length <= thresholds.database_row_max_chars:
        return Tier.DATABASE_ROW
    return Tier.OBJECT_STORAGE


def promote_for_durability(tier: Tier) -> Tier:
    """
    Move a non-durable tier up to the next durable one.
    """
    if tier is Tier.CHUNK_CACHE:
        return Tier.DATABASE_ROW
    return tier
