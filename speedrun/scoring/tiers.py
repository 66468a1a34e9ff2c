"""Memory-size tier classification."""
from typing import Tuple

from speedrun.const import BYTES_PER_GIB
from speedrun.shared.models import MemoryTier

# Lower bound (GiB, inclusive) of each tier; the upper bound is the next entry's.
TIER_LOWER_BOUNDS_GIB: Tuple[Tuple[MemoryTier, float], ...] = (
    (MemoryTier.TINY, 0),
    (MemoryTier.SMALL, 2),
    (MemoryTier.MEDIUM, 4),
    (MemoryTier.LARGE, 8),
    (MemoryTier.XL, 16),
)


def tier_for_size(size_bytes: int) -> MemoryTier:
    """Map an on-disk model size to its tier. Boundaries belong to the upper tier."""
    gib = size_bytes / BYTES_PER_GIB
    tier = MemoryTier.TINY
    for candidate, lower_bound in TIER_LOWER_BOUNDS_GIB:
        if gib >= lower_bound:
            tier = candidate
    return tier
