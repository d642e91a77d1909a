"""
Deterministic random helpers.

Every random decision in the engine goes through ``seeded_random`` with an
integer seed built from ``hash_string(node_id)``, the global map seed and a
small integer offset. Nothing here holds state, so any value can be
reproduced by recomputing its seed.
"""

import math

_HASH_MULTIPLIER = 31
_UINT32_MASK = 0xFFFFFFFF


def hash_string(text: str) -> int:
    """
    Stable polynomial rolling hash of a string.

    Args:
        text: Any string, typically a node id

    Returns:
        Unsigned 32-bit integer
    """
    value = 0
    for byte in text.encode("utf-8"):
        value = (value * _HASH_MULTIPLIER + byte) & _UINT32_MASK
    return value


def seeded_random(seed: int) -> float:
    """
    Map an integer seed to a float in [0, 1).

    Same seed, same value. Neighbouring seeds give uncorrelated-looking
    values, which is what the generators rely on when they add small offsets.
    """
    x = math.sin(seed) * 10000.0
    value = x - math.floor(x)
    # frac() of a tiny negative number rounds up to exactly 1.0
    if value >= 1.0:
        return 0.0
    return value


def seeded_range(seed: int, low: float, high: float) -> float:
    """Seeded float uniformly spread over [low, high)."""
    return low + seeded_random(seed) * (high - low)
