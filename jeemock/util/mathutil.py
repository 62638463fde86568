from __future__ import annotations

"""Small numeric helpers shared by scoring and analytics."""

import math


def round_half_up(value: float, ndigits: int = 0) -> float | int:
    """Round halves towards +inf (2.5 -> 3, -2.5 -> -2), unlike built-in round()."""
    if ndigits == 0:
        return int(math.floor(value + 0.5))
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def percent(part: int, whole: int) -> int:
    """Whole-number percentage, 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0
    return int(round_half_up(part / whole * 100))
