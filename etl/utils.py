"""Numeric helpers for the scoring layer."""

import math
from typing import Sequence


def clamp(value: float, low: float, high: float) -> float:
    """Clamp *value* into ``[low, high]``."""
    return min(max(value, low), high)


def standard_deviation(values: Sequence[float]) -> float:
    """Population standard deviation (0 for an empty sequence)."""
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    var = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(var)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


__all__ = ["clamp", "standard_deviation", "round_half_up"]
