# File: utils/math_utils.py
"""Math and calculation utilities for cyclecal.

Functions:
    - round_value: Consistent rounding to a fixed precision
    - round_half_up: Integer rounding with .5 going up (not banker's rounding)
    - clamp: Bound a value to a range
    - mean: Arithmetic mean with an explicit empty default
    - population_std_dev: Population standard deviation (divide by N)
"""

from __future__ import annotations

from collections.abc import Sequence
import logging
import math
import statistics

# Module-level logger
_LOGGER = logging.getLogger(__name__)

# Default float precision for rounding
DATA_FLOAT_PRECISION = 2


def round_value(value: float, precision: int = DATA_FLOAT_PRECISION) -> float:
    """Round a value to the configured precision.

    Examples:
        round_value(4.666) → 4.67
        round_value(5.0) → 5.0
    """
    return round(value, precision)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with halves rounded up.

    Unlike ``round``, which sends halves to the even neighbour
    (round(28.5) == 28).

    Examples:
        round_half_up(28.5) → 29
        round_half_up(28.49) → 28
        round_half_up(27.5) → 28
    """
    return math.floor(value + 0.5)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between minimum and maximum bounds.

    Examples:
        clamp(150, 0, 100) → 100
        clamp(-10, 0, 100) → 0
        clamp(50, 0, 100) → 50
    """
    return max(min_val, min(value, max_val))


def mean(values: Sequence[float], default: float = 0.0) -> float:
    """Return the arithmetic mean of ``values``, or ``default`` when empty."""
    if not values:
        return default
    return statistics.fmean(values)


def population_std_dev(values: Sequence[float]) -> float:
    """Return the population standard deviation of ``values``.

    Fewer than one sample has no spread and yields 0.0.

    Examples:
        population_std_dev([28, 28, 28]) → 0.0
        population_std_dev([26, 30]) → 2.0
    """
    if not values:
        _LOGGER.debug("population_std_dev called with no samples")
        return 0.0
    return statistics.pstdev(values)
