# File: utils/math_utils.py
"""Rounding and percentage helpers for GymVerse.

Scores, percentiles and confidence values are all rounded half up, never
with Python's banker's rounding, so results match what users see in the app.

Functions:
    - round_half_up: Nearest whole number, halves towards +inf
    - round_points: Two-decimal display rounding, halves up
    - calculate_percentage: Share of a target as a percentage
    - clamp: Bound a value to a range
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
import math

# Local copy of const.DATA_FLOAT_PRECISION (utils must not import const)
DATA_FLOAT_PRECISION = 2


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 always rounding towards +inf.

    Examples:
        round_half_up(2.5) → 3
        round_half_up(3.5) → 4
        round_half_up(-2.5) → -2
        round_half_up(125.999) → 126
    """
    return math.floor(value + 0.5)


def round_points(value: float, precision: int = DATA_FLOAT_PRECISION) -> float:
    """Round for display to ``precision`` decimals, halves up.

    The value goes through its shortest string form first, so float noise
    such as 27.499999999999996 rounds as 27.5 would.

    Examples:
        round_points(10.456) → 10.46
        round_points(10.125) → 10.13
    """
    quantum = Decimal(1).scaleb(-precision)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def calculate_percentage(
    current: float,
    target: float,
    precision: int = DATA_FLOAT_PRECISION,
    *,
    cap: float | None = None,
) -> float:
    """Return ``current`` as a rounded percentage of ``target``.

    A non-positive target gives 0.0. ``cap`` bounds the result from above
    (progress bars use 100).

    Examples:
        calculate_percentage(1, 3) → 33.33
        calculate_percentage(150, 100, cap=100) → 100.0
    """
    if target <= 0:
        return 0.0
    percentage = round_points(current / target * 100, precision)
    if cap is not None:
        return min(percentage, float(cap))
    return percentage


def clamp(value: float, lower: float, upper: float) -> float:
    """Bound ``value`` to the closed range [lower, upper]."""
    return max(lower, min(value, upper))
