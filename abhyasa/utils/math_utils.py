# File: utils/math_utils.py
"""Math and calculation utilities for Abhyasa.

Pure Python math functions with no engine imports.

Functions:
    - round_value: Consistent rounding to configured precision
    - safe_ratio: Division with a zero-denominator fallback
    - calculate_percentage: Progress percentage calculations
    - clamp: Bound a value to a range
"""

from __future__ import annotations

# ==============================================================================
# Constants (local copies to avoid circular imports)
# ==============================================================================

# Default float precision for rates
DATA_FLOAT_PRECISION = 2


def round_value(value: float, precision: int = DATA_FLOAT_PRECISION) -> float:
    """Round a value to the configured precision.

    Examples:
        round_value(90.909090) → 90.91
        round_value(10.0) → 10.0
    """
    return round(value, precision)


def safe_ratio(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Return numerator / denominator, or default when the denominator is not positive.

    Examples:
        safe_ratio(3, 8) → 0.375
        safe_ratio(3, 0) → 0.0
    """
    if denominator <= 0:
        return default
    return numerator / denominator


def calculate_percentage(
    current: float,
    target: float,
    precision: int = DATA_FLOAT_PRECISION,
) -> float:
    """Calculate progress percentage with proper rounding.

    Args:
        current: Current progress value
        target: Target/total value
        precision: Number of decimal places for rounding

    Returns:
        Percentage with proper rounding, or 0.0 if target is 0

    Examples:
        calculate_percentage(50, 100) → 50.0
        calculate_percentage(10, 11) → 90.91
        calculate_percentage(5, 0) → 0.0  # Division by zero protection
    """
    if target <= 0:
        return 0.0
    return round_value((current / target) * 100, precision)


def clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp a value between minimum and maximum bounds.

    Examples:
        clamp(150, 0, 100) → 100
        clamp(-10, 0, 100) → 0
    """
    return max(min_val, min(value, max_val))
