# File: utils/__init__.py
"""Pure Python utilities for Abhyasa.

This module contains pure functions with no I/O and no engine imports.
All functions here can be unit tested without fixtures.

Submodules:
    - dt_utils: Date normalization, day keys, calendar period arithmetic
    - math_utils: Rounding, ratios, percentages

Usage:
    from . import dt_utils
    from .math_utils import round_value
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
