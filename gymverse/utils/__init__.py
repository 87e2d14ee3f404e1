# File: utils/__init__.py
"""Pure Python utilities for GymVerse.

Submodules:
    - dt_utils: Date/time parsing, reference-timezone projection, calendar math
    - math_utils: Half-up rounding, multiplier arithmetic, progress calculations

Usage:
    from . import dt_utils
    from .math_utils import round_half_up
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
