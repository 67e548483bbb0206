# File: utils/__init__.py
"""Pure Python utilities for cyclecal.

Submodules:
    - dt_utils: Civil-date parsing, normalization and calendar arithmetic
    - math_utils: Rounding, clamping, mean and spread calculations

Usage:
    from . import dt_utils
    from .math_utils import round_value
"""

from . import dt_utils, math_utils

__all__ = ["dt_utils", "math_utils"]
