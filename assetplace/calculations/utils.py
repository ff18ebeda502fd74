"""
Numeric helpers shared by the calculation modules.
"""

import math
from typing import Any


def safe_float(value: Any, default: float = 0.0) -> float:
    """
    Coerce a user-supplied number to a finite float.

    None, NaN, infinities, booleans and anything that does not parse as a
    number come back as ``default``. The engines feed charts, so a zero is
    preferred over an exception.
    """
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def non_negative(value: Any) -> float:
    """Coerce to a finite float, flooring negatives at zero."""
    return max(0.0, safe_float(value))
