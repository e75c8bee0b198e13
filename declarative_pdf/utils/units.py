"""Unit conversion helpers for page measurements."""
from __future__ import annotations

import math

MM_PER_INCH = 25.4


def mm_to_px(value: float, ppi: float) -> int:
    """Convert millimetres to whole pixels at the given density, rounding half up."""
    return int(math.floor(value * (ppi / MM_PER_INCH) + 0.5))


def clamp(value: float, lower: float, upper: float) -> float:
    """Constrain value to the closed interval [lower, upper]."""
    return max(lower, min(upper, value))
