"""
Unit Conversion
===============

Pure conversions between pixels, inches, points and percent-of-slide.

Rounding policy: ROUND_HALF_UP at a fixed precision per unit
(pixels 2 decimals, inches 4 decimals, points 2 decimals), so repeated
round-trips settle instead of drifting. Non-finite input is returned as-is.
"""

import math
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

DEFAULT_DPI = 96
POINTS_PER_INCH = 72

PX_DIGITS = 2
IN_DIGITS = 4
PT_DIGITS = 2

Number = Union[int, float]


def round_half_up(value: float, digits: int = 0) -> float:
    """Round to `digits` decimals with halves going away from zero (2.5 -> 3)."""
    if not math.isfinite(value):
        return value
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def px_to_in(px: Number, dpi: Number = DEFAULT_DPI) -> float:
    return round_half_up(px / dpi, IN_DIGITS)


def in_to_px(inches: Number, dpi: Number = DEFAULT_DPI) -> float:
    return round_half_up(inches * dpi, PX_DIGITS)


def pt_to_px(pt: Number, dpi: Number = DEFAULT_DPI) -> float:
    return round_half_up(pt * dpi / POINTS_PER_INCH, PX_DIGITS)


def px_to_pt(px: Number, dpi: Number = DEFAULT_DPI) -> float:
    return round_half_up(px * POINTS_PER_INCH / dpi, PT_DIGITS)


def parse_percent(value: Union[str, Number]) -> float:
    """Accept 15, 15.0, "15" or "15%" and return 15.0."""
    if isinstance(value, str):
        return float(value.strip().rstrip("%").strip())
    return float(value)


def percent_to_in(pct: Union[str, Number], total_in: Number) -> float:
    return round_half_up(parse_percent(pct) / 100 * total_in, IN_DIGITS)


def in_to_percent(inches: Number, total_in: Number) -> float:
    return round_half_up(inches / total_in * 100, IN_DIGITS)


def percent_to_px(pct: Union[str, Number], total_px: Number) -> float:
    return round_half_up(parse_percent(pct) / 100 * total_px, PX_DIGITS)


def px_to_percent(px: Number, total_px: Number) -> float:
    return round_half_up(px / total_px * 100, IN_DIGITS)


def to_inches(value: Number, space: str, total_in: Number, dpi: Number = DEFAULT_DPI) -> float:
    """
    Convert a coordinate from its declared space to inches.

    Args:
        value: Coordinate or length in `space` units
        space: "pixel", "inch" or "percent"
        total_in: Slide extent along the same axis, in inches
        dpi: Pixel density
    """
    space = getattr(space, "value", space)
    if space == "pixel":
        return px_to_in(value, dpi)
    if space == "percent":
        return percent_to_in(value, total_in)
    if space == "inch":
        return round_half_up(float(value), IN_DIGITS)
    raise ValueError(f"Unknown coordinate space: {space}")


def from_inches(value_in: Number, space: str, total_in: Number, dpi: Number = DEFAULT_DPI) -> float:
    """Inverse of to_inches."""
    space = getattr(space, "value", space)
    if space == "pixel":
        return in_to_px(value_in, dpi)
    if space == "percent":
        return in_to_percent(value_in, total_in)
    if space == "inch":
        return round_half_up(float(value_in), IN_DIGITS)
    raise ValueError(f"Unknown coordinate space: {space}")
