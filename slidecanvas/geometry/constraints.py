"""
Constraint Engine
=================

Keeps pixel-space geometry valid while the user drags and resizes.

These functions run inside a live pointer loop, so they never raise on
bad numbers: NaN, infinity or None are replaced by the nearest valid
value before clamping.
"""

import math
import logging
from typing import Optional

from ..models.canvas_models import CanvasConfig, DEFAULT_CANVAS, Position, Size
from .units import round_half_up

logger = logging.getLogger(__name__)


def _finite(value, fallback: float) -> float:
    """Return value as float, or fallback when it is missing or not finite."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    return number if math.isfinite(number) else fallback


def _clamp(value: float, low: float, high: float) -> float:
    # An element larger than the usable area pins to the low edge
    if high < low:
        return low
    return max(low, min(value, high))


def constrain_position(
    x: float,
    y: float,
    width: float,
    height: float,
    canvas: CanvasConfig = DEFAULT_CANVAS
) -> Position:
    """
    Clamp a bounding box so it stays inside the safe zone.

    Args:
        x, y: Proposed top-left corner in canvas pixels
        width, height: Element size in canvas pixels
        canvas: Canvas configuration

    Returns:
        Position with both coordinates inside
        [safe_zone, dimension - size - safe_zone]. Oversized elements
        are pinned to the safe-zone edge and allowed to overflow.
    """
    safe = canvas.safe_zone_px
    width = max(0.0, _finite(width, canvas.min_width_px))
    height = max(0.0, _finite(height, canvas.min_height_px))
    x = _finite(x, safe)
    y = _finite(y, safe)

    # Round before clamping; upper bounds are floored to whole pixels
    new_x = _clamp(round_half_up(x), safe, math.floor(canvas.width_px - width - safe))
    new_y = _clamp(round_half_up(y), safe, math.floor(canvas.height_px - height - safe))
    return Position(x=new_x, y=new_y)


def resize_preserving_aspect(
    initial_width: float,
    initial_height: float,
    delta_x: float,
    aspect_ratio: Optional[float] = None,
    canvas: CanvasConfig = DEFAULT_CANVAS
) -> Size:
    """
    Resize from the bottom-right handle keeping the aspect ratio.

    Width follows the pointer and is clamped to
    [min_width, usable width]; height is derived from the ratio. When the
    derived height exceeds the usable height, height becomes the binding
    constraint and width is recomputed from it. When the minimum height
    would push width past the usable width, the width cap wins.
    """
    max_width = canvas.usable_width_px
    max_height = canvas.usable_height_px

    initial_width = _finite(initial_width, canvas.min_width_px)
    initial_height = _finite(initial_height, canvas.min_height_px)
    if aspect_ratio is None and initial_height > 0:
        aspect_ratio = initial_width / initial_height
    aspect_ratio = _finite(aspect_ratio, 1.0)
    if aspect_ratio <= 0:
        aspect_ratio = 1.0

    width = _clamp(initial_width + _finite(delta_x, 0.0), canvas.min_width_px, max_width)
    height = width / aspect_ratio

    if height > max_height:
        height = max_height
        width = height * aspect_ratio
    elif height < canvas.min_height_px:
        height = canvas.min_height_px
        # Width cap wins when both caps conflict
        width = min(height * aspect_ratio, max_width)

    return Size(width=round_half_up(width), height=round_half_up(height))


def render_scale(available_width: float, canvas: CanvasConfig = DEFAULT_CANVAS) -> float:
    """Screen-to-canvas ratio; never above 1 (the canvas only shrinks to fit)."""
    available_width = _finite(available_width, canvas.width_px)
    if available_width <= 0:
        logger.warning(f"[CONSTRAINTS] Non-positive container width {available_width}, using scale 1")
        return 1.0
    return min(1.0, available_width / canvas.width_px)


def screen_to_canvas_delta(screen_delta: float, scale: float) -> float:
    """Convert a pointer delta in screen pixels to canvas pixels."""
    scale = _finite(scale, 1.0)
    if scale <= 0:
        scale = 1.0
    return _finite(screen_delta, 0.0) / scale


def apply_drag_delta(
    start: Position,
    delta_x: float,
    delta_y: float,
    scale: float,
    width: float,
    height: float,
    canvas: CanvasConfig = DEFAULT_CANVAS
) -> Position:
    """Move an element by a screen-space pointer delta, then clamp."""
    return constrain_position(
        start.x + screen_to_canvas_delta(delta_x, scale),
        start.y + screen_to_canvas_delta(delta_y, scale),
        width,
        height,
        canvas
    )


def initial_image_size(
    natural_width: float,
    natural_height: float,
    canvas: CanvasConfig = DEFAULT_CANVAS
) -> Size:
    """Size for a newly added image: at most half the usable width, capped by usable height."""
    natural_width = max(1.0, _finite(natural_width, canvas.min_width_px))
    natural_height = max(1.0, _finite(natural_height, canvas.min_height_px))
    aspect_ratio = natural_width / natural_height

    width = min(canvas.usable_width_px / 2, natural_width)
    height = width / aspect_ratio
    if height > canvas.usable_height_px:
        height = canvas.usable_height_px
        width = height * aspect_ratio

    return Size(width=round_half_up(width), height=round_half_up(height))


def available_width(x: float, canvas: CanvasConfig = DEFAULT_CANVAS) -> float:
    """Horizontal room for an auto-sized text box starting at x."""
    x = _finite(x, canvas.safe_zone_px)
    return max(canvas.text_min_width_px, canvas.width_px - canvas.safe_zone_px * 2 - x)
