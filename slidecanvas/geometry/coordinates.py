"""
Coordinate Spaces
=================

Resolve element geometry between pixel, inch and percent spaces.
"""

import logging
from typing import Optional, Tuple

from ..models.canvas_models import Box, CanvasConfig, CoordinateSpace, DEFAULT_CANVAS, Position, Size
from ..models.element_models import Element, Slide
from .units import from_inches, to_inches

logger = logging.getLogger(__name__)


def point_to_inches(
    x: float,
    y: float,
    space: CoordinateSpace,
    canvas: CanvasConfig = DEFAULT_CANVAS
) -> Tuple[float, float]:
    """Convert an (x, y) pair from `space` to inches."""
    return (
        to_inches(x, space, canvas.width_in, canvas.dpi),
        to_inches(y, space, canvas.height_in, canvas.dpi),
    )


def element_box(element: Element, canvas: CanvasConfig = DEFAULT_CANVAS) -> Box:
    """Absolute inch geometry of an element; height is None when the element has no size."""
    x_in, y_in = point_to_inches(element.position.x, element.position.y, element.position_space, canvas)
    if element.size is None:
        return Box(x=x_in, y=y_in, width=round(canvas.width_in - x_in - canvas.safe_zone_in, 4))
    w_in, h_in = point_to_inches(element.size.width, element.size.height, element.position_space, canvas)
    return Box(x=x_in, y=y_in, width=w_in, height=h_in)


def convert_element(
    element: Element,
    target: CoordinateSpace,
    canvas: CanvasConfig = DEFAULT_CANVAS
) -> Element:
    """Return a copy of the element with position and size expressed in `target` space."""
    if element.position_space == target:
        return element.model_copy(deep=True)

    x_in, y_in = point_to_inches(element.position.x, element.position.y, element.position_space, canvas)
    position = Position(
        x=from_inches(x_in, target, canvas.width_in, canvas.dpi),
        y=from_inches(y_in, target, canvas.height_in, canvas.dpi),
    )

    size: Optional[Size] = None
    if element.size is not None:
        w_in, h_in = point_to_inches(element.size.width, element.size.height, element.position_space, canvas)
        size = Size(
            width=from_inches(w_in, target, canvas.width_in, canvas.dpi),
            height=from_inches(h_in, target, canvas.height_in, canvas.dpi),
        )

    return element.model_copy(
        update={"position_space": target, "position": position, "size": size},
        deep=True
    )


def slide_to_pixel_scene(slide: Slide, canvas: CanvasConfig = DEFAULT_CANVAS) -> Slide:
    """Editable pixel-space copy of a slide authored in percent or inch space."""
    logger.debug(f"[COORDINATES] Converting slide {slide.id} to pixel space")
    return slide.model_copy(
        update={
            "elements": [convert_element(e, CoordinateSpace.PIXEL, canvas) for e in slide.elements],
            "custom_elements": [convert_element(e, CoordinateSpace.PIXEL, canvas) for e in slide.custom_elements],
        }
    )
