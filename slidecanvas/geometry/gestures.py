"""
Gesture State Machine
=====================

Pointer-driven drag/resize decoupled from any UI toolkit.

The UI feeds three events in (start, move, end) and receives geometry
intents back. Only one gesture is active at a time; `gesture_end` always
returns the controller to idle, whatever state it was in.
"""

import logging
from enum import Enum
from typing import Optional, Union
from pydantic import BaseModel

from ..exceptions import TemplateElementLockedError
from ..models.canvas_models import CanvasConfig, CoordinateSpace, DEFAULT_CANVAS, Position, Size
from ..models.element_models import Element, ImageElement, TextElement
from .constraints import apply_drag_delta, resize_preserving_aspect, screen_to_canvas_delta
from .text_metrics import text_box_size

logger = logging.getLogger(__name__)


class GestureState(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    RESIZING = "resizing"


class GestureKind(str, Enum):
    DRAG = "drag"
    RESIZE = "resize"


class PointerEvent(BaseModel):
    """Pointer location in screen pixels."""
    x: float
    y: float


class MoveIntent(BaseModel):
    kind: str = "move"
    element_id: str
    position: Position


class ResizeIntent(BaseModel):
    kind: str = "resize"
    element_id: str
    size: Size


GeometryIntent = Union[MoveIntent, ResizeIntent]


def element_pixel_size(element: Element, canvas: CanvasConfig = DEFAULT_CANVAS) -> Size:
    """Current size of a pixel-space element, auto-sizing text without an explicit size."""
    if element.size is not None:
        return element.size
    if isinstance(element, TextElement):
        return text_box_size(element, canvas)
    return Size(width=canvas.min_width_px, height=canvas.min_height_px)


class GestureController:
    """Tracks one drag or resize gesture at a time."""

    def __init__(self, canvas: CanvasConfig = DEFAULT_CANVAS):
        self.canvas = canvas
        self.state = GestureState.IDLE
        self.element_id: Optional[str] = None
        self.start_pointer: Optional[PointerEvent] = None
        self.start_position: Optional[Position] = None
        self.start_size: Optional[Size] = None
        self.aspect_ratio: Optional[float] = None
        self.scale = 1.0

    @property
    def active(self) -> bool:
        return self.state != GestureState.IDLE

    def gesture_start(
        self,
        element: Element,
        kind: GestureKind,
        pointer: PointerEvent,
        scale: float = 1.0
    ) -> GestureState:
        """
        Begin dragging or resizing an element.

        Raises:
            TemplateElementLockedError: template elements, non-pixel
                elements, and resizing anything but an image
        """
        if element.is_template:
            raise TemplateElementLockedError(f"Element '{element.id}' is part of the template")
        if element.position_space != CoordinateSpace.PIXEL:
            raise TemplateElementLockedError(f"Element '{element.id}' is not in pixel space")
        if kind == GestureKind.RESIZE and not isinstance(element, ImageElement):
            raise TemplateElementLockedError(f"Element '{element.id}' cannot be resized")

        if self.active:
            logger.warning(f"[GESTURE] Starting new gesture while {self.state.value} {self.element_id}; ending it")
            self.gesture_end()

        self.element_id = element.id
        self.start_pointer = pointer
        self.start_position = element.position.model_copy()
        self.start_size = element_pixel_size(element, self.canvas)
        self.aspect_ratio = element.aspect_ratio if isinstance(element, ImageElement) else None
        self.scale = scale
        self.state = GestureState.RESIZING if kind == GestureKind.RESIZE else GestureState.DRAGGING
        logger.debug(f"[GESTURE] {self.state.value} {element.id} from {pointer}")
        return self.state

    def gesture_move(self, pointer: PointerEvent) -> Optional[GeometryIntent]:
        """Translate a pointer move into a geometry intent; None when idle."""
        if self.state == GestureState.IDLE:
            return None

        delta_x = pointer.x - self.start_pointer.x
        delta_y = pointer.y - self.start_pointer.y

        if self.state == GestureState.RESIZING:
            size = resize_preserving_aspect(
                self.start_size.width,
                self.start_size.height,
                screen_to_canvas_delta(delta_x, self.scale),
                self.aspect_ratio,
                self.canvas
            )
            return ResizeIntent(element_id=self.element_id, size=size)

        position = apply_drag_delta(
            self.start_position,
            delta_x,
            delta_y,
            self.scale,
            self.start_size.width,
            self.start_size.height,
            self.canvas
        )
        return MoveIntent(element_id=self.element_id, position=position)

    def gesture_end(self) -> GestureState:
        """Release the gesture unconditionally."""
        if self.active:
            logger.debug(f"[GESTURE] Ended {self.state.value} on {self.element_id}")
        self.state = GestureState.IDLE
        self.element_id = None
        self.start_pointer = None
        self.start_position = None
        self.start_size = None
        self.aspect_ratio = None
        self.scale = 1.0
        return self.state


def apply_intent(element: Element, intent: GeometryIntent) -> Element:
    """Return an updated copy of the element with the intent applied."""
    if isinstance(intent, MoveIntent):
        return element.model_copy(update={"position": intent.position})
    if isinstance(intent, ResizeIntent):
        return element.model_copy(update={"size": intent.size})
    raise TypeError(f"Unknown intent: {type(intent).__name__}")
