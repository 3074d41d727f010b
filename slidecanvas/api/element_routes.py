"""
Element Routes
===============

API routes for placing, editing and moving slide elements.
"""

from fastapi import APIRouter, HTTPException
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field, ValidationError

from ..exceptions import (
    DuplicateElementError,
    ElementNotFoundError,
    ImageLoadError,
    SessionNotFoundError,
    SlideCanvasError,
    SlideNotFoundError,
    TemplateElementLockedError
)
from ..geometry.constraints import available_width
from ..geometry.gestures import GestureKind, PointerEvent
from ..geometry.text_metrics import measure_text
from ..models.canvas_models import DEFAULT_CANVAS, Position
from ..models.element_models import TextStyle

router = APIRouter(prefix="/api/element", tags=["elements"])

# Injected by server
state_manager = None


class TextElementRequest(BaseModel):
    """Request to add a text box."""
    slide_index: int = 0
    text: str = "Click to edit"
    style: Optional[TextStyle] = None
    position: Optional[Position] = None


class ImageElementRequest(BaseModel):
    """Request to add an image."""
    slide_index: int = 0
    source: str
    position: Optional[Position] = None
    alt: Optional[str] = None


class TextUpdateRequest(BaseModel):
    slide_index: int = 0
    text: str
    description: Optional[str] = None


class StyleUpdateRequest(BaseModel):
    slide_index: int = 0
    changes: Dict[str, Any]


class GestureRequest(BaseModel):
    """Pointer event for a gesture step; kind and scale are read on start."""
    slide_index: int = 0
    kind: GestureKind = GestureKind.DRAG
    x: float = 0
    y: float = 0
    scale: float = Field(default=1.0, gt=0)


class MeasureRequest(BaseModel):
    text: str
    style: TextStyle = Field(default_factory=TextStyle)
    max_width_px: Optional[float] = None
    x: Optional[float] = None


class ElementResponse(BaseModel):
    """Response for element operations."""
    element_id: str
    element: Dict[str, Any]
    message: str


def _require_manager():
    if not state_manager:
        raise HTTPException(status_code=500, detail="State manager not initialized")
    return state_manager


def _http_error(error: SlideCanvasError) -> HTTPException:
    if isinstance(error, SessionNotFoundError):
        return HTTPException(status_code=404, detail="Session not found")
    if isinstance(error, (SlideNotFoundError, ElementNotFoundError)):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, (DuplicateElementError, TemplateElementLockedError)):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, ImageLoadError):
        return HTTPException(status_code=422, detail=str(error))
    return HTTPException(status_code=400, detail=str(error))


@router.post("/measure")
async def measure(request: MeasureRequest):
    """Measure text the way the editor sizes auto-width boxes."""
    canvas = state_manager.canvas if state_manager else DEFAULT_CANVAS
    max_width = request.max_width_px
    if max_width is None:
        x = request.x if request.x is not None else canvas.safe_zone_px
        max_width = available_width(x, canvas) - canvas.text_padding_px * 2

    return measure_text(request.text, request.style, max_width).model_dump()


@router.post("/{session_id}/text")
async def add_text_element(session_id: str, request: TextElementRequest) -> ElementResponse:
    """Add a text box to a slide."""
    manager = _require_manager()

    try:
        element = manager.add_text_element(
            session_id,
            slide_index=request.slide_index,
            text=request.text,
            style=request.style,
            position=request.position
        )
    except SlideCanvasError as e:
        raise _http_error(e)

    return ElementResponse(element_id=element.id, element=element.model_dump(mode="json"), message="Element added")


@router.post("/{session_id}/image")
async def add_image_element(session_id: str, request: ImageElementRequest) -> ElementResponse:
    """Add an image to a slide."""
    manager = _require_manager()

    try:
        element = manager.add_image_element(
            session_id,
            request.source,
            slide_index=request.slide_index,
            position=request.position,
            alt=request.alt
        )
    except SlideCanvasError as e:
        raise _http_error(e)

    return ElementResponse(element_id=element.id, element=element.model_dump(mode="json"), message="Element added")


@router.put("/{session_id}/{element_id}/text")
async def update_text(session_id: str, element_id: str, request: TextUpdateRequest) -> ElementResponse:
    """Edit element text."""
    manager = _require_manager()

    try:
        element = manager.update_text(
            session_id,
            element_id,
            request.text,
            slide_index=request.slide_index,
            description=request.description
        )
    except SlideCanvasError as e:
        raise _http_error(e)

    return ElementResponse(element_id=element_id, element=element.model_dump(mode="json"), message="Element updated")


@router.patch("/{session_id}/{element_id}/style")
async def update_style(session_id: str, element_id: str, request: StyleUpdateRequest) -> ElementResponse:
    """Merge style changes into a text element."""
    manager = _require_manager()

    try:
        element = manager.update_style(session_id, element_id, request.changes, slide_index=request.slide_index)
    except SlideCanvasError as e:
        raise _http_error(e)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))

    return ElementResponse(element_id=element_id, element=element.model_dump(mode="json"), message="Style updated")


@router.delete("/{session_id}/{element_id}")
async def remove_element(session_id: str, element_id: str, slide_index: int = 0):
    """Remove element from a slide."""
    manager = _require_manager()

    if not manager.remove_element(session_id, element_id, slide_index):
        raise HTTPException(status_code=404, detail="Session or element not found")

    return {"message": "Element removed", "element_id": element_id}


@router.post("/{session_id}/{element_id}/gesture/{action}")
async def gesture(session_id: str, element_id: str, action: str, request: Optional[GestureRequest] = None):
    """Drive a drag or resize gesture: start, move, end."""
    manager = _require_manager()
    request = request or GestureRequest()
    pointer = PointerEvent(x=request.x, y=request.y)

    try:
        if action == "start":
            state = manager.start_gesture(
                session_id,
                element_id,
                request.kind,
                pointer,
                scale=request.scale,
                slide_index=request.slide_index
            )
            return {"state": state.value, "element_id": element_id}

        if action == "move":
            element = manager.move_gesture(session_id, pointer)
            return {
                "state": "idle" if element is None else "active",
                "element": element.model_dump(mode="json") if element is not None else None
            }

        if action == "end":
            state = manager.end_gesture(session_id)
            return {"state": state.value, "element_id": element_id}

    except SlideCanvasError as e:
        raise _http_error(e)

    raise HTTPException(status_code=404, detail=f"Unknown gesture action '{action}'")
