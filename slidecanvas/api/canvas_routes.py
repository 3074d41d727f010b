"""
Canvas Routes
==============

API routes for editor session and slide management.
"""

from fastapi import APIRouter, HTTPException
from typing import Optional, Dict, Any, List
from pydantic import BaseModel

from ..exceptions import SessionNotFoundError, SlideLimitError, SlideNotFoundError
from ..geometry.coordinates import slide_to_pixel_scene
from ..models.element_models import SlideType
from ..models.presentation_models import Presentation

router = APIRouter(prefix="/api/canvas", tags=["canvas"])

# Injected by server
state_manager = None


class CanvasStateResponse(BaseModel):
    """Response for canvas state."""
    session_id: str
    title: str
    slides: List[Dict[str, Any]]
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class AddSlideRequest(BaseModel):
    """Request to append a slide."""
    type: SlideType = SlideType.CONTENT
    title: Optional[str] = None


def _require_manager():
    if not state_manager:
        raise HTTPException(status_code=500, detail="State manager not initialized")
    return state_manager


@router.post("/session")
async def create_session(presentation: Optional[Presentation] = None):
    """Create a new editor session, optionally seeded from a presentation document."""
    manager = _require_manager()
    session = manager.create_session(presentation)
    return {"session_id": session.id, "slide_count": len(session.slides), "message": "Session created"}


@router.get("/state/{session_id}")
async def get_state(session_id: str) -> CanvasStateResponse:
    """Get canvas state for session."""
    manager = _require_manager()

    session = manager.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")

    return CanvasStateResponse(
        session_id=session_id,
        title=session.title,
        slides=[slide.model_dump(mode="json") for slide in session.slides],
        created_at=session.created_at.isoformat(),
        updated_at=session.updated_at.isoformat() if session.updated_at else None
    )


@router.delete("/state/{session_id}")
async def clear_canvas(session_id: str):
    """Clear all custom elements from the deck."""
    manager = _require_manager()

    if not manager.clear_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")

    return {"message": "Canvas cleared", "session_id": session_id}


@router.post("/{session_id}/slides")
async def add_slide(session_id: str, request: Optional[AddSlideRequest] = None):
    """Append an empty slide."""
    manager = _require_manager()
    request = request or AddSlideRequest()

    try:
        slide = manager.add_slide(session_id, request.type, request.title)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    except SlideLimitError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return {"slide_id": slide.id, "slide_index": len(manager.get_session(session_id).slides) - 1, "message": "Slide added"}


@router.get("/{session_id}/slides/{index}/pixel-scene")
async def get_pixel_scene(session_id: str, index: int):
    """Slide with every element converted to canvas pixels."""
    manager = _require_manager()

    try:
        slide = manager.get_slide(session_id, index)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found")
    except SlideNotFoundError:
        raise HTTPException(status_code=404, detail="Slide not found")

    return slide_to_pixel_scene(slide, manager.canvas).model_dump(mode="json")
