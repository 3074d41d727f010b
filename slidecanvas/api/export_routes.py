"""
Export Routes
=============

API routes for exporting decks to .pptx files.
"""

from pathlib import Path
from typing import Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse
from pydantic import BaseModel

from ..models.presentation_models import Presentation
from ..models.writer_models import ExportResult
from ..services.pptx_writer import PPTX_MEDIA_TYPE

router = APIRouter(prefix="/api/export", tags=["export"])

# Injected by server
state_manager = None
deck_exporter = None


class ExportRequest(BaseModel):
    """Options for a session export."""
    owner: Optional[str] = None


class GenerateRequest(BaseModel):
    """Server-side generation from a presentation document."""
    presentation: Presentation
    owner: Optional[str] = None


def _require_exporter():
    if not deck_exporter:
        raise HTTPException(status_code=500, detail="Deck exporter not initialized")
    return deck_exporter


@router.post("/generate")
async def generate(request: GenerateRequest) -> ExportResult:
    """Build template slides from a presentation and export them."""
    exporter = _require_exporter()
    return await exporter.generate(request.presentation, owner=request.owner)


@router.get("/download/{file_name}")
async def download(file_name: str):
    """Download a previously exported file."""
    exporter = _require_exporter()

    # Only bare file names inside the export directory
    if Path(file_name).name != file_name or not file_name.endswith(".pptx"):
        raise HTTPException(status_code=400, detail="Invalid file name")

    path = exporter.export_dir / file_name
    if not path.is_file():
        raise HTTPException(status_code=404, detail="File not found")

    return FileResponse(str(path), media_type=PPTX_MEDIA_TYPE, filename=file_name)


@router.post("/{session_id}")
async def export_session(session_id: str, request: Optional[ExportRequest] = None) -> ExportResult:
    """Export a session's deck."""
    exporter = _require_exporter()
    if not state_manager:
        raise HTTPException(status_code=500, detail="State manager not initialized")

    session = state_manager.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")

    request = request or ExportRequest()
    return await exporter.export(session.slides, owner=request.owner, title=session.title)
