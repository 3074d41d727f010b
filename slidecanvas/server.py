"""
Slide Canvas Server
===================

FastAPI server for the slide editor.

Features:
- Editor sessions seeded from presentation documents
- Text and image placement with safe-zone constraints
- Drag/resize gestures driven by pointer events
- Deterministic .pptx export with optional upload to storage
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Import services
from .geometry.text_metrics import configure_font_dirs
from .models.canvas_models import DEFAULT_CANVAS
from .services.deck_exporter import DeckExporter
from .services.image_loader import ImageLoader
from .services.pptx_writer import PptxWriter
from .services.storage_client import StorageClient, get_storage_client

# Import canvas manager
from .canvas.state_manager import StateManager

# Import API routers
from .api import canvas_routes, element_routes, export_routes


# Shared service instances
state_manager: StateManager = None
deck_exporter: DeckExporter = None
storage_client: StorageClient = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global state_manager, deck_exporter, storage_client

    logger.info("[SLIDE-CANVAS] Starting up...")

    if settings.font_dir:
        configure_font_dirs(settings.font_dir)

    image_loader = ImageLoader(timeout=settings.http_timeout)

    # Initialize state manager
    state_manager = StateManager(canvas=DEFAULT_CANVAS, image_loader=image_loader)

    # Storage upload is optional
    storage_client = get_storage_client()

    deck_exporter = DeckExporter(
        canvas=DEFAULT_CANVAS,
        writer=PptxWriter(DEFAULT_CANVAS, image_loader=image_loader),
        storage=storage_client,
        export_dir=settings.export_dir
    )

    # Inject into route modules
    canvas_routes.state_manager = state_manager
    element_routes.state_manager = state_manager
    export_routes.state_manager = state_manager
    export_routes.deck_exporter = deck_exporter

    logger.info(f"[SLIDE-CANVAS] Services initialized (exports -> {settings.export_dir})")

    yield

    # Cleanup
    logger.info("[SLIDE-CANVAS] Shutting down...")
    if storage_client:
        await storage_client.close()


# Create FastAPI app
app = FastAPI(
    title="Slide Canvas",
    description="Slide editor layout model with .pptx export",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins for development
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(canvas_routes.router)
app.include_router(element_routes.router)
app.include_router(export_routes.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "slide-canvas",
        "storage": "configured" if settings.storage_url else "disabled"
    }


@app.get("/api/info")
async def api_info():
    """Canvas constants used by the editor."""
    canvas = DEFAULT_CANVAS
    return {
        "service": "Slide Canvas",
        "version": "1.0.0",
        "canvas": {
            "width_in": canvas.width_in,
            "height_in": canvas.height_in,
            "dpi": canvas.dpi,
            "width_px": canvas.width_px,
            "height_px": canvas.height_px,
            "safe_zone_px": canvas.safe_zone_px,
            "min_width_px": canvas.min_width_px,
            "min_height_px": canvas.min_height_px,
            "text_min_width_px": canvas.text_min_width_px,
            "text_padding_px": canvas.text_padding_px,
        },
        "features": {
            "letter_spacing": canvas.letter_spacing_enabled,
            "multi_slide": canvas.multi_slide_enabled,
        },
        "element_types": ["text", "image", "section"],
        "slide_types": ["title", "toc", "content"],
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "slidecanvas.server:app",
        host="0.0.0.0",
        port=8080,
        reload=True
    )
