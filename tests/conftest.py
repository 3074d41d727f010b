"""
Shared fixtures: pinned clock, sample presentation, generated images and
an image loader that never touches the network.
"""

import base64
import io
from datetime import datetime

import httpx
import pytest
from PIL import Image

from slidecanvas.models.canvas_models import CanvasConfig
from slidecanvas.models.presentation_models import Presentation
from slidecanvas.services.image_loader import ImageLoader

PINNED_NOW = datetime(2026, 10, 19, 9, 30)


def make_png(width: int = 200, height: int = 100, color=(23, 163, 62)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def to_data_uri(data: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(data).decode("ascii")


def make_presentation(topic_count: int = 3, section_counts=None, title: str = "Q4 Review") -> Presentation:
    section_counts = section_counts or [2] * topic_count
    return Presentation(
        title=title,
        subtitle="Quarterly business review",
        topics=[
            {
                "title": f"Topic {t + 1}",
                "sections": [
                    {"title": f"Section {t + 1}.{s + 1}", "description": f"Details for {t + 1}.{s + 1}"}
                    for s in range(section_counts[t])
                ],
            }
            for t in range(topic_count)
        ],
    )


@pytest.fixture
def canvas():
    return CanvasConfig()


@pytest.fixture
def clock():
    return lambda: PINNED_NOW


@pytest.fixture
def png_bytes():
    return make_png()


@pytest.fixture
def png_data_uri(png_bytes):
    return to_data_uri(png_bytes)


@pytest.fixture
def q4_presentation():
    """Three topics with 3, 2 and 3 sections."""
    return Presentation.model_validate({
        "presentationTitle": "Q4 Review",
        "presentationSubtitle": "Results and outlook",
        "slides": [
            {
                "title": "Financial Overview",
                "sections": [
                    {"title": "Revenue", "description": "Up 12% year over year"},
                    {"title": "Margins", "description": "Stable gross margin"},
                    {"title": "Cash", "description": "Strong operating cash flow"},
                ],
            },
            {
                "title": "Market Analysis",
                "sections": [
                    {"title": "Share", "description": "Gained two points"},
                    {"title": "Competitors", "description": "Two new entrants"},
                ],
            },
            {
                "title": "Strategic Initiatives",
                "sections": [
                    {"title": "Expansion", "description": "Two new regions"},
                    {"title": "Product", "description": "Platform relaunch"},
                    {"title": "People", "description": "Hiring plan"},
                ],
            },
        ],
    })


@pytest.fixture
def offline_loader(png_bytes):
    """ImageLoader whose remote fetches all return the sample PNG."""
    transport = httpx.MockTransport(lambda request: httpx.Response(200, content=png_bytes))
    return ImageLoader(client=httpx.Client(transport=transport))


@pytest.fixture
def failing_loader():
    """ImageLoader whose remote fetches all return 404."""
    transport = httpx.MockTransport(lambda request: httpx.Response(404))
    return ImageLoader(client=httpx.Client(transport=transport))
