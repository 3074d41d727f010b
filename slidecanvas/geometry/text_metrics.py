"""
Text Measurement
================

Approximate text box sizing with Pillow font metrics.

Measurement is deterministic for a given font set but only approximates
the presentation reader's own layout engine. Literal newlines start a
new paragraph; each paragraph is wrapped greedily on whitespace and a
word wider than the box stays whole on its own line.
"""

import math
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Tuple

from PIL import ImageFont
from pydantic import BaseModel

from ..models.canvas_models import CanvasConfig, DEFAULT_CANVAS, Size
from ..models.element_models import TextElement, TextStyle, TextTransform
from .constraints import available_width

logger = logging.getLogger(__name__)

# TrueType file names tried for each face, as (regular, bold, italic, bold-italic)
FONT_FILES = {
    "arial": ("arial.ttf", "arialbd.ttf", "ariali.ttf", "arialbi.ttf"),
    "helvetica": ("Helvetica.ttf", "Helvetica-Bold.ttf", "Helvetica-Oblique.ttf", "Helvetica-BoldOblique.ttf"),
    "times new roman": ("times.ttf", "timesbd.ttf", "timesi.ttf", "timesbi.ttf"),
    "calibri": ("calibri.ttf", "calibrib.ttf", "calibrii.ttf", "calibriz.ttf"),
    "georgia": ("georgia.ttf", "georgiab.ttf", "georgiai.ttf", "georgiaz.ttf"),
    "urbanist": ("Urbanist-Regular.ttf", "Urbanist-Bold.ttf", "Urbanist-Italic.ttf", "Urbanist-BoldItalic.ttf"),
    "plus jakarta sans": (
        "PlusJakartaSans-Regular.ttf", "PlusJakartaSans-Bold.ttf",
        "PlusJakartaSans-Italic.ttf", "PlusJakartaSans-BoldItalic.ttf"
    ),
    "plus jakarta sans light": (
        "PlusJakartaSans-Light.ttf", "PlusJakartaSans-Bold.ttf",
        "PlusJakartaSans-LightItalic.ttf", "PlusJakartaSans-BoldItalic.ttf"
    ),
}

# Common stand-ins shipped with most Linux distributions
FALLBACK_FILES = ("DejaVuSans.ttf", "DejaVuSans-Bold.ttf", "DejaVuSans-Oblique.ttf", "DejaVuSans-BoldOblique.ttf")

_font_dirs: Tuple[str, ...] = ()


class TextMetrics(BaseModel):
    """Measured size of a block of text, in canvas pixels."""
    width: float
    height: float
    line_count: int
    lines: List[str]


def configure_font_dirs(*dirs: Optional[Path]) -> None:
    """Extra directories searched for TrueType files before the system lookup."""
    global _font_dirs
    _font_dirs = tuple(str(d) for d in dirs if d)
    load_font.cache_clear()


def _variant_index(bold: bool, italic: bool) -> int:
    return (1 if bold else 0) + (2 if italic else 0)


@lru_cache(maxsize=128)
def load_font(font_face: str, size_px: int, bold: bool = False, italic: bool = False):
    """
    Load a font for measurement.

    Tries the face's TrueType files (in configured dirs, then Pillow's
    system lookup), then DejaVu, then Pillow's built-in default font.
    """
    index = _variant_index(bold, italic)
    candidates = []
    face_files = FONT_FILES.get(font_face.strip().lower())
    if face_files:
        candidates.append(face_files[index])
    candidates.append(FALLBACK_FILES[index])

    for file_name in candidates:
        for path in [str(Path(d) / file_name) for d in _font_dirs] + [file_name]:
            try:
                return ImageFont.truetype(path, size_px)
            except OSError:
                continue

    logger.debug(f"[TEXT-METRICS] No TrueType file for '{font_face}', using default font")
    return ImageFont.load_default(size=size_px)


def apply_text_transform(text: str, transform: TextTransform) -> str:
    """Apply a CSS-style text transform to the literal string."""
    if transform == TextTransform.UPPERCASE:
        return text.upper()
    if transform == TextTransform.LOWERCASE:
        return text.lower()
    if transform == TextTransform.CAPITALIZE:
        return re.sub(r"\b\w", lambda m: m.group(0).upper(), text)
    return text


def _line_width(font, line: str, letter_spacing: float) -> float:
    return font.getlength(line) + len(line) * letter_spacing


def _wrap_paragraph(font, paragraph: str, max_width: float, letter_spacing: float) -> List[str]:
    words = paragraph.split()
    if not words:
        return [""]

    lines = []
    current = ""
    for word in words:
        candidate = f"{current} {word}" if current else word
        if current and _line_width(font, candidate, letter_spacing) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    lines.append(current)
    return lines


def measure_text(text: str, style: TextStyle, max_width_px: float) -> TextMetrics:
    """
    Measure text at a given style, wrapping at max_width_px.

    Returns:
        TextMetrics; height is line_count * font size * line height,
        width never exceeds max_width_px unless a single word does.
    """
    text = apply_text_transform(text, style.text_transform)
    font = load_font(style.font_face, max(1, int(round(style.font_size_px))), style.bold, style.italic)
    spacing = style.letter_spacing_px

    single_width = _line_width(font, text, spacing)
    if "\n" not in text and single_width <= max_width_px:
        lines = [text]
        width = single_width
    else:
        lines = []
        for paragraph in text.split("\n"):
            lines.extend(_wrap_paragraph(font, paragraph, max_width_px, spacing))
        width = max(_line_width(font, line, spacing) for line in lines)

    line_height = style.font_size_px * style.line_height_multiplier
    return TextMetrics(
        width=math.ceil(width),
        height=math.ceil(len(lines) * line_height),
        line_count=len(lines),
        lines=lines
    )


def text_box_size(element: TextElement, canvas: CanvasConfig = DEFAULT_CANVAS) -> Size:
    """Auto-size a pixel-space text element: measured text plus padding."""
    padding = canvas.text_padding_px
    max_width = available_width(element.position.x, canvas) - padding * 2
    metrics = measure_text(element.text, element.style, max_width)
    return Size(
        width=max(canvas.text_min_width_px, metrics.width + padding * 2),
        height=metrics.height + padding * 2
    )
