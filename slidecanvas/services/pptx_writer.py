"""
PPTX Writer
===========

Renders writer records to a .pptx file with python-pptx.

Each slide is built on the blank layout: background picture first (full
bleed), then items in record order. Run-level details python-pptx has no
API for (character spacing, strike, color alpha, bullets) are written
directly into the DrawingML with lxml.
"""

import asyncio
import io
import logging
from pathlib import Path
from typing import List, Optional, Union

from lxml import etree
from PIL import UnidentifiedImageError
from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_CONNECTOR, MSO_SHAPE
from pptx.enum.text import MSO_ANCHOR, MSO_AUTO_SIZE, PP_ALIGN
from pptx.oxml.ns import qn
from pptx.util import Emu, Inches, Pt

from ..exceptions import ImageLoadError, WriterError
from ..models.canvas_models import CanvasConfig, DEFAULT_CANVAS
from ..models.writer_models import (
    ExportWarning,
    ImageRecord,
    ShapeKind,
    ShapeRecord,
    TextRecord,
    WriterRun,
    WriterSlideRecord
)
from .image_loader import ImageLoader

logger = logging.getLogger(__name__)

# Raised by Pillow or python-pptx when loaded bytes are not a usable picture
PICTURE_ERRORS = (ImageLoadError, UnidentifiedImageError, OSError, ValueError)

PPTX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"
BLANK_LAYOUT_INDEX = 6
AUTO_HEIGHT_IN = 0.5
BULLET_CHAR = "•"
INDENT_IN = 0.25

ALIGNMENTS = {
    "left": PP_ALIGN.LEFT,
    "center": PP_ALIGN.CENTER,
    "right": PP_ALIGN.RIGHT,
    "justify": PP_ALIGN.JUSTIFY,
}

ANCHORS = {
    "top": MSO_ANCHOR.TOP,
    "middle": MSO_ANCHOR.MIDDLE,
    "bottom": MSO_ANCHOR.BOTTOM,
}

AUTO_SHAPES = {
    ShapeKind.RECTANGLE: MSO_SHAPE.RECTANGLE,
    ShapeKind.ROUNDED_RECTANGLE: MSO_SHAPE.ROUNDED_RECTANGLE,
    ShapeKind.OVAL: MSO_SHAPE.OVAL,
}


class PptxWriter:
    """Writes WriterSlideRecords to a presentation file."""

    def __init__(
        self,
        canvas: CanvasConfig = DEFAULT_CANVAS,
        image_loader: Optional[ImageLoader] = None
    ):
        self.canvas = canvas
        self.image_loader = image_loader or ImageLoader()

    def write(self, records: List[WriterSlideRecord], path: Union[str, Path]) -> List[ExportWarning]:
        """
        Render records and save to `path`.

        Returns:
            Warnings for images that could not be loaded (those items are skipped)

        Raises:
            WriterError: the file could not be saved
        """
        warnings: List[ExportWarning] = []
        prs = Presentation()
        prs.slide_width = Inches(self.canvas.width_in)
        prs.slide_height = Inches(self.canvas.height_in)
        layout = prs.slide_layouts[BLANK_LAYOUT_INDEX]

        for record in records:
            slide = prs.slides.add_slide(layout)
            try:
                self._fill_slide(slide, record, warnings)
            except Exception as e:
                logger.error(f"[PPTX-WRITER] Slide {record.index} ({record.slide_id}) incomplete: {e}")
                warnings.append(ExportWarning(slide_index=record.index, message=f"Slide incomplete: {e}"))

        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            prs.save(str(path))
        except OSError as e:
            raise WriterError(f"Failed to save presentation to '{path}'", cause=e)

        logger.info(f"[PPTX-WRITER] Saved {len(records)} slides to {path} ({len(warnings)} warnings)")
        return warnings

    def _fill_slide(self, slide, record: WriterSlideRecord, warnings: List[ExportWarning]) -> None:
        if record.background:
            self._add_background(slide, record, warnings)

        for item in record.items:
            if isinstance(item, TextRecord):
                self._add_text(slide, item)
            elif isinstance(item, ImageRecord):
                self._add_image(slide, record.index, item, warnings)
            elif isinstance(item, ShapeRecord):
                self._add_shape(slide, item)

    async def write_async(self, records: List[WriterSlideRecord], path: Union[str, Path]) -> List[ExportWarning]:
        """Run `write` off the event loop."""
        return await asyncio.to_thread(self.write, records, path)

    # ===== Pictures =====

    def _picture(self, slide, source: str, x_in: float, y_in: float, w_in: float, h_in: float):
        data = self.image_loader.load(source)
        return slide.shapes.add_picture(
            io.BytesIO(data),
            Inches(x_in),
            Inches(y_in),
            Inches(w_in),
            Inches(h_in)
        )

    def _add_background(self, slide, record: WriterSlideRecord, warnings: List[ExportWarning]) -> None:
        try:
            self._picture(slide, record.background, 0, 0, self.canvas.width_in, self.canvas.height_in)
        except PICTURE_ERRORS as e:
            logger.warning(f"[PPTX-WRITER] Slide {record.index}: background skipped: {e}")
            warnings.append(ExportWarning(slide_index=record.index, message=f"Background skipped: {e}"))

    def _add_image(self, slide, slide_index: int, item: ImageRecord, warnings: List[ExportWarning]) -> None:
        source = item.data or item.path
        if not source:
            warnings.append(ExportWarning(slide_index=slide_index, element_id=item.element_id, message="Image has no source"))
            return
        try:
            self._picture(slide, source, item.x_in, item.y_in, item.w_in, item.h_in)
        except PICTURE_ERRORS as e:
            logger.warning(f"[PPTX-WRITER] Slide {slide_index}: image {item.element_id} skipped: {e}")
            warnings.append(ExportWarning(slide_index=slide_index, element_id=item.element_id, message=str(e)))

    # ===== Text =====

    def _add_text(self, slide, item: TextRecord) -> None:
        height = item.h_in if item.h_in is not None else AUTO_HEIGHT_IN
        shape = slide.shapes.add_textbox(Inches(item.x_in), Inches(item.y_in), Inches(item.w_in), Inches(height))
        tf = shape.text_frame
        tf.word_wrap = True
        tf.vertical_anchor = ANCHORS.get(item.valign, MSO_ANCHOR.TOP)
        if item.h_in is None:
            tf.auto_size = MSO_AUTO_SIZE.SHAPE_TO_FIT_TEXT

        if item.runs:
            paragraphs = item.runs
        else:
            paragraphs = [WriterRun(text=line) for line in item.text.split("\n")]

        for i, run_record in enumerate(paragraphs):
            p = tf.paragraphs[0] if i == 0 else tf.add_paragraph()
            self._format_paragraph(p, item, run_record, is_last=(i == len(paragraphs) - 1))
            run = p.add_run()
            run.text = run_record.text
            self._format_run(run, item)

    def _format_paragraph(self, p, item: TextRecord, run_record: WriterRun, is_last: bool) -> None:
        p.alignment = ALIGNMENTS.get(item.align, PP_ALIGN.LEFT)
        p.level = run_record.indent_level
        if item.line_spacing:
            p.line_spacing = item.line_spacing

        if run_record.space_after_pt is not None:
            p.space_after = Pt(run_record.space_after_pt)
        elif item.space_after_pct and not is_last:
            p.space_after = Pt(item.font_size_pt * item.space_after_pct / 100)

        if run_record.bullet:
            self._set_bullet(p, run_record)

    def _set_bullet(self, p, run_record: WriterRun) -> None:
        pPr = p._p.get_or_add_pPr()
        level = run_record.indent_level
        pPr.set("marL", str(Inches(INDENT_IN * (level + 1))))
        pPr.set("indent", str(-Inches(INDENT_IN)))
        if run_record.bullet == "number":
            etree.SubElement(pPr, qn("a:buAutoNum")).set("type", "arabicPeriod")
        else:
            etree.SubElement(pPr, qn("a:buChar")).set("char", BULLET_CHAR)

    def _format_run(self, run, item: TextRecord) -> None:
        font = run.font
        font.size = Pt(item.font_size_pt)
        font.name = item.font_face
        font.bold = item.bold
        font.italic = item.italic
        font.underline = item.underline
        font.color.rgb = RGBColor.from_string(item.color)

        rPr = run._r.get_or_add_rPr()
        if item.strike:
            rPr.set("strike", "sngStrike")
        if item.char_spacing:
            rPr.set("spc", str(int(round(item.char_spacing))))
        if item.transparency > 0:
            srgb = rPr.find(qn("a:solidFill")).find(qn("a:srgbClr"))
            # DrawingML alpha is opacity in thousandths of a percent
            etree.SubElement(srgb, qn("a:alpha")).set("val", str(int(round((1 - item.transparency) * 100000))))

    # ===== Shapes =====

    def _add_shape(self, slide, item: ShapeRecord) -> None:
        x, y = Inches(item.x_in), Inches(item.y_in)
        w, h = Inches(item.w_in), Inches(item.h_in)

        if item.shape == ShapeKind.LINE:
            connector = slide.shapes.add_connector(MSO_CONNECTOR.STRAIGHT, x, y, Emu(x + w), Emu(y + h))
            if item.line_color:
                connector.line.color.rgb = RGBColor.from_string(item.line_color)
            if item.line_width_pt:
                connector.line.width = Pt(item.line_width_pt)
            return

        shape = slide.shapes.add_shape(AUTO_SHAPES[item.shape], x, y, w, h)
        if item.fill_color:
            shape.fill.solid()
            shape.fill.fore_color.rgb = RGBColor.from_string(item.fill_color)
        else:
            shape.fill.background()

        if item.line_color:
            shape.line.color.rgb = RGBColor.from_string(item.line_color)
            if item.line_width_pt:
                shape.line.width = Pt(item.line_width_pt)
        else:
            shape.line.fill.background()

        if item.shape == ShapeKind.ROUNDED_RECTANGLE and item.corner_radius_in is not None:
            shortest = min(item.w_in, item.h_in)
            if shortest > 0:
                shape.adjustments[0] = max(0.0, min(0.5, item.corner_radius_in / shortest))
