"""
Export Transform
================

Turns scene-model slides into writer records: absolute inch geometry,
point font sizes, hex colors without `#`, 0-1 transparency, character
spacing in hundredths of a point.

Failures are contained: an element missing a required field is skipped
with a warning, and an unexpected error while building a slide drops
only that slide.
"""

import logging
from typing import List, Tuple

from ..exceptions import MissingElementFieldError
from ..geometry.coordinates import element_box
from ..geometry.text_metrics import apply_text_transform
from ..geometry.units import percent_to_in, pt_to_px, px_to_pt, round_half_up
from ..models.canvas_models import Box, CanvasConfig, DEFAULT_CANVAS
from ..models.element_models import (
    BoxStyle,
    Element,
    ImageElement,
    SectionElement,
    Slide,
    SlideType,
    TextAlign,
    TextElement,
    TextStyle,
    VerticalAlign
)
from ..models.writer_models import (
    ExportWarning,
    ImageRecord,
    ShapeKind,
    ShapeRecord,
    TextRecord,
    WriterItem,
    WriterRun,
    WriterSlideRecord
)
from .template_builder import SLIDE_LAYOUT, slide_background

logger = logging.getLogger(__name__)

DIVIDER_COLOR = "A9A9A9"
TOC_NUMBER_FONT_PT = 14


def strip_hash(color_hex: str) -> str:
    """'#17A33E' -> '17A33E'."""
    return color_hex.lstrip("#").upper()


def format_number(number: int) -> str:
    """Two-digit, zero-padded toc number."""
    return str(number).zfill(2)


class ExportTransform:
    """Builds writer records for a list of slides."""

    def __init__(self, canvas: CanvasConfig = DEFAULT_CANVAS):
        self.canvas = canvas

    def to_writer_records(self, slides: List[Slide]) -> Tuple[List[WriterSlideRecord], List[ExportWarning]]:
        """
        Convert slides to writer records.

        Returns:
            (records, warnings); records keep slide order minus any slide
            that failed to build
        """
        records = []
        warnings: List[ExportWarning] = []

        for index, slide in enumerate(slides):
            try:
                records.append(self._slide_record(index, slide, warnings))
            except Exception as e:
                logger.error(f"[EXPORT] Slide {index} ({slide.id}) failed, omitting it: {e}")
                warnings.append(ExportWarning(slide_index=index, message=f"Slide omitted: {e}"))

        logger.info(f"[EXPORT] Built {len(records)}/{len(slides)} slide records, {len(warnings)} warnings")
        return records, warnings

    def _slide_record(self, index: int, slide: Slide, warnings: List[ExportWarning]) -> WriterSlideRecord:
        record = WriterSlideRecord(
            index=index,
            slide_id=slide.id,
            slide_type=slide.type.value,
            background=slide_background(slide.type)
        )

        if slide.type == SlideType.TITLE:
            record.items.append(self._divider())

        # Template first, then custom: custom always paints on top
        for element in slide.all_elements():
            try:
                record.items.extend(self._element_items(slide, element))
            except MissingElementFieldError as e:
                logger.warning(f"[EXPORT] Slide {index}: skipping element {e.element_id}: {e}")
                warnings.append(ExportWarning(slide_index=index, element_id=e.element_id, message=str(e)))

        return record

    def _element_items(self, slide: Slide, element: Element) -> List[WriterItem]:
        if isinstance(element, TextElement):
            if slide.type == SlideType.TOC and element.number is not None:
                return self._toc_item(element)
            return [self._text_element(element)]
        if isinstance(element, SectionElement):
            return self._section(element)
        if isinstance(element, ImageElement):
            return [self._image(element)]
        raise TypeError(f"Unsupported element type: {type(element).__name__}")

    # ===== Element records =====

    def _text_element(self, element: TextElement) -> TextRecord:
        box = element_box(element, self.canvas)
        return self._text_record(element.id, element.text, element.style, box, element)

    def _text_record(
        self,
        element_id: str,
        text: str,
        style: TextStyle,
        box: Box,
        element: TextElement = None
    ) -> TextRecord:
        runs = None
        space_after_pct = 0.0
        if element is not None and element.runs:
            runs = [
                WriterRun(
                    text=apply_text_transform(run.text, style.text_transform),
                    bullet=run.bullet.value if run.bullet else None,
                    indent_level=run.indent_level,
                    space_after_pt=run.space_after_pt
                )
                for run in element.runs
            ]
            space_after_pct = max(0.0, round_half_up((style.line_height_multiplier - 1) * 100, 2))

        char_spacing = 0.0
        if self.canvas.letter_spacing_enabled and style.letter_spacing_px:
            char_spacing = round_half_up(px_to_pt(style.letter_spacing_px, self.canvas.dpi) * 100)

        return TextRecord(
            element_id=element_id,
            text=apply_text_transform(text, style.text_transform),
            runs=runs,
            x_in=box.x,
            y_in=box.y,
            w_in=box.width,
            h_in=box.height,
            font_size_pt=px_to_pt(style.font_size_px, self.canvas.dpi),
            font_face=style.font_face,
            bold=style.bold,
            italic=style.italic,
            underline=style.underline,
            strike=style.strikethrough,
            color=strip_hash(style.color_hex),
            align=style.align.value,
            valign=style.valign.value,
            char_spacing=char_spacing,
            line_spacing=style.line_height_multiplier,
            space_after_pct=space_after_pct,
            transparency=style.transparency_percent / 100
        )

    def _image(self, element: ImageElement) -> ImageRecord:
        if not element.source:
            raise MissingElementFieldError(element.id, "source")
        if element.size is None:
            raise MissingElementFieldError(element.id, "size")

        box = element_box(element, self.canvas)
        is_data = element.source.startswith("data:")
        return ImageRecord(
            element_id=element.id,
            data=element.source if is_data else None,
            path=None if is_data else element.source,
            x_in=box.x,
            y_in=box.y,
            w_in=box.width,
            h_in=box.height
        )

    # ===== Template decorations =====

    def _pct_w(self, pct: float) -> float:
        return percent_to_in(pct, self.canvas.width_in)

    def _pct_h(self, pct: float) -> float:
        return percent_to_in(pct, self.canvas.height_in)

    def _toc_item(self, element: TextElement) -> List[WriterItem]:
        layout = SLIDE_LAYOUT[SlideType.TOC]
        box = element_box(element, self.canvas)
        box_w = self._pct_w(layout["box"]["width"])
        box_h = self._pct_h(layout["box"]["height"])
        box_style = element.box_style or BoxStyle.PRIMARY

        number_style = element.style.model_copy(update={
            "font_size_px": pt_to_px(TOC_NUMBER_FONT_PT, self.canvas.dpi),
            "color_hex": "#FFFFFF",
            "bold": True,
            "align": TextAlign.CENTER,
            "valign": VerticalAlign.MIDDLE,
        })
        title_style = element.style.model_copy(update={"valign": VerticalAlign.TOP})
        item_title = layout["item_title"]

        return [
            ImageRecord(
                element_id=f"{element.id}-box",
                path=layout["box_images"][box_style],
                x_in=box.x,
                y_in=box.y,
                w_in=box_w,
                h_in=box_h
            ),
            self._text_record(
                f"{element.id}-number",
                format_number(element.number),
                number_style,
                Box(x=box.x, y=round_half_up(box.y + 0.1, 4), width=box_w, height=self._pct_h(7))
            ),
            self._text_record(
                element.id,
                element.text,
                title_style,
                Box(
                    x=round_half_up(box.x + self._pct_w(item_title["offset_x"]), 4),
                    y=box.y,
                    width=self._pct_w(item_title["width"]),
                    height=self._pct_h(item_title["height"])
                )
            ),
        ]

    def _section(self, element: SectionElement) -> List[WriterItem]:
        layout = SLIDE_LAYOUT[SlideType.CONTENT]
        box = element_box(element, self.canvas)
        if box.height is None:
            raise MissingElementFieldError(element.id, "size")

        title = layout["section_title"]
        description = layout["section_description"]
        text_x = round_half_up(box.x + self._pct_w(title["offset_x"]), 4)

        return [
            ImageRecord(
                element_id=f"{element.id}-box",
                path=layout["section_box"]["image"],
                x_in=box.x,
                y_in=box.y,
                w_in=box.width,
                h_in=box.height
            ),
            self._text_record(
                f"{element.id}-title",
                element.title,
                element.title_style.model_copy(update={"valign": VerticalAlign.MIDDLE}),
                Box(
                    x=text_x,
                    y=round_half_up(box.y + self._pct_h(title["offset_y"]), 4),
                    width=self._pct_w(title["width"]),
                    height=title["height_in"]
                )
            ),
            self._text_record(
                f"{element.id}-description",
                element.description,
                element.description_style.model_copy(update={"valign": VerticalAlign.TOP}),
                Box(
                    x=round_half_up(box.x + self._pct_w(description["offset_x"]), 4),
                    y=round_half_up(box.y + self._pct_h(description["offset_y"]), 4),
                    width=self._pct_w(description["width"]),
                    height=description["height_in"]
                )
            ),
        ]

    def _divider(self) -> ShapeRecord:
        layout = SLIDE_LAYOUT[SlideType.TITLE]
        return ShapeRecord(
            element_id="footer-divider",
            shape=ShapeKind.LINE,
            x_in=0,
            y_in=self._pct_h(layout["divider_y"]),
            w_in=self.canvas.width_in,
            h_in=0,
            line_color=DIVIDER_COLOR,
            line_width_pt=1
        )


def to_writer_records(
    slides: List[Slide],
    canvas: CanvasConfig = DEFAULT_CANVAS
) -> Tuple[List[WriterSlideRecord], List[ExportWarning]]:
    """Convenience function wrapping ExportTransform."""
    return ExportTransform(canvas).to_writer_records(slides)
