"""
Template Slide Builder
======================

Turns a Presentation document into a deterministic list of slides:
one title slide, paginated table-of-contents slides (9 topics per page),
then paginated content slides per topic (6 sections per page).

All template elements are laid out in percent space on fixed grids and
carry deterministic ids, so rebuilding unchanged input with a pinned
clock yields identical slides.
"""

import logging
import math
from datetime import datetime
from typing import Callable, List, Optional

from ..geometry.units import pt_to_px
from ..models.canvas_models import CoordinateSpace, Position, Size
from ..models.element_models import (
    BoxStyle,
    SectionElement,
    Slide,
    SlideType,
    TextElement,
    TextStyle,
    VerticalAlign,
    TextAlign
)
from ..models.presentation_models import Presentation, Topic

logger = logging.getLogger(__name__)

ASSET_BASE = "https://djgurnpwsdoqjscwqbsj.supabase.co/storage/v1/object/public/presentation-templates-data"

TOC_ITEMS_PER_PAGE = 9
SECTIONS_PER_PAGE = 6

MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December"
]

TITLE_FONT = "Urbanist"
HEADING_FONT = "Plus Jakarta Sans"
BODY_FONT = "Plus Jakarta Sans Light"

# Percent-space layout table for the three slide types
SLIDE_LAYOUT = {
    SlideType.TITLE: {
        "background": f"{ASSET_BASE}/section20_frontSlide.png",
        "title": {"x": 15, "y": 25, "width": 70, "height": 30},
        "subtitle": {"x": 15, "y": 58, "width": 70, "height": 10},
        "caption": {"x": 5, "y": 92, "width": 30, "height": 6},
        "divider_y": 90,
    },
    SlideType.TOC: {
        "background": f"{ASSET_BASE}/section20_bckgrd.png",
        "title": {"x": 5.5, "y": 10},
        # Row-major 3x3 grid
        "grid": [
            (7, 25), (38, 25), (69, 25),
            (7, 45), (38, 45), (69, 45),
            (7, 65), (38, 65), (69, 65),
        ],
        "box": {"width": 5, "height": 8},
        "item_title": {"offset_x": 5, "width": 22, "height": 8},
        "box_images": {
            BoxStyle.PRIMARY: f"{ASSET_BASE}/section20_TOC_box1.png",
            BoxStyle.ALTERNATE: f"{ASSET_BASE}/section20_TOC_box2.png",
        },
    },
    SlideType.CONTENT: {
        "background": f"{ASSET_BASE}/section20_bckgrd.png",
        "title": {"x": 5.5, "y": 10},
        # Two columns, three rows
        "grid": [
            (7, 22), (50, 22),
            (7, 47), (50, 47),
            (7, 72), (50, 72),
        ],
        "section_box": {
            "image": f"{ASSET_BASE}/section20_list1_box.png",
            "width": 40,
            "height": 22,
        },
        "section_title": {"offset_x": 2, "offset_y": 1, "width": 34, "height_in": 0.4},
        "section_description": {"offset_x": 2, "offset_y": 8, "width": 36, "height_in": 0.7},
    },
}


def _style(font_face: str, size_pt: float, **kwargs) -> TextStyle:
    # Template sizes are authored in points
    return TextStyle(font_face=font_face, font_size_px=pt_to_px(size_pt), line_height_multiplier=1.0, **kwargs)


TITLE_STYLE = _style(TITLE_FONT, 40, bold=True, align=TextAlign.CENTER, valign=VerticalAlign.BOTTOM)
SUBTITLE_STYLE = _style(BODY_FONT, 15, align=TextAlign.CENTER, valign=VerticalAlign.TOP)
CAPTION_STYLE = _style(HEADING_FONT, 15, valign=VerticalAlign.MIDDLE)
HEADING_STYLE = _style(HEADING_FONT, 25, bold=True)
TOC_ITEM_STYLE = _style(HEADING_FONT, 12, bold=True)
SECTION_TITLE_STYLE = _style(HEADING_FONT, 13, bold=True)
SECTION_DESCRIPTION_STYLE = _style(BODY_FONT, 11)


def format_month_year(moment: datetime) -> str:
    """'October 2026' style caption for the title slide."""
    return f"{MONTHS[moment.month - 1]} {moment.year}"


def slide_background(slide_type: SlideType) -> str:
    """Background image for a slide type."""
    layout = SLIDE_LAYOUT.get(slide_type, SLIDE_LAYOUT[SlideType.CONTENT])
    return layout["background"]


def page_count(item_count: int, per_page: int) -> int:
    return math.ceil(item_count / per_page) if item_count > 0 else 0


class TemplateBuilder:
    """Builds template slides from presentation data."""

    def __init__(self, now: Optional[Callable[[], datetime]] = None):
        self.now = now or datetime.now

    def build(self, presentation: Presentation) -> List[Slide]:
        """
        Build the full deck.

        Args:
            presentation: Source document (title, subtitle, topics)

        Returns:
            Slides in order: title, toc pages, content pages grouped by topic
        """
        slides = [self._title_slide(presentation)]
        slides.extend(self._toc_slides(presentation.topics))
        for topic_index, topic in enumerate(presentation.topics):
            slides.extend(self._content_slides(topic_index, topic))

        logger.info(
            f"[TEMPLATE] Built {len(slides)} slides for '{presentation.title}' "
            f"({len(presentation.topics)} topics)"
        )
        return slides

    def _title_slide(self, presentation: Presentation) -> Slide:
        layout = SLIDE_LAYOUT[SlideType.TITLE]
        slide = Slide(id="title", type=SlideType.TITLE, title=presentation.title)

        slide.add_element(self._text("main-title", presentation.title, layout["title"], TITLE_STYLE))
        slide.add_element(self._text("subtitle", presentation.subtitle, layout["subtitle"], SUBTITLE_STYLE))
        slide.add_element(
            self._text("date-caption", format_month_year(self.now()), layout["caption"], CAPTION_STYLE)
        )
        return slide

    def _toc_slides(self, topics: List[Topic]) -> List[Slide]:
        layout = SLIDE_LAYOUT[SlideType.TOC]
        box = layout["box"]
        item_title = layout["item_title"]
        slides = []

        for page in range(page_count(len(topics), TOC_ITEMS_PER_PAGE)):
            slide = Slide(id=f"toc-{page}", type=SlideType.TOC, title="Table of content")
            slide.add_element(self._text("toc-title", "Table of content", layout["title"], HEADING_STYLE))

            start = page * TOC_ITEMS_PER_PAGE
            for slot, topic in enumerate(topics[start:start + TOC_ITEMS_PER_PAGE]):
                x, y = layout["grid"][slot]
                number = start + slot + 1
                item = self._text(
                    f"toc-item-{number}",
                    topic.title,
                    {"x": x, "y": y, "width": item_title["offset_x"] + item_title["width"], "height": box["height"]},
                    TOC_ITEM_STYLE
                )
                item.number = number
                # Middle column uses the alternate box artwork
                item.box_style = BoxStyle.ALTERNATE if slot % 3 == 1 else BoxStyle.PRIMARY
                slide.add_element(item)

            slides.append(slide)

        return slides

    def _content_slides(self, topic_index: int, topic: Topic) -> List[Slide]:
        layout = SLIDE_LAYOUT[SlideType.CONTENT]
        box = layout["section_box"]
        slides = []

        for page in range(page_count(len(topic.sections), SECTIONS_PER_PAGE)):
            slide = Slide(id=f"content-{topic_index}-{page}", type=SlideType.CONTENT, title=topic.title)
            slide.add_element(
                self._text(f"content-title-{topic_index}-{page}", topic.title, layout["title"], HEADING_STYLE)
            )

            start = page * SECTIONS_PER_PAGE
            for offset, section in enumerate(topic.sections[start:start + SECTIONS_PER_PAGE]):
                x, y = layout["grid"][offset]
                slide.add_element(SectionElement(
                    id=f"section-{topic_index}-{start + offset}",
                    position_space=CoordinateSpace.PERCENT,
                    position=Position(x=x, y=y),
                    size=Size(width=box["width"], height=box["height"]),
                    title=section.title,
                    description=section.description,
                    title_style=SECTION_TITLE_STYLE,
                    description_style=SECTION_DESCRIPTION_STYLE,
                    is_template=True
                ))

            slides.append(slide)

        return slides

    def _text(self, element_id: str, text: str, box: dict, style: TextStyle) -> TextElement:
        size = None
        if "width" in box and "height" in box:
            size = Size(width=box["width"], height=box["height"])
        return TextElement(
            id=element_id,
            position_space=CoordinateSpace.PERCENT,
            position=Position(x=box["x"], y=box["y"]),
            size=size,
            text=text,
            style=style.model_copy(),
            is_template=True
        )


def build_slides(
    presentation: Presentation,
    now: Optional[Callable[[], datetime]] = None
) -> List[Slide]:
    """
    Convenience function to build template slides.

    Args:
        presentation: Source document
        now: Clock used for the title-slide caption (defaults to datetime.now)

    Returns:
        Ordered list of slides
    """
    return TemplateBuilder(now=now).build(presentation)
