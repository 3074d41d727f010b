"""
Scene Model
===========

Positioned slide elements (text, image, section) and the slide that owns them.

Elements form a closed union discriminated by `type`. A slide keeps
template-authored elements and user-authored custom elements in two
ordered sequences; ids are unique across both, and collection order is
the z-order (custom elements always render above template ones).
"""

import re
from datetime import datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional, Tuple, Union
from pydantic import BaseModel, Field, field_validator

from .canvas_models import CoordinateSpace, Position, Size
from ..exceptions import DuplicateElementError

HEX_COLOR_PATTERN = re.compile(r"^#?([0-9a-fA-F]{6})$")


class TextAlign(str, Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"
    JUSTIFY = "justify"


class VerticalAlign(str, Enum):
    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"


class TextTransform(str, Enum):
    NONE = "none"
    UPPERCASE = "uppercase"
    LOWERCASE = "lowercase"
    CAPITALIZE = "capitalize"


class BulletType(str, Enum):
    BULLET = "bullet"
    NUMBER = "number"


class BoxStyle(str, Enum):
    """Visual variant of a table-of-contents number box."""
    PRIMARY = "box1"
    ALTERNATE = "box2"


class SlideType(str, Enum):
    TITLE = "title"
    TOC = "toc"
    CONTENT = "content"


class TextStyle(BaseModel):
    """Typography for a text run, sizes in canvas pixels."""
    font_face: str = "Arial"
    font_size_px: float = Field(default=24, gt=0)
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    align: TextAlign = TextAlign.LEFT
    valign: VerticalAlign = VerticalAlign.TOP
    color_hex: str = "#000000"
    transparency_percent: float = Field(default=0, ge=0, le=100)
    letter_spacing_px: float = 0
    line_height_multiplier: float = Field(default=1.2, gt=0)
    text_transform: TextTransform = TextTransform.NONE

    @field_validator("color_hex")
    @classmethod
    def _normalize_color(cls, value: str) -> str:
        match = HEX_COLOR_PATTERN.match(value.strip())
        if not match:
            raise ValueError(f"Expected a #RRGGBB color, got '{value}'")
        return f"#{match.group(1).upper()}"


class TextRun(BaseModel):
    """One paragraph of a multi-paragraph text element."""
    text: str
    bullet: Optional[BulletType] = None
    indent_level: int = Field(default=0, ge=0, le=8)
    space_after_pt: Optional[float] = None


class ElementBase(BaseModel):
    """Fields common to every element variant."""
    id: str
    position_space: CoordinateSpace = CoordinateSpace.PIXEL
    position: Position = Field(default_factory=Position)
    size: Optional[Size] = None
    is_template: bool = False


class TextElement(ElementBase):
    type: Literal["text"] = "text"
    text: str = ""
    style: TextStyle = Field(default_factory=TextStyle)
    runs: Optional[List[TextRun]] = None

    # Table-of-contents item metadata
    number: Optional[int] = None
    box_style: Optional[BoxStyle] = None


class ImageElement(ElementBase):
    type: Literal["image"] = "image"
    source: Optional[str] = None
    aspect_ratio: float = Field(default=1.0, gt=0)
    natural_width: Optional[int] = None
    natural_height: Optional[int] = None
    alt: Optional[str] = None
    full_bleed: bool = False


class SectionElement(ElementBase):
    """Fixed-size titled block; never user-resizable."""
    type: Literal["section"] = "section"
    title: str = ""
    description: str = ""
    title_style: TextStyle = Field(default_factory=TextStyle)
    description_style: TextStyle = Field(default_factory=TextStyle)


Element = Annotated[
    Union[TextElement, ImageElement, SectionElement],
    Field(discriminator="type")
]


class Slide(BaseModel):
    """One slide: template elements first, then custom elements."""
    id: str
    type: SlideType = SlideType.CONTENT
    title: Optional[str] = None
    elements: List[Element] = Field(default_factory=list)
    custom_elements: List[Element] = Field(default_factory=list)
    updated_at: Optional[datetime] = None

    def all_elements(self) -> List[Element]:
        """Elements in render order."""
        return [*self.elements, *self.custom_elements]

    def element_ids(self) -> List[str]:
        return [e.id for e in self.all_elements()]

    def find_element(self, element_id: str) -> Tuple[Optional[Element], bool]:
        """Return (element, is_custom); (None, False) when absent."""
        for element in self.custom_elements:
            if element.id == element_id:
                return element, True
        for element in self.elements:
            if element.id == element_id:
                return element, False
        return None, False

    def add_element(self, element: Element) -> None:
        """Add a template element."""
        self._check_unique(element.id)
        self.elements.append(element)
        self.updated_at = datetime.now()

    def add_custom_element(self, element: Element) -> None:
        """Add a user-authored element on top of everything else."""
        self._check_unique(element.id)
        self.custom_elements.append(element)
        self.updated_at = datetime.now()

    def replace_element(self, element: Element) -> bool:
        """Swap in an updated copy of an existing element, keeping its z-order."""
        for collection in (self.elements, self.custom_elements):
            for i, existing in enumerate(collection):
                if existing.id == element.id:
                    collection[i] = element
                    self.updated_at = datetime.now()
                    return True
        return False

    def remove_element(self, element_id: str) -> bool:
        """Remove element from either sequence."""
        initial_len = len(self.elements) + len(self.custom_elements)
        self.elements = [e for e in self.elements if e.id != element_id]
        self.custom_elements = [e for e in self.custom_elements if e.id != element_id]
        if len(self.elements) + len(self.custom_elements) < initial_len:
            self.updated_at = datetime.now()
            return True
        return False

    def clear_custom(self) -> None:
        """Remove all user-authored elements."""
        self.custom_elements = []
        self.updated_at = datetime.now()

    def _check_unique(self, element_id: str) -> None:
        if element_id in self.element_ids():
            raise DuplicateElementError(
                f"Element id '{element_id}' already exists",
                context={"slide_id": self.id}
            )
