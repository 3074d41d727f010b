"""
Writer Record Models
====================

Input records for the presentation-file writer. All geometry is absolute
and in inches, font sizes are points, colors are six hex digits without `#`.
"""

from enum import Enum
from typing import Annotated, List, Literal, Optional, Union
from pydantic import BaseModel, Field


class ShapeKind(str, Enum):
    RECTANGLE = "rectangle"
    ROUNDED_RECTANGLE = "rounded_rectangle"
    OVAL = "oval"
    LINE = "line"


class WriterRun(BaseModel):
    """A paragraph of a multi-paragraph text record."""
    text: str
    bullet: Optional[str] = None          # "bullet" | "number"
    indent_level: int = 0
    space_after_pt: Optional[float] = None


class TextRecord(BaseModel):
    kind: Literal["text"] = "text"
    element_id: Optional[str] = None
    text: str = ""
    runs: Optional[List[WriterRun]] = None
    x_in: float
    y_in: float
    w_in: float
    h_in: Optional[float] = None          # None renders as "auto"
    font_size_pt: float
    font_face: str
    bold: bool = False
    italic: bool = False
    underline: bool = False
    strike: bool = False
    color: str = "000000"
    align: str = "left"
    valign: str = "top"
    char_spacing: float = 0               # hundredths of a point
    line_spacing: Optional[float] = None  # multiple of the font size
    space_after_pct: float = 0            # percent of the font size, between runs
    transparency: float = Field(default=0, ge=0, le=1)


class ImageRecord(BaseModel):
    kind: Literal["image"] = "image"
    element_id: Optional[str] = None
    data: Optional[str] = None            # data URI
    path: Optional[str] = None            # URL or file path
    x_in: float
    y_in: float
    w_in: float
    h_in: float


class ShapeRecord(BaseModel):
    kind: Literal["shape"] = "shape"
    element_id: Optional[str] = None
    shape: ShapeKind = ShapeKind.RECTANGLE
    x_in: float
    y_in: float
    w_in: float
    h_in: float
    fill_color: Optional[str] = None
    line_color: Optional[str] = None
    line_width_pt: Optional[float] = None
    corner_radius_in: Optional[float] = None


WriterItem = Annotated[
    Union[TextRecord, ImageRecord, ShapeRecord],
    Field(discriminator="kind")
]


class WriterSlideRecord(BaseModel):
    """Everything the writer needs for one slide, in paint order."""
    index: int
    slide_id: str
    slide_type: str
    background: Optional[str] = None
    items: List[WriterItem] = Field(default_factory=list)


class ExportWarning(BaseModel):
    """A skipped element or slide, kept for diagnostics."""
    slide_index: int
    element_id: Optional[str] = None
    message: str


class ExportResult(BaseModel):
    """Outcome of a full export."""
    success: bool
    slide_count: int = 0
    output_path: Optional[str] = None
    file_name: Optional[str] = None
    storage_url: Optional[str] = None
    warnings: List[ExportWarning] = Field(default_factory=list)
    error: Optional[str] = None
