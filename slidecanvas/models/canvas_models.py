"""
Canvas Models for Slide Canvas
==============================

Canvas configuration and the geometry primitives shared by every element.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from ..geometry.units import round_half_up, parse_percent


class CoordinateSpace(str, Enum):
    """Unit system an element's position and size are expressed in."""
    PIXEL = "pixel"
    INCH = "inch"
    PERCENT = "percent"


class CanvasConfig(BaseModel):
    """
    Slide canvas constants.

    Passed explicitly to every geometry and export function so that
    several canvases (or tests) can run with independent settings.
    """
    width_in: float = Field(default=10.0, gt=0)
    height_in: float = Field(default=5.625, gt=0)
    dpi: float = Field(default=96, gt=0)
    safe_zone_in: float = Field(default=0.25, ge=0)

    # Interactive sizing limits
    min_width_px: int = Field(default=50, ge=1)
    min_height_px: int = Field(default=50, ge=1)
    text_min_width_px: int = Field(default=100, ge=1)
    text_padding_px: int = Field(default=8, ge=0)

    # Editor feature flags
    letter_spacing_enabled: bool = True
    multi_slide_enabled: bool = True

    class Config:
        frozen = True

    @property
    def width_px(self) -> float:
        return round_half_up(self.width_in * self.dpi)

    @property
    def height_px(self) -> float:
        return round_half_up(self.height_in * self.dpi)

    @property
    def safe_zone_px(self) -> float:
        return round_half_up(self.safe_zone_in * self.dpi)

    @property
    def usable_width_px(self) -> float:
        return self.width_px - 2 * self.safe_zone_px

    @property
    def usable_height_px(self) -> float:
        return self.height_px - 2 * self.safe_zone_px


DEFAULT_CANVAS = CanvasConfig()


class Position(BaseModel):
    """Top-left corner of an element, in its declared coordinate space."""
    x: float = 0.0
    y: float = 0.0

    @field_validator("x", "y", mode="before")
    @classmethod
    def _parse_percent_strings(cls, value):
        # Template layouts are authored as "15%" strings
        if isinstance(value, str):
            return parse_percent(value)
        return value


class Size(BaseModel):
    """Width and height of an element, in its declared coordinate space."""
    width: float
    height: float

    @field_validator("width", "height", mode="before")
    @classmethod
    def _parse_percent_strings(cls, value):
        if isinstance(value, str):
            return parse_percent(value)
        return value


class Box(BaseModel):
    """Absolute geometry in inches."""
    x: float
    y: float
    width: float
    height: Optional[float] = None
