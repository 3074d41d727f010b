"""
Presentation Input Models
=========================

Business content the template builder turns into slides.
Accepts the camelCase JSON shape (`presentationTitle`, `slides`, ...)
as well as the snake_case field names. Missing or null values degrade
to empty strings and lists so a sparse document still yields a deck.
"""

from typing import List
from pydantic import BaseModel, Field, field_validator


class SectionContent(BaseModel):
    """A titled paragraph inside a topic."""
    title: str = ""
    description: str = ""

    class Config:
        frozen = True

    @field_validator("title", "description", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return "" if value is None else value


class Topic(BaseModel):
    """One agenda topic and its sections."""
    title: str = ""
    sections: List[SectionContent] = Field(default_factory=list)

    class Config:
        frozen = True

    @field_validator("title", mode="before")
    @classmethod
    def none_to_empty_title(cls, value):
        return "" if value is None else value

    @field_validator("sections", mode="before")
    @classmethod
    def none_to_empty_sections(cls, value):
        return [] if value is None else value


class Presentation(BaseModel):
    """Immutable source document for a generated deck."""
    title: str = Field(default="", alias="presentationTitle")
    subtitle: str = Field(default="", alias="presentationSubtitle")
    topics: List[Topic] = Field(default_factory=list, alias="slides")

    class Config:
        frozen = True
        populate_by_name = True

    @field_validator("title", "subtitle", mode="before")
    @classmethod
    def none_to_empty_text(cls, value):
        return "" if value is None else value

    @field_validator("topics", mode="before")
    @classmethod
    def none_to_empty_topics(cls, value):
        return [] if value is None else value
