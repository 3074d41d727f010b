"""
Slide Canvas Exceptions
=======================

Exception hierarchy shared by the scene model, export and storage layers.
Geometry code never raises these; it clamps instead.
"""

from typing import Optional, Dict, Any


class SlideCanvasError(Exception):
    """Base exception for all slide canvas errors."""

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.cause = cause
        self.context = context or {}

    def __str__(self):
        parts = [super().__str__()]
        if self.cause:
            parts.append(f" (caused by: {type(self.cause).__name__}: {str(self.cause)})")
        if self.context:
            parts.append(f" Context: {self.context}")
        return "".join(parts)


# === Scene model ===

class SessionNotFoundError(SlideCanvasError):
    """No editor session with the requested id."""
    pass


class SlideNotFoundError(SlideCanvasError):
    """Slide index outside the session's deck."""
    pass


class ElementNotFoundError(SlideCanvasError):
    """No element with the requested id on the slide."""
    pass


class DuplicateElementError(SlideCanvasError):
    """Element id already used by a template or custom element on the slide."""
    pass


class TemplateElementLockedError(SlideCanvasError):
    """Template elements cannot be dragged or resized."""
    pass


class SlideLimitError(SlideCanvasError):
    """Session is configured for a single slide."""
    pass


# === Export ===

class MissingElementFieldError(SlideCanvasError):
    """An element lacks a field required to build its writer record."""

    def __init__(self, element_id: str, field_name: str, **kwargs):
        super().__init__(f"Element '{element_id}' is missing '{field_name}'", **kwargs)
        self.element_id = element_id
        self.field_name = field_name


class ImageLoadError(SlideCanvasError):
    """Image source could not be decoded or fetched."""
    pass


class WriterError(SlideCanvasError):
    """The presentation file could not be written."""
    pass


class StorageError(SlideCanvasError):
    """The storage collaborator rejected the upload."""
    pass
