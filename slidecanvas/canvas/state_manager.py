"""
Canvas State Manager
====================

Manages editor sessions in memory: the deck being edited, the custom
elements placed on it, and the one active gesture per session.
"""

import logging
import time
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from ..exceptions import (
    ElementNotFoundError,
    SessionNotFoundError,
    SlideLimitError,
    SlideNotFoundError,
    TemplateElementLockedError
)
from ..geometry.constraints import constrain_position, initial_image_size
from ..geometry.gestures import GestureController, GestureKind, GestureState, PointerEvent, apply_intent
from ..geometry.text_metrics import text_box_size
from ..models.canvas_models import CanvasConfig, CoordinateSpace, DEFAULT_CANVAS, Position
from ..models.element_models import (
    Element,
    ImageElement,
    SectionElement,
    Slide,
    SlideType,
    TextElement,
    TextStyle
)
from ..models.presentation_models import Presentation
from ..services.image_loader import ImageLoader
from ..services.template_builder import TemplateBuilder

logger = logging.getLogger(__name__)

DEFAULT_TEXT = "Click to edit"
# New elements land just inside the safe zone
NEW_ELEMENT_OFFSET_PX = 20


class EditorSession(BaseModel):
    """One user's deck being edited."""
    id: str
    title: str = "Untitled Presentation"
    slides: List[Slide] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: Optional[datetime] = None

    def touch(self) -> None:
        self.updated_at = datetime.now()


class StateManager:
    """Manages editor sessions."""

    def __init__(
        self,
        canvas: CanvasConfig = DEFAULT_CANVAS,
        image_loader: Optional[ImageLoader] = None,
        now: Optional[Callable[[], datetime]] = None
    ):
        self.canvas = canvas
        self.image_loader = image_loader or ImageLoader()
        self.now = now
        self._sessions: Dict[str, EditorSession] = {}
        self._gestures: Dict[str, GestureController] = {}
        self._gesture_slides: Dict[str, int] = {}
        self._last_id_ms = 0
        logger.info(f"[STATE-MANAGER] Initialized ({self.canvas.width_in}x{self.canvas.height_in}in @ {self.canvas.dpi}dpi)")

    # ===== Sessions =====

    def create_session(
        self,
        presentation: Optional[Presentation] = None,
        session_id: Optional[str] = None
    ) -> EditorSession:
        """Create a session, seeded from a presentation document or with one blank slide."""
        session_id = session_id or str(uuid.uuid4())

        if presentation is not None:
            slides = TemplateBuilder(now=self.now).build(presentation)
            title = presentation.title or "Untitled Presentation"
        else:
            slides = [Slide(id="slide-0", type=SlideType.CONTENT)]
            title = "Untitled Presentation"

        session = EditorSession(id=session_id, title=title, slides=slides)
        self._sessions[session_id] = session
        self._gestures[session_id] = GestureController(self.canvas)
        logger.info(f"[STATE-MANAGER] Created session {session_id} with {len(slides)} slides")
        return session

    def get_session(self, session_id: str) -> Optional[EditorSession]:
        """Get session state."""
        return self._sessions.get(session_id)

    def require_session(self, session_id: str) -> EditorSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session '{session_id}' not found")
        return session

    def clear_session(self, session_id: str) -> bool:
        """Remove all custom elements from every slide."""
        session = self.get_session(session_id)
        if not session:
            return False

        self.end_gesture(session_id)
        for slide in session.slides:
            slide.clear_custom()
        session.touch()
        logger.info(f"[STATE-MANAGER] Cleared custom elements in {session_id}")
        return True

    def delete_session(self, session_id: str) -> bool:
        self._gestures.pop(session_id, None)
        self._gesture_slides.pop(session_id, None)
        return self._sessions.pop(session_id, None) is not None

    # ===== Slides =====

    def get_slide(self, session_id: str, slide_index: int) -> Slide:
        session = self.require_session(session_id)
        if not 0 <= slide_index < len(session.slides):
            raise SlideNotFoundError(
                f"Slide {slide_index} out of range",
                context={"session_id": session_id, "slide_count": len(session.slides)}
            )
        return session.slides[slide_index]

    def add_slide(
        self,
        session_id: str,
        slide_type: SlideType = SlideType.CONTENT,
        title: Optional[str] = None
    ) -> Slide:
        """Append an empty slide."""
        session = self.require_session(session_id)
        if not self.canvas.multi_slide_enabled and session.slides:
            raise SlideLimitError("This editor supports a single slide", context={"session_id": session_id})

        slide = Slide(id=self._next_id("slide"), type=slide_type, title=title)
        session.slides.append(slide)
        session.touch()
        return slide

    # ===== Elements =====

    def _next_id(self, prefix: str) -> str:
        """Timestamp id, strictly increasing even within one millisecond."""
        now_ms = int(time.time() * 1000)
        if now_ms <= self._last_id_ms:
            now_ms = self._last_id_ms + 1
        self._last_id_ms = now_ms
        return f"{prefix}-{now_ms}"

    def _default_position(self) -> Position:
        offset = self.canvas.safe_zone_px + NEW_ELEMENT_OFFSET_PX
        return Position(x=offset, y=offset)

    def add_text_element(
        self,
        session_id: str,
        slide_index: int = 0,
        text: str = DEFAULT_TEXT,
        style: Optional[TextStyle] = None,
        position: Optional[Position] = None
    ) -> TextElement:
        """Place a new auto-sized pixel-space text box on a slide."""
        slide = self.get_slide(session_id, slide_index)
        element = TextElement(
            id=self._next_id("custom-text"),
            position_space=CoordinateSpace.PIXEL,
            position=position or self._default_position(),
            text=text,
            style=style or TextStyle()
        )
        size = text_box_size(element, self.canvas)
        element.position = constrain_position(element.position.x, element.position.y, size.width, size.height, self.canvas)

        slide.add_custom_element(element)
        self.require_session(session_id).touch()
        logger.info(f"[STATE-MANAGER] Added {element.id} to slide {slide_index} of {session_id}")
        return element

    def add_image_element(
        self,
        session_id: str,
        source: str,
        slide_index: int = 0,
        position: Optional[Position] = None,
        alt: Optional[str] = None
    ) -> ImageElement:
        """
        Place a new image, sized from its natural dimensions.

        Raises:
            ImageLoadError: source cannot be decoded or fetched
        """
        slide = self.get_slide(session_id, slide_index)
        natural_width, natural_height = self.image_loader.probe(source)
        size = initial_image_size(natural_width, natural_height, self.canvas)
        position = position or self._default_position()

        element = ImageElement(
            id=self._next_id("custom-image"),
            position_space=CoordinateSpace.PIXEL,
            position=constrain_position(position.x, position.y, size.width, size.height, self.canvas),
            size=size,
            source=source,
            aspect_ratio=natural_width / natural_height,
            natural_width=natural_width,
            natural_height=natural_height,
            alt=alt
        )
        slide.add_custom_element(element)
        self.require_session(session_id).touch()
        logger.info(f"[STATE-MANAGER] Added {element.id} ({natural_width}x{natural_height}) to {session_id}")
        return element

    def _find(self, session_id: str, slide_index: int, element_id: str) -> Element:
        slide = self.get_slide(session_id, slide_index)
        element, _ = slide.find_element(element_id)
        if element is None:
            raise ElementNotFoundError(
                f"Element '{element_id}' not found",
                context={"session_id": session_id, "slide_index": slide_index}
            )
        return element

    def _replace(self, session_id: str, slide_index: int, element: Element) -> Element:
        self.get_slide(session_id, slide_index).replace_element(element)
        self.require_session(session_id).touch()
        return element

    def update_text(
        self,
        session_id: str,
        element_id: str,
        text: str,
        slide_index: int = 0,
        description: Optional[str] = None
    ) -> Element:
        """Edit the text of a text element, or the title/description of a section."""
        element = self._find(session_id, slide_index, element_id)
        if isinstance(element, TextElement):
            updated = element.model_copy(update={"text": text})
        elif isinstance(element, SectionElement):
            update: Dict[str, Any] = {"title": text}
            if description is not None:
                update["description"] = description
            updated = element.model_copy(update=update)
        else:
            raise TemplateElementLockedError(f"Element '{element_id}' has no editable text")
        return self._replace(session_id, slide_index, updated)

    def update_style(
        self,
        session_id: str,
        element_id: str,
        changes: Dict[str, Any],
        slide_index: int = 0
    ) -> TextElement:
        """
        Merge style changes into a text element.

        Raises:
            pydantic.ValidationError: the merged style is invalid
        """
        element = self._find(session_id, slide_index, element_id)
        if not isinstance(element, TextElement):
            raise TemplateElementLockedError(f"Element '{element_id}' has no text style")

        style = TextStyle(**{**element.style.model_dump(), **changes})
        return self._replace(session_id, slide_index, element.model_copy(update={"style": style}))

    def remove_element(self, session_id: str, element_id: str, slide_index: int = 0) -> bool:
        """Remove element from a slide (template elements included)."""
        session = self.get_session(session_id)
        if not session or not 0 <= slide_index < len(session.slides):
            return False

        controller = self._gestures.get(session_id)
        if controller is not None and controller.element_id == element_id:
            self.end_gesture(session_id)

        removed = session.slides[slide_index].remove_element(element_id)
        if removed:
            session.touch()
        return removed

    # ===== Gestures =====

    def start_gesture(
        self,
        session_id: str,
        element_id: str,
        kind: GestureKind,
        pointer: PointerEvent,
        scale: float = 1.0,
        slide_index: int = 0
    ) -> GestureState:
        element = self._find(session_id, slide_index, element_id)
        state = self._gestures[session_id].gesture_start(element, kind, pointer, scale)
        self._gesture_slides[session_id] = slide_index
        return state

    def move_gesture(self, session_id: str, pointer: PointerEvent) -> Optional[Element]:
        """Apply a pointer move to the element under the active gesture; None when idle."""
        self.require_session(session_id)
        controller = self._gestures[session_id]
        intent = controller.gesture_move(pointer)
        if intent is None:
            return None

        slide_index = self._gesture_slides[session_id]
        element = self._find(session_id, slide_index, intent.element_id)
        return self._replace(session_id, slide_index, apply_intent(element, intent))

    def end_gesture(self, session_id: str) -> GestureState:
        self.require_session(session_id)
        self._gesture_slides.pop(session_id, None)
        return self._gestures[session_id].gesture_end()
