import pytest
from pydantic import ValidationError

from slidecanvas.canvas.state_manager import StateManager
from slidecanvas.exceptions import (
    ElementNotFoundError,
    ImageLoadError,
    SessionNotFoundError,
    SlideLimitError,
    SlideNotFoundError,
    TemplateElementLockedError
)
from slidecanvas.geometry.gestures import GestureKind, GestureState, PointerEvent
from slidecanvas.models.canvas_models import CanvasConfig, Position
from slidecanvas.models.element_models import ImageElement, SlideType, TextElement


@pytest.fixture
def manager(offline_loader, clock):
    return StateManager(image_loader=offline_loader, now=clock)


def test_blank_session_has_one_slide(manager):
    session = manager.create_session()
    assert len(session.slides) == 1
    assert manager.get_session(session.id) is session
    assert manager.get_session("missing") is None


def test_session_seeded_from_presentation(manager, q4_presentation):
    session = manager.create_session(q4_presentation, session_id="q4")
    assert session.id == "q4"
    assert session.title == "Q4 Review"
    assert [s.id for s in session.slides] == ["title", "toc-0", "content-0-0", "content-1-0", "content-2-0"]


def test_add_text_element_defaults(manager):
    session = manager.create_session()
    element = manager.add_text_element(session.id)

    assert isinstance(element, TextElement)
    assert element.id.startswith("custom-text-")
    assert element.text == "Click to edit"
    assert (element.position.x, element.position.y) == (44, 44)
    assert session.slides[0].custom_elements == [element]
    assert session.updated_at is not None


def test_added_text_is_clamped_into_safe_zone(manager):
    session = manager.create_session()
    element = manager.add_text_element(session.id, position=Position(x=5000, y=-10))
    assert element.position.x == 960 - 100 - 24
    assert element.position.y == 24


def test_element_ids_strictly_increase(manager):
    session = manager.create_session()
    ids = [manager.add_text_element(session.id).id for _ in range(5)]
    stamps = [int(i.rsplit("-", 1)[1]) for i in ids]
    assert stamps == sorted(set(stamps))


def test_add_image_element_sizes_from_natural_dimensions(manager, png_data_uri):
    session = manager.create_session()
    element = manager.add_image_element(session.id, png_data_uri)

    assert isinstance(element, ImageElement)
    assert element.id.startswith("custom-image-")
    assert (element.natural_width, element.natural_height) == (200, 100)
    assert (element.size.width, element.size.height) == (200, 100)
    assert element.aspect_ratio == 2.0


def test_add_image_rejects_bad_source(manager):
    session = manager.create_session()
    with pytest.raises(ImageLoadError):
        manager.add_image_element(session.id, "data:image/png;base64,@@@")
    assert session.slides[0].custom_elements == []


def test_template_text_and_style_are_editable(manager, q4_presentation):
    session = manager.create_session(q4_presentation)
    updated = manager.update_text(session.id, "main-title", "Q4 Results")
    assert updated.text == "Q4 Results"
    assert session.slides[0].elements[0].text == "Q4 Results"

    styled = manager.update_style(session.id, "main-title", {"color_hex": "#ff0000", "italic": True})
    assert styled.style.color_hex == "#FF0000"
    assert styled.style.italic is True
    assert styled.style.bold is True


def test_section_title_and_description_are_editable(manager, q4_presentation):
    session = manager.create_session(q4_presentation)
    section = manager.update_text(session.id, "section-0-0", "Sales", slide_index=2, description="Record quarter")
    assert (section.title, section.description) == ("Sales", "Record quarter")


def test_invalid_style_is_rejected(manager):
    session = manager.create_session()
    element = manager.add_text_element(session.id)
    with pytest.raises(ValidationError):
        manager.update_style(session.id, element.id, {"color_hex": "red"})


def test_image_has_no_text(manager, png_data_uri):
    session = manager.create_session()
    image = manager.add_image_element(session.id, png_data_uri)
    with pytest.raises(TemplateElementLockedError):
        manager.update_text(session.id, image.id, "nope")


def test_remove_element(manager, q4_presentation):
    session = manager.create_session(q4_presentation)
    assert manager.remove_element(session.id, "subtitle") is True
    assert "subtitle" not in session.slides[0].element_ids()
    assert manager.remove_element(session.id, "subtitle") is False
    assert manager.remove_element("missing", "subtitle") is False


def test_drag_gesture_moves_custom_element(manager):
    session = manager.create_session()
    element = manager.add_text_element(session.id)

    state = manager.start_gesture(session.id, element.id, GestureKind.DRAG, PointerEvent(x=0, y=0))
    assert state == GestureState.DRAGGING

    moved = manager.move_gesture(session.id, PointerEvent(x=100, y=50))
    assert (moved.position.x, moved.position.y) == (144, 94)
    assert session.slides[0].custom_elements[0].position.x == 144

    assert manager.end_gesture(session.id) == GestureState.IDLE
    assert manager.move_gesture(session.id, PointerEvent(x=500, y=500)) is None


def test_resize_gesture_keeps_image_ratio(manager, png_data_uri):
    session = manager.create_session()
    image = manager.add_image_element(session.id, png_data_uri)

    manager.start_gesture(session.id, image.id, GestureKind.RESIZE, PointerEvent(x=0, y=0))
    resized = manager.move_gesture(session.id, PointerEvent(x=100, y=0))
    assert (resized.size.width, resized.size.height) == (300, 150)


def test_template_elements_cannot_be_dragged(manager, q4_presentation):
    session = manager.create_session(q4_presentation)
    with pytest.raises(TemplateElementLockedError):
        manager.start_gesture(session.id, "main-title", GestureKind.DRAG, PointerEvent(x=0, y=0))


def test_removing_dragged_element_ends_gesture(manager):
    session = manager.create_session()
    element = manager.add_text_element(session.id)
    manager.start_gesture(session.id, element.id, GestureKind.DRAG, PointerEvent(x=0, y=0))
    manager.remove_element(session.id, element.id)
    assert manager.move_gesture(session.id, PointerEvent(x=10, y=10)) is None


def test_add_slide_and_single_slide_mode(offline_loader):
    manager = StateManager(image_loader=offline_loader)
    session = manager.create_session()
    slide = manager.add_slide(session.id, SlideType.CONTENT, "Appendix")
    assert slide.id.startswith("slide-")
    assert len(session.slides) == 2

    single = StateManager(canvas=CanvasConfig(multi_slide_enabled=False), image_loader=offline_loader)
    single_session = single.create_session()
    with pytest.raises(SlideLimitError):
        single.add_slide(single_session.id)


def test_clear_session_removes_only_custom_elements(manager, q4_presentation):
    session = manager.create_session(q4_presentation)
    manager.add_text_element(session.id)
    assert manager.clear_session(session.id) is True
    assert session.slides[0].custom_elements == []
    assert session.slides[0].element_ids() == ["main-title", "subtitle", "date-caption"]
    assert manager.clear_session("missing") is False


def test_lookup_errors(manager):
    session = manager.create_session()
    with pytest.raises(SessionNotFoundError):
        manager.add_text_element("missing")
    with pytest.raises(SlideNotFoundError):
        manager.add_text_element(session.id, slide_index=3)
    with pytest.raises(ElementNotFoundError):
        manager.update_text(session.id, "nope", "text")
