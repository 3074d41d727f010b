import pytest

from slidecanvas.exceptions import TemplateElementLockedError
from slidecanvas.geometry.gestures import (
    GestureController,
    GestureKind,
    GestureState,
    MoveIntent,
    PointerEvent,
    ResizeIntent,
    apply_intent
)
from slidecanvas.models.canvas_models import CoordinateSpace, Position, Size
from slidecanvas.models.element_models import ImageElement, SectionElement, TextElement


def make_image(element_id="img", x=100, y=100, width=200, height=100):
    return ImageElement(
        id=element_id,
        position=Position(x=x, y=y),
        size=Size(width=width, height=height),
        source="data:image/png;base64,AAAA",
        aspect_ratio=width / height
    )


def test_drag_emits_clamped_move_intents(canvas):
    controller = GestureController(canvas)
    assert controller.gesture_start(make_image(), GestureKind.DRAG, PointerEvent(x=0, y=0)) == GestureState.DRAGGING

    intent = controller.gesture_move(PointerEvent(x=50, y=30))
    assert isinstance(intent, MoveIntent)
    assert (intent.position.x, intent.position.y) == (150, 130)

    intent = controller.gesture_move(PointerEvent(x=5000, y=-5000))
    assert intent.position.x == 960 - 200 - 24
    assert intent.position.y == 24


def test_drag_uses_render_scale(canvas):
    controller = GestureController(canvas)
    controller.gesture_start(make_image(), GestureKind.DRAG, PointerEvent(x=0, y=0), scale=0.5)
    intent = controller.gesture_move(PointerEvent(x=50, y=30))
    assert (intent.position.x, intent.position.y) == (200, 160)


def test_resize_preserves_aspect(canvas):
    controller = GestureController(canvas)
    controller.gesture_start(make_image(), GestureKind.RESIZE, PointerEvent(x=10, y=10))
    intent = controller.gesture_move(PointerEvent(x=110, y=999))
    assert isinstance(intent, ResizeIntent)
    assert (intent.size.width, intent.size.height) == (300, 150)


def test_end_always_returns_to_idle(canvas):
    controller = GestureController(canvas)
    assert controller.gesture_end() == GestureState.IDLE

    controller.gesture_start(make_image(), GestureKind.DRAG, PointerEvent(x=0, y=0))
    assert controller.gesture_end() == GestureState.IDLE
    assert controller.gesture_move(PointerEvent(x=10, y=10)) is None


def test_new_gesture_replaces_active_one(canvas):
    controller = GestureController(canvas)
    controller.gesture_start(make_image("first"), GestureKind.DRAG, PointerEvent(x=0, y=0))
    controller.gesture_start(make_image("second"), GestureKind.RESIZE, PointerEvent(x=0, y=0))
    assert controller.state == GestureState.RESIZING
    assert controller.element_id == "second"


def test_template_elements_are_locked(canvas):
    controller = GestureController(canvas)
    template = TextElement(id="main-title", position=Position(x=144, y=135), text="Title", is_template=True)
    with pytest.raises(TemplateElementLockedError):
        controller.gesture_start(template, GestureKind.DRAG, PointerEvent(x=0, y=0))
    assert controller.state == GestureState.IDLE


def test_only_images_resize(canvas):
    controller = GestureController(canvas)
    text = TextElement(id="t", position=Position(x=50, y=50), text="hi")
    section = SectionElement(id="s", position=Position(x=50, y=50), size=Size(width=300, height=100))
    with pytest.raises(TemplateElementLockedError):
        controller.gesture_start(text, GestureKind.RESIZE, PointerEvent(x=0, y=0))
    with pytest.raises(TemplateElementLockedError):
        controller.gesture_start(section, GestureKind.RESIZE, PointerEvent(x=0, y=0))


def test_percent_space_elements_cannot_be_dragged(canvas):
    controller = GestureController(canvas)
    element = TextElement(id="t", position_space=CoordinateSpace.PERCENT, position=Position(x="15%", y="25%"))
    with pytest.raises(TemplateElementLockedError):
        controller.gesture_start(element, GestureKind.DRAG, PointerEvent(x=0, y=0))


def test_text_drag_uses_auto_size(canvas):
    controller = GestureController(canvas)
    text = TextElement(id="t", position=Position(x=100, y=100), text="hi")
    controller.gesture_start(text, GestureKind.DRAG, PointerEvent(x=0, y=0))
    intent = controller.gesture_move(PointerEvent(x=5000, y=0))
    # Auto-sized box is at least the minimum text width
    assert intent.position.x == 960 - canvas.text_min_width_px - 24


def test_apply_intent_returns_updated_copy():
    image = make_image()
    moved = apply_intent(image, MoveIntent(element_id="img", position=Position(x=10, y=20)))
    resized = apply_intent(image, ResizeIntent(element_id="img", size=Size(width=50, height=25)))
    assert (moved.position.x, moved.position.y) == (10, 20)
    assert resized.size.width == 50
    assert (image.position.x, image.size.width) == (100, 200)
