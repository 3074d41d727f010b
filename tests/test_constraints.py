from slidecanvas.geometry.constraints import (
    apply_drag_delta,
    available_width,
    constrain_position,
    initial_image_size,
    render_scale,
    resize_preserving_aspect,
    screen_to_canvas_delta
)
from slidecanvas.models.canvas_models import CanvasConfig, Position


def test_canvas_derived_dimensions(canvas):
    assert canvas.width_px == 960
    assert canvas.height_px == 540
    assert canvas.safe_zone_px == 24
    assert canvas.usable_width_px == 912
    assert canvas.usable_height_px == 492


def test_over_drag_left_clamps_to_safe_zone(canvas):
    position = constrain_position(-500, -500, 100, 50, canvas)
    assert (position.x, position.y) == (24, 24)


def test_over_drag_right_clamps_to_far_edge(canvas):
    position = constrain_position(5000, 5000, 100, 50, canvas)
    assert position.x == 960 - 100 - 24
    assert position.y == 540 - 50 - 24


def test_fractional_size_never_rounds_past_far_edge(canvas):
    position = constrain_position(5000, 5000, 100.5, 50.5, canvas)
    assert position.x <= 960 - 100.5 - 24
    assert position.y <= 540 - 50.5 - 24
    assert (position.x, position.y) == (835, 465)


def test_position_inside_bounds_is_unchanged(canvas):
    position = constrain_position(300, 200, 100, 50, canvas)
    assert (position.x, position.y) == (300, 200)


def test_invalid_numbers_fail_closed(canvas):
    position = constrain_position(float("nan"), None, 100, 50, canvas)
    assert (position.x, position.y) == (24, 24)


def test_oversized_element_pins_to_safe_zone(canvas):
    position = constrain_position(400, 300, 2000, 1000, canvas)
    assert (position.x, position.y) == (24, 24)


def test_drag_clamp_holds_for_many_deltas(canvas):
    start = Position(x=400, y=200)
    for delta in range(-2000, 2001, 37):
        position = apply_drag_delta(start, delta, -delta, 1.0, 120, 80, canvas)
        assert canvas.safe_zone_px <= position.x <= canvas.width_px - 120 - canvas.safe_zone_px
        assert canvas.safe_zone_px <= position.y <= canvas.height_px - 80 - canvas.safe_zone_px


def test_resize_keeps_aspect_ratio(canvas):
    size = resize_preserving_aspect(150, 100, 100, 1.5, canvas)
    assert size.width == 250
    assert abs(size.height - 250 / 1.5) <= 0.5


def test_resize_height_cap_recomputes_width(canvas):
    size = resize_preserving_aspect(600, 400, 300, 1.5, canvas)
    assert size.height == 492
    assert size.width == 492 * 1.5


def test_resize_clamps_width_to_usable_area(canvas):
    size = resize_preserving_aspect(800, 100, 500, 8, canvas)
    assert size.width == 912
    assert size.height == 114


def test_resize_never_goes_below_minimum(canvas):
    size = resize_preserving_aspect(100, 100, -500, 1.0, canvas)
    assert (size.width, size.height) == (50, 50)


def test_banner_resize_keeps_width_inside_usable_area(canvas):
    size = resize_preserving_aspect(900, 45, 100, 20.0, canvas)
    assert size.width == canvas.usable_width_px
    assert size.height == canvas.min_height_px


def test_resize_derives_ratio_when_missing(canvas):
    size = resize_preserving_aspect(200, 100, 100, None, canvas)
    assert (size.width, size.height) == (300, 150)


def test_render_scale():
    canvas = CanvasConfig()
    assert render_scale(480, canvas) == 0.5
    assert render_scale(2000, canvas) == 1.0
    assert render_scale(0, canvas) == 1.0
    assert render_scale(-10, canvas) == 1.0


def test_screen_delta_is_divided_by_scale():
    assert screen_to_canvas_delta(50, 0.5) == 100
    assert screen_to_canvas_delta(50, 0) == 50


def test_drag_delta_applies_scale(canvas):
    position = apply_drag_delta(Position(x=100, y=100), 50, 20, 0.5, 100, 50, canvas)
    assert (position.x, position.y) == (200, 140)


def test_initial_image_size(canvas):
    wide = initial_image_size(2000, 1000, canvas)
    assert (wide.width, wide.height) == (456, 228)

    small = initial_image_size(200, 100, canvas)
    assert (small.width, small.height) == (200, 100)

    tall = initial_image_size(100, 2000, canvas)
    assert tall.height == 492
    assert tall.width == 25


def test_available_width(canvas):
    assert available_width(24, canvas) == 888
    assert available_width(900, canvas) == canvas.text_min_width_px
