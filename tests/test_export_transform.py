from slidecanvas.models.canvas_models import CanvasConfig, Position, Size
from slidecanvas.models.element_models import ImageElement, Slide, TextElement, TextRun, TextStyle, TextTransform
from slidecanvas.models.writer_models import ImageRecord, ShapeKind, ShapeRecord, TextRecord
from slidecanvas.services.export_transform import ExportTransform, format_number, strip_hash, to_writer_records
from slidecanvas.services.template_builder import build_slides, slide_background


def find(record, element_id):
    return next(item for item in record.items if item.element_id == element_id)


def custom_text(**style):
    return TextElement(
        id="custom-text-1",
        position=Position(x=96, y=48),
        text="hello world",
        style=TextStyle(**style)
    )


def test_color_mapping_strips_hash(q4_presentation, clock):
    slides = build_slides(q4_presentation, now=clock)
    slides[0].add_custom_element(custom_text(color_hex="#17A33E"))
    records, warnings = to_writer_records(slides)
    assert find(records[0], "custom-text-1").color == "17A33E"
    assert warnings == []


def test_strip_hash_and_number_format():
    assert strip_hash("#17a33e") == "17A33E"
    assert format_number(3) == "03"
    assert format_number(12) == "12"


def test_one_record_per_slide_in_order(q4_presentation, clock):
    slides = build_slides(q4_presentation, now=clock)
    records, _ = to_writer_records(slides)
    assert [r.slide_id for r in records] == [s.id for s in slides]
    assert [r.index for r in records] == list(range(5))
    assert all(r.background == slide_background(s.type) for r, s in zip(records, slides))


def test_unsized_text_gets_auto_height_and_remaining_width(canvas):
    slide = Slide(id="s")
    slide.add_custom_element(custom_text(font_size_px=24, letter_spacing_px=2, transparency_percent=25))
    record = find(to_writer_records([slide], canvas)[0][0], "custom-text-1")

    assert isinstance(record, TextRecord)
    assert (record.x_in, record.y_in) == (1.0, 0.5)
    assert record.w_in == 10 - 1.0 - 0.25
    assert record.h_in is None
    assert record.font_size_pt == 18
    assert record.char_spacing == 150
    assert record.transparency == 0.25
    assert record.line_spacing == 1.2


def test_letter_spacing_flag_disables_char_spacing():
    canvas = CanvasConfig(letter_spacing_enabled=False)
    slide = Slide(id="s")
    slide.add_custom_element(custom_text(letter_spacing_px=4))
    record = find(ExportTransform(canvas).to_writer_records([slide])[0][0], "custom-text-1")
    assert record.char_spacing == 0


def test_text_transform_applied_to_literal_text():
    slide = Slide(id="s")
    slide.add_custom_element(custom_text(text_transform=TextTransform.UPPERCASE))
    record = find(to_writer_records([slide])[0][0], "custom-text-1")
    assert record.text == "HELLO WORLD"


def test_runs_carry_bullets_and_space_after():
    slide = Slide(id="s")
    slide.add_custom_element(TextElement(
        id="list",
        position=Position(x=96, y=96),
        size=Size(width=480, height=192),
        style=TextStyle(line_height_multiplier=1.5, text_transform=TextTransform.CAPITALIZE),
        runs=[TextRun(text="first point", bullet="bullet"), TextRun(text="second point", bullet="number", indent_level=1)]
    ))
    record = find(to_writer_records([slide])[0][0], "list")
    assert [r.text for r in record.runs] == ["First Point", "Second Point"]
    assert [r.bullet for r in record.runs] == ["bullet", "number"]
    assert record.space_after_pct == 50
    assert (record.w_in, record.h_in) == (5.0, 2.0)


def test_image_without_source_is_skipped_with_warning():
    slide = Slide(id="s")
    slide.add_custom_element(ImageElement(id="broken", position=Position(x=50, y=50), size=Size(width=96, height=96)))
    slide.add_custom_element(custom_text())
    records, warnings = to_writer_records([slide])

    assert [item.element_id for item in records[0].items] == ["custom-text-1"]
    assert len(warnings) == 1
    assert warnings[0].element_id == "broken"
    assert warnings[0].slide_index == 0


def test_image_records_split_data_and_path(png_data_uri):
    slide = Slide(id="s")
    slide.add_custom_element(ImageElement(
        id="inline", position=Position(x=96, y=96), size=Size(width=192, height=96), source=png_data_uri, aspect_ratio=2
    ))
    slide.add_custom_element(ImageElement(
        id="remote", position=Position(x=0, y=0), size=Size(width=96, height=96), source="https://example.com/a.png"
    ))
    records, _ = to_writer_records([slide])
    inline, remote = find(records[0], "inline"), find(records[0], "remote")
    assert isinstance(inline, ImageRecord)
    assert inline.data == png_data_uri and inline.path is None
    assert (inline.x_in, inline.y_in, inline.w_in, inline.h_in) == (1.0, 1.0, 2.0, 1.0)
    assert remote.path == "https://example.com/a.png" and remote.data is None


def test_custom_elements_paint_after_template(q4_presentation, clock):
    slides = build_slides(q4_presentation, now=clock)
    slides[0].add_custom_element(custom_text())
    records, _ = to_writer_records(slides)
    assert records[0].items[-1].element_id == "custom-text-1"


def test_title_slide_gets_footer_divider(q4_presentation, clock):
    records, _ = to_writer_records(build_slides(q4_presentation, now=clock))
    divider = records[0].items[0]
    assert isinstance(divider, ShapeRecord)
    assert divider.shape == ShapeKind.LINE
    assert divider.y_in == 5.0625
    assert divider.line_color == "A9A9A9"
    assert [item.element_id for item in records[0].items[1:]] == ["main-title", "subtitle", "date-caption"]


def test_toc_items_expand_to_box_number_and_title(q4_presentation, clock):
    records, _ = to_writer_records(build_slides(q4_presentation, now=clock))
    toc = records[1]
    assert len(toc.items) == 1 + 3 * 3

    box = find(toc, "toc-item-1-box")
    number = find(toc, "toc-item-1-number")
    title = find(toc, "toc-item-1")
    assert box.path.endswith("section20_TOC_box1.png")
    assert find(toc, "toc-item-2-box").path.endswith("section20_TOC_box2.png")
    assert number.text == "01"
    assert number.color == "FFFFFF"
    assert number.font_size_pt == 14
    assert title.text == "Financial Overview"
    assert title.x_in == 1.2
    assert title.w_in == 2.2


def test_sections_expand_to_box_title_and_description(q4_presentation, clock):
    records, _ = to_writer_records(build_slides(q4_presentation, now=clock))
    content = records[2]
    assert len(content.items) == 1 + 3 * 3

    box = find(content, "section-0-0-box")
    title = find(content, "section-0-0-title")
    description = find(content, "section-0-0-description")
    assert (box.w_in, box.h_in) == (4.0, 1.2375)
    assert title.text == "Revenue"
    assert title.x_in == round(box.x_in + 0.2, 4)
    assert title.h_in == 0.4
    assert description.text == "Up 12% year over year"
    assert description.h_in == 0.7
    assert description.font_size_pt == 11


def test_failing_slide_is_omitted_with_warning(q4_presentation, clock):
    slides = build_slides(q4_presentation, now=clock)
    transform = ExportTransform()

    def explode(element):
        raise RuntimeError("boom")

    transform._section = explode
    records, warnings = transform.to_writer_records(slides)
    assert [r.slide_id for r in records] == ["title", "toc-0"]
    assert [w.slide_index for w in warnings] == [2, 3, 4]
    assert all("boom" in w.message for w in warnings)
