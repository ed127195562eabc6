import pytest

from thumbnail_editor.colors import InvalidColorFormat
from thumbnail_editor.elements import (
    ArrowElement,
    BadgeElement,
    CircleElement,
    DISPLAY_FONT,
    RectElement,
    TextElement,
    create_arrow,
    create_badge,
    create_circle,
    create_element,
    create_rect,
    create_text,
    element_to_dict,
    patch_element,
)
from thumbnail_editor.scene import Scene


def test_text_defaults():
    t = create_text()
    assert isinstance(t, TextElement)
    assert t.kind == "text"
    assert t.text == "JUDUL BESAR"
    assert t.font_size == 120
    assert t.font_style == "bold"
    assert t.font_family == DISPLAY_FONT
    assert t.fill == "#ffffff"
    assert (t.stroke, t.stroke_width) == ("#000000", 8)
    assert (t.shadow_color, t.shadow_blur, t.shadow_opacity) == ("#000000", 10, 0.6)
    assert t.align == "left"
    assert t.width == 1000
    assert t.height == pytest.approx(120 * 1.3)
    assert t.draggable is True


def test_text_height_follows_preset_font_size():
    t = create_text({"text": "RAHASIA VIRAL", "font_size": 150})
    assert t.height == pytest.approx(150 * 1.3)
    assert t.text == "RAHASIA VIRAL"


def test_shape_defaults():
    r = create_rect()
    assert (r.x, r.y, r.width, r.height) == (60, 60, 500, 220)
    assert (r.fill, r.opacity, r.corner_radius, r.stroke_width) == ("#ffce33", 0.9, 16, 0)

    c = create_circle()
    assert (c.x, c.y, c.radius) == (300, 300, 120)
    assert (c.fill, c.opacity, c.stroke_width) == ("#2fa6ff", 0.9, 0)

    a = create_arrow()
    assert (a.x, a.y, a.rotation) == (950, 540, -20)
    assert a.points == [(0.0, 0.0), (-180.0, -80.0)]
    assert (a.pointer_length, a.pointer_width) == (26, 26)
    assert a.fill == a.stroke == "#ff5b6e"
    assert a.stroke_width == 18

    b = create_badge()
    assert (b.x, b.y, b.rotation) == (1080, 120, 8)
    assert (b.num_points, b.inner_radius, b.outer_radius) == (12, 38, 90)
    assert (b.fill, b.stroke, b.stroke_width) == ("#ffce33", "#000000", 10)
    assert (b.text, b.text_fill, b.text_size) == ("NEW", "#000000", 48)


def test_ids_are_unique():
    ids = {create_element(kind).id for kind in ("text", "rect", "circle", "arrow", "badge") for _ in range(20)}
    assert len(ids) == 100


def test_create_element_dispatches_by_kind():
    assert isinstance(create_element("rect"), RectElement)
    assert isinstance(create_element("circle"), CircleElement)
    assert isinstance(create_element("arrow"), ArrowElement)
    assert isinstance(create_element("badge"), BadgeElement)
    with pytest.raises(ValueError, match="Unknown element kind"):
        create_element("hexagon")


def test_colors_are_normalized():
    assert create_rect({"fill": "#ABC"}).fill == "#aabbcc"


@pytest.mark.parametrize("kind,preset,error", [
    ("rect", {"width": -1}, ValueError),
    ("rect", {"opacity": 1.5}, ValueError),
    ("circle", {"radius": float("nan")}, ValueError),
    ("text", {"fill": "white"}, InvalidColorFormat),
    ("text", {"align": "justify"}, ValueError),
    ("arrow", {"points": [(0, 0)]}, ValueError),
    ("badge", {"num_points": 1}, ValueError),
    ("rect", {"x": float("inf")}, ValueError),
    ("text", {"draggable": False}, ValueError),
])
def test_invalid_fields_are_rejected(kind, preset, error):
    with pytest.raises(error):
        create_element(kind, preset)


def test_unknown_preset_field_is_rejected():
    with pytest.raises(TypeError):
        create_rect({"radius": 4})


def test_patch_keeps_id_and_kind():
    r = create_rect()
    patched = patch_element(r, {"width": 320, "fill": "#000"})
    assert patched.id == r.id
    assert isinstance(patched, RectElement)
    assert (patched.width, patched.fill) == (320, "#000000")
    assert r.width == 500


def test_patch_rejects_unknown_fields_and_id():
    r = create_rect()
    with pytest.raises(ValueError, match="Unknown rect field"):
        patch_element(r, {"radius": 3})
    with pytest.raises(ValueError):
        patch_element(r, {"id": "other"})


def test_draggable_is_not_editable():
    s = Scene()
    tid = s.add(create_text())
    for value in (False, "nope"):
        with pytest.raises(ValueError):
            s.update(tid, draggable=value)
    assert s.get(tid).draggable is True


def test_element_to_dict():
    d = element_to_dict(create_arrow())
    assert d["kind"] == "arrow"
    assert d["points"] == [[0.0, 0.0], [-180.0, -80.0]]
    assert "id" in d
