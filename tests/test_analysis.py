import pytest
from PIL import Image

from thumbnail_editor.analysis import (
    CANVAS_AREA,
    NO_TEXT_CONTRAST,
    SUGGEST_ADD_TITLE,
    SUGGEST_CONTRAST,
    SUGGEST_ENLARGE,
    SUGGEST_FEWER_WORDS,
    SUGGEST_FOCAL,
    SUGGEST_REDUCE_TEXT,
    analyze,
    area_score,
    composite_score,
    contrast_score,
    word_score,
)
from thumbnail_editor.background import Background
from thumbnail_editor.colors import FALLBACK_COLOR, contrast_ratio
from thumbnail_editor.elements import create_arrow, create_badge, create_rect, create_text


@pytest.fixture
def black_bg():
    return Background(bg_color="#000000")


def quarter_canvas_text(text, fill="#ffffff"):
    # 1280 x 180 = 25% of the canvas
    return create_text({"text": text, "fill": fill, "width": 1280, "height": 180})


def test_empty_scene(black_bg):
    a = analyze([], black_bg)
    assert a.word_count == 0
    assert a.area_ratio == 0
    assert a.avg_contrast == NO_TEXT_CONTRAST == 8.0
    assert a.suggestions == [SUGGEST_ADD_TITLE, SUGGEST_ENLARGE, SUGGEST_FOCAL]


def test_perfect_composition_scores_100(black_bg):
    text = quarter_canvas_text("JANGAN LEWATKAN INI SEKARANG")
    a = analyze([text, create_badge()], black_bg)
    assert a.word_count == 4
    assert a.area_ratio == pytest.approx(0.25)
    assert a.avg_contrast == pytest.approx(21.0)
    assert word_score(a.word_count) == 1.0
    assert area_score(a.area_ratio) == 1.0
    assert contrast_score(a.avg_contrast) == 1.0
    assert a.score == 100
    assert a.suggestions == []
    assert a.band == "good"


def test_three_word_headline():
    a = analyze([quarter_canvas_text("JANGAN LEWATKAN INI"), create_arrow()], Background(bg_color="#000"))
    assert a.word_count == 3
    # 100 * (0.30 * 0.875 + 0.35 + 0.35) = 96.25
    assert a.score == 96


def test_words_are_counted_per_text_element(black_bg):
    texts = [create_text({"text": "  TIPS\tYOUTUBE "}), create_text({"text": "HARI\nINI"}), create_rect()]
    assert analyze(texts, black_bg).word_count == 4


@pytest.mark.parametrize("count,expected", [(4, 1.0), (0, 0.5), (2, 0.75), (8, 0.5), (12, 0.0), (40, 0.0)])
def test_word_score(count, expected):
    assert word_score(count) == pytest.approx(expected)


@pytest.mark.parametrize("ratio,expected", [
    (0.0, 0.0), (0.06, 0.5), (0.12, 1.0), (0.25, 1.0), (0.4, 1.0), (0.45, 0.5), (0.5, 0.0), (0.9, 0.0),
])
def test_area_score(ratio, expected):
    assert area_score(ratio) == pytest.approx(expected)


def test_contrast_score():
    assert contrast_score(13) == 1.0
    assert contrast_score(3.25) == pytest.approx(0.5)


def test_composite_rounds_half_up():
    assert composite_score(1, 1, 1) == 100
    assert composite_score(0, 0, 0) == 0
    assert composite_score(0.875, 1, 1) == 96


def test_suggestions_follow_fixed_order(black_bg):
    text = create_text({
        "text": "satu dua tiga empat lima enam tujuh delapan",
        "fill": "#111111",
        "width": 1280,
        "height": 360,
    })
    a = analyze([text], black_bg)
    assert a.word_count == 8
    assert a.area_ratio == pytest.approx(0.5)
    assert a.suggestions == [SUGGEST_FEWER_WORDS, SUGGEST_REDUCE_TEXT, SUGGEST_CONTRAST, SUGGEST_FOCAL]


def test_area_ratio_ignores_rotation_and_overlap(black_bg):
    t1 = create_text({"width": 640, "height": 360, "rotation": 45})
    t2 = create_text({"width": 640, "height": 360, "x": -100, "y": -100})
    a = analyze([t1, t2], black_bg)
    assert a.area_ratio == pytest.approx(2 * 640 * 360 / CANVAS_AREA)


def test_contrast_uses_background_image_average():
    bg = Background(bg_color="#000000", image=Image.new("RGB", (320, 180), (255, 255, 255)))
    a = analyze([quarter_canvas_text("DUA KATA")], bg)
    assert a.avg_contrast == pytest.approx(1.0)
    assert SUGGEST_CONTRAST in a.suggestions


def test_unsampleable_background_falls_back():
    bg = Background(image=object())
    a = analyze([quarter_canvas_text("DUA KATA")], bg)
    assert a.avg_contrast == pytest.approx(contrast_ratio((255, 255, 255), FALLBACK_COLOR))


def test_contrast_is_averaged_over_text_elements(black_bg):
    texts = [create_text({"fill": "#ffffff"}), create_text({"fill": "#000000"})]
    assert analyze(texts, black_bg).avg_contrast == pytest.approx((21.0 + 1.0) / 2)


def test_analysis_is_deterministic(black_bg):
    elements = [create_text(), create_rect(), create_arrow()]
    assert analyze(elements, black_bg) == analyze(elements, black_bg)


def test_band_thresholds(black_bg):
    assert analyze([], black_bg).band in ("good", "fair", "poor")
    a = analyze([create_text({"text": ""})], Background(bg_color="#ffffff"))
    assert a.score < 60
    assert a.band == "poor"
