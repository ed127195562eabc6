"""
Composition analysis - heuristic effectiveness score for a thumbnail.

analyze() is a pure function of the element sequence and the background:
word count, text area ratio and text/background contrast are turned into
sub-scores in [0, 1], blended into a 0-100 score, and every failed heuristic
adds one suggestion (in a fixed order).
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .background import Background
from .colors import average_color, contrast_ratio, hex_to_rgb
from .elements import ArrowElement, BadgeElement, Element, TextElement

CANVAS_W = 1280
CANVAS_H = 720
CANVAS_AREA = CANVAS_W * CANVAS_H

# Word count
IDEAL_WORDS = 4
MAX_COUNTED_WORDS = 12
WORD_FALLOFF = 8
MAX_WORDS = 6

# Text area ratio
MIN_AREA_RATIO = 0.12
MAX_AREA_RATIO = 0.4
AREA_CUTOFF = 0.5

# Contrast
EXCELLENT_CONTRAST = 6.5
MIN_CONTRAST = 4.5
NO_TEXT_CONTRAST = 8.0

WEIGHT_WORDS = 0.30
WEIGHT_AREA = 0.35
WEIGHT_CONTRAST = 0.35

SUGGEST_FEWER_WORDS = "Reduce the word count to keep the title punchy (6 words or fewer)."
SUGGEST_ADD_TITLE = "Add a short, strong title."
SUGGEST_ENLARGE = "Enlarge the key text/elements so they read at small sizes."
SUGGEST_REDUCE_TEXT = "Reduce text dominance to keep the visual clean."
SUGGEST_CONTRAST = "Increase text contrast (change the color, add an outline or shadow)."
SUGGEST_FOCAL = "Add a focal pointer element (badge or arrow) to guide the eye."


@dataclass(frozen=True)
class Analysis:
    score: int
    word_count: int
    area_ratio: float
    avg_contrast: float
    suggestions: List[str] = field(default_factory=list)

    @property
    def band(self) -> str:
        """Display band: good (>= 80), fair (>= 60) or poor."""
        if self.score >= 80:
            return "good"
        if self.score >= 60:
            return "fair"
        return "poor"

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "word_count": self.word_count,
            "area_ratio": self.area_ratio,
            "avg_contrast": self.avg_contrast,
            "suggestions": list(self.suggestions),
            "band": self.band,
        }


def _clamp(n: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, n))


def count_words(texts: Sequence[TextElement]) -> int:
    return sum(len((t.text or "").split()) for t in texts)


def text_area_ratio(texts: Sequence[TextElement]) -> float:
    """Unclipped, unrotated text box area over the canvas area."""
    return sum(t.width * t.height for t in texts) / CANVAS_AREA


def background_color(background: Optional[Background]):
    if background is None:
        return hex_to_rgb(Background().bg_color)
    if background.image is not None:
        return average_color(background.image)
    return hex_to_rgb(background.bg_color)


def average_text_contrast(texts: Sequence[TextElement], bg_rgb) -> float:
    if not texts:
        return NO_TEXT_CONTRAST
    ratios = [contrast_ratio(hex_to_rgb(t.fill), bg_rgb) for t in texts]
    return sum(ratios) / len(ratios)


def word_score(word_count: int) -> float:
    return _clamp(1 - abs(_clamp(word_count, 0, MAX_COUNTED_WORDS) - IDEAL_WORDS) / WORD_FALLOFF, 0, 1)


def area_score(ratio: float) -> float:
    if MIN_AREA_RATIO <= ratio <= MAX_AREA_RATIO:
        return 1.0
    if ratio < MIN_AREA_RATIO:
        return _clamp(ratio / MIN_AREA_RATIO, 0, 1)
    return _clamp((AREA_CUTOFF - ratio) / (AREA_CUTOFF - MAX_AREA_RATIO), 0, 1)


def contrast_score(avg_contrast: float) -> float:
    return _clamp(avg_contrast / EXCELLENT_CONTRAST, 0, 1)


def composite_score(w: float, a: float, c: float) -> int:
    raw = 100 * (WEIGHT_WORDS * w + WEIGHT_AREA * a + WEIGHT_CONTRAST * c)
    # Round half up; float noise below 1e-9 is ignored
    return int(_clamp(math.floor(raw + 0.5 + 1e-9), 0, 100))


def build_suggestions(elements: Sequence[Element], word_count: int,
                      area_ratio: float, avg_contrast: float) -> List[str]:
    suggestions = []
    if word_count > MAX_WORDS:
        suggestions.append(SUGGEST_FEWER_WORDS)
    if word_count == 0:
        suggestions.append(SUGGEST_ADD_TITLE)
    if area_ratio < MIN_AREA_RATIO:
        suggestions.append(SUGGEST_ENLARGE)
    if area_ratio > MAX_AREA_RATIO:
        suggestions.append(SUGGEST_REDUCE_TEXT)
    if avg_contrast < MIN_CONTRAST:
        suggestions.append(SUGGEST_CONTRAST)
    if not any(isinstance(e, (BadgeElement, ArrowElement)) for e in elements):
        suggestions.append(SUGGEST_FOCAL)
    return suggestions


def analyze(elements: Sequence[Element], background: Optional[Background] = None) -> Analysis:
    """Score a composition. Never raises for image sampling problems."""
    texts = [e for e in elements if isinstance(e, TextElement)]

    word_count = count_words(texts)
    ratio = text_area_ratio(texts)
    avg_contrast = average_text_contrast(texts, background_color(background))

    score = composite_score(word_score(word_count), area_score(ratio), contrast_score(avg_contrast))
    return Analysis(
        score=score,
        word_count=word_count,
        area_ratio=ratio,
        avg_contrast=avg_contrast,
        suggestions=build_suggestions(elements, word_count, ratio, avg_contrast),
    )
