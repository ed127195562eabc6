"""
Element model - the five overlay element kinds and their factories.

Every element carries a stable id, a canvas position (top-left origin), a
rotation in degrees and the draggable flag. Z-order is NOT stored here: it is
the element's index in the owning Scene.
"""

import math
import uuid
from dataclasses import dataclass, field, fields, replace
from typing import ClassVar, List, Optional, Tuple

from .colors import normalize_hex

# Display font stack for headline text
DISPLAY_FONT = "Impact, Anton, Arial Black, sans-serif"

AMBER = "#ffce33"
BLUE = "#2fa6ff"
RED = "#ff5b6e"
BLACK = "#000000"
WHITE = "#ffffff"

TEXT_HEIGHT_FACTOR = 1.3

ALIGNMENTS = ("left", "center", "right")


def new_element_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Element:
    kind: ClassVar[str] = ""
    color_fields: ClassVar[Tuple[str, ...]] = ()
    size_fields: ClassVar[Tuple[str, ...]] = ()

    id: str = field(default_factory=new_element_id)
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0
    draggable: bool = True


@dataclass
class TextElement(Element):
    """Headline text; width/height is the layout box used for wrapping and area ratio."""
    kind: ClassVar[str] = "text"
    color_fields: ClassVar[Tuple[str, ...]] = ("fill", "stroke", "shadow_color")
    size_fields: ClassVar[Tuple[str, ...]] = (
        "font_size", "stroke_width", "shadow_blur", "width", "height",
    )

    x: float = 80.0
    y: float = 400.0
    text: str = "JUDUL BESAR"
    font_size: float = 120
    font_family: str = DISPLAY_FONT
    font_style: str = "bold"
    fill: str = WHITE
    stroke: str = BLACK
    stroke_width: float = 8
    shadow_color: str = BLACK
    shadow_blur: float = 10
    shadow_opacity: float = 0.6
    align: str = "left"
    width: float = 1000
    height: float = 120 * TEXT_HEIGHT_FACTOR


@dataclass
class RectElement(Element):
    kind: ClassVar[str] = "rect"
    color_fields: ClassVar[Tuple[str, ...]] = ("fill", "stroke")
    size_fields: ClassVar[Tuple[str, ...]] = ("width", "height", "stroke_width", "corner_radius")

    x: float = 60.0
    y: float = 60.0
    width: float = 500
    height: float = 220
    fill: str = AMBER
    opacity: float = 0.9
    stroke: str = BLACK
    stroke_width: float = 0
    corner_radius: float = 16


@dataclass
class CircleElement(Element):
    """Circle centered on (x, y)."""
    kind: ClassVar[str] = "circle"
    color_fields: ClassVar[Tuple[str, ...]] = ("fill", "stroke")
    size_fields: ClassVar[Tuple[str, ...]] = ("radius", "stroke_width")

    x: float = 300.0
    y: float = 300.0
    radius: float = 120
    fill: str = BLUE
    opacity: float = 0.9
    stroke: str = BLACK
    stroke_width: float = 0


@dataclass
class ArrowElement(Element):
    """Polyline arrow; points are local (x, y) pairs relative to the anchor."""
    kind: ClassVar[str] = "arrow"
    color_fields: ClassVar[Tuple[str, ...]] = ("fill", "stroke")
    size_fields: ClassVar[Tuple[str, ...]] = ("pointer_length", "pointer_width", "stroke_width")

    x: float = 950.0
    y: float = 540.0
    rotation: float = -20.0
    points: List[Tuple[float, float]] = field(default_factory=lambda: [(0.0, 0.0), (-180.0, -80.0)])
    pointer_length: float = 26
    pointer_width: float = 26
    fill: str = RED
    stroke: str = RED
    stroke_width: float = 18
    opacity: float = 1.0


@dataclass
class BadgeElement(Element):
    """Star badge centered on (x, y) with a centered label."""
    kind: ClassVar[str] = "badge"
    color_fields: ClassVar[Tuple[str, ...]] = ("fill", "stroke", "text_fill")
    size_fields: ClassVar[Tuple[str, ...]] = (
        "inner_radius", "outer_radius", "stroke_width", "text_size",
    )

    x: float = 1080.0
    y: float = 120.0
    rotation: float = 8.0
    inner_radius: float = 38
    outer_radius: float = 90
    num_points: int = 12
    fill: str = AMBER
    stroke: str = BLACK
    stroke_width: float = 10
    opacity: float = 1.0
    text: str = "NEW"
    text_fill: str = BLACK
    text_size: float = 48


def _check_number(name: str, value, non_negative: bool = False) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {value!r}")
    if non_negative and value < 0:
        raise ValueError(f"{name} must be >= 0, got {value!r}")


def validate_element(element: Element) -> Element:
    """
    Check geometric and style invariants, normalizing color strings in place.

    Raises ValueError (InvalidColorFormat for colors) on the first violation.
    """
    for name in ("x", "y", "rotation"):
        _check_number(name, getattr(element, name))
    if element.draggable is not True:
        raise ValueError(f"draggable is always True, got {element.draggable!r}")
    for name in element.size_fields:
        _check_number(name, getattr(element, name), non_negative=True)
    for name in ("opacity", "shadow_opacity"):
        if hasattr(element, name):
            value = getattr(element, name)
            _check_number(name, value)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value!r}")
    for name in element.color_fields:
        setattr(element, name, normalize_hex(getattr(element, name)))

    if isinstance(element, TextElement):
        if element.align not in ALIGNMENTS:
            raise ValueError(f"align must be one of {ALIGNMENTS}, got {element.align!r}")
    elif isinstance(element, ArrowElement):
        if len(element.points) < 2:
            raise ValueError("Arrow needs at least a start and an end point")
        element.points = [(float(px), float(py)) for px, py in element.points]
        for px, py in element.points:
            _check_number("points", px)
            _check_number("points", py)
    elif isinstance(element, BadgeElement):
        if isinstance(element.num_points, bool) or not isinstance(element.num_points, int) \
                or element.num_points < 2:
            raise ValueError(f"num_points must be an int >= 2, got {element.num_points!r}")
    return element


def editable_fields(element: Element) -> List[str]:
    """Field names a property edit may change (everything except id and draggable)."""
    return [f.name for f in fields(element) if f.name not in ("id", "draggable")]


def patch_element(element: Element, changes: dict) -> Element:
    """Return a validated copy of element with changes applied; id and kind are kept."""
    allowed = set(editable_fields(element))
    unknown = set(changes) - allowed
    if unknown:
        raise ValueError(
            f"Unknown {element.kind} field(s): {', '.join(sorted(unknown))}"
        )
    return validate_element(replace(element, **changes))


# ── Factories ─────────────────────────────────────────────────────────

def _build(cls, preset: Optional[dict]) -> Element:
    element = cls(**(preset or {}))
    return validate_element(element)


def create_text(preset: Optional[dict] = None) -> TextElement:
    """New headline text. The box height follows the font size unless given."""
    preset = dict(preset or {})
    font_size = preset.get("font_size", TextElement.font_size)
    preset.setdefault("height", font_size * TEXT_HEIGHT_FACTOR)
    return _build(TextElement, preset)


def create_rect(preset: Optional[dict] = None) -> RectElement:
    return _build(RectElement, preset)


def create_circle(preset: Optional[dict] = None) -> CircleElement:
    return _build(CircleElement, preset)


def create_arrow(preset: Optional[dict] = None) -> ArrowElement:
    return _build(ArrowElement, preset)


def create_badge(preset: Optional[dict] = None) -> BadgeElement:
    return _build(BadgeElement, preset)


FACTORIES = {
    "text": create_text,
    "rect": create_rect,
    "circle": create_circle,
    "arrow": create_arrow,
    "badge": create_badge,
}


def create_element(kind: str, preset: Optional[dict] = None) -> Element:
    """Create an element of the given kind ("text", "rect", "circle", "arrow", "badge")."""
    try:
        factory = FACTORIES[kind]
    except KeyError:
        raise ValueError(
            f"Unknown element kind '{kind}'. Available: {', '.join(FACTORIES)}"
        ) from None
    return factory(preset)


def element_to_dict(element: Element) -> dict:
    d = {"kind": element.kind}
    for f in fields(element):
        value = getattr(element, f.name)
        if f.name == "points":
            value = [list(p) for p in value]
        d[f.name] = value
    return d
