"""
Compositor - draws a scene onto the fixed 1280x720 canvas with Pillow.

Elements are drawn in sequence order over the rendered background (later =
on top). Also provides hit-testing against the same geometry, the preview
guides overlay (grid, rule of thirds, safe zone) and PNG export.
"""

import io
import math
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFilter, ImageFont

from .background import Background, render_background
from .colors import hex_to_rgba
from .config import fonts_dir, load_editor_config, output_path
from .elements import (
    ArrowElement, BadgeElement, CircleElement, Element, RectElement, TextElement,
)

# Thumbnail dimensions
THUMB_W = 1280
THUMB_H = 720

# Safe zone: platform duration badge, bottom-right
SAFE_ZONE_W = 220
SAFE_ZONE_H = 100

HIT_TOLERANCE = 4

Point = Tuple[float, float]


def get_font(size: float, names: Optional[List[str]] = None, config: dict = None) -> ImageFont.FreeTypeFont:
    """
    Load the display font with fallback chain.

    Priority: data/fonts/{name} → system font lookup → PIL default
    """
    config = config or load_editor_config()
    names = names or config["fonts"]["display"]
    size = max(1, int(round(size)))
    font_root = fonts_dir(config)

    for name in names:
        path = font_root / name
        if path.exists():
            try:
                return ImageFont.truetype(str(path), size)
            except OSError:
                continue
    for name in names:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue

    print(f"  WARNING: Display font not found ({', '.join(names)}), using default")
    return ImageFont.load_default(size=size)


# ── Geometry ──────────────────────────────────────────────────────────

def rotate_point(px: float, py: float, degrees: float) -> Point:
    """Rotate clockwise on screen (y axis pointing down)."""
    if not degrees:
        return px, py
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    return px * c - py * s, px * s + py * c


def to_canvas(element: Element, px: float, py: float) -> Point:
    """Local element coordinates → canvas coordinates."""
    rx, ry = rotate_point(px, py, element.rotation)
    return element.x + rx, element.y + ry


def to_local(element: Element, cx: float, cy: float) -> Point:
    """Canvas coordinates → local element coordinates."""
    return rotate_point(cx - element.x, cy - element.y, -element.rotation)


def star_points(num_points: int, inner: float, outer: float) -> List[Point]:
    """Star vertices alternating outer/inner radius, starting straight up."""
    pts = []
    for n in range(num_points * 2):
        radius = outer if n % 2 == 0 else inner
        angle = n * math.pi / num_points
        pts.append((radius * math.sin(angle), -radius * math.cos(angle)))
    return pts


def arrow_pointer(points: Sequence[Point], length: float, width: float) -> Optional[Tuple[Point, List[Point]]]:
    """
    Pointer triangle at the last point, along the last segment.

    Returns (line_end, triangle) in local coordinates, or None if the last
    segment has no direction.
    """
    (x0, y0), (x1, y1) = points[-2], points[-1]
    dx, dy = x1 - x0, y1 - y0
    seg = math.hypot(dx, dy)
    if seg == 0:
        return None
    ux, uy = dx / seg, dy / seg
    bx, by = x1 - ux * length, y1 - uy * length
    nx, ny = -uy * width / 2, ux * width / 2
    return (bx, by), [(x1, y1), (bx + nx, by + ny), (bx - nx, by - ny)]


def _segment_distance(p: Point, a: Point, b: Point) -> float:
    (px, py), (ax, ay), (bx, by) = p, a, b
    dx, dy = bx - ax, by - ay
    if dx == 0 and dy == 0:
        return math.hypot(px - ax, py - ay)
    t = max(0.0, min(1.0, ((px - ax) * dx + (py - ay) * dy) / (dx * dx + dy * dy)))
    return math.hypot(px - (ax + t * dx), py - (ay + t * dy))


def contains_point(element: Element, cx: float, cy: float) -> bool:
    """Whether a canvas point falls on the element's footprint."""
    lx, ly = to_local(element, cx, cy)
    if isinstance(element, (TextElement, RectElement)):
        return 0 <= lx <= element.width and 0 <= ly <= element.height
    if isinstance(element, CircleElement):
        return math.hypot(lx, ly) <= element.radius + element.stroke_width / 2
    if isinstance(element, BadgeElement):
        return math.hypot(lx, ly) <= element.outer_radius + element.stroke_width / 2
    if isinstance(element, ArrowElement):
        reach = max(element.stroke_width, element.pointer_width) / 2 + HIT_TOLERANCE
        pts = element.points
        return any(_segment_distance((lx, ly), pts[i], pts[i + 1]) <= reach for i in range(len(pts) - 1))
    return False


def hit_test(elements: Sequence[Element], x: float, y: float) -> Optional[str]:
    """Id of the topmost element under (x, y), or None for the empty canvas."""
    for element in reversed(elements):
        if contains_point(element, x, y):
            return element.id
    return None


def fit_display_scale(container_w: float, container_h: float) -> float:
    """Preview scale that fits the canvas into a container (export ignores it)."""
    max_w = max(320, container_w - 40)
    max_h = max(240, container_h - 80)
    scale = min(max_w / THUMB_W, max_h / THUMB_H)
    return scale or 1.0


# ── Element drawing ───────────────────────────────────────────────────

def _with_opacity(img: Image.Image, opacity: float) -> Image.Image:
    if opacity < 1.0:
        alpha = img.getchannel("A")
        alpha = alpha.point(lambda a: int(a * opacity))
        img.putalpha(alpha)
    return img


def _place(layer: Image.Image, tile: Image.Image, origin: Point, element: Element) -> None:
    """Paste a tile so its local origin lands on the element, rotated about it."""
    ox, oy = origin
    if element.rotation:
        reach = max(math.hypot(cx - ox, cy - oy) for cx in (0, tile.width) for cy in (0, tile.height))
        side = int(math.ceil(reach)) * 2 + 2
        square = Image.new("RGBA", (side, side), (0, 0, 0, 0))
        square.paste(tile, (int(round(side / 2 - ox)), int(round(side / 2 - oy))))
        tile = square.rotate(-element.rotation, resample=Image.Resampling.BICUBIC)
        ox = oy = side / 2
    layer.paste(tile, (int(round(element.x - ox)), int(round(element.y - oy))))


def wrap_text(text: str, font, max_width: float, draw: ImageDraw.ImageDraw) -> List[str]:
    """Wrap text into lines fitting within max_width."""
    lines = []
    for segment in text.split("\n"):
        words = segment.split()
        if not words:
            lines.append("")
            continue
        current = []
        for word in words:
            test = " ".join(current + [word])
            bbox = draw.textbbox((0, 0), test, font=font)
            if bbox[2] - bbox[0] <= max_width or not current:
                current.append(word)
            else:
                lines.append(" ".join(current))
                current = [word]
        lines.append(" ".join(current))
    return lines


def _draw_text_lines(draw, lines, font, x0, y0, box_w, line_h, align, **kwargs) -> None:
    for i, line in enumerate(lines):
        if not line:
            continue
        bbox = draw.textbbox((0, 0), line, font=font)
        line_w = bbox[2] - bbox[0]
        if align == "center":
            lx = x0 + (box_w - line_w) / 2
        elif align == "right":
            lx = x0 + box_w - line_w
        else:
            lx = x0
        draw.text((lx, y0 + i * line_h), line, font=font, **kwargs)


def draw_text(layer: Image.Image, el: TextElement, config: dict) -> None:
    font = get_font(el.font_size, config=config)
    measure = ImageDraw.Draw(layer)
    lines = wrap_text(el.text, font, el.width, measure)
    line_h = el.font_size

    # Outline is centered on the glyph edge
    stroke = int(round(el.stroke_width / 2))
    pad = int(math.ceil(stroke + el.shadow_blur * 2 + 4))
    box_h = max(el.height, len(lines) * line_h)
    size = (int(math.ceil(el.width)) + pad * 2, int(math.ceil(box_h)) + pad * 2)

    tile = Image.new("RGBA", size, (0, 0, 0, 0))
    if el.shadow_opacity > 0:
        shadow = Image.new("RGBA", size, (0, 0, 0, 0))
        _draw_text_lines(
            ImageDraw.Draw(shadow), lines, font, pad, pad, el.width, line_h, el.align,
            fill=hex_to_rgba(el.shadow_color), stroke_width=stroke,
            stroke_fill=hex_to_rgba(el.shadow_color),
        )
        if el.shadow_blur > 0:
            shadow = shadow.filter(ImageFilter.GaussianBlur(radius=el.shadow_blur / 2))
        tile = Image.alpha_composite(tile, _with_opacity(shadow, el.shadow_opacity))

    text_layer = Image.new("RGBA", size, (0, 0, 0, 0))
    _draw_text_lines(
        ImageDraw.Draw(text_layer), lines, font, pad, pad, el.width, line_h, el.align,
        fill=hex_to_rgba(el.fill), stroke_width=stroke, stroke_fill=hex_to_rgba(el.stroke),
    )
    tile = Image.alpha_composite(tile, text_layer)
    _place(layer, tile, (pad, pad), el)


def draw_rect(layer: Image.Image, el: RectElement) -> None:
    pad = int(math.ceil(el.stroke_width / 2)) + 1
    w, h = el.width, el.height
    tile = Image.new("RGBA", (int(math.ceil(w)) + pad * 2, int(math.ceil(h)) + pad * 2), (0, 0, 0, 0))
    draw = ImageDraw.Draw(tile)
    radius = min(el.corner_radius, w / 2, h / 2)
    draw.rounded_rectangle(
        [pad, pad, pad + w, pad + h],
        radius=int(radius),
        fill=hex_to_rgba(el.fill),
        outline=hex_to_rgba(el.stroke) if el.stroke_width > 0 else None,
        width=int(round(el.stroke_width)),
    )
    _place(layer, _with_opacity(tile, el.opacity), (pad, pad), el)


def draw_circle(layer: Image.Image, el: CircleElement) -> None:
    shape = Image.new("RGBA", layer.size, (0, 0, 0, 0))
    r = el.radius
    ImageDraw.Draw(shape).ellipse(
        [el.x - r, el.y - r, el.x + r, el.y + r],
        fill=hex_to_rgba(el.fill),
        outline=hex_to_rgba(el.stroke) if el.stroke_width > 0 else None,
        width=int(round(el.stroke_width)),
    )
    layer.alpha_composite(_with_opacity(shape, el.opacity))


def draw_arrow(layer: Image.Image, el: ArrowElement) -> None:
    shape = Image.new("RGBA", layer.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(shape)
    local = list(el.points)
    pointer = arrow_pointer(local, el.pointer_length, el.pointer_width)
    if pointer is not None:
        local[-1] = pointer[0]
    width = int(round(el.stroke_width))
    draw.line([to_canvas(el, *p) for p in local], fill=hex_to_rgba(el.stroke), width=width, joint="curve")
    if pointer is not None:
        draw.polygon(
            [to_canvas(el, *p) for p in pointer[1]],
            fill=hex_to_rgba(el.fill),
            outline=hex_to_rgba(el.stroke),
            width=width,
        )
    layer.alpha_composite(_with_opacity(shape, el.opacity))


def draw_badge(layer: Image.Image, el: BadgeElement, config: dict) -> None:
    shape = Image.new("RGBA", layer.size, (0, 0, 0, 0))
    ImageDraw.Draw(shape).polygon(
        [to_canvas(el, *p) for p in star_points(el.num_points, el.inner_radius, el.outer_radius)],
        fill=hex_to_rgba(el.fill),
        outline=hex_to_rgba(el.stroke) if el.stroke_width > 0 else None,
        width=int(round(el.stroke_width)),
    )
    layer.alpha_composite(_with_opacity(shape, el.opacity))

    # Label centered in a 2R x 2R box; not affected by the star's opacity
    side = max(1, int(math.ceil(el.outer_radius * 2)))
    label = Image.new("RGBA", (side, side), (0, 0, 0, 0))
    ImageDraw.Draw(label).text(
        (side / 2, side / 2), el.text, font=get_font(el.text_size, config=config),
        fill=hex_to_rgba(el.text_fill), anchor="mm",
    )
    text_layer = Image.new("RGBA", layer.size, (0, 0, 0, 0))
    _place(text_layer, label, (side / 2, side / 2), el)
    layer.alpha_composite(text_layer)


def draw_element(canvas: Image.Image, element: Element, config: dict) -> Image.Image:
    layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    if isinstance(element, TextElement):
        draw_text(layer, element, config)
    elif isinstance(element, RectElement):
        draw_rect(layer, element)
    elif isinstance(element, CircleElement):
        draw_circle(layer, element)
    elif isinstance(element, ArrowElement):
        draw_arrow(layer, element)
    elif isinstance(element, BadgeElement):
        draw_badge(layer, element, config)
    else:
        raise TypeError(f"Unsupported element type: {type(element).__name__}")
    return Image.alpha_composite(canvas, layer)


# ── Guides ────────────────────────────────────────────────────────────

def _dashed_line(draw, start: Point, end: Point, dash: int, fill, width: int = 1) -> None:
    """Axis-aligned dashed line."""
    (x0, y0), (x1, y1) = start, end
    length = max(abs(x1 - x0), abs(y1 - y0))
    horizontal = abs(x1 - x0) >= abs(y1 - y0)
    pos = 0
    while pos < length:
        seg_end = min(pos + dash, length)
        if horizontal:
            draw.line([(x0 + pos, y0), (x0 + seg_end, y0)], fill=fill, width=width)
        else:
            draw.line([(x0, y0 + pos), (x0, y0 + seg_end)], fill=fill, width=width)
        pos += dash * 2


def draw_guides(canvas: Image.Image, grid: bool = True, thirds: bool = False, safe_zone: bool = True) -> Image.Image:
    """Preview-only overlay; never part of an export."""
    w, h = canvas.size
    guides = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(guides)

    if grid:
        white = hex_to_rgba("#ffffff", 0.25)
        for i in range(1, 8):
            _dashed_line(draw, (i * w / 8, 0), (i * w / 8, h), 4, white)
        for i in range(1, 4):
            _dashed_line(draw, (0, i * h / 4), (w, i * h / 4), 4, white)

    if thirds:
        blue = hex_to_rgba("#2fa6ff", 0.3)
        for i in (1, 2):
            draw.line([(w * i / 3, 0), (w * i / 3, h)], fill=blue, width=2)
            draw.line([(0, h * i / 3), (w, h * i / 3)], fill=blue, width=2)

    if safe_zone:
        x0, y0 = w - SAFE_ZONE_W, h - SAFE_ZONE_H
        draw.rectangle([x0, y0, w, h], fill=hex_to_rgba("#000000", 0.25))
        border = hex_to_rgba("#ffffff", 0.5)
        _dashed_line(draw, (x0, y0), (w, y0), 6, border, 2)
        _dashed_line(draw, (x0, h - 1), (w, h - 1), 6, border, 2)
        _dashed_line(draw, (x0, y0), (x0, h), 6, border, 2)
        _dashed_line(draw, (w - 1, y0), (w - 1, h), 6, border, 2)

    return Image.alpha_composite(canvas, guides)


# ── Rendering / export ────────────────────────────────────────────────

def render_scene(
    elements: Sequence[Element],
    background: Optional[Background] = None,
    guides: Optional[dict] = None,
    config: dict = None,
) -> Image.Image:
    """
    Render background + elements at exactly 1280x720 (RGBA).

    guides: optional {"grid": bool, "thirds": bool, "safe_zone": bool}.
    """
    config = config or load_editor_config()
    canvas = render_background(background or Background(), THUMB_W, THUMB_H)
    for element in elements:
        canvas = draw_element(canvas, element, config)
    if guides is not None:
        canvas = draw_guides(canvas, **guides)
    return canvas


def render_preview(
    elements: Sequence[Element],
    background: Optional[Background] = None,
    scale: float = 1.0,
    guides: Optional[dict] = None,
    config: dict = None,
) -> Image.Image:
    """On-screen preview at a display scale (with guides by default)."""
    config = config or load_editor_config()
    if guides is None:
        guides = dict(config["guides"])
    img = render_scene(elements, background, guides=guides, config=config)
    size = (max(1, int(round(THUMB_W * scale))), max(1, int(round(THUMB_H * scale))))
    if size != img.size:
        img = img.resize(size, Image.Resampling.LANCZOS)
    return img


def export_png(elements: Sequence[Element], background: Optional[Background] = None, config: dict = None) -> bytes:
    """PNG payload of the composition, always 1280x720 and without guides."""
    img = render_scene(elements, background, guides=None, config=config).convert("RGB")
    buf = io.BytesIO()
    img.save(buf, "PNG")
    return buf.getvalue()


def save_thumbnail(
    elements: Sequence[Element],
    background: Optional[Background] = None,
    path: Optional[Path] = None,
    config: dict = None,
) -> Path:
    config = config or load_editor_config()
    path = Path(path) if path else output_path(config)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(export_png(elements, background, config))
    print(f"  Saved: {path} ({THUMB_W}x{THUMB_H})")
    return path
