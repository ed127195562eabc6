"""
Color science - hex parsing, WCAG luminance/contrast and image color sampling.

All colors inside the editor are "#rrggbb" strings; the analysis engine works
on (r, g, b) tuples with channels in 0-255.
"""

import string
from typing import Optional, Tuple

import numpy as np
from PIL import Image

RGB = Tuple[int, int, int]

# Sampling grid for average color (16:9, matches the canvas ratio)
SAMPLE_W = 64
SAMPLE_H = 36

# Used when an image cannot be sampled
FALLBACK_COLOR: RGB = (20, 20, 20)


class InvalidColorFormat(ValueError):
    """Raised for hex colors that are not 3 or 6 hex digits."""


def normalize_hex(hex_color: str) -> str:
    """Return the canonical lowercase "#rrggbb" form of a 3/6 digit hex color."""
    if not isinstance(hex_color, str):
        raise InvalidColorFormat(f"Color must be a string, got {type(hex_color).__name__}")
    h = hex_color.strip()
    if h.startswith("#"):
        h = h[1:]
    if len(h) not in (3, 6) or any(c not in string.hexdigits for c in h):
        raise InvalidColorFormat(f"Invalid hex color: {hex_color!r}")
    if len(h) == 3:
        h = "".join(c * 2 for c in h)
    return "#" + h.lower()


def hex_to_rgb(hex_color: str) -> RGB:
    """Convert "#rgb" / "#rrggbb" (leading # optional) to an RGB tuple."""
    h = normalize_hex(hex_color)[1:]
    return tuple(int(h[i:i+2], 16) for i in (0, 2, 4))


def rgb_to_hex(rgb) -> str:
    r, g, b = (max(0, min(255, int(round(c)))) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def hex_to_rgba(hex_color: str, opacity: float = 1.0) -> Tuple[int, int, int, int]:
    """RGB from hex plus an alpha byte derived from opacity (0-1)."""
    return (*hex_to_rgb(hex_color), int(round(255 * max(0.0, min(1.0, opacity)))))


def _linearize(channel: float) -> float:
    c = channel / 255
    if c <= 0.03928:
        return c / 12.92
    return ((c + 0.055) / 1.055) ** 2.4


def relative_luminance(r: float, g: float, b: float) -> float:
    """WCAG relative luminance of an sRGB color."""
    return 0.2126 * _linearize(r) + 0.7152 * _linearize(g) + 0.0722 * _linearize(b)


def contrast_ratio(color_a, color_b) -> float:
    """WCAG contrast ratio between two RGB tuples, in [1, 21]."""
    la = relative_luminance(*color_a)
    lb = relative_luminance(*color_b)
    bright = max(la, lb)
    dark = min(la, lb)
    return (bright + 0.05) / (dark + 0.05)


def sample_average_color(image: Image.Image) -> Optional[RGB]:
    """
    Mean color of the image downsampled to a 64x36 grid.

    Returns None if the image cannot be sampled.
    """
    try:
        small = image.convert("RGB").resize((SAMPLE_W, SAMPLE_H), Image.Resampling.BILINEAR)
        arr = np.asarray(small, dtype=np.float64).reshape(-1, 3)
        mean = arr.mean(axis=0)
    except (OSError, ValueError, AttributeError) as e:
        print(f"  WARNING: Could not sample image color: {e}")
        return None
    # Half-up rounding per channel
    return tuple(int(np.floor(c + 0.5)) for c in mean)


def average_color(image: Optional[Image.Image]) -> RGB:
    """Average color of an image, or FALLBACK_COLOR if it cannot be sampled."""
    if image is None:
        return FALLBACK_COLOR
    sampled = sample_average_color(image)
    return sampled if sampled is not None else FALLBACK_COLOR
