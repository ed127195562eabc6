"""
Background - optional raster image plus adjustment settings.

Also implements image loading (bytes, file-like, path or http(s) URL) and the
upload flow: one outstanding request at a time, the newest upload wins, and a
failed load never touches the current background.
"""

import asyncio
import io
import math
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import requests
from PIL import Image, ImageEnhance, ImageFilter

from .colors import hex_to_rgba, normalize_hex
from .config import load_editor_config

THUMB_W = 1280
THUMB_H = 720


class ImageLoadError(OSError):
    """Raised when an image source cannot be fetched or decoded."""


@dataclass
class BackgroundSettings:
    brightness: float = 0.0     # -0.5 .. 0.5
    contrast: float = 0.0       # -0.5 .. 0.5
    saturation: float = 0.0     # -1 .. 1
    blur: float = 0.0           # gaussian radius, 0 .. 16
    overlay: str = "#000000"
    overlay_alpha: float = 0.0  # 0 .. 1
    bg_color: str = "#0a0e15"   # used when no image is loaded


@dataclass
class Background(BackgroundSettings):
    image: Optional[Image.Image] = None

    def settings(self) -> BackgroundSettings:
        return BackgroundSettings(**{
            f.name: getattr(self, f.name) for f in fields(BackgroundSettings)
        })

    def update(self, **changes) -> "Background":
        """Validate and apply settings changes; unknown keys raise ValueError."""
        allowed = {f.name for f in fields(BackgroundSettings)}
        unknown = set(changes) - allowed
        if unknown:
            raise ValueError(f"Unknown background setting(s): {', '.join(sorted(unknown))}")
        staged = {**{k: getattr(self, k) for k in allowed}, **changes}
        for key in ("overlay", "bg_color"):
            staged[key] = normalize_hex(staged[key])
        for key in ("brightness", "contrast", "saturation", "blur", "overlay_alpha"):
            value = staged[key]
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{key} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ValueError(f"{key} must be finite, got {value!r}")
        if not 0.0 <= staged["overlay_alpha"] <= 1.0:
            raise ValueError(f"overlay_alpha must be within [0, 1], got {staged['overlay_alpha']!r}")
        if staged["blur"] < 0:
            raise ValueError(f"blur must be >= 0, got {staged['blur']!r}")
        for key, value in staged.items():
            setattr(self, key, value)
        return self


# ── Image loading ─────────────────────────────────────────────────────

def _fetch_url(url: str, timeout: float) -> bytes:
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise ImageLoadError(f"Could not fetch {url}: {e}") from e
    return resp.content


def load_image(source, timeout: float = None) -> Image.Image:
    """
    Decode an image from bytes, a binary file object, a path or an http(s) URL.

    The image is fully decoded before returning. Raises ImageLoadError.
    """
    if isinstance(source, str) and source.startswith(("http://", "https://")):
        if timeout is None:
            timeout = load_editor_config()["images"]["fetch_timeout"]
        source = _fetch_url(source, timeout)

    try:
        if isinstance(source, (bytes, bytearray)):
            img = Image.open(io.BytesIO(source))
        elif isinstance(source, (str, Path)):
            img = Image.open(Path(source))
        elif hasattr(source, "read"):
            img = Image.open(source)
        else:
            raise ImageLoadError(f"Unsupported image source: {type(source).__name__}")
        img.load()
    except ImageLoadError:
        raise
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        raise ImageLoadError(f"Could not decode image: {e}") from e

    if img.mode not in ("RGB", "RGBA"):
        img = img.convert("RGBA" if "A" in img.getbands() else "RGB")
    return img


class BackgroundUploader:
    """
    Single-outstanding background upload.

    Each upload supersedes any in-flight one. Only the newest request may
    replace background.image; a failed request leaves it unchanged.
    """

    def __init__(self, background: Background, timeout: float = None):
        self.background = background
        self.timeout = timeout
        self._generation = 0

    async def upload(self, source) -> bool:
        """
        Load source and install it as the background image.

        Returns False if a newer upload superseded this one. Raises
        ImageLoadError if this (latest) request fails.
        """
        self._generation += 1
        ticket = self._generation
        try:
            img = await asyncio.to_thread(load_image, source, self.timeout)
        except ImageLoadError:
            if ticket != self._generation:
                return False
            raise
        if ticket != self._generation:
            print("  Background upload superseded, discarding result")
            return False
        self.background.image = img
        print(f"  Background loaded: {img.width}x{img.height}")
        return True


# ── Rendering ─────────────────────────────────────────────────────────

def render_background(background: Background, width: int = THUMB_W, height: int = THUMB_H) -> Image.Image:
    """Fallback color, adjusted image (stretched to the canvas), then overlay."""
    canvas = Image.new("RGBA", (width, height), hex_to_rgba(background.bg_color))

    if background.image is not None:
        img = background.image.convert("RGBA").resize((width, height), Image.Resampling.LANCZOS)
        if background.brightness:
            img = ImageEnhance.Brightness(img).enhance(1 + background.brightness)
        if background.contrast:
            img = ImageEnhance.Contrast(img).enhance(1 + background.contrast)
        if background.saturation:
            img = ImageEnhance.Color(img).enhance(1 + background.saturation)
        if background.blur > 0:
            img = img.filter(ImageFilter.GaussianBlur(radius=background.blur))
        canvas = Image.alpha_composite(canvas, img)

    if background.overlay_alpha > 0:
        overlay = Image.new("RGBA", (width, height), hex_to_rgba(background.overlay, background.overlay_alpha))
        canvas = Image.alpha_composite(canvas, overlay)

    return canvas
