import asyncio
import io
import threading

import pytest
import requests
from PIL import Image

from thumbnail_editor import background as background_module
from thumbnail_editor.background import (
    Background,
    BackgroundUploader,
    ImageLoadError,
    load_image,
    render_background,
)
from thumbnail_editor.colors import InvalidColorFormat


def test_load_image_from_bytes(make_png):
    img = load_image(make_png((1, 2, 3), (40, 30)))
    assert img.size == (40, 30)
    assert img.getpixel((0, 0)) == (1, 2, 3)


def test_load_image_from_path_and_file(tmp_path, make_png):
    path = tmp_path / "bg.png"
    path.write_bytes(make_png())
    assert load_image(path).size == (64, 36)
    assert load_image(str(path)).size == (64, 36)
    with open(path, "rb") as f:
        assert load_image(f).size == (64, 36)


def test_palette_images_are_converted():
    buf = io.BytesIO()
    Image.new("P", (8, 8)).save(buf, "PNG")
    assert load_image(buf.getvalue()).mode == "RGB"


@pytest.mark.parametrize("source", [b"not an image", 12345])
def test_load_image_failures(source):
    with pytest.raises(ImageLoadError):
        load_image(source)


def test_load_image_missing_path(tmp_path):
    with pytest.raises(ImageLoadError):
        load_image(tmp_path / "missing.png")


class FakeResponse:
    def __init__(self, content, status=200):
        self.content = content
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def test_load_image_from_url(monkeypatch, make_png):
    calls = []

    def fake_get(url, timeout):
        calls.append((url, timeout))
        return FakeResponse(make_png((9, 9, 9)))

    monkeypatch.setattr(background_module.requests, "get", fake_get)
    img = load_image("https://example.com/bg.png", timeout=3)
    assert img.getpixel((0, 0)) == (9, 9, 9)
    assert calls == [("https://example.com/bg.png", 3)]


def test_load_image_url_errors(monkeypatch):
    monkeypatch.setattr(background_module.requests, "get", lambda url, timeout: FakeResponse(b"", 404))
    with pytest.raises(ImageLoadError):
        load_image("http://example.com/missing.png", timeout=1)

    def refuse(url, timeout):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(background_module.requests, "get", refuse)
    with pytest.raises(ImageLoadError):
        load_image("http://example.com/bg.png", timeout=1)


def test_settings_update_validates():
    bg = Background()
    bg.update(overlay="#FFF", overlay_alpha=0.5, blur=2)
    assert (bg.overlay, bg.overlay_alpha, bg.blur) == ("#ffffff", 0.5, 2)

    with pytest.raises(InvalidColorFormat):
        bg.update(bg_color="navy")
    with pytest.raises(ValueError):
        bg.update(overlay_alpha=1.5)
    with pytest.raises(ValueError):
        bg.update(sharpness=1)
    with pytest.raises(ValueError, match="finite"):
        bg.update(blur=float("nan"))
    with pytest.raises(ValueError, match="finite"):
        bg.update(brightness=float("inf"))
    # Failed updates change nothing
    assert bg.settings() == Background(overlay="#ffffff", overlay_alpha=0.5, blur=2).settings()


def test_upload_success_and_failure(make_png):
    bg = Background()
    uploader = BackgroundUploader(bg)

    assert asyncio.run(uploader.upload(make_png((50, 60, 70)))) is True
    first = bg.image
    assert first.getpixel((0, 0)) == (50, 60, 70)

    with pytest.raises(ImageLoadError):
        asyncio.run(uploader.upload(b"broken"))
    assert bg.image is first


def test_newer_upload_supersedes_in_flight(monkeypatch):
    slow_img = Image.new("RGB", (4, 4), (1, 1, 1))
    fast_img = Image.new("RGB", (4, 4), (2, 2, 2))
    release = threading.Event()

    def fake_load(source, timeout=None):
        if source == "slow":
            release.wait(5)
            return slow_img
        return fast_img

    monkeypatch.setattr(background_module, "load_image", fake_load)
    bg = Background()
    uploader = BackgroundUploader(bg)

    async def scenario():
        slow = asyncio.create_task(uploader.upload("slow"))
        await asyncio.sleep(0.05)
        fast_ok = await uploader.upload("fast")
        release.set()
        slow_ok = await slow
        return slow_ok, fast_ok

    slow_ok, fast_ok = asyncio.run(scenario())
    assert fast_ok is True
    assert slow_ok is False
    assert bg.image is fast_img


def test_render_background_without_image():
    img = render_background(Background(bg_color="#0a0e15"))
    assert img.size == (1280, 720)
    assert img.getpixel((640, 360)) == (10, 14, 21, 255)


def test_render_background_overlay_and_stretch():
    bg = Background(image=Image.new("RGB", (100, 100), (255, 255, 255)))
    img = render_background(bg)
    assert img.size == (1280, 720)
    assert img.getpixel((10, 10))[:3] == (255, 255, 255)

    bg.update(overlay="#000000", overlay_alpha=1.0)
    assert render_background(bg).getpixel((10, 10))[:3] == (0, 0, 0)


def test_render_background_brightness():
    bg = Background(image=Image.new("RGB", (16, 9), (100, 100, 100)), brightness=-0.5)
    r, g, b, _ = render_background(bg).getpixel((5, 5))
    assert r == pytest.approx(50, abs=1)
