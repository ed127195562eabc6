import io

import pytest
from PIL import Image


@pytest.fixture(autouse=True)
def data_dir(tmp_path, monkeypatch):
    """Point the editor at an empty data directory (default config)."""
    monkeypatch.setenv("THUMB_EDITOR_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("THUMB_EDITOR_CONFIG", raising=False)
    return tmp_path


def png_bytes(color=(255, 255, 255), size=(64, 36)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, "PNG")
    return buf.getvalue()


@pytest.fixture
def make_png():
    return png_bytes
