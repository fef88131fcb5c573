"""Tests for photo decoding and fitting."""

import base64
from io import BytesIO
import pytest
from PIL import Image
from cvmaker.utils.image_helpers import PhotoError, fit_photo, is_inline_image


def png_data_uri(size, mode="RGB") -> str:
    buffer = BytesIO()
    Image.new(mode, size).save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


def test_fit_photo_shrinks_into_box():
    fitted = fit_photo(png_data_uri((1200, 1600)))

    assert fitted.startswith("data:image/png;base64,")
    raw = base64.b64decode(fitted.split(",", 1)[1])
    with Image.open(BytesIO(raw)) as image:
        assert image.width <= 413
        assert image.height <= 531


def test_oversized_photo_is_rejected(monkeypatch):
    """Test images over the pixel limit fail as unreadable photos."""
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)

    with pytest.raises(PhotoError, match="not a readable image"):
        fit_photo(png_data_uri((100, 100), mode="1"))


def test_invalid_base64_is_rejected():
    with pytest.raises(PhotoError, match="not valid base64"):
        fit_photo("data:image/png;base64,notanimage")


def test_is_inline_image():
    assert is_inline_image("data:image/png;base64,AAAA") is True
    assert is_inline_image("iVBORw0KGgo=") is True
    assert is_inline_image("https://example.com/me.jpg") is False
    assert is_inline_image(None) is False
