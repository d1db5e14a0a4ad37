"""Shared fixtures for ampify tests."""

from io import BytesIO

import pytest
from PIL import Image


def make_image(width: int, height: int, fmt: str = "PNG") -> bytes:
    """Encode a blank image of the given size."""
    buffer = BytesIO()
    Image.new("RGB", (width, height), "white").save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def image_bytes():
    """Factory fixture: image_bytes(width, height, fmt="PNG") -> bytes."""
    return make_image
