"""
Pytest configuration and shared fixtures for ImageEdit tests.

This module provides synthetic Pillow images and their encoded bytes, used
across multiple test modules.
"""

import io
import sys
import types

import pytest
from PIL import Image


RED = (255, 0, 0, 255)
GREEN = (0, 255, 0, 255)
BLUE = (0, 0, 255, 255)
WHITE = (255, 255, 255, 255)


def encode_png(image):
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def make_image():
    """
    Factory for flat-colored RGBA images.

    Returns:
        Callable (width, height, color=RED) -> PIL Image
    """
    def _make(width, height, color=RED):
        return Image.new("RGBA", (width, height), color)
    return _make


@pytest.fixture
def make_png():
    """Factory for PNG bytes of a flat-colored image."""
    def _make(width, height, color=RED):
        return encode_png(Image.new("RGBA", (width, height), color))
    return _make


@pytest.fixture
def quadrant_image():
    """
    2x2 image with one distinct color per pixel.

    Layout:
        (0, 0) red    (1, 0) green
        (0, 1) blue   (1, 1) white
    """
    image = Image.new("RGBA", (2, 2))
    image.putpixel((0, 0), RED)
    image.putpixel((1, 0), GREEN)
    image.putpixel((0, 1), BLUE)
    image.putpixel((1, 1), WHITE)
    return image


@pytest.fixture
def pdf_bytes():
    """A two-page PDF written by Pillow (pages 100x50 and 60x80 pt)."""
    first = Image.new("RGB", (100, 50), (255, 0, 0))
    second = Image.new("RGB", (60, 80), (0, 0, 255))
    buffer = io.BytesIO()
    first.save(buffer, format="PDF", save_all=True, append_images=[second], resolution=72.0)
    return buffer.getvalue()


# ============================================================================
# Fake pypdfium2
# ============================================================================

class FakeBitmap:
    def __init__(self, size):
        self.size = size

    def to_pil(self):
        return Image.new("RGB", self.size, (0, 0, 255))


class FakePage:
    def __init__(self, size, fail=False):
        self.size = size
        self.fail = fail
        self.scales = []

    def render(self, scale=1):
        if self.fail:
            raise RuntimeError("render failed")
        self.scales.append(scale)
        return FakeBitmap((int(self.size[0] * scale), int(self.size[1] * scale)))


class FakeDocument:
    def __init__(self, pages):
        self.pages = pages
        self.closed = False

    def __len__(self):
        return len(self.pages)

    def __getitem__(self, index):
        return self.pages[index]

    def close(self):
        self.closed = True


@pytest.fixture
def fake_pdfium(monkeypatch):
    """
    Install a fake pypdfium2 module.

    Returns:
        The module; set ``module.document`` to control what PdfDocument returns.
    """
    module = types.ModuleType("pypdfium2")
    module.document = FakeDocument([FakePage((100, 50)), FakePage((60, 80))])

    def pdf_document(data):
        return module.document

    module.PdfDocument = pdf_document
    monkeypatch.setitem(sys.modules, "pypdfium2", module)
    return module
