"""
Surface: an owned, mutable RGBA pixel buffer with drawing primitives.

The Surface is the host-independent stand-in for a 2D drawing canvas. It is
backed by a Pillow RGBA image and exposes the primitives the pipeline needs:
region draws, flat fills, stroked rectangles, the adjustment filter chain and
byte encoding. A Surface has exactly one writer; stages that need a new size
allocate a new Surface instead of reusing the old one.

Example:
    >>> surface = Surface.new(200, 100)
    >>> surface.fill_rect(0, 0, 100, 100, "#ff0000")
    >>> surface.stroke_rect(2.5, 2.5, 195, 95, "#000000", line_width=5)
    >>> data = surface.encode(EncodeOptions(format="PNG"))
"""

import logging
import math
from typing import Any, Optional, Sequence, Tuple

import numpy as np
from PIL import Image, ImageDraw

from IE_Libs.ImageEditingLib.image_models import ColorLike, parse_color

logger = logging.getLogger(__name__)

Box = Tuple[float, float, float, float]


def round_half_up(value: float) -> int:
    """Round to the nearest whole pixel; .5 rounds up."""
    return int(math.floor(value + 0.5))


class Surface:
    """RGBA pixel buffer with canvas-style drawing operations."""

    def __init__(self, image: Any):
        if not hasattr(image, "mode"):
            raise TypeError(f"Expected PIL Image, got {type(image)}")
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        self._image = image

    @classmethod
    def new(cls, width: int, height: int, fill: Optional[ColorLike] = None) -> "Surface":
        """Allocate a transparent (or flat-filled) surface."""
        width, height = int(width), int(height)
        if width < 0 or height < 0:
            raise ValueError(f"Surface size must be >= 0, got {width}x{height}")
        color = parse_color(fill) if fill is not None else (0, 0, 0, 0)
        return cls(Image.new("RGBA", (width, height), color))

    @classmethod
    def from_image(cls, image: Any) -> "Surface":
        """Create a surface owning a copy of a PIL Image."""
        return cls(image.convert("RGBA") if image.mode != "RGBA" else image.copy())

    @property
    def image(self) -> Any:
        return self._image

    @property
    def width(self) -> int:
        return self._image.width

    @property
    def height(self) -> int:
        return self._image.height

    @property
    def size(self) -> Tuple[int, int]:
        return self._image.size

    def copy(self) -> "Surface":
        return Surface(self._image.copy())

    def get_pixels(self) -> np.ndarray:
        """Return a (height, width, 4) uint8 copy of the pixel buffer."""
        return np.array(self._image, dtype=np.uint8)

    def set_pixels(self, pixels: np.ndarray) -> None:
        """Replace the pixel buffer. Shape must match the surface size."""
        pixels = np.asarray(pixels)
        expected = (self.height, self.width, 4)
        if pixels.shape != expected:
            raise ValueError(f"Pixel buffer shape {pixels.shape} does not match {expected}")
        self._image = Image.fromarray(pixels.astype(np.uint8), "RGBA")

    def draw_region(
        self,
        source: Any,
        src_box: Optional[Box] = None,
        dst_box: Optional[Box] = None,
    ) -> None:
        """
        Draw a region of another surface or image onto this one.

        Mirrors ``drawImage(src, sx, sy, sw, sh, dx, dy, dw, dh)``: the source
        region is resampled to the destination size and composited source-over.
        Source regions extending past the source bounds read as transparent.

        Args:
            source: Surface or PIL Image to read from
            src_box: (x, y, width, height) in source pixels (default: whole source)
            dst_box: (x, y, width, height) in this surface (default: same size at 0,0)
        """
        image = source.image if isinstance(source, Surface) else source
        if image.mode != "RGBA":
            image = image.convert("RGBA")

        if src_box is None:
            src_box = (0, 0, image.width, image.height)
        sx, sy, sw, sh = (int(round(v)) for v in src_box)
        if dst_box is None:
            dst_box = (0, 0, sw, sh)
        dx, dy, dw, dh = (int(round(v)) for v in dst_box)

        if sw <= 0 or sh <= 0 or dw <= 0 or dh <= 0:
            logger.debug(f"Skipping empty draw_region src={src_box} dst={dst_box}")
            return

        region = image.crop((sx, sy, sx + sw, sy + sh))
        if (dw, dh) != region.size:
            region = region.resize((dw, dh), Image.Resampling.LANCZOS)

        # alpha_composite() cannot take negative destinations; trim instead.
        if dx < 0 or dy < 0:
            region = region.crop((max(0, -dx), max(0, -dy), dw, dh))
            dx, dy = max(0, dx), max(0, dy)
        if dx >= self.width or dy >= self.height or region.width == 0 or region.height == 0:
            return
        region = region.crop((0, 0, min(region.width, self.width - dx), min(region.height, self.height - dy)))
        self._image.alpha_composite(region, dest=(dx, dy))

    def fill_rect(self, x: float, y: float, width: float, height: float, color: ColorLike) -> None:
        """Overwrite a rectangle with a flat color (no blending)."""
        left, top = int(round(x)), int(round(y))
        right, bottom = int(round(x + width)), int(round(y + height))
        left, top = max(0, left), max(0, top)
        right, bottom = min(self.width, right), min(self.height, bottom)
        if right <= left or bottom <= top:
            return
        self._image.paste(parse_color(color), (left, top, right, bottom))

    def stroke_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        color: ColorLike,
        line_width: float = 1.0,
    ) -> None:
        """
        Stroke a rectangle outline centered on the path (x, y, width, height).

        The stroke extends ``line_width / 2`` to both sides of the path, so its
        outer edge sits at ``x - line_width / 2`` and ``x + width + line_width / 2``.
        """
        line_width = round_half_up(line_width)
        if line_width <= 0:
            return
        half = line_width / 2.0
        left = round_half_up(x - half)
        top = round_half_up(y - half)
        right = round_half_up(x + width + half)
        bottom = round_half_up(y + height + half)
        if right <= left or bottom <= top:
            return
        draw = ImageDraw.Draw(self._image)
        # ImageDraw boxes are inclusive and strokes grow inwards from the box.
        draw.rectangle(
            [left, top, right - 1, bottom - 1],
            outline=parse_color(color),
            width=line_width,
        )

    def apply_filter_chain(self, chain: Sequence[Tuple[str, float]]) -> None:
        """Apply an ordered adjustment chain in place."""
        from IE_Libs.ImageEditingLib.adjustment_filters import apply_filter_chain

        self._image = apply_filter_chain(self._image, chain)

    def encode(self, options: Any = None) -> bytes:
        """Encode to image bytes (see ExportLib.image_codec.EncodeOptions)."""
        from IE_Libs.ExportLib.image_codec import encode_surface

        return encode_surface(self, options)

    def __repr__(self) -> str:
        return f"Surface({self.width}x{self.height})"
