"""
Image editing data models for ImageEdit.

This module defines the value objects passed into the pipeline. None of them
is mutated by the pipeline itself: the editing session replaces them with
updated copies.

Classes:
    FilterState: Non-destructive adjustment and geometry settings
    ImageSource: A decoded bitmap with natural and (optional) display size
    SelectionRect: A rectangle in display coordinates
    NaturalRect: A rectangle in natural pixel coordinates (derived)

Type Aliases:
    RgbaColor: A tuple of 4 integers representing RGBA color values (0-255)
"""

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Optional, Tuple, Union

from PIL import Image, ImageColor

from IE_Libs.constants import (
    DEFAULT_BLUR,
    DEFAULT_BRIGHTNESS,
    DEFAULT_CONTRAST,
    DEFAULT_GRAYSCALE,
    DEFAULT_HUE_ROTATE,
    DEFAULT_ROTATE,
    DEFAULT_SATURATE,
    DEFAULT_SCALE,
    DEFAULT_SEPIA,
    MIN_SCALE,
)

RgbaColor = Tuple[int, int, int, int]
ColorLike = Union[str, Tuple[int, ...]]

ADJUSTMENT_FIELDS = (
    "brightness",
    "contrast",
    "saturate",
    "grayscale",
    "sepia",
    "hue_rotate",
    "blur",
)


def parse_color(color: ColorLike) -> RgbaColor:
    """
    Convert a CSS-style color string or RGB(A) tuple to an RGBA tuple.

    Args:
        color: '#rrggbb', '#rgb', a color name, or a 3/4-tuple of ints

    Returns:
        (R, G, B, A) with alpha 255 when not given

    Raises:
        ValueError: If the color cannot be parsed
    """
    if isinstance(color, str):
        rgb = ImageColor.getcolor(color, "RGBA")
        return tuple(int(c) for c in rgb)  # type: ignore[return-value]

    values = tuple(int(c) for c in color)
    if len(values) == 3:
        values = values + (255,)
    if len(values) != 4 or not all(0 <= c <= 255 for c in values):
        raise ValueError(f"Invalid RGBA color: {color!r}")
    return values  # type: ignore[return-value]


@dataclass(frozen=True)
class FilterState:
    """Adjustment and geometry settings for one editing session.

    Attributes:
        brightness: Percent, 100 = unchanged
        contrast: Percent, 100 = unchanged
        saturate: Percent, 100 = unchanged
        grayscale: Percent, 0-100
        sepia: Percent, 0-100
        hue_rotate: Degrees
        blur: Gaussian standard deviation in pixels
        rotate: Degrees, wrapped into [0, 360)
        scale: Uniform scale, clamped to >= 0.1
        flip_horizontal: Mirror left-right
        flip_vertical: Mirror top-bottom
    """
    brightness: float = DEFAULT_BRIGHTNESS
    contrast: float = DEFAULT_CONTRAST
    saturate: float = DEFAULT_SATURATE
    grayscale: float = DEFAULT_GRAYSCALE
    sepia: float = DEFAULT_SEPIA
    hue_rotate: float = DEFAULT_HUE_ROTATE
    blur: float = DEFAULT_BLUR
    rotate: float = DEFAULT_ROTATE
    scale: float = DEFAULT_SCALE
    flip_horizontal: bool = False
    flip_vertical: bool = False

    def __post_init__(self):
        for name in ADJUSTMENT_FIELDS:
            value = float(getattr(self, name))
            if value < 0:
                raise ValueError(f"{name} must be >= 0, got {value}")
            object.__setattr__(self, name, value)

        object.__setattr__(self, "rotate", float(self.rotate) % 360)
        object.__setattr__(self, "scale", max(MIN_SCALE, float(self.scale)))
        object.__setattr__(self, "flip_horizontal", bool(self.flip_horizontal))
        object.__setattr__(self, "flip_vertical", bool(self.flip_vertical))

    @property
    def has_adjustments(self) -> bool:
        """True when any colour or blur stage differs from identity."""
        return self.adjustments_dict() != FilterState().adjustments_dict()

    @property
    def has_geometry(self) -> bool:
        return (
            self.rotate != DEFAULT_ROTATE
            or self.scale != DEFAULT_SCALE
            or self.flip_horizontal
            or self.flip_vertical
        )

    @property
    def is_identity(self) -> bool:
        return not self.has_adjustments and not self.has_geometry

    def adjustments_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in ADJUSTMENT_FIELDS}

    def with_changes(self, **changes: Any) -> "FilterState":
        """Return a copy with the given fields replaced (and re-validated)."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FilterState":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)


@dataclass(frozen=True)
class SelectionRect:
    """A rectangle in display units. Zero width or height means no selection."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def is_active(self) -> bool:
        return self.width > 0 and self.height > 0

    @classmethod
    def parse(cls, text: str) -> "SelectionRect":
        """Parse 'x,y,width,height'."""
        parts = [p.strip() for p in str(text).split(",")]
        if len(parts) != 4:
            raise ValueError(f"Selection must be 'x,y,width,height', got {text!r}")
        x, y, width, height = (float(p) for p in parts)
        return cls(x, y, width, height)


@dataclass(frozen=True)
class NaturalRect:
    """A rectangle in natural pixel units, derived from a SelectionRect."""
    x: float
    y: float
    width: float
    height: float

    @property
    def is_active(self) -> bool:
        return self.width > 0 and self.height > 0

    def to_box(self) -> Tuple[int, int, int, int]:
        """Integer (left, top, right, bottom) box with the rounded size."""
        left = int(round(self.x))
        top = int(round(self.y))
        return (
            left,
            top,
            left + int(round(self.width)),
            top + int(round(self.height)),
        )


@dataclass(frozen=True)
class ImageSource:
    """A decoded bitmap.

    Attributes:
        image: RGBA PIL Image holding the natural pixel grid
        display_width: Width as presented on screen (0 = not measured yet)
        display_height: Height as presented on screen (0 = not measured yet)
        name: Optional display name (file name)
    """
    image: Any
    display_width: float = 0.0
    display_height: float = 0.0
    name: Optional[str] = None

    @property
    def natural_width(self) -> int:
        return self.image.width

    @property
    def natural_height(self) -> int:
        return self.image.height

    @property
    def natural_size(self) -> Tuple[int, int]:
        return self.image.width, self.image.height

    @property
    def is_empty(self) -> bool:
        return self.image.width == 0 or self.image.height == 0

    def with_display_size(self, width: float, height: float) -> "ImageSource":
        return replace(self, display_width=float(width), display_height=float(height))

    @classmethod
    def from_image(cls, image: Any, name: Optional[str] = None) -> "ImageSource":
        """Wrap a PIL Image, converting it to RGBA."""
        if not hasattr(image, "convert"):
            raise TypeError(f"Expected PIL Image, got {type(image)}")
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return cls(image=image, name=name)


def new_blank_source(width: int, height: int, color: ColorLike = (0, 0, 0, 0)) -> ImageSource:
    """Create an ImageSource filled with a flat color."""
    return ImageSource(image=Image.new("RGBA", (int(width), int(height)), parse_color(color)))
