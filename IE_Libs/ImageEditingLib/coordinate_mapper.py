"""
Coordinate mapping between displayed and natural image pixels.

The displayed image may be scaled by layout independently along each axis, so
X and Y scale factors are always computed separately. When the natural image
sits centered inside a larger intermediate surface (the rotated bounding box
produced by the transform pipeline) the centering offset is added as well.
"""

import logging
from typing import Optional, Tuple

from IE_Libs.errors import NotReadyError
from IE_Libs.ImageEditingLib.image_models import ImageSource, NaturalRect, SelectionRect

logger = logging.getLogger(__name__)


def display_scale(source: ImageSource) -> Tuple[float, float]:
    """
    Get the (scale_x, scale_y) factors from display to natural units.

    Raises:
        NotReadyError: If the display size has not been measured yet
    """
    if source.display_width <= 0 or source.display_height <= 0:
        raise NotReadyError(
            f"Display size not measured yet "
            f"({source.display_width}x{source.display_height})"
        )
    return (
        source.natural_width / source.display_width,
        source.natural_height / source.display_height,
    )


def surface_offset(
    source: ImageSource,
    surface_size: Optional[Tuple[int, int]],
) -> Tuple[float, float]:
    """Centering offset of the natural image inside a (possibly larger) surface."""
    if surface_size is None:
        return 0.0, 0.0
    surface_width, surface_height = surface_size
    return (
        (surface_width - source.natural_width) / 2.0,
        (surface_height - source.natural_height) / 2.0,
    )


def to_natural(
    rect: SelectionRect,
    source: ImageSource,
    surface_size: Optional[Tuple[int, int]] = None,
) -> NaturalRect:
    """
    Convert a display-unit selection to natural pixel units.

    Args:
        rect: Selection in display units
        source: Image with natural and display sizes
        surface_size: Size of the surface the natural image is centered in,
                      or None when the surface is the natural image itself

    Returns:
        NaturalRect in the surface's pixel grid

    Raises:
        NotReadyError: If the display size is zero

    Example:
        >>> src = ImageSource(image=Image.new("RGBA", (1000, 500)),
        ...                   display_width=200, display_height=100)
        >>> to_natural(SelectionRect(50, 25, 100, 50), src)
        NaturalRect(x=250.0, y=125.0, width=500.0, height=250.0)
    """
    scale_x, scale_y = display_scale(source)
    offset_x, offset_y = surface_offset(source, surface_size)

    natural = NaturalRect(
        x=rect.x * scale_x + offset_x,
        y=rect.y * scale_y + offset_y,
        width=rect.width * scale_x,
        height=rect.height * scale_y,
    )
    logger.debug(f"Mapped {rect} -> {natural} (scale={scale_x:.4f},{scale_y:.4f})")
    return natural


def full_rect(size: Tuple[int, int]) -> NaturalRect:
    """NaturalRect covering a whole surface."""
    return NaturalRect(0.0, 0.0, float(size[0]), float(size[1]))
