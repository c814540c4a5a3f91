"""
Selection-bound destructive operations for ImageEdit.

This module provides the three operations that bake pixels: crop, fill and
border. Each takes a rectangle already mapped to natural pixel units (see
coordinate_mapper.to_natural) and a target Surface.

Functions:
    crop_surface: Copy a region into a new surface sized to the region
    fill_surface: Overwrite a region (or the whole surface) with a flat color
    border_surface: Stroke an inset outline around a region (or the whole surface)
"""

import logging
from typing import Optional

from IE_Libs.constants import DEFAULT_BORDER_COLOR, DEFAULT_BORDER_WIDTH, DEFAULT_FILL_COLOR
from IE_Libs.errors import NoSelectionError
from IE_Libs.ImageEditingLib.coordinate_mapper import full_rect
from IE_Libs.ImageEditingLib.image_models import ColorLike, NaturalRect
from IE_Libs.ImageEditingLib.surface import Surface, round_half_up

logger = logging.getLogger(__name__)


def crop_surface(surface: Surface, rect: Optional[NaturalRect]) -> Surface:
    """
    Crop a surface to a natural-unit rectangle.

    The result is sized ``round(rect.width) x round(rect.height)``. Parts of
    the rectangle outside the surface come out transparent.

    Args:
        surface: Surface to read from (not modified)
        rect: Region to keep

    Returns:
        New Surface holding the region

    Raises:
        NoSelectionError: If rect is None or has zero width/height
    """
    if rect is None or not rect.is_active:
        raise NoSelectionError("Crop requires a selection with width > 0 and height > 0")

    left, top, right, bottom = rect.to_box()
    width, height = right - left, bottom - top
    if width <= 0 or height <= 0:
        raise NoSelectionError(f"Selection rounds to an empty region: {rect}")

    cropped = Surface.new(width, height)
    cropped.draw_region(surface, (left, top, width, height), (0, 0, width, height))
    logger.debug(f"Cropped {surface.size} to box {(left, top, right, bottom)}")
    return cropped


def fill_surface(
    surface: Surface,
    rect: Optional[NaturalRect] = None,
    color: ColorLike = DEFAULT_FILL_COLOR,
) -> Surface:
    """
    Fill a region with a flat, opaque overwrite.

    Without an active rect the entire surface is filled.

    Returns:
        The same surface (modified in place)
    """
    if rect is None or not rect.is_active:
        rect = full_rect(surface.size)
    surface.fill_rect(rect.x, rect.y, rect.width, rect.height, color)
    return surface


def border_surface(
    surface: Surface,
    rect: Optional[NaturalRect] = None,
    color: ColorLike = DEFAULT_BORDER_COLOR,
    width: float = DEFAULT_BORDER_WIDTH,
) -> Surface:
    """
    Stroke a rectangle outline inset by half the line width.

    The width is rounded to whole pixels first (.5 rounds up) and the inset is
    taken from the rounded width.

    The stroke path is ``(x + w/2, y + w/2, W - w, H - w)`` so the outer edge
    of the stroke lies exactly on the rect boundary and never overflows the
    surface when the rect is the whole canvas. Without an active rect the
    whole surface is outlined.

    Args:
        surface: Surface to draw on
        rect: Region to outline (None = whole surface)
        color: Stroke color
        width: Stroke width in pixels (> 0; at least 1px is drawn)

    Returns:
        The same surface (modified in place)

    Raises:
        ValueError: If width <= 0
    """
    if width <= 0:
        raise ValueError(f"Border width must be > 0, got {width}")

    if rect is None or not rect.is_active:
        rect = full_rect(surface.size)

    width = max(1, round_half_up(width))
    half = width / 2.0
    surface.stroke_rect(
        rect.x + half,
        rect.y + half,
        rect.width - width,
        rect.height - width,
        color,
        line_width=width,
    )
    return surface
