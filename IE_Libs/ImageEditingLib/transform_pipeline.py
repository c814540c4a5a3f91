"""
Transform Pipeline.

Renders an ImageSource with a FilterState onto a new Surface:

1. Compute the rotated bounding box and allocate a surface of that size, so
   no corner of the rotated image is clipped.
2. Apply the adjustment filter chain to the source pixels (exactly once,
   before any geometric resampling).
3. Compose translate(center) -> rotate -> scale -> flip about the center.
4. Draw the source centered at the origin.

Rotations by multiples of 90 degrees at scale 1 are done with lossless
transposes; any other combination goes through a single affine resample.

Example:
    >>> source = ImageSource.from_image(Image.new("RGBA", (1000, 500)))
    >>> surface = apply_transform_pipeline(source, FilterState(rotate=90))
    >>> surface.size
    (500, 1000)
"""

import logging
import math
from typing import Any, Tuple

import numpy as np
from PIL import Image

from IE_Libs.errors import EmptySourceError
from IE_Libs.ImageEditingLib.adjustment_filters import apply_filter_chain, build_filter_chain
from IE_Libs.ImageEditingLib.image_models import FilterState, ImageSource
from IE_Libs.ImageEditingLib.surface import Surface

logger = logging.getLogger(__name__)

# Trig results closer than this to an integer are snapped to it.
_TRIG_EPSILON = 1e-9


def _snap(value: float) -> float:
    nearest = round(value)
    return float(nearest) if abs(value - nearest) < _TRIG_EPSILON else value


def rotated_bounding_box(
    width: float,
    height: float,
    rotate: float,
    scale: float = 1.0,
) -> Tuple[int, int]:
    """
    Size of the axis-aligned box containing a rotated (and scaled) rectangle.

    newW = w*|cos| + h*|sin|, newH = w*|sin| + h*|cos|. The box is grown by
    ``scale`` only when scale > 1; a smaller scale keeps the natural box and
    leaves a transparent margin.

    Returns:
        (width, height) rounded up to whole pixels
    """
    rad = math.radians(rotate)
    abs_cos = abs(_snap(math.cos(rad)))
    abs_sin = abs(_snap(math.sin(rad)))
    growth = max(1.0, scale)

    box_width = _snap((width * abs_cos + height * abs_sin) * growth)
    box_height = _snap((width * abs_sin + height * abs_cos) * growth)
    return int(math.ceil(box_width)), int(math.ceil(box_height))


def build_transform_matrix(
    source_size: Tuple[int, int],
    surface_size: Tuple[int, int],
    filters: FilterState,
) -> np.ndarray:
    """
    Forward 3x3 matrix mapping source pixel coordinates to surface coordinates.

    Equivalent canvas calls:
        translate(surfaceW/2, surfaceH/2); rotate(rad); scale(s, s);
        scale(flipH ? -1 : 1, flipV ? -1 : 1); drawImage(src, -w/2, -h/2)
    """
    rad = math.radians(filters.rotate)
    c, s = _snap(math.cos(rad)), _snap(math.sin(rad))
    flip_x = -1.0 if filters.flip_horizontal else 1.0
    flip_y = -1.0 if filters.flip_vertical else 1.0

    to_center = np.array([[1, 0, surface_size[0] / 2.0],
                          [0, 1, surface_size[1] / 2.0],
                          [0, 0, 1]], dtype=np.float64)
    rotation = np.array([[c, -s, 0],
                         [s, c, 0],
                         [0, 0, 1]], dtype=np.float64)
    scaling = np.diag([filters.scale, filters.scale, 1.0])
    flipping = np.diag([flip_x, flip_y, 1.0])
    from_center = np.array([[1, 0, -source_size[0] / 2.0],
                            [0, 1, -source_size[1] / 2.0],
                            [0, 0, 1]], dtype=np.float64)

    return to_center @ rotation @ scaling @ flipping @ from_center


def _is_quarter_turn(filters: FilterState) -> bool:
    return filters.scale == 1.0 and filters.rotate % 90 == 0


def _transpose_geometry(image: Any, filters: FilterState) -> Any:
    """Lossless path: flips first, then clockwise quarter turns."""
    if filters.flip_horizontal:
        image = image.transpose(Image.Transpose.FLIP_LEFT_RIGHT)
    if filters.flip_vertical:
        image = image.transpose(Image.Transpose.FLIP_TOP_BOTTOM)

    # PIL's ROTATE_* constants turn counter-clockwise; canvas rotate() is clockwise.
    turns = int(filters.rotate // 90) % 4
    if turns == 1:
        image = image.transpose(Image.Transpose.ROTATE_270)
    elif turns == 2:
        image = image.transpose(Image.Transpose.ROTATE_180)
    elif turns == 3:
        image = image.transpose(Image.Transpose.ROTATE_90)
    return image


def _affine_geometry(image: Any, surface_size: Tuple[int, int], filters: FilterState) -> Any:
    forward = build_transform_matrix(image.size, surface_size, filters)
    inverse = np.linalg.inv(forward)
    coefficients = tuple(float(v) for v in inverse[:2].ravel())
    return image.transform(
        surface_size,
        Image.Transform.AFFINE,
        coefficients,
        resample=Image.Resampling.BICUBIC,
        fillcolor=(0, 0, 0, 0),
    )


def apply_transform_pipeline(source: ImageSource, filters: FilterState) -> Surface:
    """
    Render a source with filters and geometry onto a new Surface.

    Args:
        source: Decoded image
        filters: FilterState snapshot (not modified)

    Returns:
        New Surface sized to the rotated bounding box

    Raises:
        EmptySourceError: If the source has a zero natural dimension
    """
    if source.is_empty:
        raise EmptySourceError(
            f"Source image has no pixels ({source.natural_width}x{source.natural_height})"
        )

    surface_size = rotated_bounding_box(
        source.natural_width, source.natural_height, filters.rotate, filters.scale
    )

    chain = build_filter_chain(filters)
    image = apply_filter_chain(source.image, chain) if chain else source.image

    if not filters.has_geometry:
        surface = Surface.from_image(image)
    elif _is_quarter_turn(filters):
        surface = Surface(_transpose_geometry(image, filters))
    else:
        surface = Surface(_affine_geometry(image, surface_size, filters))

    logger.debug(
        f"Transform pipeline: {source.natural_size} -> {surface.size} "
        f"(rotate={filters.rotate}, scale={filters.scale}, "
        f"flip=({filters.flip_horizontal}, {filters.flip_vertical}), stages={len(chain)})"
    )
    return surface
