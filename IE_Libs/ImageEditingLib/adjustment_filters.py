"""
Adjustment Filter Chain.

Represents the colour adjustments of a FilterState as an ordered list of named
stages. Each colour stage is a pure function over a float32 RGB buffer in the
0-1 range; the whole chain is evaluated in float and quantized to 8 bits once,
so stacked adjustments never accumulate intermediate rounding. Blur is the
spatial tail of the chain and runs on the quantized result.

Stage order (fixed):
    brightness -> contrast -> saturate -> grayscale -> sepia -> hue_rotate -> blur

Stage semantics follow the CSS filter functions of the same name:
- brightness(p%): multiply by p/100
- contrast(p%): (c - 0.5) * p/100 + 0.5
- saturate(p%), grayscale(p%), sepia(p%), hue-rotate(deg): 3x3 colour matrices
- blur(px): Gaussian blur with standard deviation px

Example:
    >>> chain = build_filter_chain(FilterState(brightness=120, sepia=40))
    >>> chain
    [('brightness', 120.0), ('sepia', 40.0)]
    >>> adjusted = apply_filter_chain(image, chain)
"""

import logging
import math
from typing import Any, Callable, Dict, List, Sequence, Tuple

import numpy as np
from PIL import Image, ImageFilter

from IE_Libs.ImageEditingLib.image_models import ADJUSTMENT_FIELDS, FilterState

logger = logging.getLogger(__name__)

AdjustmentStage = Tuple[str, float]

IDENTITY_VALUES: Dict[str, float] = FilterState().adjustments_dict()


# ============================================================================
# Colour matrices
# ============================================================================

def saturate_matrix(amount: float) -> np.ndarray:
    """Colour matrix for saturate(amount); amount 1.0 = unchanged."""
    s = amount
    return np.array([
        [0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s],
        [0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s],
    ], dtype=np.float32)


def grayscale_matrix(amount: float) -> np.ndarray:
    """Colour matrix for grayscale(amount); amount clamped to 0-1."""
    inv = 1.0 - min(1.0, max(0.0, amount))
    return np.array([
        [0.2126 + 0.7874 * inv, 0.7152 - 0.7152 * inv, 0.0722 - 0.0722 * inv],
        [0.2126 - 0.2126 * inv, 0.7152 + 0.2848 * inv, 0.0722 - 0.0722 * inv],
        [0.2126 - 0.2126 * inv, 0.7152 - 0.7152 * inv, 0.0722 + 0.9278 * inv],
    ], dtype=np.float32)


def sepia_matrix(amount: float) -> np.ndarray:
    """Colour matrix for sepia(amount); amount clamped to 0-1."""
    inv = 1.0 - min(1.0, max(0.0, amount))
    return np.array([
        [0.393 + 0.607 * inv, 0.769 - 0.769 * inv, 0.189 - 0.189 * inv],
        [0.349 - 0.349 * inv, 0.686 + 0.314 * inv, 0.168 - 0.168 * inv],
        [0.272 - 0.272 * inv, 0.534 - 0.534 * inv, 0.131 + 0.869 * inv],
    ], dtype=np.float32)


def hue_rotate_matrix(degrees: float) -> np.ndarray:
    """Colour matrix for hue-rotate(degrees)."""
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    return np.array([
        [0.213 + c * 0.787 - s * 0.213, 0.715 - c * 0.715 - s * 0.715, 0.072 - c * 0.072 + s * 0.928],
        [0.213 - c * 0.213 + s * 0.143, 0.715 + c * 0.285 + s * 0.140, 0.072 - c * 0.072 - s * 0.283],
        [0.213 - c * 0.213 - s * 0.787, 0.715 - c * 0.715 + s * 0.715, 0.072 + c * 0.928 + s * 0.072],
    ], dtype=np.float32)


# ============================================================================
# Colour stages (pure functions over float32 RGB in 0-1)
# ============================================================================

def _apply_matrix(rgb: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    return rgb @ matrix.T


def brightness_stage(rgb: np.ndarray, value: float) -> np.ndarray:
    return rgb * (value / 100.0)


def contrast_stage(rgb: np.ndarray, value: float) -> np.ndarray:
    return (rgb - 0.5) * (value / 100.0) + 0.5


def saturate_stage(rgb: np.ndarray, value: float) -> np.ndarray:
    return _apply_matrix(rgb, saturate_matrix(value / 100.0))


def grayscale_stage(rgb: np.ndarray, value: float) -> np.ndarray:
    return _apply_matrix(rgb, grayscale_matrix(value / 100.0))


def sepia_stage(rgb: np.ndarray, value: float) -> np.ndarray:
    return _apply_matrix(rgb, sepia_matrix(value / 100.0))


def hue_rotate_stage(rgb: np.ndarray, value: float) -> np.ndarray:
    return _apply_matrix(rgb, hue_rotate_matrix(value))


COLOR_STAGES: Dict[str, Callable[[np.ndarray, float], np.ndarray]] = {
    "brightness": brightness_stage,
    "contrast": contrast_stage,
    "saturate": saturate_stage,
    "grayscale": grayscale_stage,
    "sepia": sepia_stage,
    "hue_rotate": hue_rotate_stage,
}


# ============================================================================
# Chain construction and evaluation
# ============================================================================

def build_filter_chain(filters: FilterState) -> List[AdjustmentStage]:
    """
    Build the ordered adjustment chain for a FilterState.

    Stages whose value is the identity are left out.

    Args:
        filters: FilterState snapshot

    Returns:
        List of (stage_name, value) tuples in the fixed stage order
    """
    chain: List[AdjustmentStage] = []
    for name in ADJUSTMENT_FIELDS:
        value = float(getattr(filters, name))
        if value != IDENTITY_VALUES[name]:
            chain.append((name, value))
    return chain


def _validate_chain(chain: Sequence[AdjustmentStage]) -> None:
    order = {name: index for index, name in enumerate(ADJUSTMENT_FIELDS)}
    last = -1
    for name, value in chain:
        if name not in order:
            raise ValueError(
                f"Unknown adjustment stage: {name}. "
                f"Valid stages: {', '.join(ADJUSTMENT_FIELDS)}"
            )
        if order[name] <= last:
            raise ValueError(f"Adjustment stage '{name}' is out of order or repeated")
        if value < 0:
            raise ValueError(f"Adjustment stage '{name}' must be >= 0, got {value}")
        last = order[name]


def apply_filter_chain(image: Any, chain: Sequence[AdjustmentStage]) -> Any:
    """
    Apply an adjustment chain to an image.

    Args:
        image: PIL Image (converted to RGBA)
        chain: Ordered (stage_name, value) list, see build_filter_chain()

    Returns:
        New RGBA PIL Image (the input is not modified)

    Raises:
        ValueError: If a stage is unknown, repeated, out of order or negative
        TypeError: If image is not a PIL Image
    """
    if not hasattr(image, "convert"):
        raise TypeError(f"Expected PIL Image, got {type(image)}")

    _validate_chain(chain)

    img = image.convert("RGBA") if image.mode != "RGBA" else image.copy()
    color_stages = [(name, value) for name, value in chain if name in COLOR_STAGES]
    blur_radius = sum(value for name, value in chain if name == "blur")

    if color_stages and img.width and img.height:
        pixels = np.asarray(img, dtype=np.float32) / 255.0
        rgb = pixels[..., :3]
        for name, value in color_stages:
            rgb = np.clip(COLOR_STAGES[name](rgb, value), 0.0, 1.0)
        pixels[..., :3] = rgb
        img = Image.fromarray(np.rint(pixels * 255.0).astype(np.uint8), "RGBA")
        logger.debug(f"Applied colour stages: {[name for name, _ in color_stages]}")

    if blur_radius > 0 and img.width and img.height:
        img = img.filter(ImageFilter.GaussianBlur(radius=blur_radius))
        logger.debug(f"Applied blur stage: radius={blur_radius}")

    return img


def apply_filters(image: Any, filters: FilterState) -> Any:
    """Apply the adjustment part of a FilterState to an image."""
    return apply_filter_chain(image, build_filter_chain(filters))


def describe_filter_chain(chain: Sequence[AdjustmentStage]) -> str:
    """Render a chain in CSS filter notation, e.g. 'brightness(120%) blur(2px)'."""
    units = {"hue_rotate": "deg", "blur": "px"}
    parts = []
    for name, value in chain:
        css_name = name.replace("_", "-")
        parts.append(f"{css_name}({value:g}{units.get(name, '%')})")
    return " ".join(parts) if parts else "none"
