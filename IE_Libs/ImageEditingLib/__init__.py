"""
ImageEditingLib - Raster transform core

This module provides the Surface abstraction, the adjustment filter chain,
display-to-natural coordinate mapping, the transform pipeline and the
selection-bound operations. The stateful editor lives in
IE_Libs.ImageEditingLib.editor_session.
"""

from IE_Libs.ImageEditingLib.image_models import (
    FilterState,
    ImageSource,
    NaturalRect,
    RgbaColor,
    SelectionRect,
    parse_color,
)
from IE_Libs.ImageEditingLib.surface import Surface
from IE_Libs.ImageEditingLib.adjustment_filters import (
    apply_filter_chain,
    apply_filters,
    build_filter_chain,
)
from IE_Libs.ImageEditingLib.coordinate_mapper import to_natural
from IE_Libs.ImageEditingLib.transform_pipeline import (
    apply_transform_pipeline,
    rotated_bounding_box,
)
from IE_Libs.ImageEditingLib.selection_ops import (
    border_surface,
    crop_surface,
    fill_surface,
)

__all__ = [
    "FilterState",
    "ImageSource",
    "NaturalRect",
    "RgbaColor",
    "SelectionRect",
    "parse_color",
    "Surface",
    "apply_filter_chain",
    "apply_filters",
    "build_filter_chain",
    "to_natural",
    "apply_transform_pipeline",
    "rotated_bounding_box",
    "border_surface",
    "crop_surface",
    "fill_surface",
]
