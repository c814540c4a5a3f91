"""
BatchLib - Batch resizing

This module resizes many images with shared settings and packs the
encoded results into one archive.
"""

from IE_Libs.BatchLib.batch_resizer import (
    BatchItem,
    ResizeSettings,
    build_resized_archive,
    compute_target_size,
    output_name,
    resize_batch,
    resize_item,
    resize_source,
)

__all__ = [
    "BatchItem",
    "ResizeSettings",
    "build_resized_archive",
    "compute_target_size",
    "output_name",
    "resize_batch",
    "resize_item",
    "resize_source",
]
