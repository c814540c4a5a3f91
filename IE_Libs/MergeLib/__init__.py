"""
MergeLib - Stacking images and PDF pages

This module rasterizes PDF pages and merges ordered image/PDF inputs into
one tall image or one multi-page document.
"""

from IE_Libs.MergeLib.merge_engine import (
    MergeItem,
    MergeSettings,
    build_document_pages,
    collect_images,
    merge,
    move_item_down,
    move_item_up,
    output_filename,
    remove_item,
    resolve_output_kind,
    sort_items,
    stack_images,
    stack_layout,
    validate_spacing,
)
from IE_Libs.MergeLib.pdf_rasterizer import iter_pdf_pages, render_pdf_pages

__all__ = [
    "MergeItem",
    "MergeSettings",
    "build_document_pages",
    "collect_images",
    "merge",
    "move_item_down",
    "move_item_up",
    "output_filename",
    "remove_item",
    "resolve_output_kind",
    "sort_items",
    "stack_images",
    "stack_layout",
    "validate_spacing",
    "iter_pdf_pages",
    "render_pdf_pages",
]
