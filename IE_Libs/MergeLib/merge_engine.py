"""
Merge Engine.

Stacks an ordered list of images (and PDF pages rendered to images) into one
output:

- image: every image is scaled to the widest image's width, keeping its own
  aspect ratio, and drawn top to bottom with ``spacing`` pixels between
  consecutive images. With spacing > 0 the canvas is pre-filled white so the
  gaps are visible; otherwise the background stays transparent.
- document: one PDF page per image, each page exactly the image's size; no
  scaling and no spacing.

The output kind is chosen automatically: image when every item is an image,
document as soon as one item is a PDF.

Example:
    >>> items = [
    ...     MergeItem(source_bytes=a_png, mime_kind="image", order_index=0),
    ...     MergeItem(source_bytes=b_png, mime_kind="image", order_index=1),
    ... ]
    >>> png_bytes = merge(items, spacing=20)
"""

import logging
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

from IE_Libs.constants import (
    KIND_DOCUMENT,
    KIND_IMAGE,
    MERGE_BACKGROUND_COLOR,
    MERGE_SPACING_PRESETS,
    MERGED_DOCUMENT_NAME,
    MERGED_IMAGE_NAME,
    PDF_PAGE_QUALITY,
    PDF_RENDER_SCALE,
)
from IE_Libs.errors import EmptySourceError
from IE_Libs.ExportLib.image_codec import (
    DocumentPage,
    EncodeOptions,
    decode_image,
    encode_document,
    encode_surface,
)
from IE_Libs.ImageEditingLib.surface import Surface
from IE_Libs.MergeLib.pdf_rasterizer import render_pdf_pages
from IE_Libs.task_runner import CancellationToken, ProgressCallback, run_sequential

logger = logging.getLogger(__name__)

# (y offset, width, height) of one image in the stacked output
StackSlot = Tuple[int, int, int]


@dataclass(frozen=True)
class MergeItem:
    """One input of a merge.

    Attributes:
        source_bytes: Encoded image or PDF bytes
        mime_kind: 'image' or 'document'
        order_index: Sort key for stacking (user-reorderable)
        name: Optional display name
    """
    source_bytes: bytes
    mime_kind: str = KIND_IMAGE
    order_index: int = 0
    name: Optional[str] = None

    def __post_init__(self):
        if self.mime_kind not in (KIND_IMAGE, KIND_DOCUMENT):
            raise ValueError(
                f"Unknown mime_kind: {self.mime_kind}. "
                f"Valid kinds: {KIND_IMAGE}, {KIND_DOCUMENT}"
            )

    @property
    def label(self) -> str:
        return self.name or f"item-{self.order_index}"


@dataclass
class MergeSettings:
    """Merge configuration.

    Attributes:
        spacing: Gap between stacked images in pixels (UI presets: 0, 10, 20, 40)
        render_scale: Render scale for PDF pages
    """
    spacing: int = 0
    render_scale: float = PDF_RENDER_SCALE

    def __post_init__(self):
        self.spacing = validate_spacing(self.spacing)
        if self.spacing not in MERGE_SPACING_PRESETS:
            logger.debug(f"Non-preset spacing {self.spacing}px")
        if self.render_scale <= 0:
            raise ValueError(f"render_scale must be > 0, got {self.render_scale}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MergeSettings":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)


def validate_spacing(spacing: float) -> int:
    """Return spacing as whole pixels; negative or fractional values are rejected."""
    value = float(spacing)
    if value < 0:
        raise ValueError(f"spacing must be >= 0, got {spacing}")
    if not value.is_integer():
        raise ValueError(f"spacing must be a whole number of pixels, got {spacing}")
    return int(value)


# ============================================================================
# Ordering
# ============================================================================

def sort_items(items: Sequence[MergeItem]) -> List[MergeItem]:
    """Items in stacking order (stable for equal order indexes)."""
    return sorted(items, key=lambda item: item.order_index)


def _reindex(items: Sequence[MergeItem]) -> List[MergeItem]:
    return [replace(item, order_index=index) for index, item in enumerate(items)]


def move_item_up(items: Sequence[MergeItem], index: int) -> List[MergeItem]:
    """Swap the item at ``index`` with the one before it."""
    ordered = sort_items(items)
    if 0 < index < len(ordered):
        ordered[index - 1], ordered[index] = ordered[index], ordered[index - 1]
    return _reindex(ordered)


def move_item_down(items: Sequence[MergeItem], index: int) -> List[MergeItem]:
    """Swap the item at ``index`` with the one after it."""
    ordered = sort_items(items)
    if 0 <= index < len(ordered) - 1:
        ordered[index], ordered[index + 1] = ordered[index + 1], ordered[index]
    return _reindex(ordered)


def remove_item(items: Sequence[MergeItem], index: int) -> List[MergeItem]:
    ordered = sort_items(items)
    if 0 <= index < len(ordered):
        del ordered[index]
    return _reindex(ordered)


def resolve_output_kind(items: Sequence[MergeItem]) -> str:
    """'image' if every item is an image, otherwise 'document'."""
    if items and all(item.mime_kind == KIND_IMAGE for item in items):
        return KIND_IMAGE
    return KIND_DOCUMENT


def output_filename(kind: str) -> str:
    return MERGED_IMAGE_NAME if kind == KIND_IMAGE else MERGED_DOCUMENT_NAME


# ============================================================================
# Rasterization
# ============================================================================

def item_images(item: MergeItem, render_scale: float = PDF_RENDER_SCALE) -> List[Any]:
    """Decode one item to a list of RGBA images (one per PDF page)."""
    if item.mime_kind == KIND_DOCUMENT:
        return render_pdf_pages(item.source_bytes, scale=render_scale, name=item.name)
    return [decode_image(item.source_bytes, name=item.name).image]


def collect_images(
    items: Sequence[MergeItem],
    render_scale: float = PDF_RENDER_SCALE,
    progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
) -> List[Any]:
    """
    Flatten items into one ordered list of images, one item at a time.

    Raises:
        BatchAbortedError: If an item cannot be decoded or the run is cancelled
    """
    result = run_sequential(
        sort_items(items),
        lambda item: item_images(item, render_scale),
        progress=progress,
        cancel_token=cancel_token,
        describe=lambda item: item.label,
    )
    return [image for images in result.results for image in images]


# ============================================================================
# Layout and composition
# ============================================================================

def stack_layout(sizes: Sequence[Tuple[int, int]], spacing: int = 0) -> Tuple[int, int, List[StackSlot]]:
    """
    Compute the stacked layout for a list of (width, height) sizes.

    Each height is scaled by ``max_width / width`` and rounded to whole
    pixels; total height is the sum of scaled heights plus spacing * (n - 1).

    Returns:
        (max_width, total_height, slots)

    Raises:
        EmptySourceError: If sizes is empty or a size has a zero dimension
    """
    if not sizes:
        raise EmptySourceError("Nothing to merge")
    if any(width <= 0 or height <= 0 for width, height in sizes):
        raise EmptySourceError("Cannot merge an image with a zero dimension")

    max_width = max(width for width, _ in sizes)
    slots: List[StackSlot] = []
    y = 0
    for index, (width, height) in enumerate(sizes):
        scaled_height = max(1, int(round(height * (max_width / width))))
        slots.append((y, max_width, scaled_height))
        y += scaled_height
        if index < len(sizes) - 1:
            y += spacing
    return max_width, y, slots


def stack_images(images: Sequence[Any], spacing: int = 0) -> Surface:
    """
    Stack images vertically at a common width.

    Args:
        images: PIL Images in stacking order
        spacing: Gap between consecutive images in pixels

    Returns:
        New Surface of size (max_width, sum(scaled heights) + spacing * (n - 1))
    """
    spacing = validate_spacing(spacing)

    max_width, total_height, slots = stack_layout([image.size for image in images], spacing)
    fill = MERGE_BACKGROUND_COLOR if spacing > 0 else None
    surface = Surface.new(max_width, total_height, fill=fill)

    for image, (y, width, height) in zip(images, slots):
        surface.draw_region(image, None, (0, y, width, height))

    logger.debug(f"Stacked {len(images)} images into {surface.size} (spacing={spacing})")
    return surface


def build_document_pages(images: Sequence[Any]) -> List[DocumentPage]:
    """One page per image, sized exactly to the image."""
    return [DocumentPage(image) for image in images]


def merge(
    items: Sequence[MergeItem],
    spacing: int = 0,
    kind: Optional[str] = None,
    progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    render_scale: float = PDF_RENDER_SCALE,
) -> bytes:
    """
    Merge items into one PNG image or one PDF document.

    Args:
        items: Merge items (sorted by order_index before processing)
        spacing: Gap between stacked images (image output only)
        kind: Force 'image' or 'document'; None picks automatically
        progress: Called with (completed, total) after every item is decoded
        cancel_token: Optional cancellation token checked between items
        render_scale: Render scale for PDF pages

    Returns:
        PNG bytes (image) or PDF bytes (document)

    Raises:
        ValueError: If items is empty, kind is unknown or spacing is not a
            non-negative whole number
        BatchAbortedError: If an item fails to decode or the run is cancelled
    """
    if not items:
        raise ValueError("Merge requires at least one file")
    settings = MergeSettings(spacing=spacing, render_scale=render_scale)

    kind = kind or resolve_output_kind(items)
    if kind not in (KIND_IMAGE, KIND_DOCUMENT):
        raise ValueError(f"Unknown merge kind: {kind}")

    images = collect_images(items, settings.render_scale, progress, cancel_token)

    if kind == KIND_IMAGE:
        surface = stack_images(images, settings.spacing)
        data = encode_surface(surface, EncodeOptions(format="PNG"))
    else:
        data = encode_document(build_document_pages(images), quality=PDF_PAGE_QUALITY)

    logger.info(f"Merged {len(items)} files ({len(images)} images) into {output_filename(kind)}")
    return data
