"""
Batch Resizer.

Resizes a collection of images by percentage or to fixed dimensions and packs
the encoded results into one archive.

Resize modes:
- percentage: newW = w * p/100, newH = h * p/100
- fixed, maintain_aspect_ratio=True: fit within (targetW, targetH)
- fixed, maintain_aspect_ratio=False: exactly targetW x targetH (may distort)

Example:
    >>> settings = ResizeSettings(mode="fixed", width=100, height=100)
    >>> item = BatchItem(source_bytes=png_bytes, display_name="photo.png")
    >>> surface = resize_item(item, settings)
    >>> surface.size
    (100, 50)
    >>> archive = build_resized_archive([item], settings)
"""

import logging
from dataclasses import asdict, dataclass
from pathlib import PurePosixPath
from typing import Any, Dict, Optional, Sequence, Tuple

from IE_Libs.constants import (
    DEFAULT_RESIZE_HEIGHT,
    DEFAULT_RESIZE_PERCENTAGE,
    DEFAULT_RESIZE_QUALITY,
    DEFAULT_RESIZE_WIDTH,
    ERROR_POLICY_ABORT,
    RESIZE_MODE_FIXED,
    RESIZE_MODE_PERCENTAGE,
    RESIZED_FILE_PREFIX,
    RESIZED_FOLDER_NAME,
)
from IE_Libs.errors import EmptySourceError
from IE_Libs.ExportLib.image_codec import EncodeOptions, decode_image, encode_surface
from IE_Libs.ExportLib.output_writer import build_archive
from IE_Libs.ImageEditingLib.image_models import ImageSource
from IE_Libs.ImageEditingLib.surface import Surface
from IE_Libs.task_runner import (
    CancellationToken,
    ProgressCallback,
    TaskResult,
    run_sequential,
)

logger = logging.getLogger(__name__)


@dataclass
class ResizeSettings:
    """Settings shared by every item of a batch.

    Attributes:
        mode: 'percentage' or 'fixed'
        width: Target width for fixed mode (> 0)
        height: Target height for fixed mode (> 0)
        percentage: Scale for percentage mode (> 0)
        maintain_aspect_ratio: Fit within width x height instead of stretching
        quality: Lossy encode quality 0-1, passed through to the encoder
        output_format: Encoding used for the resized files (default: JPEG)
    """
    mode: str = RESIZE_MODE_PERCENTAGE
    width: int = DEFAULT_RESIZE_WIDTH
    height: int = DEFAULT_RESIZE_HEIGHT
    percentage: float = DEFAULT_RESIZE_PERCENTAGE
    maintain_aspect_ratio: bool = True
    quality: float = DEFAULT_RESIZE_QUALITY
    output_format: str = "JPEG"

    def __post_init__(self):
        self.mode = str(self.mode).strip().lower()
        if self.mode not in (RESIZE_MODE_PERCENTAGE, RESIZE_MODE_FIXED):
            raise ValueError(
                f"Unknown resize mode: {self.mode}. "
                f"Valid modes: {RESIZE_MODE_PERCENTAGE}, {RESIZE_MODE_FIXED}"
            )
        if self.mode == RESIZE_MODE_FIXED and (self.width <= 0 or self.height <= 0):
            raise ValueError(f"Fixed size must be > 0, got {self.width}x{self.height}")
        if self.mode == RESIZE_MODE_PERCENTAGE and self.percentage <= 0:
            raise ValueError(f"percentage must be > 0, got {self.percentage}")
        # Validates format and quality.
        self.encode_options()

    def encode_options(self) -> EncodeOptions:
        return EncodeOptions(format=self.output_format, quality=self.quality)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResizeSettings":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)


@dataclass
class BatchItem:
    """One input of a batch.

    Attributes:
        source_bytes: Encoded image bytes
        display_name: File name shown to the user and used for the output name
        natural_dimensions: (width, height), populated when the item is decoded
    """
    source_bytes: bytes
    display_name: str
    natural_dimensions: Optional[Tuple[int, int]] = None

    def decode(self) -> ImageSource:
        source = decode_image(self.source_bytes, name=self.display_name)
        self.natural_dimensions = source.natural_size
        return source


def compute_target_size(natural_size: Tuple[int, int], settings: ResizeSettings) -> Tuple[int, int]:
    """
    Output dimensions for one image.

    Returns:
        (width, height) in whole pixels, each at least 1

    Raises:
        EmptySourceError: If the natural size has a zero dimension
    """
    natural_width, natural_height = natural_size
    if natural_width <= 0 or natural_height <= 0:
        raise EmptySourceError(f"Cannot resize an empty image ({natural_width}x{natural_height})")

    if settings.mode == RESIZE_MODE_PERCENTAGE:
        ratio = settings.percentage / 100.0
        new_width, new_height = natural_width * ratio, natural_height * ratio
    elif settings.maintain_aspect_ratio:
        ratio = min(settings.width / natural_width, settings.height / natural_height)
        new_width, new_height = natural_width * ratio, natural_height * ratio
    else:
        new_width, new_height = settings.width, settings.height

    return max(1, int(round(new_width))), max(1, int(round(new_height)))


def resize_source(source: ImageSource, settings: ResizeSettings) -> Surface:
    """Resize a decoded image onto a new Surface."""
    target = compute_target_size(source.natural_size, settings)
    surface = Surface.new(*target)
    surface.draw_region(source.image, None, (0, 0) + target)
    logger.debug(f"Resized {source.name}: {source.natural_size} -> {target}")
    return surface


def resize_item(item: BatchItem, settings: ResizeSettings) -> Surface:
    """Decode and resize one batch item."""
    return resize_source(item.decode(), settings)


def output_name(item: BatchItem, settings: ResizeSettings) -> str:
    """Archive member name: resized_images/resized_<stem><ext>."""
    stem = PurePosixPath(str(item.display_name).replace("\\", "/")).stem or "image"
    extension = settings.encode_options().extension
    return f"{RESIZED_FOLDER_NAME}/{RESIZED_FILE_PREFIX}{stem}{extension}"


def resize_batch(
    items: Sequence[BatchItem],
    settings: ResizeSettings,
    progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    error_policy: str = ERROR_POLICY_ABORT,
) -> TaskResult[Tuple[str, bytes]]:
    """
    Resize and encode every item, one at a time.

    Args:
        items: Batch items in order
        settings: Resize settings
        progress: Called with (completed, total) after every item
        cancel_token: Optional cancellation token checked between items
        error_policy: 'abort' (default) stops on the first failure, 'skip' continues

    Returns:
        TaskResult whose results are (archive_member_name, encoded_bytes) pairs

    Raises:
        ValueError: If items is empty
        BatchAbortedError: On failure under 'abort' or on cancellation
    """
    if not items:
        raise ValueError("Batch requires at least one image")

    options = settings.encode_options()

    def process(item: BatchItem) -> Tuple[str, bytes]:
        surface = resize_item(item, settings)
        return output_name(item, settings), encode_surface(surface, options)

    result = run_sequential(
        items,
        process,
        progress=progress,
        cancel_token=cancel_token,
        error_policy=error_policy,
        describe=lambda item: item.display_name,
    )
    logger.info(
        f"Batch resize finished: {result.succeeded}/{len(items)} images"
        + (f", {len(result.failures)} skipped" if result.failures else "")
    )
    return result


def build_resized_archive(
    items: Sequence[BatchItem],
    settings: ResizeSettings,
    progress: Optional[ProgressCallback] = None,
    cancel_token: Optional[CancellationToken] = None,
    error_policy: str = ERROR_POLICY_ABORT,
) -> bytes:
    """Resize a batch and pack the results into one ZIP archive."""
    result = resize_batch(items, settings, progress, cancel_token, error_policy)
    if not result.results:
        raise EmptySourceError("No images could be resized")
    return build_archive(result.results)
