"""
Decode and encode collaborators for ImageEdit.

Decoding turns raw bytes into an ImageSource; encoding turns a Surface (or a
list of page images) into PNG/JPEG/WEBP or multi-page PDF bytes. The core
never touches container formats beyond these functions.

Classes:
    EncodeOptions: Output format and lossy quality (0-1)
    DocumentPage: One page of a PDF document

Functions:
    decode_image: Decode image bytes to an RGBA ImageSource
    detect_kind: Classify a file name or MIME type as image or document
    encode_surface: Encode a Surface to image bytes
    encode_document: Encode page images to one PDF
"""

import io
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from PIL import Image, ImageOps, UnidentifiedImageError

from IE_Libs.constants import (
    DEFAULT_ENCODE_QUALITY,
    DEFAULT_OUTPUT_FORMAT,
    DOCUMENT_RESOLUTION,
    FORMAT_EXTENSIONS,
    KIND_DOCUMENT,
    KIND_IMAGE,
    LOSSY_FORMATS,
    PDF_MIME_TYPE,
    SUPPORTED_DOCUMENTS,
    SUPPORTED_OUTPUT_FORMATS,
)
from IE_Libs.errors import DecodeFailureError, EmptySourceError
from IE_Libs.ImageEditingLib.image_models import ImageSource

logger = logging.getLogger(__name__)


def normalize_format(save_format: str) -> str:
    """Upper-case a format name; PIL uses "JPEG" not "JPG"."""
    save_format = str(save_format).strip().upper()
    if save_format == "JPG":
        save_format = "JPEG"
    return save_format


@dataclass
class EncodeOptions:
    """Options for the byte-encoding step.

    Attributes:
        format: PNG, JPEG or WEBP
        quality: Lossy quality 0-1 (ignored for PNG)
    """
    format: str = DEFAULT_OUTPUT_FORMAT
    quality: float = DEFAULT_ENCODE_QUALITY

    def __post_init__(self):
        self.format = normalize_format(self.format)
        if self.format not in SUPPORTED_OUTPUT_FORMATS:
            raise ValueError(
                f"Unsupported output format: {self.format}. "
                f"Valid formats: {', '.join(sorted(SUPPORTED_OUTPUT_FORMATS))}"
            )
        self.quality = float(self.quality)
        if not (0.0 < self.quality <= 1.0):
            raise ValueError(f"quality must be 0 < q <= 1, got {self.quality}")

    @property
    def extension(self) -> str:
        return FORMAT_EXTENSIONS[self.format]

    def get_save_kwargs(self) -> Dict[str, Any]:
        """Get PIL Image.save() kwargs for this format."""
        kwargs: Dict[str, Any] = {"format": self.format}
        if self.format in LOSSY_FORMATS:
            kwargs["quality"] = max(1, min(100, int(round(self.quality * 100))))
        return kwargs

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EncodeOptions":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items()
                    if k in cls.__dataclass_fields__}
        return cls(**filtered)


def decode_image(data: bytes, name: Optional[str] = None) -> ImageSource:
    """
    Decode image bytes into an RGBA ImageSource.

    EXIF orientation is applied, so the natural grid matches what a viewer
    shows.

    Args:
        data: Encoded image bytes (PNG, JPEG, BMP, GIF, TIFF, WEBP)
        name: Optional display name, used in errors and kept on the source

    Returns:
        ImageSource with natural dimensions populated

    Raises:
        DecodeFailureError: If the bytes are not a readable image
    """
    if not data:
        raise DecodeFailureError("no image data", name=name)
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
        img = ImageOps.exif_transpose(img)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as e:
        raise DecodeFailureError(f"failed to decode image: {e}", name=name) from e

    source = ImageSource.from_image(img, name=name)
    logger.debug(f"Decoded {name or '<bytes>'}: {source.natural_size}")
    return source


def detect_kind(name_or_mime: str) -> str:
    """
    Classify a file name or MIME type.

    Returns:
        'document' for PDFs, 'image' otherwise
    """
    value = str(name_or_mime).strip().lower()
    if value == PDF_MIME_TYPE or Path(value).suffix in SUPPORTED_DOCUMENTS:
        return KIND_DOCUMENT
    return KIND_IMAGE


def _flatten_alpha(image: Any) -> Any:
    if image.mode == "RGBA":
        return image.convert("RGB")
    return image


def encode_image(image: Any, options: Optional[EncodeOptions] = None) -> bytes:
    """Encode a PIL Image with the given options."""
    options = options or EncodeOptions()
    kwargs = options.get_save_kwargs()
    if kwargs["format"] == "JPEG":
        image = _flatten_alpha(image)

    buffer = io.BytesIO()
    try:
        image.save(buffer, **kwargs)
    except (OSError, ValueError) as e:
        raise OSError(f"Failed to encode image as {options.format}: {e}") from e
    return buffer.getvalue()


def encode_surface(surface: Any, options: Optional[EncodeOptions] = None) -> bytes:
    """
    Encode a Surface to image bytes.

    Raises:
        EmptySourceError: If the surface has no pixels
    """
    if surface.width == 0 or surface.height == 0:
        raise EmptySourceError("Cannot encode an empty surface")
    return encode_image(surface.image, options)


@dataclass
class DocumentPage:
    """A single PDF page sized exactly to its image."""
    image: Any

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def orientation(self) -> str:
        return page_orientation(self.width, self.height)


def page_orientation(width: float, height: float) -> str:
    """'landscape' when wider than tall, else 'portrait'."""
    return "landscape" if width > height else "portrait"


def encode_document(pages: Sequence[Any], quality: Optional[float] = None) -> bytes:
    """
    Encode page images to one multi-page PDF.

    Each page is exactly the size of its image (72 dpi, so 1 px = 1 pt).

    Args:
        pages: DocumentPage objects, Surfaces or PIL Images, in page order
        quality: JPEG quality 0-1 for the embedded page rasters (None: encoder default)

    Returns:
        PDF bytes

    Raises:
        EmptySourceError: If there are no pages or a page has no pixels
    """
    images: List[Any] = []
    for page in pages:
        image = getattr(page, "image", page)
        if image.width == 0 or image.height == 0:
            raise EmptySourceError("Cannot place an empty image on a document page")
        images.append(image.convert("RGB") if image.mode != "RGB" else image)

    if not images:
        raise EmptySourceError("Document needs at least one page")

    for index, image in enumerate(images):
        logger.debug(
            f"Document page {index + 1}: {image.width}x{image.height} "
            f"{page_orientation(image.width, image.height)}"
        )

    save_kwargs: Dict[str, Any] = {"resolution": DOCUMENT_RESOLUTION}
    if quality is not None:
        save_kwargs["quality"] = EncodeOptions(format="JPEG", quality=quality).get_save_kwargs()["quality"]

    buffer = io.BytesIO()
    first, rest = images[0], images[1:]
    first.save(buffer, format="PDF", save_all=True, append_images=rest, **save_kwargs)
    return buffer.getvalue()
