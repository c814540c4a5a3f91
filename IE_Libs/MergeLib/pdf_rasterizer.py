"""
PDF page rasterizer for the merge engine.

Renders every page of a PDF into an RGBA Pillow image at a fixed render
scale (2x for legibility). Pages are rendered one at a time so only one page
bitmap is alive at once.
"""

import logging
from typing import Any, Iterator, List, Optional

from IE_Libs.constants import PDF_RENDER_SCALE
from IE_Libs.errors import DecodeFailureError

logger = logging.getLogger(__name__)


def _import_pdfium():
    try:
        import pypdfium2 as pdfium
        return pdfium
    except ImportError as exc:
        raise DecodeFailureError("pypdfium2 is required for PDF rendering") from exc


def iter_pdf_pages(
    pdf_bytes: bytes,
    scale: float = PDF_RENDER_SCALE,
    name: Optional[str] = None,
) -> Iterator[Any]:
    """
    Yield each page of a PDF as an RGBA PIL Image.

    Args:
        pdf_bytes: Raw PDF bytes
        scale: Render scale relative to 72 dpi
        name: Optional display name used in errors

    Raises:
        DecodeFailureError: If the document cannot be opened or a page fails to render
    """
    if scale <= 0:
        raise ValueError(f"scale must be > 0, got {scale}")
    if not pdf_bytes:
        raise DecodeFailureError("no document data", name=name)

    pdfium = _import_pdfium()
    try:
        document = pdfium.PdfDocument(pdf_bytes)
    except Exception as exc:
        raise DecodeFailureError(f"failed to open PDF: {exc}", name=name) from exc

    try:
        page_count = len(document)
        for index in range(page_count):
            try:
                page = document[index]
                bitmap = page.render(scale=scale)
                image = bitmap.to_pil().convert("RGBA")
            except Exception as exc:
                raise DecodeFailureError(
                    f"failed to render page {index + 1}: {exc}", name=name
                ) from exc
            logger.debug(f"Rendered page {index + 1}/{page_count} of {name or 'PDF'}: {image.size}")
            yield image
    finally:
        close = getattr(document, "close", None)
        if callable(close):
            close()


def render_pdf_pages(
    pdf_bytes: bytes,
    scale: float = PDF_RENDER_SCALE,
    name: Optional[str] = None,
) -> List[Any]:
    """Render every page of a PDF; see iter_pdf_pages()."""
    return list(iter_pdf_pages(pdf_bytes, scale=scale, name=name))
