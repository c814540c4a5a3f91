"""
Tests for the PDF page rasterizer.

Rendering runs against pypdfium2 itself. A small fake module (see conftest)
stands in only where a page failure or the document lifecycle has to be
observed.
"""

import pytest

from IE_Libs.errors import DecodeFailureError
from IE_Libs.MergeLib.pdf_rasterizer import iter_pdf_pages, render_pdf_pages

from conftest import FakeDocument, FakePage


class TestRenderPdfPages:
    """Tests for render_pdf_pages function."""

    def test_renders_every_page_at_double_scale(self, pdf_bytes):
        pages = render_pdf_pages(pdf_bytes)

        assert [page.size for page in pages] == [(200, 100), (120, 160)]
        assert all(page.mode == "RGBA" for page in pages)

    def test_page_content(self, pdf_bytes):
        first, second = render_pdf_pages(pdf_bytes)

        red, green, blue, _ = first.getpixel((100, 50))
        assert red > 200 and green < 50 and blue < 50
        red, green, blue, _ = second.getpixel((60, 80))
        assert blue > 200 and red < 50 and green < 50

    def test_custom_scale(self, pdf_bytes):
        pages = render_pdf_pages(pdf_bytes, scale=1.0)
        assert [page.size for page in pages] == [(100, 50), (60, 80)]

    def test_unreadable_document(self):
        with pytest.raises(DecodeFailureError, match="scan.pdf"):
            render_pdf_pages(b"this is not a pdf", name="scan.pdf")

    def test_empty_bytes(self):
        with pytest.raises(DecodeFailureError):
            render_pdf_pages(b"")

    def test_invalid_scale(self, pdf_bytes):
        with pytest.raises(ValueError):
            render_pdf_pages(pdf_bytes, scale=0)

    def test_iter_yields_pages_in_order(self, pdf_bytes):
        pages = iter_pdf_pages(pdf_bytes)

        assert next(pages).size == (200, 100)
        assert next(pages).size == (120, 160)
        with pytest.raises(StopIteration):
            next(pages)


class TestDocumentLifecycle:
    """Page failures and document closing, observed through a fake backend."""

    def test_requested_scale_reaches_renderer(self, fake_pdfium):
        render_pdf_pages(b"%PDF-fake", scale=3.0)
        assert fake_pdfium.document.pages[0].scales == [3.0]

    def test_document_closed(self, fake_pdfium):
        render_pdf_pages(b"%PDF-fake")
        assert fake_pdfium.document.closed

    def test_page_failure_closes_document(self, fake_pdfium):
        fake_pdfium.document = FakeDocument([FakePage((10, 10)), FakePage((10, 10), fail=True)])

        with pytest.raises(DecodeFailureError, match="page 2"):
            render_pdf_pages(b"%PDF-fake")
        assert fake_pdfium.document.closed

    def test_iter_is_lazy(self, fake_pdfium):
        pages = iter_pdf_pages(b"%PDF-fake")

        first = next(pages)

        assert first.size == (200, 100)
        assert fake_pdfium.document.pages[1].scales == []
        pages.close()
        assert fake_pdfium.document.closed
