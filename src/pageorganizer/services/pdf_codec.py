"""
PageOrganizer - PDF Codec Service

Thin wrappers around the PDF libraries used by the editor:
  - PdfCodec (pikepdf): open, copy pages between documents, save
  - PdfRasterizer (PyMuPDF): open and render pages to PIL images

Library exceptions are translated into PageOrganizer errors so callers
only deal with one hierarchy.
"""

import io
import logging

import pymupdf
import pikepdf
from PIL import Image

from pageorganizer.utils.exceptions import (
    DocumentDecodeError,
    PageCopyError,
    PageRenderError,
    SerializationError,
)
from pageorganizer.utils.i18n import _

logger = logging.getLogger(__name__)


def _friendly_error(e: Exception) -> str:
    """Map common exceptions to user-friendly messages."""
    if isinstance(e, pikepdf.PasswordError):
        return _("This PDF is password-protected. Remove the password first.")
    if isinstance(e, pikepdf.PdfError):
        return _("The PDF file appears to be damaged or invalid: {error}").format(error=e)
    if isinstance(e, PermissionError):
        return _("Permission denied.")
    return str(e) or e.__class__.__name__


# ---------------------------------------------------------------------------
# Structure (export)
# ---------------------------------------------------------------------------


class PdfCodec:
    """Builds output documents with pikepdf.

    Copied pages keep references into their source document, so a source
    handle must stay open until every output built from it is serialized.
    """

    def open(self, data: bytes, name: str = "") -> pikepdf.Pdf:
        """Open a document from bytes.

        Raises:
            DocumentDecodeError: If the bytes are not a readable PDF
        """
        try:
            return pikepdf.open(io.BytesIO(data))
        except (pikepdf.PdfError, ValueError, OSError) as e:
            raise DocumentDecodeError(name, _friendly_error(e)) from e

    def page_count(self, pdf: pikepdf.Pdf) -> int:
        return len(pdf.pages)

    def new_document(self) -> pikepdf.Pdf:
        return pikepdf.Pdf.new()

    def copy_page(self, source: pikepdf.Pdf, target: pikepdf.Pdf, index: int, name: str = "") -> None:
        """Append page `index` (0-indexed) of source to the end of target.

        Raises:
            PageCopyError: If the page does not exist or cannot be copied
        """
        if not 0 <= index < len(source.pages):
            raise PageCopyError(name, index + 1, _("page does not exist"))
        try:
            target.pages.append(source.pages[index])
        except (pikepdf.PdfError, ValueError, TypeError) as e:
            raise PageCopyError(name, index + 1, _friendly_error(e)) from e

    def serialize(self, pdf: pikepdf.Pdf, name: str = "") -> bytes:
        """Save a document to bytes.

        Raises:
            SerializationError: If the document cannot be written
        """
        buffer = io.BytesIO()
        try:
            pdf.save(buffer)
        except (pikepdf.PdfError, OSError, ValueError) as e:
            raise SerializationError(name, _friendly_error(e)) from e
        return buffer.getvalue()

    def close(self, pdf: pikepdf.Pdf) -> None:
        pdf.close()


# ---------------------------------------------------------------------------
# Rasterization (preview)
# ---------------------------------------------------------------------------


class PdfRasterizer:
    """Renders PDF pages to PIL images with PyMuPDF."""

    def open(self, data: bytes, name: str = "") -> pymupdf.Document:
        """Open a document from bytes.

        Raises:
            DocumentDecodeError: If the bytes are not a readable PDF
        """
        try:
            doc = pymupdf.open(stream=data, filetype="pdf")
        except (RuntimeError, ValueError) as e:
            raise DocumentDecodeError(name, _friendly_error(e)) from e
        if doc.needs_pass:
            doc.close()
            raise DocumentDecodeError(
                name, _("This PDF is password-protected. Remove the password first.")
            )
        return doc

    def page_count(self, doc: pymupdf.Document) -> int:
        return doc.page_count

    def render_page(
        self, doc: pymupdf.Document, page_number: int, scale: float, name: str = ""
    ) -> Image.Image:
        """Render a page at a fraction of its native size.

        Args:
            doc: Open document
            page_number: Page to render (1-indexed)
            scale: Zoom factor applied to both axes, preserving aspect ratio
            name: Document name used in error messages

        Raises:
            PageRenderError: If the page cannot be rasterized
        """
        try:
            page = doc.load_page(page_number - 1)
            pix = page.get_pixmap(matrix=pymupdf.Matrix(scale, scale), alpha=False)
            return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
        except (RuntimeError, ValueError, IndexError) as e:
            raise PageRenderError(name, page_number, _friendly_error(e)) from e

    def close(self, doc: pymupdf.Document) -> None:
        doc.close()
