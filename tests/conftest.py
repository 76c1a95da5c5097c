"""Pytest configuration for pageorganizer tests.

Test PDFs are built on the fly with pikepdf. Every page gets a distinct
MediaBox width (100 + 10 * page number) so the original page number of
any page in an exported file can be read back from its size.
"""

import io

import pikepdf
import pytest
from PIL import Image

from pageorganizer.editor.page_model import DocumentSession, PageDescriptor, SourceDocument
from pageorganizer.utils.exceptions import DeliveryError, DocumentDecodeError, PageRenderError


def _page_width(page_number: int) -> int:
    return 100 + 10 * page_number


def create_test_pdf(num_pages: int = 3) -> bytes:
    """Create a PDF whose page widths encode their page numbers."""
    pdf = pikepdf.Pdf.new()
    for i in range(1, num_pages + 1):
        page = pikepdf.Page(
            pikepdf.Dictionary(
                Type=pikepdf.Name.Page,
                MediaBox=[0, 0, _page_width(i), 200],
                Contents=pdf.make_stream(b""),
            )
        )
        pdf.pages.append(page)
    buffer = io.BytesIO()
    pdf.save(buffer)
    return buffer.getvalue()


def original_pages(data: bytes) -> list[int]:
    """Decode the original page numbers of an exported PDF, in order."""
    with pikepdf.open(io.BytesIO(data)) as pdf:
        return [(int(float(p.mediabox[2])) - 100) // 10 for p in pdf.pages]


class FakeRasterizer:
    """Rasterizer double that renders tiny blank images.

    Args:
        page_counts: Document name -> number of pages
        broken_documents: Names that fail to open
        broken_pages: (name, page) pairs that fail to render
        before_render: Optional hook called with (name, page) before rendering
    """

    def __init__(self, page_counts, broken_documents=(), broken_pages=(), before_render=None):
        self.page_counts = dict(page_counts)
        self.broken_documents = set(broken_documents)
        self.broken_pages = set(broken_pages)
        self.before_render = before_render
        self.rendered: list[tuple[str, int]] = []
        self.closed: list[str] = []

    def open(self, data, name=""):
        if name in self.broken_documents:
            raise DocumentDecodeError(name, "broken")
        return name

    def page_count(self, handle):
        return self.page_counts[handle]

    def render_page(self, handle, page_number, scale, name=""):
        if self.before_render is not None:
            self.before_render(handle, page_number)
        if (handle, page_number) in self.broken_pages:
            raise PageRenderError(handle, page_number, "bad page")
        self.rendered.append((handle, page_number))
        return Image.new("RGB", (10, 14), "white")

    def close(self, handle):
        self.closed.append(handle)


class RecordingDelivery:
    """Delivery double that keeps payloads in memory."""

    def __init__(self, fail_names=()):
        self.fail_names = set(fail_names)
        self.items: list[tuple[str, str, bytes]] = []

    def deliver(self, data, filename, media_type):
        if filename in self.fail_names:
            raise DeliveryError(filename, "disk full")
        self.items.append((filename, media_type, data))

    @property
    def names(self) -> list[str]:
        return [name for name, _media, _data in self.items]


@pytest.fixture
def make_document():
    """Factory for SourceDocuments backed by real test PDFs."""

    def _make(name: str = "a.pdf", num_pages: int = 3) -> SourceDocument:
        return SourceDocument(name=name, data=create_test_pdf(num_pages))

    return _make


@pytest.fixture
def make_session():
    """Factory for sessions filled as if thumbnail generation had completed."""

    def _make(page_counts: dict[str, int]) -> DocumentSession:
        session = DocumentSession()
        session.initialize(page_counts)
        for name, count in page_counts.items():
            for page_number in range(1, count + 1):
                session.append_page(name, PageDescriptor.for_page(name, page_number))
        return session

    return _make


@pytest.fixture
def read_pages():
    return original_pages


@pytest.fixture
def pdf_bytes():
    return create_test_pdf


@pytest.fixture
def fake_rasterizer():
    return FakeRasterizer


@pytest.fixture
def recording_delivery():
    return RecordingDelivery
