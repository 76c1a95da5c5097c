"""
PageOrganizer - Session Facade

Ties the page session, the thumbnail pipeline and the export engine
together behind the actions a user interface exposes: upload, delete or
restore a page, drag to reorder, bulk range delete, export and reset.

Thumbnail generation and export share one worker thread, so they never
run at the same time.
"""

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from pageorganizer.config import ARCHIVE_NAME, OUTPUT_PREFIX, THUMBNAIL_SCALE
from pageorganizer.editor.page_model import DocumentSession, SourceDocument
from pageorganizer.editor.page_operations import move_page, toggle_page_deleted
from pageorganizer.editor.page_ranges import apply_range_deletion
from pageorganizer.editor.thumbnail_renderer import PageCallback, ThumbnailPipeline
from pageorganizer.services.document_loader import UploadedFile, filter_supported
from pageorganizer.services.export_service import (
    DeliveryMode,
    DirectoryDelivery,
    ExportEngine,
    ExportReport,
)
from pageorganizer.services.pdf_codec import PdfCodec, PdfRasterizer
from pageorganizer.utils.config_manager import ConfigManager
from pageorganizer.utils.format_utils import format_file_size
from pageorganizer.utils.logger import logger


@dataclass
class DocumentSummary:
    """One line of the document list shown to the user."""

    name: str
    size_label: str
    page_count: int
    deleted_count: int


class PageOrganizer:
    """Editing session over a set of uploaded PDF documents."""

    def __init__(
        self,
        rasterizer: PdfRasterizer | None = None,
        codec: PdfCodec | None = None,
        delivery: DirectoryDelivery | None = None,
        *,
        scale: float = THUMBNAIL_SCALE,
        output_prefix: str = OUTPUT_PREFIX,
        archive_name: str = ARCHIVE_NAME,
        on_page: PageCallback | None = None,
    ) -> None:
        self.session = DocumentSession()
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="pageorganizer")
        self.pipeline = ThumbnailPipeline(
            rasterizer, scale, executor=self._executor, on_page=on_page
        )
        self.exporter = ExportEngine(
            codec, delivery, output_prefix=output_prefix, archive_name=archive_name
        )
        self._documents: list[SourceDocument] = []

    @classmethod
    def from_config(
        cls, config: ConfigManager, delivery: DirectoryDelivery | None = None, **kwargs
    ) -> "PageOrganizer":
        """Create an organizer using the user's saved preferences.

        Raises:
            ConfigurationError: If the thumbnail scale setting is invalid
        """
        return cls(
            delivery=delivery,
            scale=config.thumbnail_scale(),
            output_prefix=config.get("export.output_prefix", OUTPUT_PREFIX),
            archive_name=config.get("export.archive_name", ARCHIVE_NAME),
            **kwargs,
        )

    def __enter__(self) -> "PageOrganizer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def documents(self) -> list[SourceDocument]:
        return list(self._documents)

    @property
    def busy(self) -> bool:
        """True while an export is running."""
        return self.exporter.busy

    def describe(self) -> list[DocumentSummary]:
        summaries = []
        for document in self._documents:
            pages = self.session.pages(document.name) if document.name in self.session else []
            summaries.append(
                DocumentSummary(
                    name=document.name,
                    size_label=format_file_size(document.size),
                    page_count=len(pages),
                    deleted_count=sum(1 for p in pages if p.deleted),
                )
            )
        return summaries

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def load(self, files: Iterable[UploadedFile]) -> list[SourceDocument]:
        """Replace the session with the PDFs among the uploaded files."""
        return self.load_documents(filter_supported(files))

    def load_documents(self, documents: Iterable[SourceDocument]) -> list[SourceDocument]:
        """Replace the session with a new document set and start previews."""
        self._documents = list(documents)
        logger.info(f"Loaded {len(self._documents)} document(s)")
        self.pipeline.start(self.session, self._documents)
        return self.documents

    def wait_for_thumbnails(self, timeout: float | None = None) -> bool:
        return self.pipeline.wait(timeout)

    def toggle_page(self, document_name: str, original_index: int) -> bool:
        return toggle_page_deleted(self.session, document_name, original_index)

    def move_page(self, document_name: str, from_id: str, to_id: str) -> bool:
        return move_page(self.session, document_name, from_id, to_id)

    def apply_range_deletion(self, text: str) -> int:
        return apply_range_deletion(self.session, text)

    def export(self, mode: DeliveryMode | str, timeout: float | None = None) -> ExportReport:
        """Export every document, after any pending thumbnail work.

        Args:
            mode: Delivery mode, or its value ("archive" / "individual")
            timeout: Maximum seconds to wait for the result

        Raises:
            TimeoutError: If the export does not finish within timeout; the
                export itself keeps running to completion
        """
        mode = DeliveryMode(mode)
        future = self._executor.submit(
            self.exporter.export, self.session, list(self._documents), mode
        )
        return future.result(timeout=timeout)

    def reset(self) -> None:
        """Drop all documents, pending previews and page state."""
        self._documents = []
        self.pipeline.start(self.session, [])
        logger.info("Session reset")

    def close(self) -> None:
        self.pipeline.cancel()
        self._executor.shutdown(wait=True)
        self.session.clear()
