"""
PageOrganizer - Export Service Module

Materializes the edited page order of each document into a new PDF and
hands the results to a delivery target, either one file per document or
bundled in a single ZIP archive.
"""

import io
import os
import threading
import time
import zipfile
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pageorganizer.config import ARCHIVE_NAME, OUTPUT_PREFIX, PDF_MEDIA_TYPE, ZIP_MEDIA_TYPE
from pageorganizer.editor.page_model import DocumentSession, PageDescriptor, SourceDocument
from pageorganizer.services.pdf_codec import PdfCodec
from pageorganizer.utils.exceptions import (
    DeliveryError,
    ExportInProgressError,
    PageOrganizerError,
)
from pageorganizer.utils.format_utils import format_elapsed_time, format_file_size
from pageorganizer.utils.logger import logger


class DeliveryMode(Enum):
    """How exported documents are handed over."""

    ARCHIVE = "archive"
    INDIVIDUAL = "individual"


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


class ZipArchive:
    """In-memory ZIP archive built one named payload at a time."""

    def __init__(self) -> None:
        self._buffer = io.BytesIO()
        self._zip = zipfile.ZipFile(self._buffer, "w", zipfile.ZIP_DEFLATED)
        self.names: list[str] = []

    def add(self, name: str, data: bytes) -> None:
        self._zip.writestr(name, data)
        self.names.append(name)

    def finalize(self) -> bytes:
        """Close the archive and return its bytes."""
        self._zip.close()
        return self._buffer.getvalue()


class DirectoryDelivery:
    """Delivers exported files by writing them into a directory.

    Existing files are kept unless overwrite is set; a numbered suffix
    ("name-1.pdf") is used instead.
    """

    def __init__(self, output_dir: str | Path, overwrite: bool = False) -> None:
        self.output_dir = Path(output_dir)
        self.overwrite = overwrite
        self.delivered: list[Path] = []

    def _target_path(self, filename: str) -> Path:
        target = self.output_dir / os.path.basename(filename)
        if self.overwrite or not target.exists():
            return target

        counter = 1
        while True:
            candidate = self.output_dir / f"{target.stem}-{counter}{target.suffix}"
            if not candidate.exists():
                return candidate
            counter += 1

    def deliver(self, data: bytes, filename: str, media_type: str) -> Path:
        """Write a payload to the output directory.

        Raises:
            DeliveryError: If the file cannot be written
        """
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            target = self._target_path(filename)
            target.write_bytes(data)
        except OSError as e:
            raise DeliveryError(filename, str(e)) from e

        self.delivered.append(target)
        logger.info(f"Saved {target} ({format_file_size(len(data))}, {media_type})")
        return target


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass
class DocumentExportResult:
    """Outcome of exporting one document."""

    name: str
    success: bool
    output_name: str = ""
    page_count: int = 0
    error: str = ""


@dataclass
class ExportReport:
    """Outcome of one export batch."""

    mode: DeliveryMode
    results: list[DocumentExportResult] = field(default_factory=list)
    archive_name: str = ""
    archive_error: str = ""
    elapsed_seconds: float = 0.0

    @property
    def succeeded(self) -> list[DocumentExportResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> list[DocumentExportResult]:
        return [r for r in self.results if not r.success]

    @property
    def success(self) -> bool:
        return not self.failed and not self.archive_error


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


def build_document(
    document: SourceDocument, pages: Sequence[PageDescriptor], codec: PdfCodec
) -> bytes:
    """Build the output PDF for one document.

    Non-deleted pages are copied in the order given, which is the edited
    order rather than the original one. A document with every page deleted
    yields a valid PDF with zero pages.

    Raises:
        DocumentDecodeError: If the source cannot be opened
        PageCopyError: If a page cannot be copied; no partial output is returned
        SerializationError: If the output cannot be saved
    """
    indices = [page.original_index for page in pages if not page.deleted]
    return copy_pages(document, indices, codec)


def copy_pages(document: SourceDocument, original_indices: Sequence[int], codec: PdfCodec) -> bytes:
    """Build a PDF holding exactly the given original pages, in that order.

    Raises:
        DocumentDecodeError: If the source cannot be opened
        PageCopyError: If a page cannot be copied
        SerializationError: If the output cannot be saved
    """
    source = codec.open(document.data, document.name)
    try:
        output = codec.new_document()
        try:
            for original_index in original_indices:
                codec.copy_page(source, output, original_index - 1, document.name)
            return codec.serialize(output, document.name)
        finally:
            codec.close(output)
    finally:
        codec.close(source)


class ExportEngine:
    """Exports every loaded document, one at a time.

    Only one source and one output document are open at any moment. The
    ``busy`` flag is set for the duration of ``export`` and cleared on
    every exit path.
    """

    def __init__(
        self,
        codec: PdfCodec | None = None,
        delivery: DirectoryDelivery | None = None,
        archive_factory: Callable[[], ZipArchive] = ZipArchive,
        *,
        output_prefix: str = OUTPUT_PREFIX,
        archive_name: str = ARCHIVE_NAME,
    ) -> None:
        """Initialize the export engine.

        Args:
            codec: Document codec (defaults to PdfCodec)
            delivery: Object with deliver(data, filename, media_type)
            archive_factory: Creates an empty archive for archive mode
            output_prefix: Prepended to each source name
            archive_name: Filename of the bundle in archive mode
        """
        self._codec = codec or PdfCodec()
        self._delivery = delivery or DirectoryDelivery(os.getcwd())
        self._archive_factory = archive_factory
        self.output_prefix = output_prefix
        self.archive_name = archive_name
        self._lock = threading.Lock()
        self._busy = False

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._busy

    def output_name(self, document_name: str) -> str:
        return f"{self.output_prefix}{document_name}"

    def export(
        self,
        session: DocumentSession,
        documents: Sequence[SourceDocument],
        mode: DeliveryMode,
    ) -> ExportReport:
        """Export all documents using the session's current state.

        Failures are contained per document and recorded in the report.

        Raises:
            ExportInProgressError: If another export is running
        """
        with self._lock:
            if self._busy:
                raise ExportInProgressError()
            self._busy = True

        started = time.perf_counter()
        try:
            report = self._export(session, documents, mode)
        finally:
            with self._lock:
                self._busy = False

        report.elapsed_seconds = time.perf_counter() - started
        logger.info(
            f"Export finished in {format_elapsed_time(report.elapsed_seconds)}: "
            f"{len(report.succeeded)} succeeded, {len(report.failed)} failed"
        )
        return report

    def _export(
        self,
        session: DocumentSession,
        documents: Sequence[SourceDocument],
        mode: DeliveryMode,
    ) -> ExportReport:
        report = ExportReport(mode=mode)
        archive = self._archive_factory() if mode is DeliveryMode.ARCHIVE else None

        for document in documents:
            result = self._export_document(session, document, archive)
            report.results.append(result)

        if archive is not None:
            self._deliver_archive(archive, report)
        return report

    def _export_document(
        self,
        session: DocumentSession,
        document: SourceDocument,
        archive: ZipArchive | None,
    ) -> DocumentExportResult:
        output_name = self.output_name(document.name)
        if document.name not in session:
            logger.error(f"Export of {document.name} failed: document is not loaded")
            return DocumentExportResult(
                document.name, False, output_name, error="document is not loaded"
            )

        # Snapshot the active order once; later toggles do not affect this export
        indices = [p.original_index for p in session.active_pages(document.name)]
        try:
            data = copy_pages(document, indices, self._codec)
            if archive is not None:
                archive.add(output_name, data)
            else:
                self._delivery.deliver(data, output_name, PDF_MEDIA_TYPE)
        except PageOrganizerError as e:
            logger.error(f"Export of {document.name} failed: {e}")
            return DocumentExportResult(document.name, False, output_name, error=str(e))

        page_count = len(indices)
        logger.info(f"Exported {output_name} with {page_count} page(s)")
        return DocumentExportResult(document.name, True, output_name, page_count)

    def _deliver_archive(self, archive: ZipArchive, report: ExportReport) -> None:
        if not report.succeeded:
            logger.warning("No document was exported; skipping archive")
            return
        try:
            self._delivery.deliver(archive.finalize(), self.archive_name, ZIP_MEDIA_TYPE)
        except PageOrganizerError as e:
            logger.error(f"Archive delivery failed: {e}")
            report.archive_error = str(e)
            return
        report.archive_name = self.archive_name
