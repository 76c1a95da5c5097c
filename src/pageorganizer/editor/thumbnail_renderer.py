"""
PageOrganizer - Thumbnail Renderer

Renders page thumbnails for every loaded document and streams them into
the session, one page at a time, on a single background worker. Starting
a new generation cancels the previous one.
"""

import threading
import time
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import wait as wait_futures
from dataclasses import dataclass, field
from enum import Enum, auto

from pageorganizer.config import THUMBNAIL_SCALE
from pageorganizer.editor.page_model import DocumentSession, PageDescriptor, SourceDocument
from pageorganizer.services.pdf_codec import PdfRasterizer
from pageorganizer.utils.exceptions import DocumentDecodeError, PageRenderError
from pageorganizer.utils.logger import logger

PageCallback = Callable[[str, PageDescriptor], None]


class GenerationState(Enum):
    """Lifecycle of one generation epoch."""

    IDLE = auto()
    GENERATING = auto()
    COMPLETED = auto()
    CANCELLED = auto()


class CancellationToken:
    """Cooperative cancellation flag checked between page renders."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass
class GenerationResult:
    """Outcome of one generation epoch.

    Attributes:
        generation: Session generation the epoch was started for
        rendered: Number of descriptors appended to the session
        cancelled: Whether the epoch stopped before finishing
        failed_documents: Document name -> reason, for documents that could not be opened
        skipped_pages: (document name, page number) pairs that failed to render
    """

    generation: int | None = None
    rendered: int = 0
    cancelled: bool = False
    failed_documents: dict[str, str] = field(default_factory=dict)
    skipped_pages: list[tuple[str, int]] = field(default_factory=list)


def _yield_to_host() -> None:
    """Give other threads a chance to run between pages."""
    time.sleep(0)


def _render_document(
    session: DocumentSession,
    document: SourceDocument,
    rasterizer: PdfRasterizer,
    token: CancellationToken,
    result: GenerationResult,
    scale: float,
    on_page: PageCallback | None,
) -> None:
    handle = rasterizer.open(document.data, document.name)
    try:
        for page_number in range(1, rasterizer.page_count(handle) + 1):
            if token.cancelled:
                result.cancelled = True
                return

            try:
                image = rasterizer.render_page(handle, page_number, scale, document.name)
            except PageRenderError as e:
                logger.warning(f"Skipping page: {e}")
                result.skipped_pages.append((document.name, page_number))
                _yield_to_host()
                continue

            descriptor = PageDescriptor.for_page(document.name, page_number, image)
            if token.cancelled or not session.append_page(
                document.name, descriptor, result.generation
            ):
                # Superseded while rendering; the session now belongs to a newer epoch
                descriptor.release_thumbnail()
                result.cancelled = True
                return

            result.rendered += 1
            if on_page is not None:
                on_page(document.name, descriptor)
            _yield_to_host()
    finally:
        rasterizer.close(handle)


def generate_thumbnails(
    session: DocumentSession,
    documents: Sequence[SourceDocument],
    rasterizer: PdfRasterizer,
    token: CancellationToken,
    *,
    scale: float = THUMBNAIL_SCALE,
    generation: int | None = None,
    on_page: PageCallback | None = None,
) -> GenerationResult:
    """Render every page of every document into the session, sequentially.

    Documents are processed in upload order and pages in ascending order.
    A document that cannot be opened is recorded and skipped; a page that
    cannot be rendered is recorded and left without a descriptor.

    Args:
        session: Session already initialized for these documents
        documents: Documents in upload order
        rasterizer: Page renderer
        token: Checked before and after every page render
        scale: Fraction of the native page size
        generation: Session generation this run belongs to
        on_page: Optional callback invoked after each appended page

    Returns:
        GenerationResult describing what was produced
    """
    result = GenerationResult(generation=generation)
    started = time.perf_counter()

    for document in documents:
        if token.cancelled:
            result.cancelled = True
            break
        try:
            _render_document(session, document, rasterizer, token, result, scale, on_page)
        except DocumentDecodeError as e:
            logger.error(f"Failed to load {document.name}: {e}")
            result.failed_documents[document.name] = str(e)
        if result.cancelled:
            break

    elapsed = time.perf_counter() - started
    if result.cancelled:
        logger.info(f"Thumbnail generation cancelled after {result.rendered} page(s)")
    else:
        logger.info(
            f"Rendered {result.rendered} thumbnail(s) for {len(documents)} document(s) "
            f"in {elapsed:.2f}s"
        )
    return result


class ThumbnailPipeline:
    """Schedules generation epochs on a single worker thread.

    Only one epoch is active at a time. ``start`` resets the session for the
    new document set, cancels the previous epoch and queues the new one.
    """

    def __init__(
        self,
        rasterizer: PdfRasterizer | None = None,
        scale: float = THUMBNAIL_SCALE,
        executor: ThreadPoolExecutor | None = None,
        on_page: PageCallback | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            rasterizer: Page renderer (defaults to PdfRasterizer)
            scale: Fraction of the native page size
            executor: Worker to run on; a private single-thread pool if omitted
            on_page: Optional callback invoked after each appended page
        """
        self._rasterizer = rasterizer or PdfRasterizer()
        self._scale = scale
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="thumbnails"
        )
        self._on_page = on_page
        self._lock = threading.Lock()
        self._token: CancellationToken | None = None
        self._future: Future | None = None
        self._state = GenerationState.IDLE
        self.last_result: GenerationResult | None = None

    @property
    def state(self) -> GenerationState:
        with self._lock:
            return self._state

    def start(
        self, session: DocumentSession, documents: Iterable[SourceDocument]
    ) -> Future | None:
        """Start a new epoch for a document set.

        Args:
            session: Session to reset and populate
            documents: New document set, in upload order

        Returns:
            Future of the GenerationResult, or None for an empty set
        """
        documents = list(documents)
        with self._lock:
            if self._token is not None:
                self._token.cancel()
            generation = session.initialize(d.name for d in documents)

            if not documents:
                self._token = None
                self._future = None
                self._state = GenerationState.IDLE
                return None

            token = CancellationToken()
            self._token = token
            self._state = GenerationState.GENERATING
            self._future = self._executor.submit(self._run, session, documents, token, generation)
            logger.debug(f"Queued thumbnail generation {generation}")
            return self._future

    def _run(
        self,
        session: DocumentSession,
        documents: list[SourceDocument],
        token: CancellationToken,
        generation: int,
    ) -> GenerationResult:
        result: GenerationResult | None = None
        try:
            result = generate_thumbnails(
                session,
                documents,
                self._rasterizer,
                token,
                scale=self._scale,
                generation=generation,
                on_page=self._on_page,
            )
            return result
        except Exception as e:
            logger.error(f"Thumbnail generation {generation} aborted: {e}")
            raise
        finally:
            with self._lock:
                # A newer epoch owns the state once the token was replaced
                if self._token is token:
                    finished = result is not None and not result.cancelled
                    self._state = (
                        GenerationState.COMPLETED if finished else GenerationState.CANCELLED
                    )
                    self.last_result = result

    def cancel(self) -> None:
        """Stop the active epoch after its current page."""
        with self._lock:
            if self._token is not None:
                self._token.cancel()

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for the active epoch to finish.

        Returns:
            True if no epoch is pending when the call returns
        """
        with self._lock:
            future = self._future
        if future is None:
            return True
        wait_futures([future], timeout=timeout)
        return future.done()

    def shutdown(self) -> None:
        """Cancel the active epoch and stop the worker if this pipeline owns it."""
        self.cancel()
        if self._owns_executor:
            self._executor.shutdown(wait=True)
