"""Tests for the thumbnail generation pipeline."""

import threading

from pageorganizer.editor.page_model import DocumentSession, SourceDocument
from pageorganizer.editor.thumbnail_renderer import (
    CancellationToken,
    GenerationState,
    ThumbnailPipeline,
    generate_thumbnails,
)
from pageorganizer.services.pdf_codec import PdfRasterizer


def _docs(*names):
    return [SourceDocument(name=name, data=b"") for name in names]


def _session_for(documents):
    session = DocumentSession()
    generation = session.initialize(d.name for d in documents)
    return session, generation


class TestGenerateThumbnails:
    def test_renders_in_upload_and_page_order(self, fake_rasterizer):
        documents = _docs("b.pdf", "a.pdf")
        rasterizer = fake_rasterizer({"a.pdf": 2, "b.pdf": 3})
        session, generation = _session_for(documents)

        result = generate_thumbnails(
            session, documents, rasterizer, CancellationToken(), generation=generation
        )

        assert rasterizer.rendered == [
            ("b.pdf", 1),
            ("b.pdf", 2),
            ("b.pdf", 3),
            ("a.pdf", 1),
            ("a.pdf", 2),
        ]
        assert result.rendered == 5
        assert result.cancelled is False
        assert [p.original_index for p in session.pages("b.pdf")] == [1, 2, 3]
        assert all(p.thumbnail is not None for p in session.pages("a.pdf"))

    def test_closes_each_document(self, fake_rasterizer):
        documents = _docs("a.pdf", "b.pdf")
        rasterizer = fake_rasterizer({"a.pdf": 1, "b.pdf": 1})
        session, generation = _session_for(documents)
        generate_thumbnails(session, documents, rasterizer, CancellationToken())
        assert rasterizer.closed == ["a.pdf", "b.pdf"]

    def test_page_failure_is_skipped(self, fake_rasterizer):
        documents = _docs("a.pdf")
        rasterizer = fake_rasterizer({"a.pdf": 3}, broken_pages={("a.pdf", 2)})
        session, generation = _session_for(documents)

        result = generate_thumbnails(session, documents, rasterizer, CancellationToken())

        assert [p.original_index for p in session.pages("a.pdf")] == [1, 3]
        assert result.skipped_pages == [("a.pdf", 2)]

    def test_decode_failure_skips_only_that_document(self, fake_rasterizer):
        documents = _docs("bad.pdf", "good.pdf")
        rasterizer = fake_rasterizer({"good.pdf": 2}, broken_documents={"bad.pdf"})
        session, generation = _session_for(documents)

        result = generate_thumbnails(session, documents, rasterizer, CancellationToken())

        assert "bad.pdf" in result.failed_documents
        assert session.page_count("bad.pdf") == 0
        assert session.page_count("good.pdf") == 2

    def test_cancel_stops_between_pages(self, fake_rasterizer):
        documents = _docs("a.pdf", "b.pdf")
        rasterizer = fake_rasterizer({"a.pdf": 5, "b.pdf": 5})
        session, generation = _session_for(documents)
        token = CancellationToken()

        def on_page(name, descriptor):
            if descriptor.original_index == 2:
                token.cancel()

        result = generate_thumbnails(session, documents, rasterizer, token, on_page=on_page)

        assert result.cancelled is True
        assert session.page_count("a.pdf") == 2
        assert session.page_count("b.pdf") == 0
        assert len(rasterizer.rendered) == 2

    def test_cancel_during_render_discards_result(self, fake_rasterizer):
        documents = _docs("a.pdf")
        token = CancellationToken()

        def before_render(name, page_number):
            if page_number == 2:
                token.cancel()

        rasterizer = fake_rasterizer({"a.pdf": 3}, before_render=before_render)
        session, generation = _session_for(documents)

        result = generate_thumbnails(session, documents, rasterizer, token)

        assert result.cancelled is True
        assert [p.original_index for p in session.pages("a.pdf")] == [1]

    def test_stale_generation_stops_run(self, fake_rasterizer):
        documents = _docs("a.pdf")
        rasterizer = fake_rasterizer({"a.pdf": 3})
        session, generation = _session_for(documents)
        session.initialize(["a.pdf"])

        result = generate_thumbnails(
            session, documents, rasterizer, CancellationToken(), generation=generation
        )

        assert result.cancelled is True
        assert session.page_count("a.pdf") == 0

    def test_real_rasterizer_scales_pages(self, make_document):
        document = make_document("a.pdf", 2)
        session, generation = _session_for([document])

        generate_thumbnails(
            session, [document], PdfRasterizer(), CancellationToken(), scale=0.5
        )

        pages = session.pages("a.pdf")
        assert [p.original_index for p in pages] == [1, 2]
        # Page 1 is 110x200 points, page 2 is 120x200
        width, height = pages[0].thumbnail.size
        assert abs(width - 55) <= 1
        assert abs(height - 100) <= 1
        assert abs(pages[1].thumbnail.size[0] - 60) <= 1


class TestThumbnailPipeline:
    def test_completes_and_reports_state(self, fake_rasterizer):
        pipeline = ThumbnailPipeline(fake_rasterizer({"a.pdf": 3}))
        session = DocumentSession()
        try:
            pipeline.start(session, _docs("a.pdf"))
            assert pipeline.wait(timeout=5)
            assert pipeline.state is GenerationState.COMPLETED
            assert pipeline.last_result.rendered == 3
            assert session.page_count("a.pdf") == 3
        finally:
            pipeline.shutdown()

    def test_empty_document_set_is_idle(self, fake_rasterizer):
        pipeline = ThumbnailPipeline(fake_rasterizer({}))
        session = DocumentSession()
        try:
            assert pipeline.start(session, []) is None
            assert pipeline.state is GenerationState.IDLE
            assert pipeline.wait(timeout=1)
        finally:
            pipeline.shutdown()

    def test_restart_replaces_previous_set(self, fake_rasterizer):
        rendering = threading.Event()
        release = threading.Event()

        def before_render(name, page_number):
            if name == "old.pdf" and page_number == 1:
                rendering.set()
                release.wait(timeout=5)

        rasterizer = fake_rasterizer({"old.pdf": 4, "new.pdf": 2}, before_render=before_render)
        pipeline = ThumbnailPipeline(rasterizer)
        session = DocumentSession()
        try:
            pipeline.start(session, _docs("old.pdf"))
            assert rendering.wait(timeout=5)

            pipeline.start(session, _docs("new.pdf"))
            release.set()

            assert pipeline.wait(timeout=5)
            assert session.document_names() == ["new.pdf"]
            assert [p.id for p in session.pages("new.pdf")] == [
                "new.pdf-page-1",
                "new.pdf-page-2",
            ]
            assert ("old.pdf", 2) not in rasterizer.rendered
            assert pipeline.state is GenerationState.COMPLETED
        finally:
            release.set()
            pipeline.shutdown()

    def test_cancel_marks_epoch_cancelled(self, fake_rasterizer):
        rendering = threading.Event()
        release = threading.Event()

        def before_render(name, page_number):
            if page_number == 1:
                rendering.set()
                release.wait(timeout=5)

        pipeline = ThumbnailPipeline(fake_rasterizer({"a.pdf": 5}, before_render=before_render))
        session = DocumentSession()
        try:
            pipeline.start(session, _docs("a.pdf"))
            assert rendering.wait(timeout=5)
            pipeline.cancel()
            release.set()
            assert pipeline.wait(timeout=5)
            assert pipeline.state is GenerationState.CANCELLED
            assert session.page_count("a.pdf") == 0
        finally:
            release.set()
            pipeline.shutdown()

    def test_on_page_callback(self, fake_rasterizer):
        seen = []
        pipeline = ThumbnailPipeline(
            fake_rasterizer({"a.pdf": 2}), on_page=lambda name, page: seen.append(page.id)
        )
        try:
            pipeline.start(DocumentSession(), _docs("a.pdf"))
            pipeline.wait(timeout=5)
        finally:
            pipeline.shutdown()
        assert seen == ["a.pdf-page-1", "a.pdf-page-2"]
