"""Tests for the exception hierarchy."""

import pytest

from pageorganizer.utils.exceptions import (
    ConfigurationError,
    DeliveryError,
    DocumentDecodeError,
    ExportInProgressError,
    PageCopyError,
    PageOrganizerError,
    PageRenderError,
    SerializationError,
    UnsupportedInputError,
)


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "error",
        [
            UnsupportedInputError("a.txt", "text/plain"),
            DocumentDecodeError("a.pdf", "bad xref"),
            PageRenderError("a.pdf", 2),
            PageCopyError("a.pdf", 3, "missing"),
            SerializationError("a.pdf"),
            DeliveryError("out.zip", "disk full"),
            ExportInProgressError(),
            ConfigurationError("thumbnails.scale"),
        ],
    )
    def test_all_derive_from_base(self, error):
        assert isinstance(error, PageOrganizerError)

    def test_details_appended_to_str(self):
        error = PageOrganizerError("Something failed", details="code=7")
        assert str(error) == "Something failed (code=7)"
        assert str(PageOrganizerError("plain")) == "plain"


class TestMessages:
    def test_decode_error_carries_name_and_reason(self):
        error = DocumentDecodeError("scan.pdf", "not a PDF")
        assert error.name == "scan.pdf"
        assert "scan.pdf" in error.message
        assert "not a PDF" in error.message

    def test_page_errors_carry_page_number(self):
        assert PageRenderError("a.pdf", 4).page_number == 4
        assert "page 5 of a.pdf" in PageCopyError("a.pdf", 5).message

    def test_delivery_error(self):
        error = DeliveryError("modified-a.pdf", "disk full")
        assert error.filename == "modified-a.pdf"
        assert str(error).startswith("Cannot deliver file: modified-a.pdf - disk full")

    def test_configuration_error_without_setting(self):
        assert ConfigurationError(reason="bad value").message == "Configuration error: bad value"

    def test_unsupported_input_details(self):
        error = UnsupportedInputError("notes.txt", "text/plain")
        assert error.details == "media_type=text/plain"
