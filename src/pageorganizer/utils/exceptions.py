"""
PageOrganizer - Custom Exceptions Module

This module defines custom exception classes for the failure modes of the
preview pipeline and the export engine.
"""


class PageOrganizerError(Exception):
    """Base exception for all PageOrganizer errors.

    All custom exceptions should inherit from this class to allow
    catching any PageOrganizer-specific error.
    """

    def __init__(self, message: str, details: str | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional technical details for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} ({self.details})"
        return self.message


class UnsupportedInputError(PageOrganizerError):
    """Raised when a file is not of a supported media type."""

    def __init__(self, name: str, media_type: str | None = None) -> None:
        self.name = name
        self.media_type = media_type
        super().__init__(
            f"Unsupported file: {name}",
            details=f"media_type={media_type}" if media_type else None,
        )


class DocumentDecodeError(PageOrganizerError):
    """Raised when a source document cannot be opened or parsed."""

    def __init__(self, name: str, reason: str | None = None) -> None:
        """Initialize the exception.

        Args:
            name: Name of the document that failed to open
            reason: Optional reason reported by the codec
        """
        self.name = name
        self.reason = reason
        msg = f"Cannot open document: {name}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg, details=f"document={name}")


class PageRenderError(PageOrganizerError):
    """Raised when a single page cannot be rasterized for preview."""

    def __init__(self, name: str, page_number: int, reason: str | None = None) -> None:
        self.name = name
        self.page_number = page_number
        self.reason = reason
        msg = f"Cannot render page {page_number} of {name}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg, details=f"document={name}, page={page_number}")


class PageCopyError(PageOrganizerError):
    """Raised when a page cannot be copied into an output document."""

    def __init__(self, name: str, page_number: int, reason: str | None = None) -> None:
        self.name = name
        self.page_number = page_number
        self.reason = reason
        msg = f"Cannot copy page {page_number} of {name}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg, details=f"document={name}, page={page_number}")


class SerializationError(PageOrganizerError):
    """Raised when an output document cannot be written to bytes."""

    def __init__(self, name: str, reason: str | None = None) -> None:
        self.name = name
        self.reason = reason
        msg = f"Cannot save document: {name}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg, details=f"document={name}")


class DeliveryError(PageOrganizerError):
    """Raised when an exported file cannot be handed to its destination."""

    def __init__(self, filename: str, reason: str | None = None) -> None:
        """Initialize the exception.

        Args:
            filename: Suggested filename of the payload
            reason: Optional reason for the failure
        """
        self.filename = filename
        self.reason = reason
        msg = f"Cannot deliver file: {filename}"
        if reason:
            msg += f" - {reason}"
        super().__init__(msg, details=f"filename={filename}")


class ExportInProgressError(PageOrganizerError):
    """Raised when an export is requested while another one is running."""

    def __init__(self) -> None:
        super().__init__("An export is already in progress")


class ConfigurationError(PageOrganizerError):
    """Raised when there's a configuration-related error."""

    def __init__(self, setting_name: str | None = None, reason: str | None = None) -> None:
        """Initialize the exception.

        Args:
            setting_name: Optional name of the problematic setting
            reason: Optional reason for the error
        """
        self.setting_name = setting_name
        self.reason = reason

        if setting_name:
            msg = f"Configuration error for '{setting_name}'"
        else:
            msg = "Configuration error"

        if reason:
            msg += f": {reason}"

        super().__init__(msg)


# Exception hierarchy summary:
# PageOrganizerError (base)
# ├── UnsupportedInputError
# ├── DocumentDecodeError
# ├── PageRenderError
# ├── PageCopyError
# ├── SerializationError
# ├── DeliveryError
# ├── ExportInProgressError
# └── ConfigurationError
