"""
PageOrganizer - Services Package

Service modules for PDF decoding, document loading and export.
"""

from pageorganizer.services.pdf_codec import PdfCodec, PdfRasterizer

__all__ = ["PdfCodec", "PdfRasterizer"]
