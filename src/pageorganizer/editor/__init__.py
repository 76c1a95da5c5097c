"""
PageOrganizer - Editor Package

Page session model, range selection, reordering and thumbnail generation.
"""

from pageorganizer.editor.page_model import DocumentSession, PageDescriptor, SourceDocument
from pageorganizer.editor.page_operations import move_page, toggle_page_deleted
from pageorganizer.editor.page_ranges import apply_range_deletion, parse_page_ranges
from pageorganizer.editor.thumbnail_renderer import (
    CancellationToken,
    GenerationResult,
    GenerationState,
    ThumbnailPipeline,
    generate_thumbnails,
)

__all__ = [
    "CancellationToken",
    "DocumentSession",
    "GenerationResult",
    "GenerationState",
    "PageDescriptor",
    "SourceDocument",
    "ThumbnailPipeline",
    "apply_range_deletion",
    "generate_thumbnails",
    "move_page",
    "parse_page_ranges",
    "toggle_page_deleted",
]
