"""
PageOrganizer - Document Loader

Turns uploaded files into SourceDocuments. Only PDFs are accepted; other
files are dropped from the batch without raising.
"""

import mimetypes
import os
from collections.abc import Iterable
from dataclasses import dataclass, field

from pageorganizer.config import PDF_MEDIA_TYPE
from pageorganizer.editor.page_model import SourceDocument
from pageorganizer.utils.logger import logger


@dataclass(frozen=True)
class UploadedFile:
    """A file handed over by an upload or drag-and-drop source."""

    name: str
    data: bytes = field(repr=False)
    media_type: str = ""

    @property
    def size(self) -> int:
        return len(self.data)


def guess_media_type(name: str) -> str:
    """Guess a media type from a file name ("" when unknown)."""
    media_type, _encoding = mimetypes.guess_type(name)
    return media_type or ""


def filter_supported(files: Iterable[UploadedFile]) -> list[SourceDocument]:
    """Keep the PDFs of a batch, in order, as SourceDocuments.

    Later files with an already used name replace nothing; the first one wins.
    """
    documents: list[SourceDocument] = []
    seen: set[str] = set()
    for upload in files:
        if upload.media_type != PDF_MEDIA_TYPE:
            logger.debug(f"Ignoring {upload.name}: unsupported type '{upload.media_type}'")
            continue
        if upload.name in seen:
            logger.warning(f"Ignoring duplicate document name: {upload.name}")
            continue
        seen.add(upload.name)
        documents.append(SourceDocument(name=upload.name, data=upload.data, size=upload.size))
    return documents


def load_paths(paths: Iterable[str]) -> list[SourceDocument]:
    """Read files from disk and keep the PDFs among them.

    Raises:
        OSError: If a file cannot be read
    """
    uploads = []
    for path in paths:
        name = os.path.basename(path)
        media_type = guess_media_type(name)
        if media_type != PDF_MEDIA_TYPE:
            logger.debug(f"Ignoring {path}: unsupported type '{media_type}'")
            continue
        with open(path, "rb") as f:
            uploads.append(UploadedFile(name=name, data=f.read(), media_type=media_type))
    return filter_supported(uploads)
