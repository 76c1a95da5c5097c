"""
PageOrganizer - Page Model

Data models for source documents, page descriptors and the editable
session that records output order and deletion state per document.
"""

import os
import threading
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pageorganizer.utils.logger import logger

if TYPE_CHECKING:
    from PIL import Image


@dataclass(frozen=True)
class SourceDocument:
    """An uploaded document, kept as immutable bytes.

    Attributes:
        name: Display name, unique within a session
        data: Raw document bytes
        size: Declared size in bytes (defaults to len(data))
    """

    name: str
    data: bytes = field(repr=False)
    size: int = -1

    def __post_init__(self) -> None:
        if self.size < 0:
            object.__setattr__(self, "size", len(self.data))

    @classmethod
    def from_path(cls, path: str) -> "SourceDocument":
        """Read a document from disk, named after its file name."""
        with open(path, "rb") as f:
            data = f.read()
        return cls(name=os.path.basename(path), data=data)


def make_page_id(document_name: str, original_index: int) -> str:
    """Build the stable descriptor id for a page of a document."""
    return f"{document_name}-page-{original_index}"


@dataclass
class PageDescriptor:
    """Editable record for one original page.

    Attributes:
        id: Stable identifier, unique within the owning document
        original_index: Page number in the source document (1-indexed)
        thumbnail: Rendered preview image (None until rendered)
        deleted: Whether the page is left out of the export (soft delete)
    """

    id: str
    original_index: int
    thumbnail: "Image.Image | None" = field(default=None, repr=False, compare=False)
    deleted: bool = False

    def __post_init__(self) -> None:
        if self.original_index < 1:
            raise ValueError(f"original_index must be >= 1, got {self.original_index}")

    @classmethod
    def for_page(
        cls, document_name: str, original_index: int, thumbnail: "Image.Image | None" = None
    ) -> "PageDescriptor":
        return cls(
            id=make_page_id(document_name, original_index),
            original_index=original_index,
            thumbnail=thumbnail,
        )

    def release_thumbnail(self) -> None:
        """Close the preview image and drop the reference."""
        if self.thumbnail is not None:
            self.thumbnail.close()
            self.thumbnail = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "original_index": self.original_index,
            "deleted": self.deleted,
        }


class DocumentSession:
    """Ordered page descriptors for every loaded document.

    The position of a descriptor in its document's list is the export
    order. Every mutation holds the session lock for its whole duration, so
    an append, toggle or move is never observed half-applied by the
    generation worker or the export.

    ``generation`` increases on every ``initialize`` call. Producers pass the
    generation they started with to ``append_page`` so results from a
    replaced document set are dropped.
    """

    def __init__(self) -> None:
        self._documents: dict[str, list[PageDescriptor]] = {}
        self._lock = threading.RLock()
        self.generation = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self, document_names: Iterable[str]) -> int:
        """Replace the whole session with one empty list per document.

        Args:
            document_names: Names of the new document set, in upload order

        Returns:
            The new generation number
        """
        with self._lock:
            self._release_all()
            self._documents = {name: [] for name in document_names}
            self.generation += 1
            logger.debug(
                f"Session initialized with {len(self._documents)} document(s), "
                f"generation {self.generation}"
            )
            return self.generation

    def clear(self) -> None:
        """Drop all documents and release their thumbnails."""
        self.initialize([])

    def _release_all(self) -> None:
        for pages in self._documents.values():
            for page in pages:
                page.release_thumbnail()

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def append_page(
        self, document_name: str, descriptor: PageDescriptor, generation: int | None = None
    ) -> bool:
        """Append a descriptor to the end of a document's list.

        Returns:
            True if appended, False if the document is unknown or the
            generation is stale (the descriptor's thumbnail is released)
        """
        with self._lock:
            stale = generation is not None and generation != self.generation
            pages = self._documents.get(document_name)
            if stale or pages is None:
                descriptor.release_thumbnail()
                return False
            pages.append(descriptor)
            return True

    def set_deleted(
        self, document_name: str, original_index: int, value: bool | None = None
    ) -> bool | None:
        """Set or toggle the deletion flag of a page.

        Args:
            document_name: Document owning the page
            original_index: Original page number (1-indexed)
            value: New flag, or None to toggle

        Returns:
            The resulting flag, or None when no such page exists
        """
        with self._lock:
            for page in self._documents.get(document_name, ()):
                if page.original_index == original_index:
                    page.deleted = (not page.deleted) if value is None else value
                    return page.deleted
            return None

    def reorder(self, document_name: str, from_position: int, to_position: int) -> None:
        """Move the element at from_position so it ends up at to_position.

        Raises:
            KeyError: If the document is not loaded
            IndexError: If either position is out of range
        """
        with self._lock:
            pages = self._documents[document_name]
            for position in (from_position, to_position):
                if not 0 <= position < len(pages):
                    raise IndexError(
                        f"Position {position} out of range for {document_name} "
                        f"({len(pages)} pages)"
                    )
            if from_position == to_position:
                return
            pages.insert(to_position, pages.pop(from_position))

    def move(self, document_name: str, from_id: str, to_id: str) -> tuple[int, int] | None:
        """Move the page with from_id to the position held by to_id.

        Both ids are resolved and the move applied under one lock hold.

        Returns:
            The (from, to) positions, or None if either id is not found
        """
        with self._lock:
            from_position = self.position_of(document_name, from_id)
            to_position = self.position_of(document_name, to_id)
            if from_position is None or to_position is None:
                return None
            self.reorder(document_name, from_position, to_position)
            return from_position, to_position

    def mark_deleted(self, original_indices: set[int]) -> int:
        """OR a set of original page numbers into every document's flags.

        Returns:
            Number of descriptors that were newly marked
        """
        marked = 0
        with self._lock:
            for pages in self._documents.values():
                for page in pages:
                    if not page.deleted and page.original_index in original_indices:
                        page.deleted = True
                        marked += 1
        return marked

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def document_names(self) -> list[str]:
        with self._lock:
            return list(self._documents)

    def __contains__(self, document_name: object) -> bool:
        with self._lock:
            return document_name in self._documents

    def pages(self, document_name: str) -> list[PageDescriptor]:
        """Return a copy of the document's current order.

        Raises:
            KeyError: If the document is not loaded
        """
        with self._lock:
            return list(self._documents[document_name])

    def active_pages(self, document_name: str) -> list[PageDescriptor]:
        """Return the non-deleted pages in export order.

        Raises:
            KeyError: If the document is not loaded
        """
        with self._lock:
            return [p for p in self._documents[document_name] if not p.deleted]

    def page_count(self, document_name: str) -> int:
        with self._lock:
            return len(self._documents.get(document_name, ()))

    def max_original_index(self) -> int:
        """Highest original page number among all loaded pages, 0 if none."""
        with self._lock:
            return max(
                (p.original_index for pages in self._documents.values() for p in pages),
                default=0,
            )

    def position_of(self, document_name: str, page_id: str) -> int | None:
        """Return the current position of a descriptor id, or None."""
        with self._lock:
            for position, page in enumerate(self._documents.get(document_name, ())):
                if page.id == page_id:
                    return position
            return None

    def to_dict(self) -> dict:
        """Convert to a serializable snapshot (thumbnails excluded).

        Returns:
            Dictionary representation of the session
        """
        with self._lock:
            return {
                "generation": self.generation,
                "documents": {
                    name: [p.to_dict() for p in pages] for name, pages in self._documents.items()
                },
            }
