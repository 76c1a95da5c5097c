"""
PageOrganizer - Page Range Selection

Parses page range expressions such as "1,3,5-7" and applies them as bulk
deletions to every loaded document.
"""

import re

from pageorganizer.editor.page_model import DocumentSession
from pageorganizer.utils.logger import logger

_TERM_RE = re.compile(r"([0-9]+)(?:\s*-\s*([0-9]+))?")


def _parse_term(term: str) -> tuple[int, int]:
    """Parse a single term into the inclusive (start, end) pages it covers.

    Raises:
        ValueError: If the term is not a number or a start-end pair
    """
    match = _TERM_RE.fullmatch(term)
    if match is None:
        raise ValueError(f"Invalid page term: {term!r}")
    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) is not None else start
    return start, end


def parse_page_ranges(text: str, max_page: int | None = None) -> set[int]:
    """Parse a page range string into a set of page numbers.

    Supports: "3", "1-5", "1,3,7", "1-3,7,10-12". Malformed terms are
    skipped without discarding the rest, so "1,x,3-4" gives {1, 3, 4}.
    A reversed range such as "5-2" covers nothing.

    Args:
        text: Page range string such as "1,3,5-7"
        max_page: Highest page number of interest; larger pages are left out

    Returns:
        Set of 1-indexed page numbers
    """
    pages: set[int] = set()
    if not text or not text.strip():
        return pages

    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            start, end = _parse_term(part)
        except ValueError:
            logger.debug(f"Ignoring invalid page term '{part}'")
            continue
        if max_page is not None:
            end = min(end, max_page)
        pages.update(range(max(start, 1), end + 1))
    return pages


def format_page_ranges(pages: set[int] | list[int]) -> str:
    """Compact page numbers back into "1-3,5" form."""
    ordered = sorted(set(pages))
    parts: list[str] = []
    i = 0
    while i < len(ordered):
        start = end = ordered[i]
        while i + 1 < len(ordered) and ordered[i + 1] == end + 1:
            i += 1
            end = ordered[i]
        parts.append(str(start) if start == end else f"{start}-{end}")
        i += 1
    return ",".join(parts)


def apply_range_deletion(session: DocumentSession, text: str) -> int:
    """Mark every page matched by the expression as deleted, in all documents.

    Flags are only ever set, never cleared, so applying the same
    expression twice has the same effect as applying it once.

    Args:
        session: The session to modify
        text: Page range string such as "1,3,5-7"

    Returns:
        Number of pages that were newly marked as deleted
    """
    pages = parse_page_ranges(text, max_page=session.max_original_index())
    if not pages:
        return 0

    marked = session.mark_deleted(pages)
    logger.info(f"Range '{format_page_ranges(pages)}' marked {marked} page(s) as deleted")
    return marked
