"""
PageOrganizer - Page Operations

Functions for manipulating the editable page order of a document:
drag-style moves and per-page delete/restore.
"""

from pageorganizer.editor.page_model import DocumentSession
from pageorganizer.utils.logger import logger


def move_page(session: DocumentSession, document_name: str, from_id: str, to_id: str) -> bool:
    """Move a page so it takes the position currently held by another page.

    Pages in between shift by one towards the vacated slot. Deletion flags
    and ids travel with the moved page.

    Args:
        session: The session to modify
        document_name: Document owning both pages
        from_id: Id of the page being dragged
        to_id: Id of the page it was dropped on

    Returns:
        True if the order changed, False for a no-op
    """
    if from_id == to_id:
        return False

    positions = session.move(document_name, from_id, to_id)
    if positions is None:
        logger.debug(f"Ignoring move in {document_name}: {from_id} -> {to_id} not found")
        return False

    logger.debug(f"Moved {from_id} from position {positions[0]} to {positions[1]}")
    return True


def toggle_page_deleted(session: DocumentSession, document_name: str, original_index: int) -> bool:
    """Flip the deletion flag of a page.

    Args:
        session: The session to modify
        document_name: Document owning the page
        original_index: Original page number (1-indexed)

    Returns:
        True if the page exists and was toggled
    """
    state = session.set_deleted(document_name, original_index)
    if state is None:
        return False

    logger.debug(
        f"Page {original_index} of {document_name} {'deleted' if state else 'restored'}"
    )
    return True
