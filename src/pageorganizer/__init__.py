"""
PageOrganizer - Python package for reordering and pruning PDF pages

This package keeps an editable page order and deletion state per loaded
document, renders page thumbnails in the background and exports the
result as new PDF files or as a single ZIP archive.
"""

__version__ = "1.0.0"
__license__ = "GPL-3.0"
