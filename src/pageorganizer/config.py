#!/usr/bin/env python3
"""
PageOrganizer - Configuration Module

This module contains all configuration constants and paths used by the application.
"""

import logging
import os
from typing import Final

from pageorganizer.utils.i18n import _

# ============================================================================
# Application Constants
# ============================================================================

APP_NAME: Final[str] = "PageOrganizer"
APP_VERSION: Final[str] = "1.0.0"
APP_DESCRIPTION: Final[str] = _("Reorder, delete and export pages of PDF documents")


# ============================================================================
# Media Types
# ============================================================================

PDF_MEDIA_TYPE: Final[str] = "application/pdf"
ZIP_MEDIA_TYPE: Final[str] = "application/zip"


# ============================================================================
# Export Defaults
# ============================================================================

# Prepended to the source name of every exported document
OUTPUT_PREFIX: Final[str] = "modified-"

# Name of the bundle delivered in archive mode
ARCHIVE_NAME: Final[str] = "processed-pdfs.zip"


# ============================================================================
# Thumbnail Defaults
# ============================================================================

# Fraction of the native page size, not a pixel width
THUMBNAIL_SCALE: Final[float] = 0.15

# Upper bound accepted from user configuration
MAX_THUMBNAIL_SCALE: Final[float] = 2.0


# ============================================================================
# Configuration Directory
# ============================================================================

CONFIG_DIR: Final[str] = os.path.expanduser("~/.config/pageorganizer")
CONFIG_FILE_PATH: Final[str] = os.path.join(CONFIG_DIR, "settings.json")


# ============================================================================
# Logging Configuration
# ============================================================================

LOG_LEVEL: int = logging.INFO
LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOGGER_NAME: Final[str] = "PageOrganizer"
