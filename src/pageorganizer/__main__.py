#!/usr/bin/env python3
"""
PageOrganizer - Entry point for python -m pageorganizer

This module allows the package to be run as a module:
    python -m pageorganizer
"""

import sys

from pageorganizer.cli import main

if __name__ == "__main__":
    sys.exit(main())
