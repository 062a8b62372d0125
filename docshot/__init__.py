"""
docshot
=======

Capture rendered documents as one or more raster images by driving a
Chromium page through Playwright.

This package provides:
- A capture engine deciding which region(s) of a laid-out document to capture
- Selector capture modes (first, each, union, stitch)
- Height-limited splitting with block-aware cut points
- A browser pool and document shell for exporting HTML + CSS to images
"""

__version__ = "1.0.0"
__author__ = "docshot Team"
