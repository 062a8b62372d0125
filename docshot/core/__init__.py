"""
Core Business Logic
==================

Core business logic modules for document capture.

Modules:
- capture: Screenshot capture and tiling engine
- rendering: Document shell, browser pool and image export
"""
