"""
Test Suite
==========

Test suite matching the docshot/ package structure.

Test Categories:
- unit: Unit tests for individual components, driven by a fake session
- integration: End-to-end captures against a real Chromium browser
"""
