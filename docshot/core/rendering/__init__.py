"""
Rendering Module
===============

Document shell generation, browser management and image export.

Components:
- page_builder: Wrap HTML fragments and CSS into a full document
- image_exporter: Browser pool and page lifecycle around the capture engine
- output: Persist capture results as single or multi-part image files
"""
