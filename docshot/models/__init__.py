"""
Data Models
===========

Pydantic data models for capture requests, geometry and results.

Models:
- schemas: Capture request, regions, split plans and capture results
"""
