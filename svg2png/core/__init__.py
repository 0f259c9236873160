"""
Core Business Logic
==================

Conversion pipeline for SVG to PNG.

Modules:
- errors: Pipeline error taxonomy and caller/server fault classes
- rendering: Dimension resolution, rasterization, PNG encoding, transparency conversion
- conversion: Orchestration of the public conversion operations
"""
