"""
SVG to PNG Conversion Service
=============================

An HTTP service that converts SVG documents into PNG images whose physical
resolution metadata reflects a caller-supplied DPI.

This package provides:
- FastAPI REST endpoints for HTTP access
- DPI-aware rasterization with CairoSVG
- PNG encoding with an embedded pHYs chunk
- Transparency-aware conversion through an external ImageMagick process
"""

__version__ = "0.2.2"
__author__ = "svg2png Team"
