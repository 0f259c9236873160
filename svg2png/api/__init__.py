"""
API Layer
=========

FastAPI application and HTTP routes for SVG to PNG conversion.
"""
