"""
Test Suite
==========

Test suite matching the svg2png/ package structure.

Test Categories:
- unit: Unit tests for individual pipeline components
- integration: HTTP contract tests against the FastAPI application
"""
