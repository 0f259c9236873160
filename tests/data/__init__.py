"""
Test Data
=========

Sample SVG documents used across the test suite.
"""
