"""
Test Utilities
==============

Shared assertion helpers for PNG output.
"""
