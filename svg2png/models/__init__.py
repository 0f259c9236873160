"""
Data Models
===========

Pydantic data models for pipeline values and API responses.

Models:
- schemas: Pipeline value types, API response and error schemas
"""
