"""
Routes
======

HTTP routers for conversion and health endpoints.
"""
