"""Middleware package for FastAPI request/response processing.

This package contains middleware components for cross-cutting concerns
like request timing.
"""
