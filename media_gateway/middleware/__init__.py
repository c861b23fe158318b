"""Middleware package for FastAPI application."""

from .preflight import PreflightMiddleware
from .request_logging import RequestLoggingMiddleware

__all__ = ["PreflightMiddleware", "RequestLoggingMiddleware"]
