"""Middleware for URL shortener web app."""

from .gzip import GzipRequestMiddleware
from .logging import LoggingMiddleware

__all__ = ["GzipRequestMiddleware", "LoggingMiddleware"]
