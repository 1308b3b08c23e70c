"""Core business logic for URL shortener."""

from .shortcode import ShortCodeGenerator
from .service import (
    BatchItem,
    BatchResult,
    BatchResultItem,
    ShortenResult,
    URLShortenerService,
)

__all__ = [
    "ShortCodeGenerator",
    "BatchItem",
    "BatchResult",
    "BatchResultItem",
    "ShortenResult",
    "URLShortenerService",
]
