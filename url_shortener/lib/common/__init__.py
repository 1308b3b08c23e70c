"""Common utilities for URL shortener."""

from .validators import is_valid_url
from .url_builder import base_path, build_short_url
from .logging_config import get_logger, setup_logging
from .retry import RetryAttempt, retry_bounded
from .rwlock import ReadWriteLock

__all__ = [
    "is_valid_url",
    "base_path",
    "build_short_url",
    "get_logger",
    "setup_logging",
    "RetryAttempt",
    "retry_bounded",
    "ReadWriteLock",
]
