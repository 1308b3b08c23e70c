"""URL building utilities for URL shortener."""

from urllib.parse import urlparse


def build_short_url(short_code: str, base_url: str) -> str:
    """Build complete short URL by joining the base URL and the short code.

    Any path in the base URL is kept, so ``http://host:8080/s/`` and
    ``http://host:8080/s`` both yield ``http://host:8080/s/<code>``.

    Args:
        short_code: The short code
        base_url: Base URL (e.g., http://localhost:8080/)

    Returns:
        Complete short URL
    """
    base = base_url.rstrip("/")
    return f"{base}/{short_code}"


def base_path(base_url: str) -> str:
    """Path component of the base URL, normalized without trailing slash.

    Returns '' when the base URL has no path, e.g. '/s' for http://host/s/.
    """
    path = urlparse(base_url).path.strip("/")
    return "/" + path if path else ""
