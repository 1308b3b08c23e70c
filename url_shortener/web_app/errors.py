"""HTTP status mapping for service errors."""

from fastapi import status

from url_shortener.lib.exceptions import ErrorKind, ShortenerError

STATUS_BY_KIND = {
    ErrorKind.INVALID_URL: status.HTTP_400_BAD_REQUEST,
    ErrorKind.DUPLICATE_IN_BATCH: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND_SHORT: status.HTTP_404_NOT_FOUND,
    ErrorKind.NOT_FOUND_URL: status.HTTP_404_NOT_FOUND,
    ErrorKind.URL_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.SHORT_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
}


def status_for_error(error: ShortenerError) -> int:
    """HTTP status code for a service error; unknown kinds are server errors."""
    return STATUS_BY_KIND.get(error.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
