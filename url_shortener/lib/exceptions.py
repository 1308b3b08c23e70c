"""Error taxonomy for URL shortener.

Every error raised by the repository and service layers derives from
ShortenerError and carries an ErrorKind, so callers can branch on the kind of
failure without inspecting messages.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Kinds of failure the service distinguishes."""

    INVALID_URL = "invalid_url"
    NOT_FOUND_SHORT = "not_found_short"
    NOT_FOUND_URL = "not_found_url"
    SHORT_ALREADY_EXISTS = "short_already_exists"
    URL_ALREADY_EXISTS = "url_already_exists"
    GENERATION_EXHAUSTED = "generation_exhausted"
    PERSISTENCE_FAILURE = "persistence_failure"
    DUPLICATE_IN_BATCH = "duplicate_in_batch"
    BACKEND_FAILURE = "backend_failure"
    BATCH_NOT_SUPPORTED = "batch_not_supported"
    CONFIGURATION = "configuration"


class ShortenerError(Exception):
    """Base exception for all application-specific errors."""

    kind = ErrorKind.BACKEND_FAILURE

    @property
    def error_code(self) -> str:
        return f"shortener:{self.kind.value}"


class InvalidURLError(ShortenerError):
    """Raised when a URL is empty or cannot be parsed."""

    kind = ErrorKind.INVALID_URL


class NotFoundShortError(ShortenerError):
    """Raised when an alias is not present in the store."""

    kind = ErrorKind.NOT_FOUND_SHORT


class NotFoundURLError(ShortenerError):
    """Raised when an original URL has no alias yet."""

    kind = ErrorKind.NOT_FOUND_URL


class AlreadyExistsError(ShortenerError):
    """Base class for uniqueness violations."""


class ShortAlreadyExistsError(AlreadyExistsError):
    """Raised when inserting an alias that is already taken."""

    kind = ErrorKind.SHORT_ALREADY_EXISTS


class URLAlreadyExistsError(AlreadyExistsError):
    """Raised when inserting an original URL that already has an alias."""

    kind = ErrorKind.URL_ALREADY_EXISTS


class GenerationExhaustedError(ShortenerError):
    """Raised when no unique alias could be generated within the retry budget."""

    kind = ErrorKind.GENERATION_EXHAUSTED


class PersistenceError(ShortenerError):
    """Raised when the durable snapshot could not be written or read.

    The in-memory mutation that triggered the write has already been rolled
    back when this is raised.
    """

    kind = ErrorKind.PERSISTENCE_FAILURE


class DuplicateInBatchError(ShortenerError):
    """Raised when the same URL appears more than once in one batch request."""

    kind = ErrorKind.DUPLICATE_IN_BATCH


class BackendError(ShortenerError):
    """Raised when the storage backend fails (connection loss, timeouts)."""

    kind = ErrorKind.BACKEND_FAILURE


class BatchNotSupportedError(ShortenerError):
    """Raised when the repository has no batch capability."""

    kind = ErrorKind.BATCH_NOT_SUPPORTED


class ConfigurationError(ShortenerError):
    """Raised when the application is configured with invalid parameters."""

    kind = ErrorKind.CONFIGURATION
