"""Business logic service for URL shortener."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .batch import BatchResolution, resolve_urls
from .common.retry import RetryAttempt, retry_bounded
from .common.url_builder import build_short_url
from .common.validators import is_valid_url
from .database.base import BatchRepository, Repository, TransactionRunner
from .database.cache import RedisCache
from .exceptions import (
    BatchNotSupportedError,
    DuplicateInBatchError,
    InvalidURLError,
    NotFoundURLError,
    ShortAlreadyExistsError,
    URLAlreadyExistsError,
)
from .shortcode import ShortCodeGenerator

DEFAULT_MAX_ATTEMPTS = 6


@dataclass(frozen=True)
class ShortenResult:
    """Result of shortening one URL."""

    short_code: str
    link: str
    existed: bool


@dataclass(frozen=True)
class BatchItem:
    """One entry of a batch shorten request."""

    correlation_id: str
    original_url: str


@dataclass(frozen=True)
class BatchResultItem:
    """One entry of a batch shorten response."""

    correlation_id: str
    short_url: str


@dataclass(frozen=True)
class BatchResult:
    """Batch response, in request order."""

    items: List[BatchResultItem]
    had_existing: bool


class URLShortenerService:
    """Service layer for URL shortening business logic."""

    def __init__(
        self,
        repository: Repository,
        base_url: str,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        cache: Optional[RedisCache] = None,
        logger: Optional[logging.Logger] = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        """Initialize URL shortener service.

        Args:
            repository: Storage backend
            base_url: Base URL short links are built from
            short_code_generator: Optional short code generator
            cache: Optional redirect cache
            logger: Optional logger
            max_attempts: Alias generation attempts before giving up
        """
        self.repository = repository
        self.base_url = base_url
        self.generator = short_code_generator or ShortCodeGenerator()
        self.cache = cache
        self.logger = logger or logging.getLogger("url_shortener.service")
        self.max_attempts = max_attempts

    def build_link(self, short_code: str) -> str:
        return build_short_url(short_code, self.base_url)

    @staticmethod
    def validate_url(url: str) -> str:
        """Return ``url`` if valid.

        Raises:
            InvalidURLError: If the URL is empty or malformed
        """
        is_valid, error = is_valid_url(url)
        if not is_valid:
            raise InvalidURLError(f"Invalid URL: {error}")
        return url

    async def shorten(self, url: str) -> ShortenResult:
        """Shorten a URL, reusing the existing short code if there is one.

        Args:
            url: The original long URL

        Returns:
            ShortenResult; ``existed`` is True when the URL was already stored

        Raises:
            InvalidURLError: If the URL is invalid
            GenerationExhaustedError: If no free short code was found
            BackendError, PersistenceError: On storage failure
        """
        self.validate_url(url)

        try:
            short_code = await self.repository.search(url)
        except NotFoundURLError:
            pass
        else:
            self.logger.debug(f"URL already shortened: {short_code} -> {url}")
            return ShortenResult(short_code, self.build_link(short_code), existed=True)

        async def attempt(number: int) -> ShortenResult:
            candidate = self.generator.generate_random()
            try:
                await self.repository.add(candidate, url)
            except ShortAlreadyExistsError as e:
                raise RetryAttempt(str(e)) from e
            except URLAlreadyExistsError as e:
                # A concurrent caller stored the same URL first
                try:
                    short_code = await self.repository.search(url)
                except NotFoundURLError:
                    raise RetryAttempt(str(e)) from e
                return ShortenResult(short_code, self.build_link(short_code), existed=True)

            self.logger.info(f"Created short URL: {candidate} -> {url}")
            return ShortenResult(candidate, self.build_link(candidate), existed=False)

        return await retry_bounded(attempt, self.max_attempts)

    async def resolve(self, short_code: str) -> str:
        """Get the original URL for a short code.

        Raises:
            NotFoundShortError: If the short code is unknown
        """
        if self.cache:
            cached_url = await self.cache.get(short_code)
            if cached_url:
                self.logger.debug(f"Cache hit for {short_code}")
                return cached_url

        url = await self.repository.get(short_code)

        if self.cache:
            await self.cache.set(short_code, url)

        return url

    async def batch(self, items: Sequence[BatchItem]) -> BatchResult:
        """Shorten many URLs at once.

        Runs inside a transaction when the repository supports one, so a
        failure leaves no partial inserts behind.

        Args:
            items: Request entries; every original_url must be distinct

        Returns:
            BatchResult with one item per request entry, in request order

        Raises:
            InvalidURLError: If any URL is invalid
            DuplicateInBatchError: If a URL appears twice in the request
            GenerationExhaustedError: If some URLs could not get a free code
            URLAlreadyExistsError: If a URL was stored concurrently mid-insert
            BatchNotSupportedError: If the repository has no batch support
        """
        urls: List[str] = []
        seen = set()
        for item in items:
            self.validate_url(item.original_url)
            if item.original_url in seen:
                raise DuplicateInBatchError(f"URL appears more than once in batch: {item.original_url}")
            seen.add(item.original_url)
            urls.append(item.original_url)

        if not urls:
            return BatchResult(items=[], had_existing=False)

        if isinstance(self.repository, TransactionRunner):
            async with self.repository.transaction() as tx:
                resolution = await self._resolve_batch(tx, urls)
        else:
            resolution = await self._resolve_batch(self.repository, urls)

        result_items = [
            BatchResultItem(
                correlation_id=item.correlation_id,
                short_url=self.build_link(resolution.short_codes[item.original_url]),
            )
            for item in items
        ]

        self.logger.info(
            f"Batch of {len(urls)} URLs shortened ({len(resolution.existing)} already existed)"
        )
        return BatchResult(items=result_items, had_existing=bool(resolution.existing))

    async def _resolve_batch(self, repository: Repository, urls: List[str]) -> BatchResolution:
        if not isinstance(repository, BatchRepository):
            raise BatchNotSupportedError(f"{type(repository).__name__} has no batch support")
        return await resolve_urls(
            repository,
            urls,
            self.generator,
            max_attempts=self.max_attempts,
            logger=self.logger,
        )

    async def health_check(self) -> bool:
        """Check if the durability backend is reachable."""
        return await self.repository.health_check()

    async def close(self) -> None:
        """Close service connections."""
        await self.repository.close()
        if self.cache:
            await self.cache.close()
