"""In-memory repository for URL shortener."""

import logging
from typing import Dict, List, Optional, Sequence

from ..common.rwlock import ReadWriteLock
from ..exceptions import (
    NotFoundShortError,
    NotFoundURLError,
    ShortAlreadyExistsError,
    URLAlreadyExistsError,
)
from .base import BatchRepository, Repository, Rollback, Seeder, Snapshotter
from .models import NewRecord, Record


class InMemoryRepository(Repository, BatchRepository, Snapshotter, Seeder, Rollback):
    """Repository keeping both indices in process memory.

    All access goes through one reader/writer lock, so the short -> URL and
    URL -> short indices are never observed out of step.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """Initialize empty repository.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger("url_shortener.repository.memory")
        self._lock = ReadWriteLock()
        self._by_short: Dict[str, str] = {}
        self._by_url: Dict[str, str] = {}
        self._ids: Dict[str, int] = {}
        self._next_id = 1

    def __len__(self) -> int:
        return len(self._by_short)

    def _insert(self, short_url: str, url: str, record_id: Optional[int] = None) -> int:
        if record_id is None:
            record_id = self._next_id
        self._by_short[short_url] = url
        self._by_url[url] = short_url
        self._ids[short_url] = record_id
        self._next_id = max(self._next_id, record_id + 1)
        return record_id

    async def add(self, short_url: str, url: str) -> None:
        """Insert a new mapping.

        Raises:
            ShortAlreadyExistsError: If the short code is taken
            URLAlreadyExistsError: If the URL already has a short code
        """
        async with self._lock.write():
            if short_url in self._by_short:
                raise ShortAlreadyExistsError(f"short code already exists: {short_url}")
            if url in self._by_url:
                raise URLAlreadyExistsError(f"URL already exists: {url}")
            self._insert(short_url, url)

        self.logger.debug(f"Added {short_url} -> {url}")

    async def get(self, short_url: str) -> str:
        async with self._lock.read():
            try:
                return self._by_short[short_url]
            except KeyError:
                raise NotFoundShortError(f"short code not found: {short_url}") from None

    async def search(self, url: str) -> str:
        async with self._lock.read():
            try:
                return self._by_url[url]
            except KeyError:
                raise NotFoundURLError(f"URL not found: {url}") from None

    async def get_by_urls(self, urls: Sequence[str]) -> List[Record]:
        if not urls:
            return []

        async with self._lock.read():
            return [
                Record(url=url, short_url=self._by_url[url], id=self._ids[self._by_url[url]])
                for url in urls
                if url in self._by_url
            ]

    async def add_many(self, records: Sequence[NewRecord]) -> List[Record]:
        """Insert many mappings under a single write lock.

        Candidates whose short code is taken are skipped. A URL collision
        aborts the call and undoes the candidates inserted before it.

        Raises:
            URLAlreadyExistsError: If any candidate URL is already stored
        """
        if not records:
            return []

        inserted: List[Record] = []
        async with self._lock.write():
            for rec in records:
                if rec.short_url in self._by_short:
                    continue
                if rec.url in self._by_url:
                    for done in inserted:
                        self._delete(done.short_url, done.url)
                    raise URLAlreadyExistsError(f"URL already exists: {rec.url}")
                record_id = self._insert(rec.short_url, rec.url)
                inserted.append(Record(url=rec.url, short_url=rec.short_url, id=record_id))

        self.logger.debug(f"Batch added {len(inserted)} of {len(records)} records")
        return inserted

    def _delete(self, short_url: str, url: str) -> None:
        if self._by_short.get(short_url) == url:
            del self._by_short[short_url]
            self._ids.pop(short_url, None)
        if self._by_url.get(url) == short_url:
            del self._by_url[url]

    async def remove(self, short_url: str, url: str) -> None:
        async with self._lock.write():
            self._delete(short_url, url)

        self.logger.debug(f"Removed {short_url} -> {url}")

    async def snapshot(self) -> List[Record]:
        async with self._lock.read():
            return [
                Record(url=url, short_url=short, id=self._ids[short])
                for short, url in self._by_short.items()
            ]

    async def seed(self, records: Sequence[Record]) -> None:
        """Replace the current state with ``records``.

        Later records win when the input repeats a short code or URL; the
        displaced pair is dropped so both indices stay a bijection.
        """
        async with self._lock.write():
            self._by_short = {}
            self._by_url = {}
            self._ids = {}
            self._next_id = 1
            for rec in records:
                if rec.short_url in self._by_short:
                    self._delete(rec.short_url, self._by_short[rec.short_url])
                if rec.url in self._by_url:
                    self._delete(self._by_url[rec.url], rec.url)
                self._insert(rec.short_url, rec.url, rec.id)

        self.logger.info(f"Seeded repository with {len(self._by_short)} records")

    async def health_check(self) -> bool:
        """Memory alone is not a durability backend."""
        return False
