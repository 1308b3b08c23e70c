"""File-backed repository: in-memory indices plus a JSON snapshot file."""

import asyncio
import logging
from typing import List, Optional, Sequence

from ..exceptions import BatchNotSupportedError, ConfigurationError, PersistenceError
from .base import BatchRepository, Repository, Rollback, Seeder, Snapshotter
from .file_store import JSONFileStore
from .memory import InMemoryRepository
from .models import NewRecord, Record


class FileBackedRepository(Repository, BatchRepository, Snapshotter):
    """Repository that rewrites a snapshot file after every mutation.

    The mutation is applied to the wrapped repository first. If the snapshot
    write then fails the mutation is removed again and PersistenceError is
    raised, so memory and file agree after every completed call. Mutations
    are serialized with the snapshot write that follows them.
    """

    def __init__(
        self,
        base: Repository,
        store: JSONFileStore,
        logger: Optional[logging.Logger] = None,
    ):
        """Wrap a repository with snapshot persistence.

        Args:
            base: Repository holding the live state; must support snapshot,
                seed and remove
            store: Snapshot file
            logger: Optional logger instance

        Raises:
            ConfigurationError: If ``base`` lacks a required capability
        """
        for capability in (Snapshotter, Seeder, Rollback):
            if not isinstance(base, capability):
                raise ConfigurationError(
                    f"{type(base).__name__} does not implement {capability.__name__}"
                )

        self.base = base
        self.store = store
        self.logger = logger or logging.getLogger("url_shortener.repository.file")
        self._mutation_lock = asyncio.Lock()

    @classmethod
    async def open(
        cls,
        path: str,
        logger: Optional[logging.Logger] = None,
    ) -> "FileBackedRepository":
        """Create an in-memory repository seeded from the snapshot at ``path``.

        Raises:
            PersistenceError: If an existing snapshot cannot be parsed
        """
        store = JSONFileStore(path, logger=logger)
        base = InMemoryRepository(logger=logger)
        repo = cls(base, store, logger=logger)
        await repo.load()
        return repo

    async def load(self) -> int:
        """Seed the wrapped repository from the snapshot file.

        Returns:
            Number of records loaded
        """
        records = await asyncio.to_thread(self.store.load)
        await self.base.seed(records)
        return len(records)

    async def _persist(self) -> None:
        records = await self.base.snapshot()
        await asyncio.to_thread(self.store.save, records)

    async def _persist_or_rollback(self, inserted: Sequence[Record]) -> None:
        """Write the snapshot, removing ``inserted`` again if the write fails.

        Must be called with the mutation lock held. The write runs to
        completion even if the caller is cancelled, so an older snapshot can
        never land after a newer one.
        """
        write = asyncio.ensure_future(self._persist())
        try:
            try:
                await asyncio.shield(write)
            except asyncio.CancelledError:
                # Worker thread is still writing; wait for it under the lock
                await write
                raise
        except PersistenceError as e:
            for rec in inserted:
                await self.base.remove(rec.short_url, rec.url)
            self.logger.error(f"Snapshot write failed, rolled back {len(inserted)} records: {e}")
            raise

    async def add(self, short_url: str, url: str) -> None:
        """Insert a mapping and rewrite the snapshot.

        Raises:
            ShortAlreadyExistsError: If the short code is taken
            URLAlreadyExistsError: If the URL already has a short code
            PersistenceError: If the snapshot write failed (insert undone)
        """
        async with self._mutation_lock:
            await self.base.add(short_url, url)
            await self._persist_or_rollback([Record(url=url, short_url=short_url)])

    async def add_many(self, records: Sequence[NewRecord]) -> List[Record]:
        """Batch insert and rewrite the snapshot once.

        Raises:
            URLAlreadyExistsError: If any candidate URL is already stored
            PersistenceError: If the snapshot write failed (inserts undone)
        """
        if not isinstance(self.base, BatchRepository):
            raise BatchNotSupportedError(f"{type(self.base).__name__} has no batch support")

        async with self._mutation_lock:
            inserted = await self.base.add_many(records)
            if not inserted:
                return inserted
            await self._persist_or_rollback(inserted)
            return inserted

    async def get(self, short_url: str) -> str:
        return await self.base.get(short_url)

    async def search(self, url: str) -> str:
        return await self.base.search(url)

    async def get_by_urls(self, urls: Sequence[str]) -> List[Record]:
        if not isinstance(self.base, BatchRepository):
            raise BatchNotSupportedError(f"{type(self.base).__name__} has no batch support")
        return await self.base.get_by_urls(urls)

    async def snapshot(self) -> List[Record]:
        return await self.base.snapshot()

    async def health_check(self) -> bool:
        """Reachable when the snapshot location accepts writes."""
        return await asyncio.to_thread(self.store.is_writable)

    async def close(self) -> None:
        await self.base.close()
