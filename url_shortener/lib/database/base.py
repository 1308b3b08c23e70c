"""Abstract base classes for URL shortener repositories.

Repository is the contract every backend implements. Optional capabilities
(batch operations, transactions, snapshots, seeding, compensating removal)
are separate ABCs that callers check with isinstance before use.
"""

from abc import ABC, abstractmethod
from typing import AsyncContextManager, List, Sequence

from .models import NewRecord, Record


class Repository(ABC):
    """Bidirectional URL <-> short code mapping."""

    @abstractmethod
    async def add(self, short_url: str, url: str) -> None:
        """Insert a new mapping into both indices.

        Args:
            short_url: The short code to use
            url: The original long URL

        Raises:
            ShortAlreadyExistsError: If the short code is taken
            URLAlreadyExistsError: If the URL already has a short code
        """

    @abstractmethod
    async def get(self, short_url: str) -> str:
        """Get the original URL for a short code.

        Raises:
            NotFoundShortError: If the short code is unknown
        """

    @abstractmethod
    async def search(self, url: str) -> str:
        """Get the short code for an original URL.

        Raises:
            NotFoundURLError: If the URL has not been shortened
        """

    async def health_check(self) -> bool:
        """Check if the durability backend is reachable."""
        return False

    async def close(self) -> None:
        """Release backend resources."""


class BatchRepository(ABC):
    """Batch lookup and insert."""

    @abstractmethod
    async def get_by_urls(self, urls: Sequence[str]) -> List[Record]:
        """Look up many original URLs at once.

        Returns:
            Records for the URLs that exist; unknown URLs are omitted
        """

    @abstractmethod
    async def add_many(self, records: Sequence[NewRecord]) -> List[Record]:
        """Insert many mappings.

        A candidate whose short code is already taken is skipped and left out
        of the result. A candidate whose URL already exists aborts the call.

        Returns:
            The records actually inserted

        Raises:
            URLAlreadyExistsError: If any candidate URL is already stored
        """


class TransactionRunner(ABC):
    """Atomic scope for a group of repository operations."""

    @abstractmethod
    def transaction(self) -> AsyncContextManager[Repository]:
        """Open a transaction.

        Use as ``async with repo.transaction() as tx:``; operations on ``tx``
        are committed when the block exits normally and rolled back when it
        raises.
        """


class Snapshotter(ABC):
    """Full export of the stored records."""

    @abstractmethod
    async def snapshot(self) -> List[Record]:
        """Return every stored record."""


class Seeder(ABC):
    """Bulk replacement of the stored records."""

    @abstractmethod
    async def seed(self, records: Sequence[Record]) -> None:
        """Replace the current state with ``records``."""


class Rollback(ABC):
    """Compensating delete after a failed downstream step."""

    @abstractmethod
    async def remove(self, short_url: str, url: str) -> None:
        """Remove a mapping from both indices if present."""
