"""Tests for batch shortening."""

from contextlib import asynccontextmanager

import pytest
from url_shortener.lib.batch import BatchResolution, resolve_urls, urls_diff
from url_shortener.lib.database.base import Repository, TransactionRunner
from url_shortener.lib.database.memory import InMemoryRepository
from url_shortener.lib.database.models import Record
from url_shortener.lib.exceptions import (
    BatchNotSupportedError,
    DuplicateInBatchError,
    GenerationExhaustedError,
    InvalidURLError,
    NotFoundShortError,
    NotFoundURLError,
)
from url_shortener.lib.service import BatchItem, URLShortenerService

from conftest import BASE_URL, SequenceGenerator


def items(*urls):
    return [BatchItem(correlation_id=f"id-{i}", original_url=u) for i, u in enumerate(urls)]


class TransactionalMemoryRepository(InMemoryRepository, TransactionRunner):
    """In-memory repository whose transaction restores a snapshot on error."""

    def __init__(self, logger=None):
        super().__init__(logger=logger)
        self.transactions = 0
        self.rollbacks = 0

    @asynccontextmanager
    async def transaction(self):
        self.transactions += 1
        saved = await self.snapshot()
        try:
            yield self
        except BaseException:
            self.rollbacks += 1
            await self.seed(saved)
            raise


class SingleOnlyRepository(Repository):
    """Repository without batch support."""

    async def add(self, short_url, url):
        pass

    async def get(self, short_url):
        raise NotFoundShortError(short_url)

    async def search(self, url):
        raise NotFoundURLError(url)


class TestUrlsDiff:
    """Test set difference helper."""

    def test_keeps_input_order(self):
        """Test missing URLs come back in request order."""
        records = [Record(url="b", short_url="2")]
        assert urls_diff(["c", "b", "a"], records) == ["c", "a"]

    def test_empty(self):
        """Test empty inputs."""
        assert urls_diff([], []) == []
        assert urls_diff(["a"], []) == ["a"]

    def test_resolution_take(self):
        """Test existing flag bookkeeping."""
        resolution = BatchResolution()
        resolution.take([Record(url="a", short_url="1")], existed=True)
        resolution.take([Record(url="b", short_url="2")], existed=False)

        assert resolution.short_codes == {"a": "1", "b": "2"}
        assert resolution.existing == {"a"}


@pytest.mark.asyncio
class TestResolveUrls:
    """Test the batch insert and retry loop."""

    async def test_retries_colliding_codes(self, memory_repo):
        """Test URLs whose code collided get a new code on the next attempt."""
        await memory_repo.add("taken1", "https://example.com/old")
        generator = SequenceGenerator(["taken1", "free01", "free02"])

        resolution = await resolve_urls(
            memory_repo, ["https://example.com/a", "https://example.com/b"], generator
        )

        assert resolution.short_codes == {
            "https://example.com/a": "free02",
            "https://example.com/b": "free01",
        }
        assert resolution.existing == set()

    async def test_exhaustion(self, memory_repo):
        """Test the retry budget bounds the batch loop."""
        await memory_repo.add("taken1", "https://example.com/old")
        generator = SequenceGenerator(["taken1"] * 10)

        with pytest.raises(GenerationExhaustedError):
            await resolve_urls(memory_repo, ["https://example.com/a"], generator, max_attempts=3)

        assert generator.calls == 3


@pytest.mark.asyncio
class TestServiceBatch:
    """Test batch shortening through the service."""

    async def test_batch_creates_in_order(self, service):
        """Test every item gets a link and order is preserved."""
        request = items("https://example.com/a", "https://example.com/b", "https://example.com/c")

        result = await service.batch(request)

        assert not result.had_existing
        assert [i.correlation_id for i in result.items] == ["id-0", "id-1", "id-2"]
        for item, req in zip(result.items, request):
            code = item.short_url.rsplit("/", 1)[1]
            assert item.short_url.startswith(BASE_URL)
            assert await service.resolve(code) == req.original_url

    async def test_batch_with_existing(self, service):
        """Test URLs stored earlier reuse their code and mark the batch."""
        first = await service.shorten("https://example.com/b")

        result = await service.batch(items("https://example.com/a", "https://example.com/b"))

        assert result.had_existing
        assert result.items[1].short_url == first.link

    async def test_batch_all_existing(self, service):
        """Test repeating a batch returns the same links."""
        request = items("https://example.com/a", "https://example.com/b")
        first = await service.batch(request)

        second = await service.batch(request)

        assert second.had_existing
        assert second.items == first.items

    async def test_empty_batch(self, service):
        """Test empty batch is a no-op."""
        result = await service.batch([])

        assert result.items == []
        assert not result.had_existing

    async def test_duplicate_in_batch(self, service, memory_repo):
        """Test repeated URLs are rejected before anything is stored."""
        with pytest.raises(DuplicateInBatchError):
            await service.batch(items("https://example.com/a", "https://example.com/a"))

        assert len(memory_repo) == 0

    async def test_invalid_url_in_batch(self, service, memory_repo):
        """Test one invalid URL rejects the whole batch."""
        with pytest.raises(InvalidURLError):
            await service.batch(items("https://example.com/a", "not-a-url"))

        assert len(memory_repo) == 0

    async def test_runs_in_transaction(self, logger):
        """Test a transactional repository is used through its transaction."""
        repo = TransactionalMemoryRepository(logger=logger)
        service = URLShortenerService(repo, BASE_URL, logger=logger)

        await service.batch(items("https://example.com/a"))

        assert repo.transactions == 1
        assert repo.rollbacks == 0

    async def test_failed_transaction_leaves_nothing(self, logger):
        """Test exhaustion inside a transaction rolls back earlier inserts."""
        repo = TransactionalMemoryRepository(logger=logger)
        await repo.add("taken1", "https://example.com/old")
        generator = SequenceGenerator(["fresh1"] + ["taken1"] * 10)
        service = URLShortenerService(
            repo, BASE_URL, short_code_generator=generator, logger=logger, max_attempts=3
        )

        with pytest.raises(GenerationExhaustedError):
            await service.batch(items("https://example.com/a", "https://example.com/b"))

        assert repo.rollbacks == 1
        assert [r.short_url for r in await repo.snapshot()] == ["taken1"]

    async def test_batch_not_supported(self, logger):
        """Test repositories without batch support are refused."""
        service = URLShortenerService(SingleOnlyRepository(), BASE_URL, logger=logger)

        with pytest.raises(BatchNotSupportedError):
            await service.batch(items("https://example.com/a"))
