"""Pytest configuration and fixtures."""

import pytest
from typing import AsyncGenerator

from httpx import ASGITransport, AsyncClient

from url_shortener.config import Config
from url_shortener.lib.common.logging_config import setup_logging
from url_shortener.lib.database.memory import InMemoryRepository
from url_shortener.lib.service import URLShortenerService
from url_shortener.lib.shortcode import ShortCodeGenerator
from url_shortener.web_app import create_app

BASE_URL = "http://localhost:8080/"


class SequenceGenerator(ShortCodeGenerator):
    """Generator returning predetermined codes, then random ones."""

    def __init__(self, codes, default_length: int = 6):
        super().__init__(default_length=default_length)
        self.codes = list(codes)
        self.calls = 0

    def generate_random(self, length=None) -> str:
        self.calls += 1
        if self.codes:
            return self.codes.pop(0)
        return super().generate_random(length)


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(default_length=6)


@pytest.fixture
def memory_repo(logger) -> InMemoryRepository:
    """Create empty in-memory repository."""
    return InMemoryRepository(logger=logger)


@pytest.fixture
def service(memory_repo, short_code_generator, logger) -> URLShortenerService:
    """Create service instance over the in-memory repository."""
    return URLShortenerService(
        repository=memory_repo,
        base_url=BASE_URL,
        short_code_generator=short_code_generator,
        cache=None,  # No cache for tests
        logger=logger,
    )


@pytest.fixture
def config(monkeypatch) -> Config:
    """Configuration matching BASE_URL, isolated from the environment."""
    for name in ("SERVER_ADDRESS", "BASE_URL", "FILE_STORAGE_PATH", "DATABASE_DSN", "REDIS_URL"):
        monkeypatch.delenv(name, raising=False)
    return Config(
        server_address="localhost:8080",
        base_url=BASE_URL,
        file_storage_path="",
        _env_file=None,
    )


@pytest.fixture
def app(service, config, logger):
    """Create test FastAPI app."""
    return create_app(service=service, config=config, logger=logger)


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Create test client."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://localhost:8080") as ac:
        yield ac


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "https://stackoverflow.com/questions/123456",
    ]
