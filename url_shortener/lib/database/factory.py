"""Backend selection for URL shortener."""

import logging
from typing import Optional

from .base import Repository
from .memory import InMemoryRepository
from .persisted import FileBackedRepository
from .postgres import PostgresRepository


async def create_repository(
    database_dsn: Optional[str] = None,
    file_storage_path: Optional[str] = None,
    timeout_seconds: float = 2.0,
    pool_max_size: int = 10,
    logger: Optional[logging.Logger] = None,
) -> Repository:
    """Build the repository selected by configuration.

    A database DSN selects PostgreSQL (schema created on the way). Otherwise a
    file path selects the in-memory repository persisted to that file, and
    with neither the repository lives in memory only.

    Args:
        database_dsn: PostgreSQL connection string
        file_storage_path: Snapshot file path
        timeout_seconds: Per-call database timeout
        pool_max_size: Maximum database pool size
        logger: Optional logger instance

    Returns:
        Ready-to-use repository
    """
    logger = logger or logging.getLogger("url_shortener")

    if database_dsn:
        logger.info("Using PostgreSQL repository")
        repo = PostgresRepository(
            dsn=database_dsn,
            pool_max_size=pool_max_size,
            timeout_seconds=timeout_seconds,
            logger=logger,
        )
        await repo.ensure_schema()
        return repo

    if file_storage_path:
        logger.info(f"Using in-memory repository persisted to {file_storage_path}")
        return await FileBackedRepository.open(file_storage_path, logger=logger)

    logger.info("Using in-memory repository without persistence")
    return InMemoryRepository(logger=logger)
