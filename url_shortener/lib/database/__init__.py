"""Repository layer for URL shortener."""

from .base import (
    BatchRepository,
    Repository,
    Rollback,
    Seeder,
    Snapshotter,
    TransactionRunner,
)
from .cache import RedisCache
from .factory import create_repository
from .file_store import JSONFileStore
from .importer import ImportResult, import_records
from .memory import InMemoryRepository
from .models import NewRecord, Record
from .persisted import FileBackedRepository
from .postgres import PostgresRepository

__all__ = [
    "BatchRepository",
    "Repository",
    "Rollback",
    "Seeder",
    "Snapshotter",
    "TransactionRunner",
    "RedisCache",
    "create_repository",
    "JSONFileStore",
    "ImportResult",
    "import_records",
    "InMemoryRepository",
    "NewRecord",
    "Record",
    "FileBackedRepository",
    "PostgresRepository",
]
