"""JSON snapshot file for the in-memory repository."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence

from ..exceptions import PersistenceError
from .models import Record


class JSONFileStore:
    """Reads and writes the full record set as one JSON array.

    Writes go to a temp file in the target directory which is then renamed
    over the target, so readers only ever see a complete file.
    """

    def __init__(self, path: str, logger: Optional[logging.Logger] = None):
        """Initialize file store.

        Args:
            path: Snapshot file path
            logger: Optional logger instance
        """
        self.path = Path(path)
        self.logger = logger or logging.getLogger("url_shortener.repository.file")

    def load(self) -> List[Record]:
        """Read all records.

        A missing or empty file means no prior state.

        Raises:
            PersistenceError: If the file cannot be read or parsed
        """
        try:
            data = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            self.logger.info(f"Snapshot file {self.path} not found, starting empty")
            return []
        except OSError as e:
            raise PersistenceError(f"cannot read {self.path}: {e}") from e

        if not data.strip():
            return []

        try:
            rows = json.loads(data)
            if not isinstance(rows, list):
                raise ValueError("top-level value must be an array")
            records = [Record.from_dict(row) for row in rows]
        except (ValueError, KeyError, TypeError) as e:
            raise PersistenceError(f"malformed snapshot {self.path}: {e}") from e

        self.logger.info(f"Loaded {len(records)} records from {self.path}")
        return records

    def save(self, records: Sequence[Record]) -> None:
        """Atomically replace the file with ``records``.

        Raises:
            PersistenceError: If any step of the write fails
        """
        rows = [rec.to_dict() for rec in sorted(records, key=lambda r: r.short_url)]
        directory = self.path.parent

        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=directory
            )
        except OSError as e:
            raise PersistenceError(f"cannot create temp file for {self.path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(rows, f, indent=2, ensure_ascii=False)
                f.write("\n")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise PersistenceError(f"cannot write {self.path}: {e}") from e

        self.logger.debug(f"Saved {len(rows)} records to {self.path}")

    def is_writable(self) -> bool:
        """Check that the snapshot directory exists and accepts writes."""
        directory = self.path.parent
        if self.path.exists():
            return os.access(self.path, os.W_OK) and os.access(directory, os.W_OK)
        return directory.is_dir() and os.access(directory, os.W_OK)
