"""Data models for URL shortener."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Record:
    """A stored URL <-> short code pair."""

    url: str
    short_url: str
    id: Optional[int] = None

    def to_dict(self) -> dict:
        """Convert to the persisted JSON shape."""
        data = {"url": self.url, "short_url": self.short_url}
        if self.id is not None:
            data["id"] = self.id
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Record":
        """Create from dictionary.

        Raises:
            KeyError: If url or short_url is missing
        """
        record_id = data.get("id")
        return cls(
            url=data["url"],
            short_url=data["short_url"],
            id=int(record_id) if record_id is not None else None,
        )


@dataclass(frozen=True)
class NewRecord:
    """Candidate pair passed to a batch insert."""

    url: str
    short_url: str
