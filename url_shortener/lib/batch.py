"""Batch shorten helpers: set difference and the insert/retry loop."""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set

from .common.retry import RetryAttempt, retry_bounded
from .database.base import BatchRepository
from .database.models import NewRecord, Record
from .shortcode import ShortCodeGenerator


def urls_diff(urls: Sequence[str], records: Iterable[Record]) -> List[str]:
    """URLs not covered by ``records``, in their original order."""
    present = {rec.url for rec in records}
    return [url for url in urls if url not in present]


@dataclass
class BatchResolution:
    """Outcome of resolving a set of URLs to short codes."""

    short_codes: Dict[str, str] = field(default_factory=dict)
    existing: Set[str] = field(default_factory=set)

    def take(self, records: Iterable[Record], existed: bool) -> None:
        for rec in records:
            self.short_codes[rec.url] = rec.short_url
            if existed:
                self.existing.add(rec.url)


async def resolve_urls(
    repository: BatchRepository,
    urls: Sequence[str],
    generator: ShortCodeGenerator,
    max_attempts: int = 6,
    logger: Optional[logging.Logger] = None,
) -> BatchResolution:
    """Find or create a short code for every URL.

    Existing records are looked up first. The rest get fresh codes through
    add_many; URLs left over after an attempt (their code collided) are looked
    up again in case a concurrent caller stored them, and the remainder is
    retried with new codes.

    Args:
        repository: Batch-capable repository (possibly bound to a transaction)
        urls: Distinct, validated URLs
        generator: Short code generator
        max_attempts: Insert attempts before giving up
        logger: Optional logger instance

    Returns:
        Mapping of every URL to its short code, and which ones were not
        created by this call

    Raises:
        GenerationExhaustedError: If some URLs are still unresolved after
            ``max_attempts`` attempts
        URLAlreadyExistsError: If add_many hit a URL stored concurrently
    """
    logger = logger or logging.getLogger("url_shortener.batch")
    resolution = BatchResolution()

    existing = await repository.get_by_urls(urls)
    resolution.take(existing, existed=True)
    remaining = urls_diff(urls, existing)

    if not remaining:
        return resolution

    async def attempt(number: int) -> None:
        nonlocal remaining

        candidates = [NewRecord(url=url, short_url=generator.generate_random()) for url in remaining]
        inserted = await repository.add_many(candidates)
        resolution.take(inserted, existed=False)
        remaining = urls_diff(remaining, inserted)
        if not remaining:
            return

        appeared = await repository.get_by_urls(remaining)
        resolution.take(appeared, existed=True)
        remaining = urls_diff(remaining, appeared)
        if remaining:
            raise RetryAttempt(f"{len(remaining)} URLs left after attempt {number}")

    await retry_bounded(attempt, max_attempts, what=f"short codes for {len(urls)} URLs")

    logger.debug(
        f"Resolved {len(urls)} URLs: {len(urls) - len(resolution.existing)} created, "
        f"{len(resolution.existing)} existing"
    )
    return resolution
