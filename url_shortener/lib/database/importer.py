"""Restore exported records into a repository, keeping their short codes."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from ..exceptions import (
    NotFoundShortError,
    NotFoundURLError,
    ShortAlreadyExistsError,
    URLAlreadyExistsError,
)
from ..shortcode import ShortCodeGenerator
from .base import BatchRepository, Repository, TransactionRunner
from .models import NewRecord, Record


@dataclass
class ImportResult:
    """Outcome of an import, one list entry per input record."""

    imported: List[Record] = field(default_factory=list)
    present: List[Record] = field(default_factory=list)
    conflicts: List[Record] = field(default_factory=list)
    invalid: List[Record] = field(default_factory=list)


def _partition(records: Sequence[Record], result: ImportResult) -> List[Record]:
    """Drop malformed records and repeats of an earlier short code or URL."""
    candidates = []
    shorts = set()
    urls = set()
    for rec in records:
        if not ShortCodeGenerator.is_valid_format(rec.short_url):
            result.invalid.append(rec)
        elif rec.short_url in shorts or rec.url in urls:
            result.conflicts.append(rec)
        else:
            shorts.add(rec.short_url)
            urls.add(rec.url)
            candidates.append(rec)
    return candidates


async def _import_batch(repository: BatchRepository, candidates: List[Record], result: ImportResult) -> None:
    stored = {rec.url: rec.short_url for rec in await repository.get_by_urls([c.url for c in candidates])}

    new = []
    for rec in candidates:
        if rec.url not in stored:
            new.append(rec)
        elif stored[rec.url] == rec.short_url:
            result.present.append(rec)
        else:
            result.conflicts.append(rec)

    if not new:
        return

    inserted = await repository.add_many([NewRecord(url=r.url, short_url=r.short_url) for r in new])
    inserted_shorts = {rec.short_url for rec in inserted}
    for rec in new:
        if rec.short_url in inserted_shorts:
            result.imported.append(rec)
        else:
            # Short code already belongs to another URL
            result.conflicts.append(rec)


async def _import_one_by_one(repository: Repository, candidates: List[Record], result: ImportResult) -> None:
    for rec in candidates:
        try:
            await repository.add(rec.short_url, rec.url)
        except ShortAlreadyExistsError:
            try:
                same = await repository.get(rec.short_url) == rec.url
            except NotFoundShortError:
                same = False
            (result.present if same else result.conflicts).append(rec)
        except URLAlreadyExistsError:
            try:
                same = await repository.search(rec.url) == rec.short_url
            except NotFoundURLError:
                same = False
            (result.present if same else result.conflicts).append(rec)
        else:
            result.imported.append(rec)


async def import_records(
    repository: Repository,
    records: Sequence[Record],
    logger: Optional[logging.Logger] = None,
) -> ImportResult:
    """Insert ``records`` with their own short codes.

    Records already stored with the same short code are reported as present.
    A record whose short code or URL is taken by a different pair is reported
    as a conflict and never renamed. Batch-capable repositories are filled
    with one add_many call, inside a transaction when they support one.

    Args:
        repository: Target repository
        records: Records to restore, e.g. loaded from a JSON snapshot
        logger: Optional logger instance

    Returns:
        ImportResult sorting every input record into one outcome
    """
    logger = logger or logging.getLogger("url_shortener.importer")
    result = ImportResult()
    candidates = _partition(records, result)

    if candidates:
        if isinstance(repository, TransactionRunner):
            async with repository.transaction() as tx:
                await _import_into(tx, candidates, result)
        else:
            await _import_into(repository, candidates, result)

    for rec in result.conflicts:
        logger.warning(f"Conflict, not imported: {rec.short_url} -> {rec.url}")
    for rec in result.invalid:
        logger.warning(f"Malformed short code, not imported: {rec.short_url!r}")

    logger.info(
        f"Imported {len(result.imported)} records, {len(result.present)} already present, "
        f"{len(result.conflicts)} conflicts, {len(result.invalid)} invalid"
    )
    return result


async def _import_into(repository: Repository, candidates: List[Record], result: ImportResult) -> None:
    if isinstance(repository, BatchRepository):
        await _import_batch(repository, candidates, result)
    else:
        await _import_one_by_one(repository, candidates, result)
