"""
Size bucketer: first filter of the dedup pipeline.

Files of a size shared by no other file cannot have a duplicate, so only
buckets with 2+ members go on to hashing. Symlinks and zero-byte files are
never candidates.
"""

from __future__ import annotations

from typing import Iterable, Iterator

import structlog

from dedup.models import FileRecord

logger = structlog.get_logger(__name__)

SizeBuckets = dict[int, list[FileRecord]]


def is_candidate(record: FileRecord) -> bool:
    """Symlinks and empty files are excluded unconditionally."""
    return not record.is_symlink and record.size > 0


def bucket_by_size(records: Iterable[FileRecord]) -> SizeBuckets:
    """
    Group records by exact byte size, keeping discovery order inside each bucket.

    Args:
        records: Stream of FileRecords from all partitions

    Returns:
        Mapping size -> records, including single-member buckets
    """
    buckets: SizeBuckets = {}
    for record in records:
        if not is_candidate(record):
            continue
        buckets.setdefault(record.size, []).append(record)
    return buckets


def candidate_buckets(buckets: SizeBuckets) -> Iterator[tuple[int, list[FileRecord]]]:
    """Yield (size, records) for every bucket that may hold duplicates."""
    for size, records in buckets.items():
        if len(records) >= 2:
            yield size, records


def potential_duplicates(buckets: SizeBuckets) -> int:
    """Upper bound on duplicates: every candidate bucket minus one keeper."""
    return sum(len(records) - 1 for _, records in candidate_buckets(buckets))
