"""
Keeper selection for duplicate groups.

Orders the members of a digest group and keeps the first one:
1. Partition/volume name, ascending (empty sorts first)
2. Modification time, ascending (oldest copy is the original)

Full ties keep discovery order (sorted() is stable).
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Sequence

import structlog

from dedup.models import DuplicateGroup, FileRecord
from dedup.walker import partition_of

logger = structlog.get_logger(__name__)

SortKey = tuple[str, float]


class KeeperSelector:
    """
    Select 1 file to KEEP, order the others as duplicates.

    Metadata is re-read at ordering time unless refresh is disabled; the
    scan-time values are the fallback.
    """

    def __init__(
        self,
        refresh: bool = True,
        partition_reader: Callable[[Path], str] = partition_of,
        stat_reader: Callable[[Path], os.stat_result] = os.stat,
    ):
        self.refresh = refresh
        self.partition_reader = partition_reader
        self.stat_reader = stat_reader

    def sort_key(self, record: FileRecord) -> SortKey:
        """(partition, mtime) for one record."""
        if not self.refresh:
            return record.partition, record.mtime

        try:
            partition = self.partition_reader(record.path) or ""
        except OSError:
            partition = ""

        try:
            mtime = self.stat_reader(record.path).st_mtime
        except OSError as e:
            logger.debug("dedup_mtime_fallback", path=str(record.path), error=str(e))
            mtime = record.mtime

        return partition, mtime

    def order(self, records: Sequence[FileRecord]) -> list[FileRecord]:
        """Return a new list, keeper first."""
        return sorted(records, key=self.sort_key)

    def select(self, digest: str, records: Sequence[FileRecord]) -> DuplicateGroup:
        """
        Build the DuplicateGroup for one digest.

        Args:
            digest: Content digest shared by all records
            records: 2+ records with identical content

        Returns:
            DuplicateGroup with keeper = ordered[0]

        Raises:
            ValueError: If fewer than 2 records are given
        """
        if len(records) < 2:
            raise ValueError(f"duplicate group {digest[:8]} needs at least 2 files, got {len(records)}")

        ordered = self.order(records)
        return DuplicateGroup(digest=digest, keeper=ordered[0], duplicates=ordered[1:])
