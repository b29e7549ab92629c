"""
Content hashing and digest grouping (second filter of the dedup pipeline).

Every member of a candidate size bucket is read in full and grouped by
SHA256. A file that cannot be read is dropped from every later stage.
"""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Callable, Optional

import structlog

from config.exceptions import HashError
from dedup.models import FileRecord, RunStatistics
from dedup.scanner import SizeBuckets, candidate_buckets

logger = structlog.get_logger(__name__)

DEFAULT_CHUNK_SIZE = 65536

DigestGroups = dict[str, list[FileRecord]]
HashFunction = Callable[[Path], str]


def hash_file(file_path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """
    Compute SHA256 hash of the whole file (chunked for memory efficiency).

    Args:
        file_path: File to hash
        chunk_size: Bytes read per iteration

    Returns:
        Hex digest string (64 chars)

    Raises:
        HashError: If the file cannot be opened or read
    """
    sha256 = hashlib.sha256()
    try:
        with open(file_path, "rb") as f:
            while chunk := f.read(chunk_size):
                sha256.update(chunk)
    except OSError as e:
        raise HashError(file_path, e) from e
    return sha256.hexdigest()


class HashGrouper:
    """
    Hash candidate buckets and group records by digest.

    Hashing is sequential. The hash function is injectable so tests can
    substitute a deterministic fake.
    """

    def __init__(
        self,
        hash_function: Optional[HashFunction] = None,
        stats: Optional[RunStatistics] = None,
        verbose: bool = False,
    ):
        """
        Initialize grouper.

        Args:
            hash_function: path -> digest, raises HashError on failure
            stats: Shared run statistics (files_hashed, hash_failures)
            verbose: Log one progress line per bucket
        """
        self.hash_function = hash_function or hash_file
        self.stats = stats if stats is not None else RunStatistics()
        self.verbose = verbose

    def group(self, buckets: SizeBuckets) -> DigestGroups:
        """
        Hash every member of every candidate bucket.

        Returns:
            Mapping digest -> records, only digests with 2+ members
        """
        groups: DigestGroups = {}

        for size, records in candidate_buckets(buckets):
            if self.verbose:
                logger.info("dedup_hashing_bucket", files=len(records), size_bytes=size)

            for record in records:
                digest = self._digest(record)
                if digest is None:
                    continue
                groups.setdefault(digest, []).append(record)
                self.stats.files_hashed += 1

        return {digest: members for digest, members in groups.items() if len(members) >= 2}

    def _digest(self, record: FileRecord) -> Optional[str]:
        try:
            return self.hash_function(record.path)
        except HashError as e:
            self.stats.hash_failures += 1
            logger.warning("dedup_hash_failed", path=str(record.path), error=str(e.cause))
            return None
