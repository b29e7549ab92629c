"""
Dedup pipeline: walk -> size buckets -> digest groups -> keeper -> deletion.

Stages run strictly one after another: traversal finishes before any
hashing starts, and all hashing finishes before the first deletion.
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Iterable, Optional

import structlog

from dedup.deleter import ConfirmationProvider, DeletionExecutor, Remover
from dedup.hasher import HashFunction, HashGrouper
from dedup.models import DuplicateGroup, DuplicateOutcome, FileRecord, RunOptions, RunStatistics
from dedup.priority_engine import KeeperSelector
from dedup.report_generator import ReportGenerator
from dedup.scanner import bucket_by_size, potential_duplicates
from dedup.walker import PartitionWalker

logger = structlog.get_logger(__name__)


class DedupPipeline:
    """
    One dedup run over a set of partitions.

    Collaborators (hash function, confirmation, remover, reporter) are
    injectable; defaults touch the real filesystem and terminal.
    """

    def __init__(
        self,
        options: RunOptions,
        hash_function: Optional[HashFunction] = None,
        confirmation: Optional[ConfirmationProvider] = None,
        remover: Optional[Remover] = None,
        reporter: Optional[ReportGenerator] = None,
        selector: Optional[KeeperSelector] = None,
    ):
        self.options = options
        self.stats = RunStatistics()
        self.reporter = reporter or ReportGenerator()
        self.selector = selector or KeeperSelector()
        self.grouper = HashGrouper(
            hash_function=hash_function,
            stats=self.stats,
            verbose=options.verbose,
        )
        self.executor = DeletionExecutor(
            dry_run=options.dry_run,
            confirm=options.confirm,
            confirmation=confirmation,
            remover=remover,
            reporter=self.reporter,
            stats=self.stats,
        )
        self.results: list[tuple[DuplicateGroup, list[DuplicateOutcome]]] = []
        self.files_seen: int = 0

    def scan(self) -> list[FileRecord]:
        """Walk every partition to completion."""
        walker = PartitionWalker(self.options.partitions, verbose=self.options.verbose)
        records = list(walker)
        self.stats.scan_errors = walker.errors
        self.files_seen = walker.files_seen
        return records

    def run(self) -> RunStatistics:
        """
        Execute the whole pipeline and print the report.

        Returns:
            RunStatistics for the run
        """
        start = time.monotonic()
        verbose = self.options.verbose

        records = self.scan()
        buckets = bucket_by_size(records)
        if verbose:
            logger.info(
                "dedup_scan_completed",
                files=self.files_seen,
                scan_errors=self.stats.scan_errors,
                distinct_sizes=len(buckets),
                elapsed_seconds=round(time.monotonic() - start, 3),
            )
            logger.info("dedup_size_candidates", potential_duplicates=potential_duplicates(buckets))

        digest_groups = self.grouper.group(buckets)
        if verbose:
            logger.info(
                "dedup_hashing_completed",
                files_hashed=self.stats.files_hashed,
                duplicate_groups=len(digest_groups),
                elapsed_seconds=round(time.monotonic() - start, 3),
            )

        self.process_groups(digest_groups.items())

        self.reporter.summary(self.stats, dry_run=self.options.dry_run)
        if self.options.report_path is not None:
            self.write_report(self.options.report_path)

        if verbose:
            logger.info(
                "dedup_run_completed",
                duplicates_found=self.stats.duplicates_found,
                files_deleted=self.stats.files_deleted,
                delete_failures=self.stats.delete_failures,
                elapsed_seconds=round(time.monotonic() - start, 3),
            )
        return self.stats

    def write_report(self, output_path: Path) -> Optional[Path]:
        """CSV export. A write failure is logged, the run still succeeds."""
        try:
            return self.reporter.write_csv(self.results, output_path)
        except OSError as e:
            logger.warning("dedup_report_failed", path=str(output_path), error=str(e))
            return None

    def process_groups(self, digest_groups: Iterable[tuple[str, list[FileRecord]]]) -> None:
        """Order each digest group, print its header and run the deletion policy."""
        for digest, members in digest_groups:
            group = self.selector.select(digest, members)
            self.reporter.group_header(group)
            outcomes = self.executor.process(group)
            self.results.append((group, outcomes))
