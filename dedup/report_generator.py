"""
Text and CSV reports for dedup runs.

The text report goes to stdout as the run progresses (one block per
duplicate group, then a summary). The optional CSV report lists every file
of every group with its final disposition.
"""

from __future__ import annotations

import csv
import sys
from pathlib import Path
from typing import Iterable, Optional, TextIO

import structlog

from dedup.models import DuplicateGroup, DuplicateOutcome, FileRecord, RunStatistics

logger = structlog.get_logger(__name__)

DRY_RUN_BANNER = "**RUN IN DRY-RUN MODE - NO FILES WERE DELETED**"


class ReportGenerator:
    """
    Write the human-readable report.

    Features:
    - Group header with short digest
    - Keeper / Duplicate / Deleted lines
    - Summary with truncated megabytes and dry-run banner
    - CSV export of all groups
    """

    CSV_COLUMNS = [
        "digest",
        "role",
        "path",
        "size_bytes",
        "mtime",
        "partition",
        "disposition",
    ]

    def __init__(self, stream: Optional[TextIO] = None, digest_prefix_length: int = 8):
        """
        Initialize report generator.

        Args:
            stream: Output stream (stdout when None, resolved at write time)
            digest_prefix_length: Hex chars of the digest shown in headers
        """
        self.stream = stream
        self.digest_prefix_length = digest_prefix_length

    def _write(self, line: str = "") -> None:
        out = self.stream or sys.stdout
        out.write(line + "\n")
        out.flush()

    def group_header(self, group: DuplicateGroup) -> None:
        self._write()
        self._write(f"Duplicate group ({group.short_digest(self.digest_prefix_length)}):")
        self._write(f"  Keeper: {group.keeper.path}")

    def duplicate(self, record: FileRecord) -> None:
        self._write(f"  Duplicate: {record.path}")

    def deleted(self, record: FileRecord) -> None:
        self._write(f"Deleted {record.path}")

    def summary(self, stats: RunStatistics, dry_run: bool) -> None:
        """Final block. Space is whole megabytes, truncated."""
        self._write()
        self._write("Summary:")
        self._write(f"\tTotal files processed: {stats.files_hashed}")
        self._write(f"\tTotal duplicates found: {stats.duplicates_found}")
        self._write(f"\tPotential space saved: {stats.megabytes_reclaimable} MB")
        if dry_run:
            self._write()
            self._write(f"\t{DRY_RUN_BANNER}")

    def write_csv(
        self,
        results: Iterable[tuple[DuplicateGroup, list[DuplicateOutcome]]],
        output_path: Path,
    ) -> Path:
        """
        Generate CSV report file.

        Args:
            results: (group, outcomes) pairs as produced by the pipeline
            output_path: Where to save the CSV file

        Returns:
            Path to generated CSV file
        """
        output_path.parent.mkdir(parents=True, exist_ok=True)
        rows = 0

        with open(output_path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=self.CSV_COLUMNS)
            writer.writeheader()

            for group, outcomes in results:
                writer.writerow(self._row(group.digest, "keeper", group.keeper, "kept"))
                rows += 1
                for outcome in outcomes:
                    writer.writerow(
                        self._row(group.digest, "duplicate", outcome.record, outcome.disposition.value)
                    )
                    rows += 1

        logger.info("dedup_report_generated", output_path=str(output_path), rows=rows)
        return output_path

    @staticmethod
    def _row(digest: str, role: str, record: FileRecord, disposition: str) -> dict:
        return {
            "digest": digest,
            "role": role,
            "path": str(record.path),
            "size_bytes": record.size,
            "mtime": record.mtime,
            "partition": record.partition,
            "disposition": disposition,
        }
