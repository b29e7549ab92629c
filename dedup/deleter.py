"""
Deletion of duplicate files with dry-run and confirmation modes.

Per duplicate: Identified -> Reported -> (Skipped | Deleted | DeleteFailed).
No retries. The keeper of a group is never touched.

Every identified duplicate is counted in duplicates_found and
bytes_reclaimable, even when it is skipped or its deletion fails, so a
dry-run shows the same savings as a real run.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Callable, Optional, TextIO

import structlog

from config.exceptions import DeletionError
from dedup.models import (
    Disposition,
    DuplicateGroup,
    DuplicateOutcome,
    FileRecord,
    RunStatistics,
)
from dedup.report_generator import ReportGenerator

logger = structlog.get_logger(__name__)

ConfirmationProvider = Callable[[Path], bool]
Remover = Callable[[Path], None]

ACCEPTED_ANSWERS = ("y", "Y")


class PromptConfirmation:
    """Interactive yes/no on a pair of text streams (stdin/stdout by default)."""

    def __init__(self, input_stream: Optional[TextIO] = None, output_stream: Optional[TextIO] = None):
        self.input_stream = input_stream
        self.output_stream = output_stream

    def __call__(self, path: Path) -> bool:
        out = self.output_stream or sys.stdout
        out.write(f"Delete {path}? (y/N) ")
        out.flush()
        answer = (self.input_stream or sys.stdin).readline().strip()
        return answer in ACCEPTED_ANSWERS


def remove_file(path: Path) -> None:
    """
    Unlink one file.

    Raises:
        DeletionError: On permission error, missing file or any other OSError
    """
    try:
        os.remove(path)
    except OSError as e:
        raise DeletionError(path, e) from e


class DeletionExecutor:
    """
    Apply the dry-run / confirm policy to every duplicate of a group.

    Modes:
    - dry_run: report only, confirm is ignored
    - confirm: ask the confirmation provider before each deletion
    - otherwise: delete unconditionally
    """

    def __init__(
        self,
        dry_run: bool = False,
        confirm: bool = False,
        confirmation: Optional[ConfirmationProvider] = None,
        remover: Optional[Remover] = None,
        reporter: Optional[ReportGenerator] = None,
        stats: Optional[RunStatistics] = None,
    ):
        """
        Initialize executor.

        Args:
            dry_run: Never delete anything
            confirm: Ask before each deletion (ignored with dry_run)
            confirmation: path -> bool, PromptConfirmation() by default
            remover: path -> None, raises DeletionError on failure
            reporter: Receives Duplicate/Deleted lines
            stats: Shared run statistics
        """
        self.dry_run = dry_run
        self.confirm = confirm
        self.confirmation = confirmation or PromptConfirmation()
        self.remover = remover or remove_file
        self.reporter = reporter or ReportGenerator()
        self.stats = stats if stats is not None else RunStatistics()

    def process(self, group: DuplicateGroup) -> list[DuplicateOutcome]:
        """
        Handle every duplicate of one group.

        Args:
            group: Ordered group (keeper + duplicates)

        Returns:
            One DuplicateOutcome per duplicate, in group order
        """
        self.stats.duplicate_groups += 1
        return [self._handle(entry) for entry in group.duplicates]

    def _handle(self, entry: FileRecord) -> DuplicateOutcome:
        outcome = DuplicateOutcome(record=entry)

        self.stats.duplicates_found += 1
        self.stats.bytes_reclaimable += entry.size
        self.reporter.duplicate(entry)
        outcome.disposition = Disposition.reported

        if self.dry_run:
            return outcome

        if self.confirm and not self.confirmation(entry.path):
            self.stats.files_skipped += 1
            outcome.disposition = Disposition.skipped
            logger.debug("dedup_file_skipped", path=str(entry.path))
            return outcome

        try:
            self.remover(entry.path)
        except DeletionError as e:
            self.stats.delete_failures += 1
            outcome.disposition = Disposition.delete_failed
            outcome.error = str(e.cause)
            logger.warning("dedup_delete_failed", path=str(entry.path), error=str(e.cause))
            return outcome

        self.stats.files_deleted += 1
        self.stats.bytes_deleted += entry.size
        outcome.disposition = Disposition.deleted
        self.reporter.deleted(entry)
        logger.info("dedup_file_deleted", path=str(entry.path), size_bytes=entry.size)
        return outcome
