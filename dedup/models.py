"""
Pydantic models for the dedup pipeline.

Models:
- FileRecord: Metadata snapshot of one scanned file
- DuplicateGroup: Keeper + duplicates sharing one SHA256 digest
- DuplicateOutcome: Final disposition of one duplicate
- RunStatistics: Counters accumulated over the whole run
- RunOptions: Validated command line options
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from config.exceptions import ConfigurationError

BYTES_PER_MEGABYTE = 1024 * 1024


class Disposition(str, Enum):
    """Lifecycle state of a duplicate file within one run."""

    identified = "identified"
    reported = "reported"
    skipped = "skipped"
    deleted = "deleted"
    delete_failed = "delete_failed"


class FileRecord(BaseModel):
    """Single file as seen during traversal. Not re-validated until deletion."""

    path: Path
    size: int = Field(ge=0)
    mtime: float
    partition: str = ""
    is_symlink: bool = False

    model_config = {"frozen": True}


class DuplicateGroup(BaseModel):
    """Ordered group of byte-identical files (same SHA256)."""

    digest: str
    keeper: FileRecord
    duplicates: list[FileRecord] = Field(default_factory=list)

    def short_digest(self, length: int = 8) -> str:
        return self.digest[:length]

    @property
    def members(self) -> list[FileRecord]:
        return [self.keeper, *self.duplicates]


class DuplicateOutcome(BaseModel):
    """What happened to one duplicate."""

    record: FileRecord
    disposition: Disposition = Disposition.identified
    error: Optional[str] = None


class RunStatistics(BaseModel):
    """
    Run-wide counters.

    duplicates_found and bytes_reclaimable count every identified duplicate,
    whether or not it was actually removed. files_deleted and bytes_deleted
    count confirmed removals only.
    """

    files_hashed: int = 0
    duplicate_groups: int = 0
    duplicates_found: int = 0
    bytes_reclaimable: int = 0
    files_deleted: int = 0
    bytes_deleted: int = 0
    files_skipped: int = 0
    delete_failures: int = 0
    hash_failures: int = 0
    scan_errors: int = 0

    @property
    def megabytes_reclaimable(self) -> int:
        return self.bytes_reclaimable // BYTES_PER_MEGABYTE


class RunOptions(BaseModel):
    """Validated options for one run."""

    partitions: list[Path]
    dry_run: bool = False
    confirm: bool = False
    verbose: bool = False
    report_path: Optional[Path] = None

    @field_validator("partitions")
    @classmethod
    def validate_partitions(cls, v: list[Path]) -> list[Path]:
        """At least one root is needed."""
        if not v:
            raise ValueError("no partitions given")
        return v

    @classmethod
    def from_partition_list(cls, partitions: Optional[str], **kwargs) -> "RunOptions":
        """
        Build options from an os.pathsep separated partition list.

        Raises:
            ConfigurationError: If the list is missing or contains no root
        """
        roots = split_partition_list(partitions)
        if not roots:
            raise ConfigurationError(
                "Please specify partitions/directories to scan using --partitions"
            )
        return cls(partitions=roots, **kwargs)


def split_partition_list(partitions: Optional[str]) -> list[Path]:
    """Split an os.pathsep separated list, dropping empty entries."""
    if not partitions:
        return []
    return [Path(p) for p in partitions.split(os.pathsep) if p.strip()]
