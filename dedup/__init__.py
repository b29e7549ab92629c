"""
partition-dedup: find and remove byte-identical files across partitions.

Modules:
- walker: FileRecord source over the scan roots
- scanner: Size bucketing (first filter)
- hasher: SHA256 content hashing and digest grouping (second filter)
- priority_engine: Keeper selection (partition, then oldest mtime)
- deleter: Dry-run / confirm / delete policy
- report_generator: Text report, summary and CSV export
- pipeline: Orchestration of one run
- models: Pydantic data models
"""

from dedup.models import (
    Disposition,
    DuplicateGroup,
    DuplicateOutcome,
    FileRecord,
    RunOptions,
    RunStatistics,
)

__version__ = "1.0.0"

__all__ = [
    "Disposition",
    "DuplicateGroup",
    "DuplicateOutcome",
    "FileRecord",
    "RunOptions",
    "RunStatistics",
]
