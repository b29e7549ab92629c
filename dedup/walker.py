"""
Partition walker: yields a FileRecord for every file under the scan roots.

Features:
- os.walk traversal, symlinks reported but never followed
- lstat metadata (size, mtime, symlink flag)
- Per-entry errors logged and skipped
- Unwalkable roots logged, remaining roots still scanned
- A file reached twice (repeated or nested roots) is recorded once
"""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Iterable, Iterator, Optional

import structlog

from dedup.models import FileRecord

logger = structlog.get_logger(__name__)


def partition_of(path: Path) -> str:
    """
    Volume name of a path ("C:" or "\\\\server\\share" on Windows, "" on POSIX).

    Used only as an ordering hint. Never raises.
    """
    try:
        drive, _ = os.path.splitdrive(os.path.abspath(path))
    except (OSError, ValueError):
        return ""
    return drive


class PartitionWalker:
    """
    Walk every root and produce FileRecords in discovery order.

    Directories are never yielded. Symlinks are yielded with is_symlink=True
    so the bucketer can drop them.
    """

    def __init__(self, roots: Iterable[Path], verbose: bool = False):
        """
        Initialize walker.

        Args:
            roots: Directories (or single files) to scan
            verbose: Log each root as it is scanned
        """
        self.roots = [Path(r) for r in roots]
        self.verbose = verbose
        self.errors: int = 0
        self.files_seen: int = 0
        self._seen: set[str] = set()

    def __iter__(self) -> Iterator[FileRecord]:
        for root in self.roots:
            yield from self.walk_root(root)

    def walk_root(self, root: Path) -> Iterator[FileRecord]:
        """Yield records for a single root. An unreadable root yields nothing."""
        root = Path(os.path.abspath(root))
        if self.verbose:
            logger.info("dedup_scanning_partition", partition=str(root))
        try:
            root_stat = os.stat(root)
        except OSError as e:
            self.errors += 1
            logger.warning("dedup_partition_walk_failed", partition=str(root), error=str(e))
            return

        if not stat.S_ISDIR(root_stat.st_mode):
            record = self._record(root)
            if record is not None:
                yield record
            return

        for dirpath, _dirnames, filenames in os.walk(root, onerror=self._on_walk_error):
            for filename in filenames:
                record = self._record(Path(dirpath) / filename)
                if record is not None:
                    yield record

    def _record(self, path: Path) -> Optional[FileRecord]:
        try:
            st = os.lstat(path)
        except OSError as e:
            self.errors += 1
            logger.warning("dedup_scan_entry_error", path=str(path), error=str(e))
            return None

        if stat.S_ISDIR(st.st_mode):
            return None

        key = self._identity(path)
        if key in self._seen:
            logger.debug("dedup_scan_path_already_seen", path=str(path))
            return None
        self._seen.add(key)

        self.files_seen += 1
        return FileRecord(
            path=path,
            size=st.st_size,
            mtime=st.st_mtime,
            partition=partition_of(path),
            is_symlink=stat.S_ISLNK(st.st_mode),
        )

    @staticmethod
    def _identity(path: Path) -> str:
        """Canonical location of a directory entry. The entry itself is not dereferenced."""
        return os.path.normcase(os.path.join(os.path.realpath(path.parent), path.name))

    def _on_walk_error(self, error: OSError) -> None:
        self.errors += 1
        logger.warning("dedup_scan_entry_error", path=str(error.filename), error=str(error))
