"""
Shared pytest fixtures for partition-dedup.

- Repo root on sys.path (tests run without an editable install too)
- structlog / settings reset between tests
- Helpers to create files with a fixed mtime and FileRecords
"""

import os
import sys
from pathlib import Path

import pytest
import structlog

repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from config.settings import get_settings  # noqa: E402
from dedup.models import FileRecord  # noqa: E402


@pytest.fixture(autouse=True)
def reset_runtime_state():
    """Each test starts with default structlog config and fresh settings."""
    get_settings.cache_clear()
    yield
    structlog.reset_defaults()
    get_settings.cache_clear()


@pytest.fixture
def make_file():
    """
    Create a file with given content and modification time.

    Usage:
        path = make_file(tmp_path / "a.txt", b"content", mtime=1_000_000)
    """

    def _make(path: Path, content: bytes, mtime: float = None) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        if mtime is not None:
            os.utime(path, (mtime, mtime))
        return path

    return _make


@pytest.fixture
def make_record():
    """Build a FileRecord without touching the filesystem."""

    def _make(path, size: int = 100, mtime: float = 0.0, partition: str = "", is_symlink: bool = False):
        return FileRecord(
            path=Path(path),
            size=size,
            mtime=mtime,
            partition=partition,
            is_symlink=is_symlink,
        )

    return _make
