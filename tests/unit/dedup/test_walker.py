"""
Unit tests for PartitionWalker.

Tests:
- Records for nested files (absolute path, size, mtime)
- Symlinks flagged, never followed
- Unwalkable root logged, other roots still scanned
- Per-entry lstat failure logged and skipped
"""

import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from structlog.testing import capture_logs

from dedup.walker import PartitionWalker, partition_of


class TestPartitionWalker:
    """Traversal of scan roots."""

    def test_yields_nested_files(self, tmp_path, make_file):
        make_file(tmp_path / "a.txt", b"hello", mtime=1_000_000)
        make_file(tmp_path / "sub" / "deeper" / "b.bin", b"x" * 300, mtime=2_000_000)

        records = {r.path.name: r for r in PartitionWalker([tmp_path])}

        assert set(records) == {"a.txt", "b.bin"}
        assert records["a.txt"].size == 5
        assert records["a.txt"].mtime == pytest.approx(1_000_000)
        assert records["b.bin"].size == 300
        assert records["b.bin"].path.is_absolute()
        assert records["b.bin"].is_symlink is False

    def test_directories_are_not_records(self, tmp_path, make_file):
        (tmp_path / "empty_dir").mkdir()
        make_file(tmp_path / "file.txt", b"data")

        records = list(PartitionWalker([tmp_path]))

        assert [r.path.name for r in records] == ["file.txt"]

    @pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges on Windows")
    def test_symlink_flagged(self, tmp_path, make_file):
        target = make_file(tmp_path / "target.txt", b"content")
        (tmp_path / "link.txt").symlink_to(target)

        records = {r.path.name: r for r in PartitionWalker([tmp_path])}

        assert records["link.txt"].is_symlink is True
        assert records["target.txt"].is_symlink is False

    @pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges on Windows")
    def test_symlinked_directory_not_followed(self, tmp_path, make_file):
        outside = tmp_path / "outside"
        make_file(outside / "inner.txt", b"inner")
        root = tmp_path / "root"
        root.mkdir()
        (root / "linked_dir").symlink_to(outside, target_is_directory=True)

        records = list(PartitionWalker([root]))

        assert records == []

    def test_missing_root_logged_and_others_continue(self, tmp_path, make_file):
        good = tmp_path / "good"
        make_file(good / "kept.txt", b"data")
        missing = tmp_path / "does_not_exist"

        walker = PartitionWalker([missing, good])
        with capture_logs() as logs:
            records = list(walker)

        assert [r.path.name for r in records] == ["kept.txt"]
        assert walker.errors == 1
        failures = [log for log in logs if log["event"] == "dedup_partition_walk_failed"]
        assert len(failures) == 1
        assert failures[0]["partition"] == str(missing)

    def test_root_that_is_a_file(self, tmp_path, make_file):
        single = make_file(tmp_path / "single.txt", b"just me")

        records = list(PartitionWalker([single]))

        assert len(records) == 1
        assert records[0].path == single

    def test_lstat_failure_skips_entry(self, tmp_path, make_file):
        make_file(tmp_path / "ok.txt", b"fine")
        broken = make_file(tmp_path / "broken.txt", b"gone")
        real_lstat = os.lstat

        def flaky_lstat(path, *args, **kwargs):
            if Path(path) == broken:
                raise PermissionError(13, "Permission denied", str(path))
            return real_lstat(path, *args, **kwargs)

        walker = PartitionWalker([tmp_path])
        with patch("dedup.walker.os.lstat", side_effect=flaky_lstat), capture_logs() as logs:
            records = list(walker)

        assert [r.path.name for r in records] == ["ok.txt"]
        assert walker.errors == 1
        assert any(
            log["event"] == "dedup_scan_entry_error" and log["path"] == str(broken) for log in logs
        )

    def test_walk_error_callback_counts(self, tmp_path):
        walker = PartitionWalker([tmp_path])

        with capture_logs() as logs:
            walker._on_walk_error(PermissionError(13, "Permission denied", "/locked"))

        assert walker.errors == 1
        assert logs[0]["event"] == "dedup_scan_entry_error"
        assert logs[0]["path"] == "/locked"


class TestPartitionOf:
    """Volume name lookup."""

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX has no drive letters")
    def test_empty_on_posix(self, tmp_path):
        assert partition_of(tmp_path / "file.txt") == ""

    def test_never_raises(self):
        with patch("dedup.walker.os.path.abspath", side_effect=ValueError("bad path")):
            assert partition_of(Path("whatever")) == ""


class TestRepeatedRoots:
    """A file reachable from several roots is recorded once."""

    def test_same_root_twice(self, tmp_path, make_file):
        only = make_file(tmp_path / "only.txt", b"single copy")

        walker = PartitionWalker([tmp_path, tmp_path])
        records = list(walker)

        assert [r.path for r in records] == [only]
        assert walker.files_seen == 1

    def test_nested_root(self, tmp_path, make_file):
        only = make_file(tmp_path / "sub" / "only.txt", b"single copy")

        with capture_logs() as logs:
            records = list(PartitionWalker([tmp_path, tmp_path / "sub"]))

        assert [r.path for r in records] == [only]
        skipped = [log for log in logs if log["event"] == "dedup_scan_path_already_seen"]
        assert len(skipped) == 1
        assert skipped[0]["log_level"] == "debug"

    def test_root_given_as_file_inside_scanned_dir(self, tmp_path, make_file):
        only = make_file(tmp_path / "only.txt", b"single copy")

        records = list(PartitionWalker([tmp_path, only]))

        assert [r.path for r in records] == [only]

    @pytest.mark.skipif(sys.platform == "win32", reason="symlinks need privileges on Windows")
    def test_root_reached_through_symlinked_alias(self, tmp_path, make_file):
        real = tmp_path / "real"
        make_file(real / "only.txt", b"single copy")
        alias = tmp_path / "alias"
        alias.symlink_to(real, target_is_directory=True)

        records = list(PartitionWalker([real, alias]))

        assert [r.path.name for r in records] == ["only.txt"]

    def test_verbose_logs_each_root(self, tmp_path):
        with capture_logs() as logs:
            list(PartitionWalker([tmp_path], verbose=True))

        assert {"event": "dedup_scanning_partition", "partition": str(tmp_path), "log_level": "info"} in logs
