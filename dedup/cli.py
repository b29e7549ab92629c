#!/usr/bin/env python3
"""
Command line entry point for partition-dedup.

Usage:
    partition-dedup --partitions /data:/backup --dry-run
    partition-dedup --partitions /data:/backup --confirm --verbose
    partition-dedup --partitions /data --report duplicates.csv
"""

from __future__ import annotations

import argparse
import functools
import os
import sys
from pathlib import Path
from typing import Optional, Sequence

from config.exceptions import ConfigurationError
from config.logging import configure_logging
from config.settings import get_settings
from dedup.hasher import hash_file
from dedup.models import RunOptions
from dedup.pipeline import DedupPipeline
from dedup.report_generator import ReportGenerator


def build_parser() -> argparse.ArgumentParser:
    """Argument parser (single command, no subcommands)."""
    parser = argparse.ArgumentParser(
        prog="partition-dedup",
        description="Find byte-identical files across partitions and delete all but one copy",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  partition-dedup --partitions /data{os.pathsep}/backup --dry-run
  partition-dedup --partitions /data --confirm
        """,
    )
    parser.add_argument(
        "--partitions",
        default="",
        help=f"'{os.pathsep}'-separated list of directories to scan (required)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be deleted without actually deleting",
    )
    parser.add_argument(
        "--confirm",
        action="store_true",
        help="Require confirmation before each deletion",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show detailed progress on stderr",
    )
    parser.add_argument(
        "--report",
        type=Path,
        default=None,
        help="Also write a CSV report of every duplicate group",
    )
    return parser


def parse_options(argv: Optional[Sequence[str]] = None) -> RunOptions:
    """
    Parse and validate the command line.

    Raises:
        ConfigurationError: If no partition was given
    """
    args = build_parser().parse_args(argv)
    return RunOptions.from_partition_list(
        args.partitions,
        dry_run=args.dry_run,
        confirm=args.confirm,
        verbose=args.verbose,
        report_path=args.report,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main CLI entry point. Returns the process exit status."""
    try:
        settings = get_settings()
        options = parse_options(argv)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    level = settings.log_level or ("INFO" if options.verbose else "WARNING")
    configure_logging(level=level, json_format=settings.log_format == "json")

    pipeline = DedupPipeline(
        options,
        hash_function=functools.partial(hash_file, chunk_size=settings.chunk_size),
        reporter=ReportGenerator(digest_prefix_length=settings.digest_prefix_length),
    )

    try:
        pipeline.run()
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user", file=sys.stderr)
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
