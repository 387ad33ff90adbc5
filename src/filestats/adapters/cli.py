"""Command-line interface.

Usage:
    filestats fs <dir> [--json] [--depth N] [--min-size BYTES] ...
    filestats log <file> [--json] [--format FORMAT] [--regex PATTERN] ...
"""

import argparse
import sys
from collections.abc import Sequence
from datetime import datetime

from rich.console import Console

from filestats.adapters.logging import configure_logging
from filestats.adapters.sources import analyze_log_file
from filestats.core import directory
from filestats.core.encoding import JsonReportRenderer, TextReportRenderer
from filestats.core.errors import FileStatsError
from filestats.core.models import LogFilterOptions, LogFormat, ScanOptions
from filestats.core.ports import ReportRendererPort

EXIT_OK = 0
EXIT_FAILURE = 1


def _iso_datetime(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value).replace(tzinfo=None)
    except ValueError as exc:
        message = f"not an ISO 8601 datetime: {value!r}"
        raise argparse.ArgumentTypeError(message) from exc


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative: {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="filestats",
        description="Descriptive statistics for directory trees and web server logs.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase diagnostic output (-v info, -vv debug).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    fs = sub.add_parser("fs", help="Analyze file system statistics.")
    fs.add_argument("path", help="Directory to analyze.")
    fs.add_argument("--json", action="store_true", help="Output JSON instead of text.")
    fs.add_argument(
        "--depth", type=int, default=-1, help="Maximum depth, -1 for unlimited."
    )
    fs.add_argument(
        "--min-size",
        type=_non_negative_int,
        default=0,
        help="Ignore files smaller than this many bytes.",
    )
    fs.add_argument(
        "--include",
        action="append",
        default=[],
        metavar="GLOB",
        help="Count only files matching this glob (repeatable).",
    )
    fs.add_argument(
        "--exclude",
        action="append",
        default=[],
        metavar="GLOB",
        help="Skip files and directories matching this glob (repeatable).",
    )
    fs.add_argument(
        "--show-hidden",
        action="store_true",
        help="Include dot-files and dot-directories.",
    )
    fs.add_argument(
        "--follow-symlinks", action="store_true", help="Traverse symbolic links."
    )

    log = sub.add_parser("log", help="Analyze log file statistics.")
    log.add_argument("path", help="Log file to analyze.")
    log.add_argument("--json", action="store_true", help="Output JSON instead of text.")
    log.add_argument(
        "--format",
        choices=[f.value for f in LogFormat],
        default=LogFormat.AUTO.value,
        help="Log line format (default: auto-detect per line).",
    )
    log.add_argument("--regex", default="", help="Case-insensitive search pattern.")
    log.add_argument(
        "--status",
        action="append",
        type=int,
        default=[],
        metavar="CODE",
        help="Keep only this status code (repeatable).",
    )
    log.add_argument(
        "--errors-only", action="store_true", help="Keep only status >= 400."
    )
    log.add_argument("--since", type=_iso_datetime, help="Keep records at or after.")
    log.add_argument("--until", type=_iso_datetime, help="Keep records at or before.")
    return parser


def _renderer(use_json: bool) -> ReportRendererPort:
    return JsonReportRenderer() if use_json else TextReportRenderer()


def _run_fs(args: argparse.Namespace) -> tuple[str, str | None]:
    options = ScanOptions(
        max_depth=args.depth,
        include_patterns=args.include,
        exclude_patterns=args.exclude,
        min_size_threshold=args.min_size,
        skip_hidden=not args.show_hidden,
        follow_symlinks=args.follow_symlinks,
    )
    summary = directory.analyze(args.path, options)
    return _renderer(args.json).render_directory(summary), summary.error


def _run_log(args: argparse.Namespace) -> tuple[str, str | None]:
    options = LogFilterOptions(
        status_codes=args.status,
        pattern_regex=args.regex,
        error_only=args.errors_only,
        start_time=args.since,
        end_time=args.until,
    )
    summary = analyze_log_file(args.path, LogFormat(args.format), options)
    return _renderer(args.json).render_log(summary), summary.error


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line and return the process exit status."""
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    err = Console(stderr=True, highlight=False)

    runner = _run_fs if args.command == "fs" else _run_log
    try:
        report, error = runner(args)
    except FileStatsError as exc:
        err.print(f"Error: {exc}", markup=False)
        return EXIT_FAILURE

    sys.stdout.write(report)
    if not report.endswith("\n"):
        sys.stdout.write("\n")
    if error is not None:
        err.print(f"Error: {error}", markup=False)
        return EXIT_FAILURE
    return EXIT_OK
