"""Human-readable text renderer built on rich tables.

The report is rendered into an in-memory console with colour disabled, so
the result is plain text that can be written anywhere.
"""

import io
from collections.abc import Iterable
from datetime import datetime

from rich import box
from rich.console import Console, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from filestats.core.models import (
    DirectorySummary,
    FileRecord,
    HistogramBucket,
    LogSummary,
    top,
)

TOP_N = 10
DEFAULT_WIDTH = 100

_UNITS = ["B", "KB", "MB", "GB", "TB"]


def format_size(num: int) -> str:
    """Format a byte count with a binary unit and two decimals."""
    x = float(num)
    for unit in _UNITS:
        if x < 1024.0 or unit == _UNITS[-1]:
            return f"{x:.2f} {unit}"
        x /= 1024.0
    return f"{x:.2f} {_UNITS[-1]}"


def _format_time(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


def _banner(title: str, subtitle: str) -> Panel:
    return Panel(title, subtitle=Text(subtitle) if subtitle else None)


def _key_value_table(title: str, rows: Iterable[tuple[str, str]]) -> Table:
    table = Table(title=title, title_justify="left", box=box.SIMPLE, show_header=False)
    table.add_column("name", style="bold")
    table.add_column("value", justify="right")
    for name, value in rows:
        table.add_row(name, value)
    return table


def _histogram_table(title: str, buckets: list[HistogramBucket]) -> Table:
    return _key_value_table(title, ((b.label, f"{b.count} files") for b in buckets))


def _files_table(title: str, records: list[FileRecord]) -> Table:
    table = Table(title=title, title_justify="left", box=box.SIMPLE)
    table.add_column("Size", justify="right", no_wrap=True)
    table.add_column("Modified", no_wrap=True)
    table.add_column("Path", overflow="fold")
    for r in records:
        table.add_row(format_size(r.size), _format_time(r.last_modified), r.path)
    return table


def _counts_table(title: str, header: str, rows: list[tuple]) -> Table:
    table = Table(title=title, title_justify="left", box=box.SIMPLE)
    table.add_column(header, overflow="fold")
    table.add_column("Count", justify="right")
    for key, count in rows:
        table.add_row(str(key), str(count))
    return table


class TextReportRenderer:
    """Renders summaries as plain-text reports.

    Args:
        width: Console width used for table layout.
    """

    def __init__(self, width: int = DEFAULT_WIDTH) -> None:
        self._width = width

    def _render(self, parts: list[RenderableType]) -> str:
        buffer = io.StringIO()
        console = Console(
            file=buffer,
            width=self._width,
            color_system=None,
            force_terminal=False,
            highlight=False,
            markup=False,
            emoji=False,
        )
        for part in parts:
            console.print(part)
        return buffer.getvalue()

    def render_directory(self, summary: DirectorySummary) -> str:
        parts: list[RenderableType] = [
            _banner("FILE SYSTEM ANALYSIS REPORT", summary.root),
        ]
        if summary.error:
            parts.append(f"Error: {summary.error}")
            return self._render(parts)

        parts.append(
            _key_value_table(
                "Summary",
                [
                    ("Total Files", str(summary.total_files)),
                    ("Total Directories", str(summary.total_directories)),
                    ("Total Size", format_size(summary.total_size)),
                ],
            )
        )

        types = Table(
            title=f"File Type Distribution (Top {TOP_N})",
            title_justify="left",
            box=box.SIMPLE,
        )
        types.add_column("Extension")
        types.add_column("Files", justify="right")
        types.add_column("Size", justify="right")
        for ext, count in top(summary.type_distribution_count, TOP_N):
            types.add_row(
                ext, str(count), format_size(summary.type_distribution_size.get(ext, 0))
            )
        parts.append(types)

        parts.append(_histogram_table("Size Distribution", summary.size_histogram))
        parts.append(_histogram_table("Age Distribution", summary.age_distribution))
        parts.append(_files_table("Largest Files", summary.largest_files.sorted()))
        parts.append(_files_table("Oldest Files", summary.oldest_files.sorted()))
        parts.append(_files_table("Newest Files", summary.newest_files.sorted()))

        if summary.warnings:
            parts.append(f"Warnings ({len(summary.warnings)}):")
            parts.extend(f"  {w}" for w in summary.warnings)
        if summary.cancelled:
            parts.append("Analysis was cancelled; results are partial.")
        return self._render(parts)

    def render_log(self, summary: LogSummary) -> str:
        parts: list[RenderableType] = [
            _banner("LOG ANALYSIS REPORT", summary.source),
        ]
        if summary.error:
            parts.append(f"Error: {summary.error}")
            return self._render(parts)

        parts.append(
            _key_value_table(
                "Summary",
                [
                    ("Total Requests", str(summary.total_requests)),
                    ("Total Data Sent", format_size(summary.total_bytes)),
                    ("Unique IPs", str(summary.unique_ips)),
                    ("Error Rate", f"{summary.error_rate * 100:.2f}%"),
                ],
            )
        )
        parts.append(
            _counts_table(
                "HTTP Status Distribution",
                "Status",
                sorted(summary.status_code_stats.items()),
            )
        )
        parts.append(
            _counts_table(
                "HTTP Method Breakdown", "Method", sorted(summary.method_stats.items())
            )
        )
        parts.append(
            _counts_table(
                "Top Endpoints", "Endpoint", top(summary.endpoint_stats, TOP_N)
            )
        )
        parts.append(
            _counts_table("Top IP Addresses", "Address", top(summary.ip_stats, TOP_N))
        )
        if summary.top_errors:
            parts.append(
                _counts_table(
                    "Top Error Endpoints", "Endpoint", top(summary.top_errors, TOP_N)
                )
            )
        if summary.regex_match_count > 0:
            parts.append(f"Regex Pattern Matches: {summary.regex_match_count}")
            parts.extend(f"  {line}" for line in summary.matched_lines)
        if summary.cancelled:
            parts.append("Analysis was cancelled; results are partial.")
        return self._render(parts)
