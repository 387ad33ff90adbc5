"""JSON renderer for directory and log summaries."""

import json
from datetime import datetime
from typing import Any

from filestats.core.models import DirectorySummary, FileRecord, LogSummary, top

TOP_N = 10


def _file_entry(record: FileRecord) -> dict[str, Any]:
    return {
        "path": record.path,
        "size": record.size,
        "extension": record.extension,
        "last_modified": datetime.fromtimestamp(record.last_modified).isoformat(),
    }


def directory_document(summary: DirectorySummary) -> dict[str, Any]:
    """Build the plain-dict form of a directory summary."""
    return {
        "root": summary.root,
        "summary": {
            "total_files": summary.total_files,
            "total_directories": summary.total_directories,
            "total_size": summary.total_size,
        },
        "type_distribution": {
            ext: {"count": count, "size": summary.type_distribution_size.get(ext, 0)}
            for ext, count in top(
                summary.type_distribution_count, len(summary.type_distribution_count)
            )
        },
        "size_distribution": {b.label: b.count for b in summary.size_histogram},
        "age_distribution": {b.label: b.count for b in summary.age_distribution},
        "largest_files": [_file_entry(r) for r in summary.largest_files.sorted()],
        "oldest_files": [_file_entry(r) for r in summary.oldest_files.sorted()],
        "newest_files": [_file_entry(r) for r in summary.newest_files.sorted()],
        "warnings": list(summary.warnings),
        "error": summary.error,
        "cancelled": summary.cancelled,
    }


def log_document(summary: LogSummary) -> dict[str, Any]:
    """Build the plain-dict form of a log summary.

    Status codes become string keys, as JSON object keys must be strings.
    """
    return {
        "source": summary.source,
        "summary": {
            "total_requests": summary.total_requests,
            "total_bytes": summary.total_bytes,
            "unique_ips": summary.unique_ips,
            "error_rate": summary.error_rate,
        },
        "status_codes": {
            str(code): count
            for code, count in sorted(summary.status_code_stats.items())
        },
        "methods": dict(sorted(summary.method_stats.items())),
        "top_endpoints": dict(top(summary.endpoint_stats, TOP_N)),
        "top_ips": dict(top(summary.ip_stats, TOP_N)),
        "top_errors": dict(top(summary.top_errors, TOP_N)),
        "pattern_matches": {
            "count": summary.regex_match_count,
            "lines": list(summary.matched_lines),
        },
        "error": summary.error,
        "cancelled": summary.cancelled,
    }


class JsonReportRenderer:
    """Renders summaries as indented JSON documents."""

    def __init__(self, indent: int = 4) -> None:
        self._indent = indent

    def render_directory(self, summary: DirectorySummary) -> str:
        return json.dumps(directory_document(summary), indent=self._indent)

    def render_log(self, summary: LogSummary) -> str:
        return json.dumps(log_document(summary), indent=self._indent)
