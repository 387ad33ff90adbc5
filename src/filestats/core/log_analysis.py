"""Log aggregator.

Streams raw lines through pattern search, parsing, filtering and tallying.
Only the set of distinct client addresses grows with the input; everything
else is a counter or a mapping keyed by a low-cardinality field.
"""

import logging
import re
from collections.abc import Callable, Iterable

from filestats.core.errors import InvalidPatternError
from filestats.core.models import (
    MAX_MATCHED_LINES,
    LogFilterOptions,
    LogFormat,
    LogRecord,
    LogSummary,
)
from filestats.core.parsing import parse_line, parse_timestamp

logger = logging.getLogger(__name__)

ERROR_STATUS = 400


def compile_pattern(pattern: str) -> re.Pattern[str] | None:
    """Compile a case-insensitive search pattern, or return None if empty.

    Raises:
        InvalidPatternError: If the pattern is not a valid regular expression.
    """
    if not pattern:
        return None
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        raise InvalidPatternError(pattern, str(exc)) from exc


def passes_filters(record: LogRecord, options: LogFilterOptions) -> bool:
    """Return True when ``record`` satisfies every active filter."""
    if options.error_only and record.status_code < ERROR_STATUS:
        return False
    if options.status_codes and record.status_code not in options.status_codes:
        return False
    if options.has_time_range:
        when = parse_timestamp(record.timestamp_str)
        if when is None:
            return False
        if options.start_time is not None and when < options.start_time:
            return False
        if options.end_time is not None and when > options.end_time:
            return False
    return True


def _increment(counts: dict, key) -> None:
    counts[key] = counts.get(key, 0) + 1


class LogAggregator:
    """Running tallies for one log stream.

    Args:
        options: Filters and search pattern.
        source: Label of the stream, copied into the summary.

    Raises:
        InvalidPatternError: If the search pattern does not compile.
    """

    def __init__(self, options: LogFilterOptions, source: str = "<lines>") -> None:
        self._options = options
        self._pattern = compile_pattern(options.pattern_regex)
        self._summary = LogSummary(source=source)
        self._addresses: set[str] = set()
        self._errors = 0

    def search(self, line: str) -> None:
        """Record ``line`` if it matches the search pattern."""
        if self._pattern is None or not self._pattern.search(line):
            return
        self._summary.regex_match_count += 1
        if len(self._summary.matched_lines) < MAX_MATCHED_LINES:
            self._summary.matched_lines.append(line)

    def tally(self, record: LogRecord) -> None:
        """Add a parsed, filtered record to the tallies."""
        s = self._summary
        s.total_requests += 1
        s.total_bytes += record.body_bytes_sent
        self._addresses.add(record.ip)
        _increment(s.ip_stats, record.ip)
        _increment(s.endpoint_stats, record.endpoint)
        _increment(s.status_code_stats, record.status_code)
        _increment(s.method_stats, record.method)
        if record.status_code >= ERROR_STATUS:
            self._errors += 1
            _increment(s.top_errors, record.endpoint)

    def feed(self, line: str, log_format: LogFormat) -> None:
        """Process one raw line."""
        line = line.rstrip("\r\n")
        self.search(line)
        record = parse_line(line, log_format)
        if record is None:
            if line:
                logger.debug(
                    "Skipping unparseable line",
                    extra={"source": self._summary.source, "line": line[:200]},
                )
            return
        if passes_filters(record, self._options):
            self.tally(record)

    def cancel(self) -> None:
        self._summary.cancelled = True

    def finish(self) -> LogSummary:
        """Compute derived figures and return the summary."""
        s = self._summary
        s.unique_ips = len(self._addresses)
        s.error_rate = self._errors / s.total_requests if s.total_requests else 0.0
        return s


def analyze(
    lines: Iterable[str],
    log_format: LogFormat = LogFormat.AUTO,
    options: LogFilterOptions | None = None,
    *,
    cancel_flag: Callable[[], bool] | None = None,
    source: str = "<lines>",
) -> LogSummary:
    """Collect statistics over a sequence of log lines.

    Args:
        lines: Raw log lines; trailing newlines are stripped.
        log_format: Grammar to parse with, or LogFormat.AUTO to detect per line.
        options: Filters and search pattern. Defaults to LogFilterOptions().
        cancel_flag: Callable checked once per line; reading stops when it
            returns True.
        source: Label of the stream, copied into the summary.

    Returns:
        The populated summary.

    Raises:
        InvalidPatternError: If the search pattern does not compile. Raised
            before any line is consumed.
    """
    aggregator = LogAggregator(options or LogFilterOptions(), source=source)
    for line in lines:
        if cancel_flag is not None and cancel_flag():
            aggregator.cancel()
            logger.info("Log analysis cancelled", extra={"source": source})
            break
        aggregator.feed(line, log_format)
    summary = aggregator.finish()
    logger.debug(
        "Log analysis finished",
        extra={
            "source": source,
            "requests": summary.total_requests,
            "matches": summary.regex_match_count,
        },
    )
    return summary
