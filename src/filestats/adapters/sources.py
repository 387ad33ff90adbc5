"""File adapter feeding log files to the log aggregator."""

import logging
import os
from collections.abc import Callable

from filestats.core import log_analysis
from filestats.core.models import LogFilterOptions, LogFormat, LogSummary

logger = logging.getLogger(__name__)


def analyze_log_file(
    path: str | os.PathLike[str],
    log_format: LogFormat = LogFormat.AUTO,
    options: LogFilterOptions | None = None,
    *,
    encoding: str = "utf-8",
    cancel_flag: Callable[[], bool] | None = None,
) -> LogSummary:
    """Analyse the log file at ``path`` line by line.

    Undecodable bytes are replaced rather than failing the line.

    Returns:
        The populated summary, or an empty summary with ``error`` set when
        the file cannot be opened or read.

    Raises:
        InvalidPatternError: If the search pattern does not compile. Checked
            before the file is opened.
    """
    options = options or LogFilterOptions()
    log_analysis.compile_pattern(options.pattern_regex)
    source = os.fspath(path)
    try:
        with open(source, encoding=encoding, errors="replace") as handle:
            return log_analysis.analyze(
                handle,
                log_format,
                options,
                cancel_flag=cancel_flag,
                source=source,
            )
    except OSError as exc:
        logger.error(
            "Could not read log file",
            extra={"path": source, "reason": exc.strerror or str(exc)},
        )
        return LogSummary(
            source=source,
            error=f"Could not open log file: {source}: {exc.strerror or exc}",
        )
