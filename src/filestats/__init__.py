"""Descriptive statistics for directory trees and web server logs."""

from filestats.adapters.sources import analyze_log_file
from filestats.core.directory import analyze as analyze_directory
from filestats.core.encoding import JsonReportRenderer, TextReportRenderer
from filestats.core.errors import (
    ConfigurationError,
    FileStatsError,
    InvalidPatternError,
)
from filestats.core.log_analysis import analyze as analyze_log_lines
from filestats.core.models import (
    DirectorySummary,
    FileRecord,
    HistogramBucket,
    LogFilterOptions,
    LogFormat,
    LogRecord,
    LogSummary,
    ScanOptions,
)
from filestats.core.topk import TopK

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DirectorySummary",
    "FileRecord",
    "FileStatsError",
    "HistogramBucket",
    "InvalidPatternError",
    "JsonReportRenderer",
    "LogFilterOptions",
    "LogFormat",
    "LogRecord",
    "LogSummary",
    "ScanOptions",
    "TextReportRenderer",
    "TopK",
    "analyze_directory",
    "analyze_log_file",
    "analyze_log_lines",
]
