"""Report renderers for directory and log summaries."""

from filestats.core.encoding.json_report import JsonReportRenderer
from filestats.core.encoding.text_report import TextReportRenderer, format_size

__all__ = [
    "JsonReportRenderer",
    "TextReportRenderer",
    "format_size",
]
