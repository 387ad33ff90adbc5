"""Log line parsers.

Each parser is a pure function returning a LogRecord, or None when the line
does not fit its grammar. ``parse_line`` picks one parser per line from the
first character when the format is auto-detected.
"""

import json
import re
from collections.abc import Callable
from datetime import datetime
from typing import Any

from filestats.core.models import LogFormat, LogRecord

LineParser = Callable[[str], LogRecord | None]

# 127.0.0.1 - frank [10/Oct/2000:13:55:36 -0700] "GET /index.html HTTP/1.0" 200 2326
# optionally followed by "referer" "user-agent" (combined format)
COMMON_LOG_RE = re.compile(
    r"^(?P<ip>\S+) \S+ \S+ \[(?P<timestamp>[^\]]+)\] "
    r'"(?P<method>\S+) (?P<endpoint>\S+) \S+" '
    r"(?P<status>\d+) (?P<bytes>\d+|-)"
    r'(?: "(?P<referer>[^"]*)" "(?P<user_agent>[^"]*)")?'
)

COMMON_LOG_TIME_FORMAT = "%d/%b/%Y:%H:%M:%S"


def parse_common(line: str) -> LogRecord | None:
    """Parse an Apache/Nginx common or combined log line."""
    m = COMMON_LOG_RE.match(line)
    if m is None:
        return None
    raw_bytes = m.group("bytes")
    return LogRecord(
        ip=m.group("ip"),
        timestamp_str=m.group("timestamp"),
        method=m.group("method"),
        endpoint=m.group("endpoint"),
        status_code=int(m.group("status")),
        body_bytes_sent=0 if raw_bytes == "-" else int(raw_bytes),
        referer=m.group("referer") or "",
        user_agent=m.group("user_agent") or "",
    )


def _first(obj: dict[str, Any], *keys: str, default: Any) -> Any:
    for key in keys:
        if key in obj:
            return obj[key]
    return default


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("boolean is not a number")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"non-integral number {value}")
        return int(value)
    return int(value)


def _as_str(value: Any) -> str:
    if isinstance(value, (dict, list)):
        raise TypeError("expected a scalar value")
    return "" if value is None else str(value)


def parse_json(line: str) -> LogRecord | None:
    """Parse a structured (JSON object) log line.

    Missing fields default to "" or 0. Values of the wrong shape make the
    whole line unparseable.
    """
    try:
        obj = json.loads(line)
    except (json.JSONDecodeError, RecursionError):
        return None
    if not isinstance(obj, dict):
        return None
    try:
        return LogRecord(
            ip=_as_str(obj.get("ip", "")),
            timestamp_str=_as_str(_first(obj, "timestamp", "time", default="")),
            method=_as_str(obj.get("method", "")),
            endpoint=_as_str(_first(obj, "endpoint", "url", default="")),
            status_code=_as_int(_first(obj, "status", "status_code", default=0)),
            body_bytes_sent=_as_int(_first(obj, "size", "bytes", default=0)),
            referer=_as_str(obj.get("referer", "")),
            user_agent=_as_str(obj.get("user_agent", "")),
        )
    except (TypeError, ValueError):
        return None


_PARSERS: dict[LogFormat, LineParser] = {
    LogFormat.COMMON: parse_common,
    LogFormat.COMBINED: parse_common,
    LogFormat.JSON: parse_json,
}


def select_parser(line: str, log_format: LogFormat) -> LineParser:
    """Return the parser to use for ``line`` under ``log_format``."""
    if log_format is LogFormat.AUTO:
        return parse_json if line.startswith("{") else parse_common
    return _PARSERS[log_format]


def parse_line(line: str, log_format: LogFormat = LogFormat.AUTO) -> LogRecord | None:
    """Parse one log line, returning None when no grammar accepts it."""
    if not line:
        return None
    return select_parser(line, log_format)(line)


def parse_timestamp(text: str) -> datetime | None:
    """Parse a record timestamp into a naive datetime.

    Accepts the common-log form (zone offset ignored) and ISO 8601 (tzinfo
    dropped). Returns None when the text matches neither.
    """
    if not text:
        return None
    try:
        return datetime.strptime(text[:20], COMMON_LOG_TIME_FORMAT)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        return None
