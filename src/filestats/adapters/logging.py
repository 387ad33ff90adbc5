"""Logging setup for the filestats command line.

Engine modules log through ``logging.getLogger(__name__)`` and pass context
as ``extra`` fields. The formatter here appends those fields to the message
as ``key=value`` pairs.
"""

import logging
import sys
from typing import TextIO

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

DEFAULT_FORMAT = "%(levelname)s %(name)s: %(message)s"

_VERBOSITY_LEVELS = [logging.WARNING, logging.INFO, logging.DEBUG]


def extra_fields(record: logging.LogRecord) -> dict[str, object]:
    """Return the fields passed via ``extra`` on a logging call."""
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _STANDARD_LOGRECORD_ATTRS and not key.startswith("_")
    }


class KeyValueFormatter(logging.Formatter):
    """Formatter appending extra record fields as ``key=value`` pairs.

    Example:
        ``WARNING filestats.core.directory: Could not access directory
        path=/srv/private reason=Permission denied``
    """

    def __init__(self, fmt: str = DEFAULT_FORMAT) -> None:
        super().__init__(fmt)

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        fields = extra_fields(record)
        if not fields:
            return text
        pairs = " ".join(f"{key}={value}" for key, value in fields.items())
        head, sep, tail = text.partition("\n")
        return f"{head} {pairs}{sep}{tail}"


class _FileStatsHandler(logging.StreamHandler):
    """Marker subclass so repeated configuration replaces, not stacks."""


def verbosity_level(verbosity: int) -> int:
    """Map a ``-v`` count to a logging level."""
    return _VERBOSITY_LEVELS[max(0, min(verbosity, len(_VERBOSITY_LEVELS) - 1))]


def configure_logging(
    verbosity: int = 0,
    stream: TextIO | None = None,
    logger_name: str = "filestats",
) -> logging.Handler:
    """Install a key=value stderr handler on the filestats logger.

    Args:
        verbosity: 0 for WARNING, 1 for INFO, 2 or more for DEBUG.
        stream: Destination stream. Defaults to sys.stderr.
        logger_name: Logger to configure.

    Returns:
        The installed handler.
    """
    logger = logging.getLogger(logger_name)
    for existing in [h for h in logger.handlers if isinstance(h, _FileStatsHandler)]:
        logger.removeHandler(existing)

    handler = _FileStatsHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(KeyValueFormatter())
    logger.addHandler(handler)
    logger.setLevel(verbosity_level(verbosity))
    return handler
