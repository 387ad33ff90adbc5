"""Error types raised by the aggregation engine.

Only precondition violations are raised. Failures local to one file or one
log line are absorbed by the aggregators, and an unusable root or source is
reported through the ``error`` field of the returned summary.
"""


class FileStatsError(Exception):
    """Base class for all filestats errors."""


class ConfigurationError(FileStatsError, ValueError):
    """Raised when analysis options are invalid."""


class InvalidPatternError(ConfigurationError):
    """Raised when a search or glob pattern cannot be compiled.

    Attributes:
        pattern: The offending pattern text.
    """

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"invalid pattern {pattern!r}: {reason}")
        self.pattern = pattern


__all__ = [
    "ConfigurationError",
    "FileStatsError",
    "InvalidPatternError",
]
