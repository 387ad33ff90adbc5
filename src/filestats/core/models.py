"""Core domain models for directory and log statistics."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from filestats.core.buckets import AGE_BUCKET_LABELS, SIZE_BUCKET_LABELS
from filestats.core.errors import ConfigurationError
from filestats.core.topk import DEFAULT_CAPACITY, TopK

MAX_MATCHED_LINES = 100


@dataclass(frozen=True)
class FileRecord:
    """A file discovered during directory traversal.

    Attributes:
        path: Path of the file as reached from the analysed root.
        size: Size in bytes.
        extension: Extension with its leading dot, or "no-extension".
        last_modified: Modification time as a POSIX timestamp.
    """

    path: str
    size: int
    extension: str
    last_modified: float


@dataclass(frozen=True)
class LogRecord:
    """A single parsed log line.

    Attributes:
        ip: Client address.
        timestamp_str: Raw timestamp text, unparsed.
        method: HTTP method.
        endpoint: Request path.
        status_code: HTTP status code.
        body_bytes_sent: Response size in bytes.
        referer: Referer header, when the format carries it.
        user_agent: User-Agent header, when the format carries it.
    """

    ip: str = ""
    timestamp_str: str = ""
    method: str = ""
    endpoint: str = ""
    status_code: int = 0
    body_bytes_sent: int = 0
    referer: str = ""
    user_agent: str = ""


@dataclass
class HistogramBucket:
    """One labelled bucket of a fixed histogram."""

    label: str
    count: int = 0


class LogFormat(Enum):
    """Log line grammar selection."""

    AUTO = "auto"
    COMMON = "common"
    COMBINED = "combined"
    JSON = "json"


@dataclass
class ScanOptions:
    """Options controlling directory traversal.

    Attributes:
        max_depth: Deepest directory level to descend into; -1 for unlimited.
            The root is level 0.
        include_patterns: Glob patterns a file must match (by name or
            root-relative path) to be counted. Empty means every file.
        exclude_patterns: Glob patterns removing files and whole directories.
        min_size_threshold: Files strictly smaller than this are ignored.
        skip_hidden: Skip names starting with "." together with their subtree.
        follow_symlinks: Descend into symbolic links to directories. Links to
            regular files are always counted as files.
    """

    max_depth: int = -1
    include_patterns: list[str] = field(default_factory=list)
    exclude_patterns: list[str] = field(default_factory=list)
    min_size_threshold: int = 0
    skip_hidden: bool = True
    follow_symlinks: bool = False

    def __post_init__(self) -> None:
        if self.max_depth < -1:
            raise ConfigurationError(
                f"max_depth must be -1 or non-negative, got {self.max_depth}"
            )
        if self.min_size_threshold < 0:
            raise ConfigurationError(
                "min_size_threshold must be non-negative, "
                f"got {self.min_size_threshold}"
            )


@dataclass
class LogFilterOptions:
    """Filters and search settings for log analysis.

    Attributes:
        status_codes: Keep only these status codes. Empty keeps all.
        pattern_regex: Case-insensitive pattern searched in every raw line.
        error_only: Keep only records with status >= 400.
        start_time: Keep only records at or after this naive datetime.
        end_time: Keep only records at or before this naive datetime.
    """

    status_codes: list[int] = field(default_factory=list)
    pattern_regex: str = ""
    error_only: bool = False
    start_time: datetime | None = None
    end_time: datetime | None = None

    def __post_init__(self) -> None:
        if (
            self.start_time is not None
            and self.end_time is not None
            and self.start_time > self.end_time
        ):
            raise ConfigurationError("start_time must not be later than end_time")

    @property
    def has_time_range(self) -> bool:
        return self.start_time is not None or self.end_time is not None


def largest_files(capacity: int = DEFAULT_CAPACITY) -> TopK[FileRecord]:
    """Tracker keeping the biggest files."""
    return TopK(capacity, key=lambda r: r.size, largest=True)


def oldest_files(capacity: int = DEFAULT_CAPACITY) -> TopK[FileRecord]:
    """Tracker keeping the least recently modified files."""
    return TopK(capacity, key=lambda r: r.last_modified, largest=False)


def newest_files(capacity: int = DEFAULT_CAPACITY) -> TopK[FileRecord]:
    """Tracker keeping the most recently modified files."""
    return TopK(capacity, key=lambda r: r.last_modified, largest=True)


def _size_histogram() -> list[HistogramBucket]:
    return [HistogramBucket(label=label) for label in SIZE_BUCKET_LABELS]


def _age_histogram() -> list[HistogramBucket]:
    return [HistogramBucket(label=label) for label in AGE_BUCKET_LABELS]


def _add_counts(target: dict, source: dict) -> None:
    for key, value in source.items():
        target[key] = target.get(key, 0) + value


@dataclass
class DirectorySummary:
    """Statistics accumulated over one directory tree.

    The aggregator mutates the summary once per counted file and hands it
    over when traversal ends; consumers treat it as read-only.
    """

    root: str = ""
    total_files: int = 0
    total_directories: int = 0
    total_size: int = 0
    type_distribution_count: dict[str, int] = field(default_factory=dict)
    type_distribution_size: dict[str, int] = field(default_factory=dict)
    size_histogram: list[HistogramBucket] = field(default_factory=_size_histogram)
    age_distribution: list[HistogramBucket] = field(default_factory=_age_histogram)
    largest_files: TopK[FileRecord] = field(default_factory=largest_files)
    oldest_files: TopK[FileRecord] = field(default_factory=oldest_files)
    newest_files: TopK[FileRecord] = field(default_factory=newest_files)
    warnings: list[str] = field(default_factory=list)
    error: str | None = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        """True when the analysis ran (possibly with warnings)."""
        return self.error is None

    def merge(self, other: "DirectorySummary") -> None:
        """Fold another summary into this one.

        Counters and mappings add, histograms add bucket-wise and the top-K
        trackers re-offer every retained record of ``other``.
        """
        self.total_files += other.total_files
        self.total_directories += other.total_directories
        self.total_size += other.total_size
        _add_counts(self.type_distribution_count, other.type_distribution_count)
        _add_counts(self.type_distribution_size, other.type_distribution_size)
        for mine, theirs in zip(self.size_histogram, other.size_histogram):
            mine.count += theirs.count
        for mine, theirs in zip(self.age_distribution, other.age_distribution):
            mine.count += theirs.count
        self.largest_files.merge(other.largest_files)
        self.oldest_files.merge(other.oldest_files)
        self.newest_files.merge(other.newest_files)
        self.warnings.extend(other.warnings)
        self.cancelled = self.cancelled or other.cancelled


@dataclass
class LogSummary:
    """Statistics accumulated over one log stream."""

    source: str = ""
    total_requests: int = 0
    total_bytes: int = 0
    unique_ips: int = 0
    ip_stats: dict[str, int] = field(default_factory=dict)
    endpoint_stats: dict[str, int] = field(default_factory=dict)
    status_code_stats: dict[int, int] = field(default_factory=dict)
    method_stats: dict[str, int] = field(default_factory=dict)
    error_rate: float = 0.0
    top_errors: dict[str, int] = field(default_factory=dict)
    matched_lines: list[str] = field(default_factory=list)
    regex_match_count: int = 0
    error: str | None = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        """True when the source could be read."""
        return self.error is None


def top(counts: dict, n: int = 10) -> list[tuple]:
    """Return the ``n`` entries of ``counts`` with the highest values.

    Equal counts keep the mapping's insertion order.
    """
    return sorted(counts.items(), key=lambda kv: kv[1], reverse=True)[:n]
