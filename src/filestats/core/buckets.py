"""Bucket classifiers for file sizes, file ages and extensions."""

import os
from bisect import bisect_right

KIB = 1024
MIB = 1024 * KIB
GIB = 1024 * MIB

# Upper bounds (exclusive) of every size bucket but the last
SIZE_BUCKET_BOUNDS = [KIB, MIB, 100 * MIB, GIB]
SIZE_BUCKET_LABELS = ["0-1KB", "1KB-1MB", "1MB-100MB", "100MB-1GB", "1GB+"]

HOUR = 60 * 60
DAY = 24 * HOUR

# Upper bounds (exclusive, in seconds) of every age bucket but the last
AGE_BUCKET_BOUNDS = [DAY, 7 * DAY, 30 * DAY]
AGE_BUCKET_LABELS = ["Today", "This Week", "This Month", "Older"]

NO_EXTENSION = "no-extension"


def size_bucket(size: int) -> int:
    """Return the index of the size bucket containing ``size``.

    Buckets are half-open intervals ``[0, 1KiB)``, ``[1KiB, 1MiB)``,
    ``[1MiB, 100MiB)``, ``[100MiB, 1GiB)`` and ``[1GiB, inf)``.

    Args:
        size: File size in bytes.

    Returns:
        Index into SIZE_BUCKET_LABELS.

    Raises:
        ValueError: If size is negative.
    """
    if size < 0:
        raise ValueError(f"size must be non-negative, got {size}")
    return bisect_right(SIZE_BUCKET_BOUNDS, size)


def age_bucket(now: float, last_modified: float) -> int:
    """Return the index of the age bucket for a file modified at ``last_modified``.

    Future-dated files (negative age) land in the youngest bucket.

    Args:
        now: Reference time as a POSIX timestamp.
        last_modified: Modification time as a POSIX timestamp.

    Returns:
        Index into AGE_BUCKET_LABELS.
    """
    age = max(0.0, now - last_modified)
    return bisect_right(AGE_BUCKET_BOUNDS, age)


def normalize_extension(path: str) -> str:
    """Return the extension of ``path`` including its dot, or ``no-extension``."""
    ext = os.path.splitext(os.path.basename(path))[1]
    return ext or NO_EXTENSION

