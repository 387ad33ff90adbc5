"""Directory aggregator.

Walks a directory tree depth-first with ``os.scandir`` and folds every
counted file into a DirectorySummary.
"""

import fnmatch
import logging
import os
import stat as statmod
import time
from collections.abc import Callable

from filestats.core.buckets import age_bucket, normalize_extension, size_bucket
from filestats.core.models import DirectorySummary, FileRecord, ScanOptions

logger = logging.getLogger(__name__)

CancelFlag = Callable[[], bool]


def _matches_any(patterns: list[str], name: str, rel_path: str) -> bool:
    return any(
        fnmatch.fnmatch(name, p) or fnmatch.fnmatch(rel_path, p) for p in patterns
    )


def fold_file(summary: DirectorySummary, record: FileRecord, now: float) -> None:
    """Add one file to the running statistics."""
    summary.total_files += 1
    summary.total_size += record.size

    ext = record.extension
    summary.type_distribution_count[ext] = (
        summary.type_distribution_count.get(ext, 0) + 1
    )
    summary.type_distribution_size[ext] = (
        summary.type_distribution_size.get(ext, 0) + record.size
    )

    summary.size_histogram[size_bucket(record.size)].count += 1
    summary.age_distribution[age_bucket(now, record.last_modified)].count += 1

    summary.largest_files.offer(record)
    summary.oldest_files.offer(record)
    summary.newest_files.offer(record)


class _Walker:
    """Traversal state for a single analyze() call."""

    def __init__(
        self,
        root: str,
        options: ScanOptions,
        now: float,
        cancel_flag: CancelFlag | None,
    ) -> None:
        self.root = root
        self.options = options
        self.now = now
        self.cancel_flag = cancel_flag
        self.summary = DirectorySummary(root=root)
        self._visited: set[tuple[int, int]] = set()

    def _cancelled(self) -> bool:
        if self.cancel_flag is not None and self.cancel_flag():
            self.summary.cancelled = True
            return True
        return False

    def _depth_allows(self, depth: int) -> bool:
        return self.options.max_depth == -1 or depth <= self.options.max_depth

    def _first_visit(self, st: os.stat_result) -> bool:
        ident = (st.st_dev, st.st_ino)
        if ident in self._visited:
            return False
        self._visited.add(ident)
        return True

    def walk(self) -> DirectorySummary:
        if self.options.follow_symlinks:
            self._first_visit(os.stat(self.root))
        self._scan_dir(self.root, 0)
        return self.summary

    def _scan_dir(self, dir_path: str, depth: int) -> None:
        opts = self.options
        try:
            with os.scandir(dir_path) as it:
                for entry in it:
                    if self._cancelled():
                        return
                    if opts.skip_hidden and entry.name.startswith("."):
                        continue

                    rel_path = os.path.relpath(entry.path, self.root)
                    rel_path = rel_path.replace(os.sep, "/")
                    if opts.exclude_patterns and _matches_any(
                        opts.exclude_patterns, entry.name, rel_path
                    ):
                        continue

                    try:
                        is_link = entry.is_symlink()
                        st = entry.stat()
                    except OSError as exc:
                        logger.debug(
                            "Skipping unreadable entry",
                            extra={"path": entry.path, "reason": str(exc)},
                        )
                        continue

                    if statmod.S_ISDIR(st.st_mode):
                        # links to directories stay opaque unless followed
                        if is_link and not opts.follow_symlinks:
                            continue
                        if opts.follow_symlinks and not self._first_visit(st):
                            logger.debug(
                                "Skipping already visited directory",
                                extra={"path": entry.path},
                            )
                            continue
                        self.summary.total_directories += 1
                        if self._depth_allows(depth + 1):
                            self._scan_dir(entry.path, depth + 1)
                            if self.summary.cancelled:
                                return
                    elif statmod.S_ISREG(st.st_mode):
                        self._process_file(entry.path, entry.name, rel_path, st)
        except OSError as exc:
            message = f"Could not access directory {dir_path}: {exc.strerror or exc}"
            logger.warning(
                "Could not access directory",
                extra={"path": dir_path, "reason": exc.strerror or str(exc)},
            )
            self.summary.warnings.append(message)

    def _process_file(
        self, path: str, name: str, rel_path: str, st: os.stat_result
    ) -> None:
        opts = self.options
        if opts.include_patterns and not _matches_any(
            opts.include_patterns, name, rel_path
        ):
            return
        if st.st_size < opts.min_size_threshold:
            return
        record = FileRecord(
            path=path,
            size=st.st_size,
            extension=normalize_extension(name),
            last_modified=st.st_mtime,
        )
        fold_file(self.summary, record, self.now)


def analyze(
    root: str | os.PathLike[str],
    options: ScanOptions | None = None,
    *,
    now: float | None = None,
    cancel_flag: CancelFlag | None = None,
) -> DirectorySummary:
    """Collect statistics over the directory tree rooted at ``root``.

    The reference time for age buckets is taken once per call, so every file
    of one run is classified against the same instant.

    Args:
        root: Directory to analyse.
        options: Traversal options. Defaults to ScanOptions().
        now: Reference POSIX timestamp for age buckets. Defaults to time.time().
        cancel_flag: Callable checked once per directory entry; traversal stops
            when it returns True.

    Returns:
        The populated summary. When ``root`` is missing or not a directory
        the summary is empty and its ``error`` field is set.
    """
    options = options or ScanOptions()
    root_str = os.fspath(root)
    if not os.path.isdir(root_str):
        message = f"Target path does not exist or is not a directory: {root_str}"
        logger.error(
            "Target path does not exist or is not a directory",
            extra={"path": root_str},
        )
        return DirectorySummary(root=root_str, error=message)

    snapshot = time.time() if now is None else now
    logger.info("Analyzing directory", extra={"path": root_str})
    summary = _Walker(root_str, options, snapshot, cancel_flag).walk()
    if summary.cancelled:
        logger.info("Directory analysis cancelled", extra={"path": root_str})
    logger.debug(
        "Directory analysis finished",
        extra={
            "path": root_str,
            "files": summary.total_files,
            "directories": summary.total_directories,
            "bytes": summary.total_size,
        },
    )
    return summary
