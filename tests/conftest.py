"""Shared test fixtures for all test modules."""

import os
from collections.abc import Callable
from pathlib import Path

import pytest

# Reference instant for age-bucket tests: 2023-11-14T22:13:20Z
FIXED_NOW = 1_700_000_000.0

DAY = 24 * 60 * 60

TreeSpec = dict[str, int | tuple[int, float]]


@pytest.fixture
def fixed_now() -> float:
    """Reference POSIX timestamp passed as ``now`` to the directory aggregator."""
    return FIXED_NOW


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[[TreeSpec], Path]:
    """Factory fixture building a directory tree under tmp_path.

    Maps relative file paths to a size, or to a (size, age_in_seconds) tuple
    measured back from FIXED_NOW. Files without an age are one hour old.

    Usage:
        def test_something(make_tree):
            root = make_tree({"a.txt": 10, "sub/b.log": (20, 3 * DAY)})
    """

    def _make(spec: TreeSpec) -> Path:
        root = tmp_path / "tree"
        root.mkdir(exist_ok=True)
        for rel_path, value in spec.items():
            size, age = value if isinstance(value, tuple) else (value, 3600.0)
            path = root / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(b"x" * size)
            mtime = FIXED_NOW - age
            os.utime(path, (mtime, mtime))
        return root

    return _make


@pytest.fixture
def common_log_lines() -> list[str]:
    """A small access log in the common log format."""
    return [
        '10.0.0.1 - - [10/Oct/2023:13:55:36 -0700] "GET /index.html HTTP/1.1" 200 2326',
        '10.0.0.2 - - [10/Oct/2023:13:56:01 -0700] "GET /missing HTTP/1.1" 404 0',
        '10.0.0.1 - - [10/Oct/2023:13:57:12 -0700] "POST /api/login HTTP/1.1" 500 -',
        '10.0.0.3 - - [11/Oct/2023:08:00:00 -0700] "GET /index.html HTTP/1.1" 200 512',
    ]


@pytest.fixture
def log_file(tmp_path: Path, common_log_lines: list[str]) -> Path:
    """The common_log_lines fixture written to a file."""
    path = tmp_path / "access.log"
    path.write_text("\n".join(common_log_lines) + "\n", encoding="utf-8")
    return path
