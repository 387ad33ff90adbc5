"""Integration tests for the directory aggregator on real trees."""

import os
import sys
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from filestats.core.directory import analyze
from filestats.core.models import ScanOptions


pytestmark = pytest.mark.integration

FIXED_NOW = 1_700_000_000.0
DAY = 24 * 60 * 60


def _counts(buckets) -> list[int]:
    return [b.count for b in buckets]


class TestTotals:
    """Tests for counters and mappings."""

    def test_min_size_threshold_scenario(self, make_tree, fixed_now) -> None:
        """Files below the threshold are left out of every statistic."""
        root = make_tree({"small.txt": 500, "mid.bin": 2048, "big.dat": 2_000_000})
        summary = analyze(root, ScanOptions(min_size_threshold=1000), now=fixed_now)

        assert summary.total_files == 2
        assert summary.total_size == 2_002_048
        assert ".txt" not in summary.type_distribution_count
        assert _counts(summary.size_histogram) == [0, 1, 1, 0, 0]
        assert {r.path for r in summary.largest_files} == {
            str(root / "mid.bin"),
            str(root / "big.dat"),
        }

    def test_extension_mappings(self, make_tree, fixed_now) -> None:
        """Counts and cumulative sizes are kept per extension."""
        root = make_tree({"a.py": 10, "b.py": 20, "sub/c.md": 5, "Makefile": 7})
        summary = analyze(root, now=fixed_now)

        assert summary.type_distribution_count == {
            ".py": 2,
            ".md": 1,
            "no-extension": 1,
        }
        assert summary.type_distribution_size == {
            ".py": 30,
            ".md": 5,
            "no-extension": 7,
        }
        assert summary.total_directories == 1

    def test_directories_counted_below_root(self, make_tree, fixed_now) -> None:
        """Every subdirectory is counted, the root is not."""
        root = make_tree({"a/b/c/file.txt": 1, "d/file.txt": 1})
        (root / "empty").mkdir()
        summary = analyze(root, now=fixed_now)
        assert summary.total_directories == 5
        assert summary.total_files == 2

    def test_empty_directory(self, tmp_path: Path, fixed_now) -> None:
        """An empty root yields an empty but valid summary."""
        summary = analyze(tmp_path, now=fixed_now)
        assert summary.ok
        assert summary.total_files == 0
        assert _counts(summary.size_histogram) == [0] * 5

    def test_root_is_recorded(self, make_tree, fixed_now) -> None:
        """The analysed root is stored on the summary."""
        root = make_tree({"a.txt": 1})
        assert analyze(root, now=fixed_now).root == str(root)


class TestHistograms:
    """Tests for size and age histograms."""

    def test_age_buckets_use_single_snapshot(self, make_tree, fixed_now) -> None:
        """Ages are measured against the injected reference time."""
        root = make_tree(
            {
                "fresh.txt": (1, 60),
                "week.txt": (1, 2 * DAY),
                "month.txt": (1, 10 * DAY),
                "old.txt": (1, 90 * DAY),
                "future.txt": (1, -DAY),
            }
        )
        summary = analyze(root, now=fixed_now)
        assert _counts(summary.age_distribution) == [2, 1, 1, 1]

    def test_top_lists(self, make_tree, fixed_now) -> None:
        """Largest, oldest and newest lists keep at most ten sorted records."""
        spec = {f"f{i:02d}.bin": (i + 1, i * DAY) for i in range(15)}
        root = make_tree(spec)
        summary = analyze(root, now=fixed_now)

        largest = summary.largest_files.sorted()
        oldest = summary.oldest_files.sorted()
        newest = summary.newest_files.sorted()
        assert len(largest) == len(oldest) == len(newest) == 10
        assert [r.size for r in largest] == list(range(15, 5, -1))
        assert Path(oldest[0].path).name == "f14.bin"
        assert Path(newest[0].path).name == "f00.bin"

    @settings(max_examples=25, deadline=None)
    @given(
        st.dictionaries(
            st.from_regex(r"[a-z]{1,6}(\.[a-z]{1,3})?", fullmatch=True),
            st.integers(min_value=0, max_value=5000),
            max_size=12,
        )
    )
    def test_sums_match_totals(self, tmp_path_factory, files) -> None:
        """Extension and histogram sums always equal the totals."""
        root = tmp_path_factory.mktemp("prop")
        for name, size in files.items():
            (root / name).write_bytes(b"x" * size)
        summary = analyze(root, now=FIXED_NOW)

        assert summary.total_files == len(files)
        assert sum(summary.type_distribution_count.values()) == summary.total_files
        assert sum(summary.type_distribution_size.values()) == summary.total_size
        assert sum(_counts(summary.size_histogram)) == summary.total_files
        assert sum(_counts(summary.age_distribution)) == summary.total_files
        assert len(summary.largest_files) == min(10, len(files))


class TestTraversalOptions:
    """Tests for depth, hidden entries and patterns."""

    def test_max_depth_zero_counts_root_files_only(self, make_tree, fixed_now) -> None:
        """Depth 0 lists subdirectories without descending into them."""
        root = make_tree({"top.txt": 1, "sub/inner.txt": 1, "sub/deeper/x.txt": 1})
        summary = analyze(root, ScanOptions(max_depth=0), now=fixed_now)
        assert summary.total_files == 1
        assert summary.total_directories == 1

    def test_max_depth_one(self, make_tree, fixed_now) -> None:
        """Depth 1 descends one level."""
        root = make_tree({"top.txt": 1, "sub/inner.txt": 1, "sub/deeper/x.txt": 1})
        summary = analyze(root, ScanOptions(max_depth=1), now=fixed_now)
        assert summary.total_files == 2
        assert summary.total_directories == 2

    def test_hidden_entries_skipped_with_subtree(self, make_tree, fixed_now) -> None:
        """Dot-files and dot-directories are ignored by default."""
        root = make_tree({".env": 5, ".git/config": 5, ".git/objects/a": 5, "a.txt": 1})
        summary = analyze(root, now=fixed_now)
        assert summary.total_files == 1
        assert summary.total_directories == 0

    def test_hidden_entries_included_on_request(self, make_tree, fixed_now) -> None:
        """skip_hidden=False counts dot entries too."""
        root = make_tree({".env": 5, ".git/config": 5, "a.txt": 1})
        summary = analyze(root, ScanOptions(skip_hidden=False), now=fixed_now)
        assert summary.total_files == 3
        assert summary.total_directories == 1
        assert summary.type_distribution_count["no-extension"] == 2

    def test_exclude_patterns_prune_files_and_directories(
        self, make_tree, fixed_now
    ) -> None:
        """Excluded directories are skipped together with their contents."""
        root = make_tree(
            {"keep.py": 1, "skip.log": 1, "build/out.py": 1, "src/mod.py": 1}
        )
        options = ScanOptions(exclude_patterns=["*.log", "build"])
        summary = analyze(root, options, now=fixed_now)
        assert summary.total_files == 2
        assert summary.total_directories == 1

    def test_exclude_by_relative_path(self, make_tree, fixed_now) -> None:
        """Patterns may match root-relative paths."""
        root = make_tree({"src/a.py": 1, "src/gen/b.py": 1})
        options = ScanOptions(exclude_patterns=["src/gen"])
        summary = analyze(root, options, now=fixed_now)
        assert summary.total_files == 1

    def test_include_patterns_select_files(self, make_tree, fixed_now) -> None:
        """Only files matching an include pattern are counted."""
        root = make_tree({"a.py": 1, "b.txt": 1, "pkg/c.py": 1})
        options = ScanOptions(include_patterns=["*.py"])
        summary = analyze(root, options, now=fixed_now)
        assert summary.total_files == 2
        assert summary.total_directories == 1
        assert summary.type_distribution_count == {".py": 2}


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unavailable")
class TestSymlinks:
    """Tests for symbolic link handling."""

    def test_directory_links_are_opaque_by_default(self, make_tree, fixed_now) -> None:
        """Links to directories are neither counted nor entered unless followed."""
        root = make_tree({"real/data.bin": 100})
        os.symlink(root / "real", root / "link_dir")
        summary = analyze(root, now=fixed_now)
        assert summary.total_files == 1
        assert summary.total_directories == 1

    def test_file_links_are_counted(self, make_tree, fixed_now) -> None:
        """A link to a regular file counts as a file of the target's size."""
        root = make_tree({"real.txt": 10})
        os.symlink(root / "real.txt", root / "link.txt")
        summary = analyze(root, now=fixed_now)
        assert summary.total_files == 2
        assert summary.total_size == 20
        assert summary.type_distribution_count == {".txt": 2}

    def test_broken_links_are_skipped(self, make_tree, fixed_now) -> None:
        """A dangling link is ignored without a warning."""
        root = make_tree({"a.txt": 1})
        os.symlink(root / "gone.txt", root / "dangling.txt")
        summary = analyze(root, now=fixed_now)
        assert summary.total_files == 1
        assert summary.warnings == []

    def test_symlink_cycle_is_not_followed_twice(self, make_tree, fixed_now) -> None:
        """Following links never revisits a directory."""
        root = make_tree({"a/file.txt": 1})
        os.symlink(root, root / "a" / "loop")
        summary = analyze(root, ScanOptions(follow_symlinks=True), now=fixed_now)
        assert summary.total_files == 1
        assert summary.total_directories == 1


class TestFailures:
    """Tests for configuration and partial access failures."""

    def test_missing_root_returns_empty_summary(self, tmp_path: Path) -> None:
        """A missing root is reported on the summary, not raised."""
        summary = analyze(tmp_path / "nope")
        assert not summary.ok
        assert "does not exist" in summary.error
        assert summary.total_files == 0

    def test_file_as_root_is_an_error(self, tmp_path: Path) -> None:
        """A regular file is not a valid root."""
        path = tmp_path / "file.txt"
        path.write_text("x")
        summary = analyze(path)
        assert not summary.ok

    def test_missing_root_is_logged(self, tmp_path: Path, caplog) -> None:
        """The configuration error is logged at ERROR."""
        with caplog.at_level("ERROR", logger="filestats"):
            analyze(tmp_path / "nope")
        assert "does not exist" in caplog.text

    @pytest.mark.skipif(
        sys.platform == "win32" or (hasattr(os, "geteuid") and os.geteuid() == 0),
        reason="permission bits are not enforced",
    )
    def test_unreadable_subdirectory_is_skipped(
        self, make_tree, fixed_now, caplog
    ) -> None:
        """An inaccessible subtree produces a warning; siblings are still counted."""
        root = make_tree({"ok/a.txt": 1, "locked/b.txt": 1})
        locked = root / "locked"
        locked.chmod(0)
        try:
            with caplog.at_level("WARNING", logger="filestats"):
                summary = analyze(root, now=fixed_now)
        finally:
            locked.chmod(0o755)

        assert summary.ok
        assert summary.total_files == 1
        assert summary.total_directories == 2
        assert len(summary.warnings) == 1
        assert "locked" in summary.warnings[0]
        assert "Could not access directory" in caplog.text

    def test_cancel_flag_stops_traversal(self, make_tree, fixed_now) -> None:
        """Cancelling returns a partial summary marked as cancelled."""
        root = make_tree({f"f{i}.txt": 1 for i in range(20)})
        calls = {"n": 0}

        def cancel() -> bool:
            calls["n"] += 1
            return calls["n"] > 5

        summary = analyze(root, now=fixed_now, cancel_flag=cancel)
        assert summary.cancelled
        assert summary.total_files == 5
