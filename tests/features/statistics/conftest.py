"""BDD step definitions for the statistics scenarios."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
from pytest_bdd import given, parsers, then, when

from filestats.core import directory, log_analysis
from filestats.core.models import LogFilterOptions, LogRecord, ScanOptions
from filestats.core.parsing import parse_line


@dataclass
class StatisticsContext:
    """State shared between the steps of one scenario."""

    root: Path | None = None
    lines: list[str] = field(default_factory=list)
    summary: Any = None
    record: LogRecord | None = None


@pytest.fixture
def ctx() -> StatisticsContext:
    """Fresh scenario context for each test."""
    return StatisticsContext()


@given(
    parsers.parse("a directory containing files of {a:d}, {b:d} and {c:d} bytes")
)
def step_directory(
    ctx: StatisticsContext, tmp_path: Path, a: int, b: int, c: int
) -> None:
    root = tmp_path / "tree"
    root.mkdir()
    for index, size in enumerate([a, b, c]):
        with open(root / f"file{index}.bin", "wb") as handle:
            handle.truncate(size)
    ctx.root = root


@given(parsers.parse("the log line '{line}'"))
def step_log_line(ctx: StatisticsContext, line: str) -> None:
    ctx.lines.append(line)


@when("the directory is analyzed")
def step_analyze_directory(ctx: StatisticsContext) -> None:
    ctx.summary = directory.analyze(ctx.root)


@when(parsers.parse("the directory is analyzed with a minimum size of {size:d} bytes"))
def step_analyze_directory_threshold(ctx: StatisticsContext, size: int) -> None:
    ctx.summary = directory.analyze(ctx.root, ScanOptions(min_size_threshold=size))


@when("the log lines are analyzed")
def step_analyze_lines(ctx: StatisticsContext) -> None:
    ctx.summary = log_analysis.analyze(ctx.lines)


@when(parsers.parse('the log lines are analyzed with search pattern "{pattern}"'))
def step_analyze_lines_with_pattern(ctx: StatisticsContext, pattern: str) -> None:
    options = LogFilterOptions(pattern_regex=pattern)
    ctx.summary = log_analysis.analyze(ctx.lines, options=options)


@when("the log line is parsed")
def step_parse_line(ctx: StatisticsContext) -> None:
    ctx.record = parse_line(ctx.lines[-1])


@then(parsers.re(r"(?P<name>\w+) is (?P<value>\d+)"))
def step_counter(ctx: StatisticsContext, name: str, value: str) -> None:
    assert getattr(ctx.summary, name) == int(value)


@then(parsers.parse("the error rate is {rate:g}"))
def step_error_rate(ctx: StatisticsContext, rate: float) -> None:
    assert ctx.summary.error_rate == pytest.approx(rate)


@then(parsers.parse('the only error endpoint is "{endpoint}" with {count:d} request'))
def step_only_error_endpoint(ctx: StatisticsContext, endpoint: str, count: int) -> None:
    assert ctx.summary.top_errors == {endpoint: count}


@then(parsers.parse("the size histogram is {counts}"))
def step_size_histogram(ctx: StatisticsContext, counts: str) -> None:
    expected = [int(c) for c in counts.split(",")]
    assert [b.count for b in ctx.summary.size_histogram] == expected


@then(parsers.parse("the record has {name} {value:d}"))
def step_record_field(ctx: StatisticsContext, name: str, value: int) -> None:
    assert ctx.record is not None
    assert getattr(ctx.record, name) == value
