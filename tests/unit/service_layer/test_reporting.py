"""Unit tests for `perch.service_layer.reporting.do_report`.

Trees are built on fresh roots from the `make_root` fixture, and output is
captured through the `log_function` option.
"""

from __future__ import annotations

import click
import pytest

from perch.config import ReportOptions
from perch.domain import filters
from perch.domain.node import TestNode
from perch.service_layer import reporting

# pylint: disable=magic-value-comparison


def _passes(test: TestNode) -> None:  # pylint: disable=unused-argument
    """A body that does nothing."""


def _raises(test: TestNode) -> None:  # pylint: disable=unused-argument
    raise RuntimeError("exploded")


def _plain(lines: list[str]) -> str:
    return click.unstyle("\n".join(lines))


@pytest.mark.asyncio
async def test_keep_alive_returns_the_report(root):
    """With keep_alive, the report is returned instead of exiting."""
    root.test("passes", _passes)
    lines: list[str] = []
    report = await reporting.do_report(
        root, ReportOptions(keep_alive=True, log_function=lines.append)
    )
    assert report.ok is True
    assert [test.name for test in report.passed] == ["root", "passes"]
    output = _plain(lines)
    assert "Running tests via Perch..." in output
    assert "Finished running 2 tests." in output
    assert "2 of 2 tests passed." in output
    assert "Status: OK" in output


@pytest.mark.asyncio
async def test_failures_are_summarized_with_their_stack(root):
    """Failed runs list the summary, every error, and a failed status."""
    root.test("passes", _passes)
    root.test("fails", _raises)
    lines: list[str] = []
    report = await reporting.do_report(
        root, ReportOptions(keep_alive=True, log_function=lines.append)
    )
    assert report.ok is False
    output = _plain(lines)
    assert "Encountered 1 error." in output
    assert "X fails (1 error)" in output
    assert 'Error at "fails": Traceback' in output
    assert "RuntimeError: exploded" in output
    assert "1 of 3 tests passed." in output
    assert "2 of 3 tests failed." in output
    assert "Status: Failed" in output


@pytest.mark.asyncio
async def test_concise_omits_the_summary_and_silences_tests(root):
    """Concise runs report totals only and run every test silently."""
    root.test("fails", _raises)
    lines: list[str] = []
    await reporting.do_report(
        root, ReportOptions(concise=True, keep_alive=True, log_function=lines.append)
    )
    output = _plain(lines)
    assert root.children[0].is_silent is True
    assert "X fails" not in output
    assert "Encountered an error while running" not in output
    assert "Status: Failed" in output


@pytest.mark.asyncio
async def test_silent_suppresses_the_reporter_output(root):
    """The silent option mutes the reporter's own lines."""
    root.test("passes", _passes)
    lines: list[str] = []
    report = await reporting.do_report(
        root, ReportOptions(silent=True, keep_alive=True, log_function=lines.append)
    )
    assert report.ok is True
    assert not any("Status" in line for line in lines)


@pytest.mark.asyncio
async def test_verbose_makes_every_test_verbose(root):
    """Verbose runs log each test's lifecycle steps."""
    root.test("passes", _passes)
    lines: list[str] = []
    await reporting.do_report(
        root, ReportOptions(verbose=True, keep_alive=True, log_function=lines.append)
    )
    assert root.children[0].is_verbose is True
    assert 'Beginning to run test "passes".' in _plain(lines)


@pytest.mark.asyncio
async def test_criteria_are_combined_with_or(root):
    """Name, tag and predicate criteria each let their tests through."""
    root.test("by name", _passes)
    root.test("by tag", _passes).tags("picked")
    root.test("by predicate", _passes)
    root.test("left out", _raises)
    lines: list[str] = []
    report = await reporting.do_report(
        root,
        ReportOptions(
            keep_alive=True,
            log_function=lines.append,
            names=["by name"],
            tags=["picked"],
            filter=lambda test: test.name == "by predicate",
        ),
    )
    assert report.ok is True
    assert [test.name for test in report.skipped] == ["left out"]
    output = _plain(lines)
    assert 'Filtering tests by name: "by name"' in output
    assert 'Filtering tests by tags: "picked"' in output
    assert "Filtering tests by a provided filter function." in output
    assert "- left out (filtered)" in output


@pytest.mark.asyncio
async def test_paths_criterion_matches_the_defining_file(root):
    """The paths criterion matches tests by their definition file."""
    here = root.test("here", _passes)
    elsewhere = root.test("elsewhere", _raises)
    elsewhere.file_path = "/somewhere/else.py"
    report = await reporting.do_report(
        root,
        ReportOptions(
            keep_alive=True, silent=True, paths=[here.file_path or "unknown"]
        ),
    )
    assert report.ok is True
    assert elsewhere.filtered is True


@pytest.mark.asyncio
async def test_errors_of_skipped_tests_are_not_shown(root):
    """Errors recorded on tests that ended up skipped are left out of the listing."""
    leaf = root.test("later", _passes)
    leaf.add_error(RuntimeError("stale"))
    leaf.todo()
    lines: list[str] = []
    await reporting.do_report(
        root, ReportOptions(keep_alive=True, log_function=lines.append)
    )
    assert "RuntimeError: stale" not in _plain(lines)


@pytest.mark.asyncio
@pytest.mark.parametrize(("body", "status"), [(_passes, 0), (_raises, 1)])
async def test_exits_with_the_run_status(root, body, status):
    """Without keep_alive, the process exits with 0 on success and 1 on failure."""
    root.test("only", body)
    with pytest.raises(SystemExit) as excinfo:
        await reporting.do_report(root, ReportOptions(silent=True))
    assert excinfo.value.code == status


@pytest.mark.asyncio
async def test_unhandled_error_is_reported(root, monkeypatch):
    """A fault in the reporting process itself yields a failed report."""
    root.test("passes", _passes)

    def broken_report() -> None:
        raise RuntimeError("cannot report")

    monkeypatch.setattr(root, "get_report", broken_report)
    lines: list[str] = []
    report = await reporting.do_report(
        root, ReportOptions(keep_alive=True, log_function=lines.append)
    )
    assert isinstance(report.unhandled_error, RuntimeError)
    assert report.ok is False
    assert report.total == 0
    output = _plain(lines)
    assert "Encountered an unhandled error while running tests." in output
    assert "Status: Failed" in output


@pytest.mark.asyncio
async def test_unhandled_error_exits_with_failure(root, monkeypatch):
    """An unhandled error still signals failure when not kept alive."""
    monkeypatch.setattr(root, "expand_groups", lambda: 1 / 0)
    with pytest.raises(SystemExit) as excinfo:
        await reporting.do_report(root, ReportOptions(silent=True))
    assert excinfo.value.code == 1


def test_build_filter_without_criteria_is_none():
    """No criteria means no filtering at all."""
    assert reporting.build_filter(ReportOptions(), lambda message: None) is None


def test_build_filter_uses_path_normalization(root):
    """Requested paths are normalized before matching."""
    test = root.test("t", _passes)
    test.file_path = "/a/b/c.py"
    combined = reporting.build_filter(
        ReportOptions(paths=["/a/x/../b/c.py"]), lambda message: None
    )
    assert combined is not None
    assert combined(test)
    assert filters.by_paths(["/a/b/c.py"])(test)
