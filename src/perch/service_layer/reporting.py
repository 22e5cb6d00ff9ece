"""Top-level reporting run: filter, run, summarize and signal the outcome."""

from __future__ import annotations

import logging
import sys
import traceback
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

import click

from perch.config import ReportOptions
from perch.domain import filters
from perch.domain.callbacks import TestCallback
from perch.domain.report import Report

if TYPE_CHECKING:
    from perch.domain.filters import TestFilter
    from perch.domain.node import TestNode

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1


def _quoted(items: list[str]) -> str:
    return '", "'.join(items)


def build_filter(options: ReportOptions, log: Callable[[str], Any]) -> TestFilter | None:
    """Combine the filtering criteria in `options` into one OR predicate.

    Returns:
        The combined filter, or None when no criterion was given.
    """
    collected: list[TestFilter] = []
    if options.filter is not None:
        log("Filtering tests by a provided filter function.")
        collected.append(options.filter)
    if options.names is not None:
        log(f'Filtering tests by name: "{_quoted(options.names)}"')
        collected.append(filters.by_names(options.names))
    if options.tags is not None:
        log(f'Filtering tests by tags: "{_quoted(options.tags)}"')
        collected.append(filters.by_tags(options.tags))
    if options.paths is not None:
        log(f'Filtering tests by file paths: "{_quoted(options.paths)}"')
        collected.append(filters.by_paths(options.paths))
    if not collected:
        return None
    return filters.any_of(collected)


def _error_is_skipped(location: TestNode | TestCallback) -> bool:
    if isinstance(location, TestCallback):
        return location.owner.should_skip()
    return location.should_skip()


def _log_results(
    root: TestNode, report: Report, options: ReportOptions, log: Callable[[str], Any]
) -> None:
    total = report.total
    log(f"Finished running {total} tests.")
    if len(report.errors) == 1:
        log(click.style("Encountered 1 error.", fg="bright_red"))
    elif report.errors:
        log(click.style(f"Encountered {len(report.errors)} errors.", fg="bright_red"))
    if not options.concise:
        root.log_verbose("Getting a text summary...")
        log(root.get_summary())
        root.log_verbose("Showing all errors...")
        for error in report.errors:
            if _error_is_skipped(error.location):
                continue
            title = error.get_location_title()
            text = f'Error at "{title}": {error.stack}' if title else f"Error: {error.stack}"
            log(click.style(text, fg="bright_red"))
    if report.passed and len(report.passed) == total:
        log(click.style(f"{total} of {total} tests passed.", fg="bright_green"))
    elif report.passed:
        log(f"{len(report.passed)} of {total} tests {click.style('passed', fg='bright_green')}.")
    if report.skipped:
        log(f"{len(report.skipped)} of {total} tests {click.style('skipped', fg='bright_yellow')}.")
    if report.failed:
        log(f"{len(report.failed)} of {total} tests {click.style('failed', fg='bright_red')}.")
        log(click.style("Status: Failed", fg="bright_red"))
    else:
        log(click.style("Status: OK", fg="bright_green"))


async def do_report(root: TestNode, options: ReportOptions | None = None) -> Report:
    """Run a whole tree once and report on it.

    Applies the mode flags, expands every group, applies the combined filter
    if any criterion is given, runs the tree, then logs a summary. Unless
    `keep_alive` is set, the process then exits with status 0 when nothing
    failed and 1 otherwise.

    Args:
        root: The root of the tree to run.
        options: Report options. Defaults to `ReportOptions()`.

    Returns:
        The report. If an unhandled error escaped the process, an empty
        report with `unhandled_error` set.
    """
    options = options or ReportOptions()

    def log(message: str) -> None:
        if not options.silent:
            root.get_log_function()(message)

    try:
        if options.log_function is not None:
            root.set_log_function(options.log_function)
        log("Running tests via Perch...")
        if options.concise:
            root.silent()
        elif options.verbose:
            root.verbose()
        root.expand_groups()
        if (test_filter := build_filter(options, log)) is not None:
            root.apply_filter(test_filter)
        await root.run()
        root.log_verbose("Getting a report...")
        report = root.get_report()
        _log_results(root, report, options, log)
    except Exception as error:  # pylint: disable=broad-except
        logger.exception("Unhandled error while running tests")
        log(click.style("Encountered an unhandled error while running tests.", fg="bright_red"))
        log(click.style("".join(traceback.format_exception(error)), fg="bright_red"))
        log(click.style("Status: Failed", fg="bright_red"))
        report = Report(unhandled_error=error)
    exit_status = EXIT_OK if report.ok else EXIT_FAILED
    if not options.keep_alive:
        root.log_verbose(f"Exiting with status code {exit_status}.")
        sys.exit(exit_status)
    return report
