"""PERCH ``run`` command: load test files, run them, report the results.

Behavior
- Each FILE is imported in order; importing it registers its tests on the
  default root group (``perch.test``, ``perch.group``, ``perch.series``).
- The whole tree is then run once through `do_report`, with any name, tag or
  path criteria combined into a single OR filter.
- The summary goes to **stdout**; the final one-line verdict goes to
  **stderr**.

Exit status
- ``0`` when no test failed, ``1`` otherwise (including unhandled errors).
- A file that cannot be imported aborts before any test runs, with a
  ``ClickException`` (status ``1``).

Examples
    $ perch run tests/test_left_pad.py
    $ perch run tests/*.py --tag slow --concise
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import click

import perch
from perch.config import ReportOptions
from perch.service_layer.errors import TestFileLoadError
from perch.service_layer.loader import load_test_files
from perch.service_layer.reporting import EXIT_FAILED, do_report

from .helpers import error, success, warn

logger = logging.getLogger(__name__)


@click.command(name="run")
@click.argument(
    "files",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--name",
    "-n",
    "names",
    multiple=True,
    envvar="PERCH_NAMES",
    show_envvar=True,
    help="Run only tests with this name, plus their ancestors and descendants. Repeatable.",
)
@click.option(
    "--tag",
    "-t",
    "tags",
    multiple=True,
    envvar="PERCH_TAGS",
    show_envvar=True,
    help="Run only tests with this tag, plus their ancestors and descendants. Repeatable.",
)
@click.option(
    "--path",
    "-p",
    "paths",
    multiple=True,
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="PERCH_PATHS",
    show_envvar=True,
    help="Run only tests defined in this file. Repeatable.",
)
@click.option(
    "--concise/--no-concise",
    default=False,
    envvar="PERCH_CONCISE",
    show_envvar=True,
    help="Report only totals and run every test silently.",
)
@click.option(
    "--verbose/--no-verbose",
    "verbose_tests",
    default=False,
    envvar="PERCH_VERBOSE",
    show_envvar=True,
    help="Run every test verbosely, logging each lifecycle step.",
)
@click.option(
    "--silent",
    is_flag=True,
    default=False,
    help="Suppress the runner's own progress and summary lines.",
)
@click.pass_context
def run(  # pylint: disable=too-many-arguments, too-many-positional-arguments
    ctx: click.Context,
    files: tuple[Path, ...],
    names: tuple[str, ...],
    tags: tuple[str, ...],
    paths: tuple[Path, ...],
    concise: bool,
    verbose_tests: bool,
    silent: bool,
) -> None:
    """Run the tests defined in FILES and report the results."""
    try:
        load_test_files(files)
    except TestFileLoadError as e:
        raise click.ClickException(str(e)) from e

    if not perch.root.get_children():
        warn("No tests were registered by the given files.")

    options = ReportOptions(
        concise=concise,
        verbose=verbose_tests,
        silent=silent,
        keep_alive=True,
        names=list(names) or None,
        tags=list(tags) or None,
        paths=[str(path.resolve()) for path in paths] or None,
    )
    logger.debug("Running %d test file(s) with %s", len(files), options)
    report = asyncio.run(do_report(perch.root, options))

    if report.unhandled_error is not None:
        error("The test run itself failed with an unhandled error.")
        ctx.exit(EXIT_FAILED)
    if report.failed:
        error(f"{len(report.failed)} of {report.total} tests failed.")
        ctx.exit(EXIT_FAILED)
    success(f"{len(report.passed)} of {report.total} tests passed.")
