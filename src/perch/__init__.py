"""PERCH

A hierarchical test runner. Tests, groups and series form a tree that is run
depth-first with a well-defined begin/body/children/end lifecycle, filtered
by name, tag, path or predicate, and summarized in a single report.

The package exposes a process-wide default root group so that test files can
register tests with ``perch.test(...)``, ``perch.group(...)`` and
``perch.series(...)`` and then run them with ``asyncio.run(perch.do_report())``.
"""

from __future__ import annotations

from perch.bootstrap import bootstrap
from perch.config import ReportOptions
from perch.domain.callbacks import CallbackType, TestCallback
from perch.domain.failures import TestError
from perch.domain.node import TestNode
from perch.domain.report import Report
from perch.service_layer import reporting

__all__ = [
    "__version__",
    "CallbackType",
    "Report",
    "ReportOptions",
    "TestCallback",
    "TestError",
    "TestNode",
    "do_report",
    "group",
    "root",
    "series",
    "test",
]
__version__ = "0.1.0"

root: TestNode = bootstrap().root

test = root.test
group = root.group
series = root.series


async def do_report(options: ReportOptions | None = None) -> Report:
    """Run every test registered on the default root and report the results.

    See `perch.service_layer.reporting.do_report`.
    """
    return await reporting.do_report(root, options)
