"""Report aggregation: classify every test in a tree after a run."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from perch.domain.failures import TestError
    from perch.domain.node import TestNode


class Status(str, Enum):
    """Final classification of a test for reporting purposes."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Report:
    """Snapshot of a tree's results.

    Attributes:
        passed: Tests that completed successfully, in depth-first pre-order.
        failed: Tests that were attempted and did not succeed.
        skipped: Tests that were skipped, filtered, or never attempted.
        errors: Every recorded error in the tree, self before children.
        unhandled_error: An error that escaped the reporting process itself.
    """

    passed: tuple[TestNode, ...] = ()
    failed: tuple[TestNode, ...] = ()
    skipped: tuple[TestNode, ...] = ()
    errors: tuple[TestError, ...] = ()
    unhandled_error: BaseException | None = None

    @property
    def total(self) -> int:
        """Number of tests classified by this report."""
        return len(self.passed) + len(self.failed) + len(self.skipped)

    @property
    def ok(self) -> bool:
        """True when nothing failed and no unhandled error occurred."""
        return not self.failed and self.unhandled_error is None


def get_status_string(test: TestNode) -> str:
    """Classify a single test.

    Skipped when it should be skipped or was never attempted; otherwise
    passed when it succeeded, and failed in every other case.
    """
    if test.should_skip() or not test.attempted:
        return Status.SKIPPED.value
    if test.success:
        return Status.PASSED.value
    return Status.FAILED.value


def build_report(test: TestNode) -> Report:
    """Walk a tree and build its report. The tree is not modified."""
    buckets: dict[str, list[TestNode]] = {status.value: [] for status in Status}
    errors: list[TestError] = []
    stack = [test]
    while stack:
        node = stack.pop()
        buckets[get_status_string(node)].append(node)
        errors.extend(node.errors)
        stack.extend(reversed(node.children))
    return Report(
        passed=tuple(buckets[Status.PASSED.value]),
        failed=tuple(buckets[Status.FAILED.value]),
        skipped=tuple(buckets[Status.SKIPPED.value]),
        errors=tuple(errors),
    )
