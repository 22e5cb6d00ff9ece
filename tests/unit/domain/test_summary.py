"""Unit tests for `perch.domain.summary` and `TestNode.get_summary`."""

from __future__ import annotations

import click
import pytest

from perch.domain.node import TestNode
from perch.domain.summary import describe

# pylint: disable=magic-value-comparison


def _passes(test: TestNode) -> None:  # pylint: disable=unused-argument
    """A body that does nothing."""


def _raises(test: TestNode) -> None:  # pylint: disable=unused-argument
    raise RuntimeError("first line\nsecond line")


@pytest.mark.asyncio
async def test_summary_marks_every_outcome(root):
    """Each test's line shows its outcome; errors list the first message line."""
    root.test("passes", _passes)
    root.test("fails", _raises)
    root.test("later", _passes).todo()
    root.test("never", _passes).ignore()
    await root.run()

    lines = click.unstyle(root.get_summary()).split("\n")
    assert lines[0] == "X root (failed)"
    assert lines[1].startswith("  ✓ passes (")
    assert lines[1].endswith("s)")
    assert lines[2] == "  X fails (1 error)"
    assert lines[3] == "    Error: first line"
    assert "in _raises" in lines[4]
    assert lines[5] == "  - later (TODO)"
    assert lines[6] == "  - never (ignored)"
    assert len(lines) == 7


def test_summary_hides_children_of_skipped_groups(root):
    """Skipped tests are listed, but not what is inside them."""
    group = root.group("group")
    group.test("inner", _passes)
    group.ignore()
    lines = click.unstyle(root.get_summary(indent="-> ", prefix="* ")).split("\n")
    assert lines == ["* - root (skipped)", "* -> - group (ignored)"]


def test_summary_uses_color(root):
    """Summary lines are styled for the terminal."""
    assert root.get_summary() != click.unstyle(root.get_summary())


@pytest.mark.parametrize(
    ("setup", "expected"),
    [
        (lambda t: setattr(t, "filtered", True), "- t (filtered)"),
        (lambda t: setattr(t, "aborted", True), "X t (aborted)"),
        (lambda t: setattr(t, "failed", True), "X t (failed)"),
        (lambda t: setattr(t, "skipped", True), "- t (skipped)"),
        (lambda t: setattr(t, "attempted", True), "X t (terminated unexpectedly)"),
    ],
)
def test_describe_markers(setup, expected):
    """Each combination of state flags has its own marker."""
    test = TestNode("t")
    setup(test)
    assert click.unstyle(describe(test)) == expected


def test_describe_counts_errors():
    """More than one error is pluralized."""
    test = TestNode("t")
    test.add_error(ValueError("a"))
    test.add_error(ValueError("b"))
    assert click.unstyle(describe(test)) == "X t (2 errors)"
