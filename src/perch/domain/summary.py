"""Human-readable, hierarchical summary of a test tree's results."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from perch.domain.node import TestNode


def _red(text: str) -> str:
    return click.style(text, fg="bright_red")


def _green(text: str) -> str:
    return click.style(text, fg="bright_green")


def _yellow(text: str) -> str:
    return click.style(text, fg="bright_yellow")


def describe(test: TestNode) -> str:
    """Get the colored one-line status of a single test, without indentation."""
    name = test.name
    if test.filtered:
        return _yellow(f"- {name} (filtered)")
    if test.is_ignored:
        return _yellow(f"- {name} (ignored)")
    if test.is_todo:
        return _yellow(f"- {name} (TODO)")
    if test.success:
        return _green(f"✓ {name} ({test.get_duration_seconds():.3f}s)")
    if test.errors:
        noun = "error" if len(test.errors) == 1 else "errors"
        return _red(f"X {name} ({len(test.errors)} {noun})")
    if test.aborted:
        return _red(f"X {name} (aborted)")
    if test.failed:
        return _red(f"X {name} (failed)")
    if test.failed_children:
        return _red(f"X {name} (failed child test)")
    if test.skipped or not test.attempted:
        return _yellow(f"- {name} (skipped)")
    return _red(f"X {name} (terminated unexpectedly)")


def render_summary(test: TestNode, indent: str = "  ", prefix: str = "") -> str:
    """Render a test and its descendants, one line each.

    Each recorded error is listed under its test with the first line of its
    message and the line it was raised from. Children of skipped tests are
    not listed.
    """
    lines = [prefix + describe(test)]
    if not test.should_skip():
        for error in test.errors:
            first_line = error.message.split("\n")[0].strip()
            lines.append(_red(f"{prefix}{indent}Error: {first_line}"))
            lines.append(_red(f"{prefix}{indent}{indent}{error.get_line()}"))
        for child in test.children:
            lines.append(render_summary(child, indent=indent, prefix=prefix + indent))
    return "\n".join(lines)
