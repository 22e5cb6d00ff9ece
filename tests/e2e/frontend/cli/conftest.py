"""Fixtures and test helpers for end-to-end CLI tests.

Provides a CliRunner, an isolated filesystem per test, and a factory that
writes small PERCH test files into it. Every test here runs against the
process-wide default root, which the `default_root` fixture empties before
and after each test.
"""

from collections.abc import Callable
from pathlib import Path
from textwrap import dedent

import pytest
from click.testing import CliRunner

# pylint: disable=redefined-outer-name,unused-argument


@pytest.fixture
def runner():
    """Return a Click CliRunner for invoking CLI commands in tests."""
    return CliRunner()


@pytest.fixture
def fs(runner, default_root):
    """Provide an isolated filesystem and an empty default root.

    Uses runner.isolated_filesystem() to ensure filesystem side-effects are
    confined to the test.
    """
    with runner.isolated_filesystem():
        yield


@pytest.fixture
def write_test_file(fs) -> Callable[[str, str], Path]:
    """Factory fixture: write a test file into the isolated filesystem.

    Example:
        path = write_test_file("test_math.py", '''
            import perch
            perch.test("adds", lambda test: None)
        ''')
    """

    def _write(name: str, source: str) -> Path:
        path = Path(name)
        path.write_text(dedent(source), encoding="utf-8")
        return path

    return _write
