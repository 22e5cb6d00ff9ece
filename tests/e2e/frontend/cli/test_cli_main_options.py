"""End-to-end CLI tests for the top-level `perch` command.

These tests exercise logging verbosity, logger-level overrides, the version
option, and the in-memory flight-recorder by invoking `perch run` on a small
test file under various CLI flags.
"""

import re
from pathlib import Path

import pytest

from perch import __version__
from perch.entrypoints.cli.main import perch

# pylint: disable=unused-argument,magic-value-comparison

# A test whose body logs through the standard library at every level.
LOGGING_TESTS = """
    import logging

    import perch

    def body(test):
        logger = logging.getLogger("perch.demo")
        logger.debug("This is a debug-level test message.")
        logger.info("This is an info-level test message.")
        logger.warning("This is a warning-level test message.")
        third_party_logger = logging.getLogger("some.thirdparty")
        third_party_logger.debug("This is a debug-level third-party test message.")
        third_party_logger.info("This is an info-level third-party test message.")

    perch.test("logs", body)
"""


def assert_in_output(pattern: str, output: str) -> None:
    """Assert that a regex pattern is found in the output string."""
    if not re.search(pattern, output, re.MULTILINE):
        raise AssertionError(f"Pattern '{pattern}' not found in output:\n{output}")


def assert_not_in_output(pattern: str, output: str) -> None:
    """Assert that a regex pattern is NOT found in the output string."""
    if re.search(pattern, output, re.MULTILINE):
        raise AssertionError(f"Pattern '{pattern}' found in output:\n{output}")


@pytest.fixture
def logging_tests(write_test_file) -> str:
    """Path of a test file that emits log records."""
    return str(write_test_file("test_logging.py", LOGGING_TESTS))


def test_version(runner, fs):
    """`--version` prints the package version."""
    result = runner.invoke(perch, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_lists_the_run_command(runner, fs):
    """The group help mentions the run subcommand."""
    result = runner.invoke(perch, ["--help"])
    assert result.exit_code == 0
    assert "run" in result.output
    assert "PERCH command-line interface." in result.output


def test_default_shows_warning(runner, logging_tests):
    """Default invocation shows WARNING and above but not INFO."""
    result = runner.invoke(perch, ["--no-flight-recorder", "run", logging_tests])
    assert result.exit_code == 0
    assert_in_output("This is a warning-level test message.", result.output)
    assert_not_in_output("This is an info-level test message.", result.output)


def test_verbose_shows_info(runner, logging_tests):
    """Single -v should enable INFO-level console output (but not DEBUG)."""
    result = runner.invoke(perch, ["-v", "--no-flight-recorder", "run", logging_tests])
    assert result.exit_code == 0
    assert_in_output("This is an info-level test message.", result.output)
    assert_not_in_output("This is a debug-level test message.", result.output)


def test_vv_shows_debug(runner, logging_tests):
    """-vv should enable DEBUG-level console output."""
    result = runner.invoke(perch, ["-vv", "--no-flight-recorder", "run", logging_tests])
    assert result.exit_code == 0
    assert_in_output("This is a debug-level test message.", result.output)


def test_quiet_suppresses_warning(runner, logging_tests):
    """-q should lower verbosity so WARNING is suppressed."""
    result = runner.invoke(perch, ["-q", "--no-flight-recorder", "run", logging_tests])
    assert result.exit_code == 0
    assert_not_in_output("This is a warning-level test message.", result.output)


def test_logger_level_silences_debug(runner, logging_tests):
    """Logger-level overrides should silence third-party DEBUG while keeping INFO+."""
    result = runner.invoke(
        perch,
        ["-vv", "-L", "some.thirdparty=INFO", "--no-flight-recorder", "run", logging_tests],
    )
    assert result.exit_code == 0
    assert_not_in_output(
        "This is a debug-level third-party test message.", result.output
    )
    assert_in_output("This is an info-level third-party test message.", result.output)


def test_flight_recorder_flush_on_warning(runner, logging_tests):
    """Flight recorder writes buffered DEBUG logs to disk when a WARNING occurs."""
    log_path = "flight_recorder.log"
    result = runner.invoke(perch, ["--log-path", log_path, "run", logging_tests])
    assert result.exit_code == 0
    content = Path(log_path).read_text(encoding="utf-8")
    assert_in_output("This is a debug-level test message.", content)
    assert_in_output("This is a warning-level test message.", content)


def test_flight_recorder_records_test_lifecycle(runner, logging_tests):
    """The flight recorder keeps each test's lifecycle steps at DEBUG."""
    log_path = "flight_recorder.log"
    result = runner.invoke(
        perch, ["--log-path", log_path, "--force-flush", "run", logging_tests]
    )
    assert result.exit_code == 0
    content = Path(log_path).read_text(encoding="utf-8")
    assert_in_output(r'Beginning to run test "logs"\.', content)
    assert_in_output(r"PERCH \d+\.\d+\.\d+ - console=WARNING, flight-recorder=ON", content)
    assert_in_output(
        r"Flight recorder: path=flight_recorder\.log, capacity=2000, flush_on_close=True",
        content,
    )
    assert_in_output(r"Per-logger overrides: {'asyncio': 'WARNING'}", content)


def test_flight_recorder_can_be_disabled(runner, logging_tests):
    """Disabling the flight recorder should prevent writing the log file."""
    log_path = "flight_recorder.log"
    result = runner.invoke(
        perch, ["--log-path", log_path, "--no-flight-recorder", "run", logging_tests]
    )
    assert result.exit_code == 0
    assert not Path(log_path).exists()
