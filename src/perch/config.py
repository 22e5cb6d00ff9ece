"""Configuration utilities for PERCH.

This module centralizes the options accepted by `do_report` and the
environment variables that can supply them.
"""

from __future__ import annotations

import os
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from perch.domain.filters import TestFilter

ENV_NAMES = "PERCH_NAMES"
ENV_TAGS = "PERCH_TAGS"
ENV_PATHS = "PERCH_PATHS"
ENV_CONCISE = "PERCH_CONCISE"
ENV_VERBOSE = "PERCH_VERBOSE"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class ReportOptions:  # pylint: disable=too-many-instance-attributes
    """Options for a single top-level run via `do_report`.

    Attributes:
        concise: Report only a little, and run every test silently.
        verbose: Run every test verbosely.
        silent: Suppress the reporter's own log lines.
        keep_alive: Return the report instead of exiting the process.
        filter: Run only tests satisfying this predicate (or related to one).
        names: Run only tests with one of these names (or related to one).
        tags: Run only tests with one of these tags (or related to one).
        paths: Run only tests defined in one of these files.
        log_function: Where log output goes. Defaults to each test's own.
    """

    concise: bool = False
    verbose: bool = False
    silent: bool = False
    keep_alive: bool = False
    filter: TestFilter | None = None
    names: list[str] | None = None
    tags: list[str] | None = None
    paths: list[str] | None = None
    log_function: Callable[[str], Any] | None = field(default=None, repr=False)


def split_list(value: str) -> list[str]:
    """Split a comma and/or whitespace separated list, dropping empty items."""
    return [item for item in re.split(r"[,\s]+", value) if item]


def _flag(value: str | None) -> bool:
    return value is not None and value.strip().lower() in _TRUTHY


def options_from_env(environ: Mapping[str, str] | None = None) -> ReportOptions:
    """Build report options from ``PERCH_*`` environment variables.

    ``PERCH_NAMES``, ``PERCH_TAGS`` and ``PERCH_PATHS`` hold comma/space
    separated lists; ``PERCH_CONCISE`` and ``PERCH_VERBOSE`` are flags
    enabled by "1", "true", "yes" or "on".

    Args:
        environ: Mapping to read from. Defaults to `os.environ`.

    Returns:
        Options with only the environment-supplied values set.
    """
    env = os.environ if environ is None else environ
    options = ReportOptions(
        concise=_flag(env.get(ENV_CONCISE)),
        verbose=_flag(env.get(ENV_VERBOSE)),
    )
    if names := env.get(ENV_NAMES):
        options.names = split_list(names)
    if tags := env.get(ENV_TAGS):
        options.tags = split_list(tags)
    if paths := env.get(ENV_PATHS):
        options.paths = split_list(paths)
    return options
