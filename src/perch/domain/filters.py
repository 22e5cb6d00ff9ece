"""Builders for test filter predicates.

Filters are plain callables taking a `TestNode` and returning a truthy value
when the test should run. Several filters are combined with logical OR.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any, TypeAlias

from perch.domain.utils import normalize_path

if TYPE_CHECKING:
    from perch.domain.node import TestNode

TestFilter: TypeAlias = Callable[["TestNode"], Any]


def by_names(names: Iterable[str]) -> TestFilter:
    """Match tests whose name is one of `names`."""
    wanted = frozenset(names)
    return lambda test: test.name in wanted


def by_tags(tags: Iterable[str]) -> TestFilter:
    """Match tests that have, or inherit, any of `tags`."""
    wanted = tuple(tags)
    return lambda test: any(test.has_tag(tag) for tag in wanted)


def by_paths(paths: Iterable[str]) -> TestFilter:
    """Match tests defined in one of `paths`.

    Paths are compared after normalization. Tests with an unknown location
    never match.
    """
    wanted = frozenset(normalize_path(path) for path in paths)
    return lambda test: test.file_path is not None and test.file_path in wanted


def any_of(filters: Iterable[TestFilter]) -> TestFilter:
    """Combine filters with logical OR."""
    collected = tuple(filters)
    return lambda test: any(test_filter(test) for test_filter in collected)
