"""Global pytest configuration for PERCH."""

from __future__ import annotations

from pathlib import Path

import pytest

# pylint: disable=unused-argument

TESTS_ROOT = Path(__file__).parent.resolve()

# Top-level test folder -> marker added to every test collected under it
FOLDER_MARKERS = {
    "unit": "unit",
    "functional": "functional",
    "e2e": "e2e",
}


pytest_plugins = [
    "tests.fixtures.trees",
]


@pytest.hookimpl(tryfirst=True)
def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Add the default taxonomy mark (unit/functional/e2e) to each collected item."""
    for item in items:
        path = item.path.resolve()  # pytest>=8: pathlib.Path
        try:
            folder = path.relative_to(TESTS_ROOT).parts[0]
        except (ValueError, IndexError):
            continue
        marker_name = FOLDER_MARKERS.get(folder)
        if marker_name is None:
            continue
        if not any(marker.name == marker_name for marker in item.iter_markers()):
            item.add_marker(getattr(pytest.mark, marker_name))
