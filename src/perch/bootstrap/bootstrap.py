"""Wire the location provider and build the default root group."""

from __future__ import annotations

from dataclasses import dataclass

from perch.adapters.location import StackLocationProvider
from perch.domain.node import TestNode
from perch.interfaces.location import CallerLocationProvider

DEFAULT_ROOT_NAME = "Perch"


@dataclass(frozen=True)
class AppContainer:
    """A class to hold application wiring constants."""

    root: TestNode
    location_provider: CallerLocationProvider


def bootstrap(
    location_provider: CallerLocationProvider | None = None,
    root_name: str = DEFAULT_ROOT_NAME,
) -> AppContainer:
    """Install a location provider and build a fresh root group.

    Args:
        location_provider: Provider for test definition sites. Defaults to
            stack inspection.
        root_name: Name of the root group.

    Returns:
        The wired container.
    """
    provider = location_provider or StackLocationProvider()
    TestNode.location_provider = provider
    return AppContainer(root=TestNode.new_group(root_name), location_provider=provider)
