"""Test callbacks: hooks registered on test groups."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from perch.domain.node import TestNode

CallbackBody: TypeAlias = Callable[["TestNode"], "Awaitable[Any] | Any"]


class CallbackType(Enum):
    """Enumeration of valid test callback types."""

    ON_BEGIN = "onBegin"
    ON_END = "onEnd"
    ON_EACH_BEGIN = "onEachBegin"
    ON_EACH_END = "onEachEnd"
    ON_SUCCESS = "onSuccess"
    ON_FAILURE = "onFailure"
    ON_EACH_SUCCESS = "onEachSuccess"
    ON_EACH_FAILURE = "onEachFailure"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, eq=False)
class TestCallback:
    """One registered hook.

    Attributes:
        type: The lifecycle phase this callback belongs to.
        owner: The test group the callback was registered on.
        name: An identifying name, e.g. "1st onBegin callback".
        body: The function to invoke. It receives the test being run, which
            is the owner itself for onBegin/onEnd/onSuccess/onFailure and the
            child test for the onEach* variants. May return an awaitable.
    """

    __test__ = False

    type: CallbackType
    owner: TestNode
    name: str
    body: CallbackBody | None

    def get_owner(self) -> TestNode:
        """Get the test group to which this callback belongs."""
        return self.owner

    def get_name(self) -> str:
        """Get a short name for this callback."""
        return f"{self.owner.get_name()} => {self.type} ({self.name})"

    def get_title(self) -> str:
        """Get a fully identifying title for this callback."""
        return f"{self.owner.get_title()} => {self.type} ({self.name})"
