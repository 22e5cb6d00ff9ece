"""Test errors: records of failures encountered while running a test."""

from __future__ import annotations

import traceback
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeAlias

if TYPE_CHECKING:
    from perch.domain.callbacks import TestCallback
    from perch.domain.node import TestNode

ErrorLocation: TypeAlias = "TestNode | TestCallback"


@dataclass(frozen=True, eq=False)
class TestError:
    """One failure occurrence.

    Attributes:
        test: The test whose `errors` list holds this record.
        error: The exception that was raised.
        location: The test or callback where the error surfaced.
    """

    __test__ = False

    test: TestNode
    error: BaseException
    location: ErrorLocation

    @property
    def message(self) -> str:
        """The exception's message, or an empty string."""
        return str(self.error) if self.error is not None else ""

    @property
    def name(self) -> str:
        """The exception's class name, or an empty string."""
        return type(self.error).__name__ if self.error is not None else ""

    @property
    def stack(self) -> str:
        """The formatted traceback, or an empty string if none was recorded."""
        if self.error is None or self.error.__traceback__ is None:
            return ""
        return "".join(
            traceback.format_exception(
                type(self.error), self.error, self.error.__traceback__
            )
        ).rstrip("\n")

    def get_error(self) -> BaseException:
        """Get the original exception instance that was recorded."""
        return self.error

    def get_location(self) -> ErrorLocation:
        """Get the test or callback where this error took place."""
        return self.location

    def get_location_name(self) -> str:
        """Get a short name for the error location, or "" if unknown."""
        if self.location is None:
            return ""
        return self.location.get_name()

    def get_location_title(self) -> str:
        """Get a fully identifying title for the error location, or "" if unknown."""
        if self.location is None:
            return ""
        return self.location.get_title()

    def get_line(self) -> str:
        """Get the single offending line from the traceback.

        This is the innermost frame, where the exception was actually raised,
        rendered as ``path:line in function``. Returns an empty string when
        no traceback is available.
        """
        if self.error is None or self.error.__traceback__ is None:
            return ""
        frames = traceback.extract_tb(self.error.__traceback__)
        if not frames:
            return ""
        frame = frames[-1]
        return f"{frame.filename}:{frame.lineno} in {frame.name}"
