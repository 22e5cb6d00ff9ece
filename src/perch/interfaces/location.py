"""Interface for caller-location providers."""

import abc
from dataclasses import dataclass

# pylint: disable=too-few-public-methods


@dataclass(frozen=True)
class CallerLocation:
    """Where a test was defined.

    `line` and `column` are None when the runtime could not report them.
    """

    file_path: str
    line: int | None = None
    column: int | None = None


class CallerLocationProvider(abc.ABC):
    """Contract for inferring the source location of a test definition."""

    @abc.abstractmethod
    def locate(self) -> CallerLocation | None:
        """Return the location of the code that is defining a test.

        Returns:
            The caller's location, or None when it cannot be determined.
        """
