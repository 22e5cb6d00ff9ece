"""Caller-location providers for PERCH."""

import traceback
from pathlib import Path

from perch.interfaces.location import CallerLocation, CallerLocationProvider

# pylint: disable=too-few-public-methods

PACKAGE_ROOT = Path(__file__).resolve().parents[1]


class StackLocationProvider(CallerLocationProvider):
    """Locate the caller by walking the current call stack.

    Frames that belong to the perch package itself (or to any of the
    additional `skip_roots`) are skipped, so the first remaining frame,
    innermost first, is the test author's code.
    """

    def __init__(self, skip_roots: tuple[Path, ...] = ()) -> None:
        self._skip_roots = (PACKAGE_ROOT, *skip_roots)

    def locate(self) -> CallerLocation | None:
        """Return the innermost frame outside the skipped roots."""
        for frame in reversed(traceback.extract_stack()):
            if self._is_skipped(frame.filename):
                continue
            return CallerLocation(
                file_path=frame.filename,
                line=frame.lineno,
                column=_column_of(frame),
            )
        return None

    def _is_skipped(self, filename: str) -> bool:
        try:
            path = Path(filename).resolve()
        except (OSError, ValueError):
            return False
        return any(
            root == path or root in path.parents for root in self._skip_roots
        )


class NullLocationProvider(CallerLocationProvider):
    """A provider for runtimes without usable stack information.

    Always reports an unknown location.
    """

    def locate(self) -> CallerLocation | None:
        """Return None."""
        return None


def _column_of(frame: traceback.FrameSummary) -> int | None:
    # FrameSummary.colno is 0-based and only present on Python 3.11+
    colno = getattr(frame, "colno", None)
    return colno + 1 if colno is not None else None
