"""Service-layer error definitions."""

from pathlib import Path

from perch.domain.errors import PerchError


class TestFileLoadError(PerchError):
    """Raised when a test file cannot be found or fails to import."""

    __test__ = False

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Could not load test file '{path}': {reason}")
        self.path = path
        self.reason = reason
