"""Domain-layer error definitions."""

# ============================================================================
#                           General domain errors
# ============================================================================


class PerchError(Exception):
    """Base class for PERCH errors."""


# ============================================================================
#                   Structural errors (raised to the caller)
# ============================================================================


class StructuralError(PerchError):
    """Raised synchronously for invalid use of the tree-construction API."""


class NotAGroupError(StructuralError):
    """Raised when a callback or child test is attached to a non-group test."""

    def __init__(self, test_name: str, what: str) -> None:
        super().__init__(
            f"{what} can only be added to test groups, "
            f"but test '{test_name}' is not a group."
        )
        self.test_name = test_name
        self.what = what


# ============================================================================
#                   Run-time errors (recorded, never raised)
# ============================================================================


class MissingCallbackBodyError(PerchError):
    """Recorded against a registered callback that has no implementation."""

    def __init__(self, callback_name: str) -> None:
        super().__init__(f"Callback '{callback_name}' has no implementation.")
        self.callback_name = callback_name
