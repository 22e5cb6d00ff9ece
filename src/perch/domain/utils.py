"""Domain layer utilities."""

import time


def get_time() -> float:
    """Return a monotonic timestamp in milliseconds."""
    return time.perf_counter() * 1000.0


def get_ordinal(value: int) -> str:
    """Get an ordinal string like "1st", "2nd", "3rd" for an integer.

    Used to produce names for tests and callbacks that were not given a more
    descriptive one. Only the last digit is considered, so 11 becomes "11st".
    """
    last_digit = value % 10
    if last_digit == 1:
        return f"{value}st"
    if last_digit == 2:
        return f"{value}nd"
    if last_digit == 3:
        return f"{value}rd"
    return f"{value}th"


def normalize_path(path: str) -> str:
    """Normalize a file path for comparison.

    Makes all slashes forward slashes, removes trailing and redundant
    slashes, and resolves "." and ".." segments. A leading slash is kept, as
    are leading ".." segments that have nothing left to climb out of.

    Args:
        path: The path to normalize.

    Returns:
        The normalized path. An input of "." is returned unchanged.
    """
    parts = [part for part in path.replace("\\", "/").split("/") if part]
    if parts == ["."]:
        return "."
    resolved: list[str] = []
    for part in parts:
        if part == ".":
            continue
        if part == ".." and resolved and resolved[-1] != "..":
            resolved.pop()
        else:
            resolved.append(part)
    result = "/".join(resolved)
    if path[:1] in ("/", "\\"):
        result = "/" + result
    return result
