"""Import test files so that they register their tests.

A test file is an ordinary Python module that attaches tests to the default
root group (``perch.test(...)``, ``perch.group(...)``) at import time.
"""

from __future__ import annotations

import importlib.util
import logging
import sys
from collections.abc import Iterable
from pathlib import Path
from types import ModuleType

from .errors import TestFileLoadError

logger = logging.getLogger(__name__)

MODULE_PREFIX = "perch_test_file"


def _module_name(path: Path, index: int) -> str:
    stem = "".join(char if char.isalnum() else "_" for char in path.stem)
    return f"{MODULE_PREFIX}_{stem}_{index}"


def load_test_file(path: Path, index: int = 0) -> ModuleType:
    """Import a single test file.

    The file's directory is put on `sys.path` first so that it can import
    its sibling modules.

    Args:
        path: Path to a ``.py`` file.
        index: Disambiguates modules loaded from files with the same stem.

    Returns:
        The imported module.

    Raises:
        TestFileLoadError: If the file does not exist or raises on import.
    """
    path = path.resolve()
    if not path.is_file():
        raise TestFileLoadError(path, "no such file")
    name = _module_name(path, index)
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise TestFileLoadError(path, "not an importable Python file")
    directory = str(path.parent)
    if directory not in sys.path:
        sys.path.insert(0, directory)
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    logger.debug("Loading test file %s as module %s", path, name)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(name, None)
        logger.exception("Error while importing test file %s", path)
        raise TestFileLoadError(path, f"{type(e).__name__}: {e}") from e
    return module


def load_test_files(paths: Iterable[Path]) -> list[ModuleType]:
    """Import test files in the given order.

    Raises:
        TestFileLoadError: On the first file that cannot be loaded.
    """
    return [load_test_file(path, index) for index, path in enumerate(paths)]
