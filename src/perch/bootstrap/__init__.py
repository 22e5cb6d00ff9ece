"""Bootstrap (composition root) for PERCH.

Assembles the application at runtime: installs the concrete caller-location
provider on `TestNode` and builds the process-wide default root group that
`perch.test`, `perch.group` and friends attach to.

Import rules:
- Entry points and the top-level `perch` package import *this* package.
- This package may import: `perch.adapters`, `perch.service_layer`,
  `perch.interfaces`, `perch.domain`, and `perch.config`.
- Inner layers must not import `perch.bootstrap`.
"""

from .bootstrap import AppContainer, bootstrap

__all__ = ["AppContainer", "bootstrap"]
