"""Interfaces (application boundary) for PERCH.

Defines framework-free contracts (ABCs and small DTOs) that the domain
depends on and adapters implement, such as the caller-location provider.

Dependency rule: this package is independent; do not import from any
`perch.*` modules.
"""
