"""Adapters (infrastructure) for PERCH.

Provide concrete implementations of the contracts in `perch.interfaces`,
such as call-stack inspection for test locations.

Dependency rule: may import `perch.interfaces` and `perch.domain`; the domain
must not import this package.
"""
