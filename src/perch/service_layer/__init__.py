"""Service layer for PERCH.

Implements application use-cases: the single top-level reporting run and the
loading of test files. Calls domain objects only.

Dependency rule: may import `perch.domain` and `perch.config`, but not
`perch.adapters` or `perch.entrypoints`.
"""
