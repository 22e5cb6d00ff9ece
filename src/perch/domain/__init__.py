"""Domain layer for PERCH.

Contains the test tree itself: nodes, callbacks, error records, filters, the
report aggregator and the summary renderer. This package is deliberately free
of I/O beyond the log function each node is given.

Dependency rule: may import `perch.interfaces`; do not import from
`perch.adapters` or `perch.entrypoints`.
"""
