"""Entrypoints (inbound adapters) for PERCH.

Expose the application to the outside world: the ``perch`` command line.
Parse and validate inputs, call service-layer functions, and present results.

Dependency rule: may import `perch.service_layer` and the top-level `perch`
package; avoid importing `perch.adapters` directly.
"""
