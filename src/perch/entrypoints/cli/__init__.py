"""The ``perch`` command line interface."""
