"""PERCH test suite.

Folder taxonomy
- unit/         : Isolated, fast checks of a single module/class/function.
- functional/   : User-visible flows (whole test trees run through `do_report`).
- e2e/          : The `perch` command line, invoked through Click's CliRunner.
- fixtures/     : Shared pytest fixtures, loaded as plugins from conftest.
- helpers/      : Shared utilities (no tests here).

General guidance
- Keep unit fast and deterministic; build small trees per test instead of
  sharing one.
- Coroutine tests are marked explicitly with @pytest.mark.asyncio.
- Tests that touch the process-wide default root (`perch.root`) must use the
  `default_root` fixture, which empties it before and after the test.
- Property-based tests live with the layer they exercise and use @pytest.mark.property.
- Suggested markers: unit, functional, e2e, property, slow
"""
