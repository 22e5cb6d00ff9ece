"""Test nodes: the tree of tests, groups and series, and their lifecycle.

A `TestNode` is one entry in a test tree. Leaf nodes carry test code in their
body function. Groups carry registration code in their body instead: it is
evaluated once ("expanded") to attach child tests and callbacks, and the
children are then run in declaration order. A series is a group that stops at
the first failing child.

Running a node walks this sequence::

    parent's onEachBegin -> onBegin -> body / children
        -> onSuccess, parent's onEachSuccess   (no errors, no failed children)
        or onFailure, parent's onEachFailure   (otherwise)
        -> onEnd -> parent's onEachEnd

Every fault raised by a body or callback is recorded as a `TestError` on the
node where it happened. `run()` never raises; only invalid use of the
construction API (e.g. adding callbacks to a non-group) raises to the caller.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any, ClassVar, TypeAlias

import click

from perch.domain import report as report_module
from perch.domain import summary as summary_module
from perch.domain.callbacks import CallbackBody, CallbackType, TestCallback
from perch.domain.errors import MissingCallbackBodyError, NotAGroupError
from perch.domain.failures import ErrorLocation, TestError
from perch.domain.filters import TestFilter
from perch.domain.utils import get_ordinal, get_time, normalize_path

if TYPE_CHECKING:
    from perch.domain.report import Report
    from perch.interfaces.location import CallerLocationProvider

# pylint: disable=too-many-instance-attributes, too-many-public-methods

logger = logging.getLogger(__name__)

TestBody: TypeAlias = Callable[["TestNode"], Any]
LogFunction: TypeAlias = Callable[[str], Any]


def _split_name_and_body(
    name: str | Callable[..., Any] | None, body: Callable[..., Any] | None
) -> tuple[str | None, Callable[..., Any] | None]:
    """Support both ``f(body)`` and ``f(name, body)`` call forms."""
    if name is not None and not isinstance(name, str) and body is None:
        return None, name
    return name, body  # type: ignore[return-value]


class TestNode:
    """A test, test group or test series.

    Attributes:
        name: The test's name. Not required to be unique.
        body: The test's body function, called with the node itself. For a
            group it only registers children and callbacks and must be
            synchronous; for a leaf it may return an awaitable.
        parent: The group this test was added to, if any.
        children: Child tests, in declaration (and execution) order.
        attempted: Set when the test is initialized, i.e. about to be run.
        skipped: Set when the test was skipped (todo, ignored or filtered).
        success: True on completion, False on failure, None before.
        aborted: True when the run was cut short by an error.
        failed: True when the test failed for any reason, aborted or not.
        filtered: Set by `apply_filter` on tests that do not satisfy it.
        errors: Errors recorded while running this test (not its children).
        failed_children: Children that ended failed or aborted.
        callbacks: Registered callbacks, keyed by callback type.
        file_path: Normalized path of the file where the test was defined,
            or None when the location is unknown.
    """

    __test__ = False

    location_provider: ClassVar[CallerLocationProvider | None] = None
    """Provider used to record where each new test is defined.

    Installed by `perch.bootstrap`; when unset, locations are unknown.
    """

    def __init__(self, name: str, body: TestBody | None = None) -> None:
        self.name: str = name
        self.body: TestBody | None = body
        self.parent: TestNode | None = None
        self.children: list[TestNode] = []
        self.own_tags: set[str] = set()
        self.callbacks: dict[CallbackType, list[TestCallback]] = {
            callback_type: [] for callback_type in CallbackType
        }
        self.log_function: LogFunction = click.echo

        self.is_group: bool = False
        self.is_series: bool = False
        self.is_todo: bool = False
        self.is_ignored: bool = False
        self.is_verbose: bool = False
        self.is_silent: bool = False
        self.is_expanded_group: bool = False

        self.attempted: bool = False
        self.skipped: bool = False
        self.filtered: bool = False
        self.success: bool | None = None
        self.aborted: bool | None = None
        self.failed: bool | None = None
        self.start_time: float | None = None
        self.end_time: float | None = None
        self.expand_time: float | None = None
        self.errors: list[TestError] = []
        self.failed_children: list[TestNode] = []
        self.body_returned_value: Any = None
        self.body_returned_value_resolved: Any = None

        # Group whose body is being evaluated; only tracked on the tree root.
        self._expanding_group: TestNode | None = None
        self._in_end_phase: bool = False

        self.file_path: str | None = None
        self.line: int | None = None
        self.column: int | None = None
        provider = type(self).location_provider
        location = provider.locate() if provider is not None else None
        if location is not None and location.file_path:
            self.file_path = normalize_path(location.file_path)
            self.line = location.line
            self.column = location.column

    def __repr__(self) -> str:
        kind = "series" if self.is_series else "group" if self.is_group else "test"
        return f"<TestNode {kind} {self.name!r}>"

    # --- Construction Paths ---

    @classmethod
    def new_group(cls, name: str, body: TestBody | None = None) -> TestNode:
        """Create a standalone test group, e.g. to serve as a tree root."""
        group = cls(name, body)
        group.is_group = True
        return group

    @classmethod
    def new_series(cls, name: str, body: TestBody | None = None) -> TestNode:
        """Create a standalone test series."""
        series = cls.new_group(name, body)
        series.is_series = True
        return series

    def test(
        self, name: str | TestBody | None = None, body: TestBody | None = None
    ) -> TestNode:
        """Create a test and add it as a child of this group.

        Can be called as ``test(body)`` or ``test(name, body)``. Unnamed
        tests get an ordinal name such as "2nd child test".

        Raises:
            NotAGroupError: If this test is not a group.
        """
        use_name, use_body = _split_name_and_body(name, body)
        if not use_name:
            use_name = f"{get_ordinal(len(self.children) + 1)} child test"
        child = type(self)(use_name, use_body)
        self.add_test(child)
        child.is_todo = self.is_todo
        child.is_ignored = self.is_ignored
        child.is_silent = self.is_silent
        child.is_verbose = self.is_verbose
        child.log_function = self.log_function
        expanding = self.get_root()._expanding_group  # pylint: disable=protected-access
        if expanding is not None and expanding is not self:
            message = (
                f'Warning: Adding test "{use_name}" to a group other than '
                f'"{expanding.get_title()}" even though the operation is taking '
                "place in that group's body function. This is probably unintended!"
            )
            logger.warning(message)
            self.log(click.style(message, fg="bright_yellow"))
        return child

    def group(self, name: str, body: TestBody | None = None) -> TestNode:
        """Create a test group and add it as a child of this group.

        A group body should only add child tests and callbacks, and must be
        synchronous.
        """
        child = self.test(name, body)
        child.is_group = True
        return child

    def series(self, name: str, body: TestBody | None = None) -> TestNode:
        """Create a test series and add it as a child of this group.

        A series aborts its remaining children at the first child failure.
        """
        child = self.group(name, body)
        child.is_series = True
        return child

    # --- Structure ---

    def add_test(self, child: TestNode) -> None:
        """Add an existing test as the last child of this group.

        A child that belongs to another parent is orphaned from it first.

        Raises:
            NotAGroupError: If this test is not a group.
        """
        self.log_verbose(
            f'Adding test "{child.name}" as a child of parent "{self.name}".'
        )
        if child.parent is self:
            return
        if not self.is_group:
            raise NotAGroupError(self.name, "Tests")
        if child.parent is not None:
            child.orphan()
        child.parent = self
        self.children.append(child)

    def orphan(self) -> bool:
        """Remove this test from its parent.

        Returns:
            True if the test was removed, False if it had no parent.
        """
        if self.parent is None:
            return False
        self.log_verbose(
            f'Orphaning test "{self.name}" from its parent "{self.parent.name}".'
        )
        return self.parent.remove_test(self)

    def remove_test(self, child: TestNode) -> bool:
        """Remove a test from this test's children or from any descendant.

        Returns:
            True if the test was found and removed, False otherwise.
        """
        self.log_verbose(
            f'Removing child test "{child.name}" from parent test "{self.name}".'
        )
        for index, candidate in enumerate(self.children):
            if candidate is child:
                child.parent = None
                del self.children[index]
                return True
        return any(search.remove_test(child) for search in self.children)

    def remove_all_tests(self) -> None:
        """Remove every child test."""
        self.log_verbose(f'Removing all child tests from "{self.name}".')
        for child in self.children:
            child.parent = None
        self.children = []

    def get_parent(self) -> TestNode | None:
        """Get the parent test."""
        return self.parent

    def get_root(self) -> TestNode:
        """Get the root of the tree this test belongs to."""
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def get_children(self) -> list[TestNode]:
        """Get the child tests, expanding this group first if needed."""
        if self.is_group and not self.is_expanded_group:
            self.expand_groups()
        return self.children

    # --- Identity ---

    def get_name(self) -> str:
        """Get the name of this test."""
        return self.name

    def get_title(self) -> str:
        """Get a string identifying this test within its tree.

        Ancestor names are joined with " => ". The root's name is omitted.
        """
        title = self.name or ""
        node = self.parent
        while node is not None:
            if node.parent is not None and node.name:
                title = f"{node.name} => {title}"
            node = node.parent
        return title

    def tags(self, *names: str) -> None:
        """Assign tags to this test. Descendants inherit them."""
        for tag in names:
            self.own_tags.add(str(tag))

    def get_tags(self) -> list[str]:
        """Get this test's tags, including those inherited from ancestors."""
        tags: set[str] = set()
        node: TestNode | None = self
        while node is not None:
            tags |= node.own_tags
            node = node.parent
        return sorted(tags)

    def has_tag(self, tag: str) -> bool:
        """Whether this test or any of its ancestors has the given tag."""
        node: TestNode | None = self
        while node is not None:
            if tag in node.own_tags:
                return True
            node = node.parent
        return False

    # --- Flags ---

    def todo(self) -> None:
        """Mark this test and its children as TODO. They will be skipped."""
        self.log_verbose(f'Marking test "{self.name}" as todo.')
        self.is_todo = True
        for child in self.children:
            child.todo()

    def remove_todo(self) -> None:
        """Remove the TODO mark from this test and its children."""
        self.log_verbose(f'Removing todo status from test "{self.name}".')
        self.is_todo = False
        for child in self.children:
            child.remove_todo()

    def ignore(self) -> None:
        """Mark this test and its children as ignored. They will be skipped."""
        self.log_verbose(f'Marking test "{self.name}" as ignored.')
        self.is_ignored = True
        for child in self.children:
            child.ignore()

    def unignore(self) -> None:
        """Mark this test and its children as not ignored."""
        self.log_verbose(f'Marking test "{self.name}" as unignored.')
        self.is_ignored = False
        for child in self.children:
            child.unignore()

    def silent(self) -> None:
        """Silence this test and its children: they log nothing."""
        self.is_silent = True
        for child in self.children:
            child.silent()

    def not_silent(self) -> None:
        """Un-silence this test and its children."""
        self.is_silent = False
        for child in self.children:
            child.not_silent()

    def verbose(self) -> None:
        """Make this test and its children verbose. Also un-silences them."""
        self.is_verbose = True
        self.is_silent = False
        for child in self.children:
            child.verbose()

    def not_verbose(self) -> None:
        """Make this test and its children not verbose."""
        self.is_verbose = False
        for child in self.children:
            child.not_verbose()

    def should_skip(self) -> bool:
        """Whether the test should be skipped: todo, ignored or filtered."""
        return self.is_todo or self.is_ignored or self.filtered

    # --- Logging ---

    def get_log_function(self) -> LogFunction:
        """Get the function that receives this test's log messages."""
        return self.log_function

    def set_log_function(self, log_function: LogFunction) -> None:
        """Set the log function for this test and all of its children."""
        self.log_function = log_function
        for child in self.children:
            child.set_log_function(log_function)

    def log(self, message: str) -> None:
        """Log a message, unless the test is silent."""
        if not self.is_silent:
            self.log_function(message)

    def log_verbose(self, message: str) -> None:
        """Log a message only when the test is verbose and not silent.

        The message always reaches the module logger at DEBUG level.
        """
        logger.debug(click.unstyle(message))
        if self.is_verbose and not self.is_silent:
            self.log_function(message)

    # --- Results ---

    def get_duration_milliseconds(self) -> float:
        """How long the test took to run, in milliseconds. 0 if it hasn't run."""
        if self.start_time is None or self.end_time is None:
            return 0
        return self.end_time - self.start_time

    def get_duration_seconds(self) -> float:
        """How long the test took to run, in seconds. 0 if it hasn't run."""
        return self.get_duration_milliseconds() * 0.001

    def any_errors(self) -> bool:
        """True when at least one error has been recorded for this test."""
        return bool(self.errors)

    def no_errors(self) -> bool:
        """True when no error has been recorded for this test."""
        return not self.errors

    def get_errors(self) -> list[TestError]:
        """Get the errors recorded for this test so far."""
        return self.errors

    def any_failed_children(self) -> bool:
        """True when any child test has failed."""
        return bool(self.failed_children)

    def no_failed_children(self) -> bool:
        """True when no child test has failed."""
        return not self.failed_children

    def get_failed_children(self) -> list[TestNode]:
        """Get the children that failed."""
        return self.failed_children

    def add_error(
        self, error: BaseException, location: ErrorLocation | None = None
    ) -> TestError:
        """Record an error against this test.

        Args:
            error: The exception that was raised.
            location: The test or callback where it surfaced. Defaults to
                this test.

        Returns:
            The recorded error.
        """
        self.log(
            click.style(
                f'Encountered an error while running test "{self.name}":\n  {error}',
                fg="bright_red",
            )
        )
        test_error = TestError(self, error, location if location is not None else self)
        self.errors.append(test_error)
        return test_error

    def get_status_string(self) -> str:
        """Get "passed", "failed" or "skipped" for this test."""
        return report_module.get_status_string(self)

    def get_report(self) -> Report:
        """Classify every test in this tree and collect all errors."""
        self.log_verbose(f'Generating a report object for test "{self.name}"...')
        return report_module.build_report(self)

    def get_summary(self, indent: str = "  ", prefix: str = "") -> str:
        """Get a hierarchical, colored summary of this tree's results."""
        self.log_verbose(f'Generating a summary string for test "{self.name}"...')
        return summary_module.render_summary(self, indent=indent, prefix=prefix)

    # --- Callbacks ---

    def add_callback(
        self, callback_type: CallbackType, name: str | None, body: CallbackBody | None
    ) -> TestCallback:
        """Register a callback of the given type on this group.

        Raises:
            NotAGroupError: If this test is not a group.
        """
        self.log_verbose(f'Adding "{callback_type}" callback to test "{self.name}"...')
        if not self.is_group:
            raise NotAGroupError(self.name, "Callbacks")
        callback_list = self.callbacks[callback_type]
        use_name = name or (
            f"{get_ordinal(len(callback_list) + 1)} {callback_type} callback"
        )
        callback = TestCallback(callback_type, self, use_name, body)
        callback_list.append(callback)
        self.log_verbose(
            f'Added "{callback_type}" callback named "{use_name}" '
            f'to test "{self.name}".'
        )
        return callback

    def on_begin(
        self, name: str | CallbackBody, body: CallbackBody | None = None
    ) -> TestCallback:
        """Add a callback that runs before this group's children."""
        return self.add_callback(CallbackType.ON_BEGIN, *_split_name_and_body(name, body))

    def on_end(
        self, name: str | CallbackBody, body: CallbackBody | None = None
    ) -> TestCallback:
        """Add a callback that runs after this group ends, whatever the outcome."""
        return self.add_callback(CallbackType.ON_END, *_split_name_and_body(name, body))

    def on_each_begin(
        self, name: str | CallbackBody, body: CallbackBody | None = None
    ) -> TestCallback:
        """Add a callback that runs before each child test."""
        return self.add_callback(
            CallbackType.ON_EACH_BEGIN, *_split_name_and_body(name, body)
        )

    def on_each_end(
        self, name: str | CallbackBody, body: CallbackBody | None = None
    ) -> TestCallback:
        """Add a callback that runs after each child test ends."""
        return self.add_callback(
            CallbackType.ON_EACH_END, *_split_name_and_body(name, body)
        )

    def on_success(
        self, name: str | CallbackBody, body: CallbackBody | None = None
    ) -> TestCallback:
        """Add a callback that runs when this group completes successfully."""
        return self.add_callback(
            CallbackType.ON_SUCCESS, *_split_name_and_body(name, body)
        )

    def on_failure(
        self, name: str | CallbackBody, body: CallbackBody | None = None
    ) -> TestCallback:
        """Add a callback that runs when this group fails or is aborted."""
        return self.add_callback(
            CallbackType.ON_FAILURE, *_split_name_and_body(name, body)
        )

    def on_each_success(
        self, name: str | CallbackBody, body: CallbackBody | None = None
    ) -> TestCallback:
        """Add a callback that runs after each child test that succeeds."""
        return self.add_callback(
            CallbackType.ON_EACH_SUCCESS, *_split_name_and_body(name, body)
        )

    def on_each_failure(
        self, name: str | CallbackBody, body: CallbackBody | None = None
    ) -> TestCallback:
        """Add a callback that runs after each child test that fails."""
        return self.add_callback(
            CallbackType.ON_EACH_FAILURE, *_split_name_and_body(name, body)
        )

    async def run_callbacks(
        self, exit_on_error: bool, callbacks: Sequence[TestCallback]
    ) -> None:
        """Invoke callbacks in registration order, with this test as argument.

        Faults are recorded as errors located at the callback and never
        propagate. When `exit_on_error` is set, the remaining callbacks are
        skipped as soon as this test has errors or has been aborted or failed.
        """
        for callback in callbacks:
            if exit_on_error and self._is_halted():
                return
            if callback.body is None:
                self.add_error(MissingCallbackBodyError(callback.get_name()), callback)
                continue
            try:
                result = callback.body(self)
                if inspect.isawaitable(result):
                    await result
            except Exception as error:  # pylint: disable=broad-except
                self.add_error(error, callback)

    async def do_begin_callbacks(self) -> None:
        """Run the parent's onEachBegin callbacks, then this test's onBegin."""
        if self.parent is not None:
            each_begin = self.parent.callbacks[CallbackType.ON_EACH_BEGIN]
            self.log_verbose(
                f"Executing parent's {len(each_begin)} onEachBegin callbacks "
                f'for test "{self.name}".'
            )
            await self.run_callbacks(True, each_begin)
        if not self._is_halted():
            on_begin = self.callbacks[CallbackType.ON_BEGIN]
            self.log_verbose(
                f'Executing {len(on_begin)} onBegin callbacks for test "{self.name}".'
            )
            await self.run_callbacks(True, on_begin)
        elif self.parent is not None:
            self.log_verbose(
                f'Skipping onBegin callbacks for test "{self.name}" due to '
                "errors encountered while running onEachBegin callbacks."
            )

    async def do_end_callbacks(self) -> None:
        """Run the outcome callbacks, then onEnd and the parent's onEachEnd.

        Outcome callbacks are onSuccess and the parent's onEachSuccess when
        the test succeeded, or onFailure and the parent's onEachFailure
        otherwise. Every list runs to the end even if callbacks fail.
        """
        if self.success:
            own_type, each_type = CallbackType.ON_SUCCESS, CallbackType.ON_EACH_SUCCESS
        else:
            own_type, each_type = CallbackType.ON_FAILURE, CallbackType.ON_EACH_FAILURE
        self._in_end_phase = True
        try:
            for own, each in (
                (own_type, each_type),
                (CallbackType.ON_END, CallbackType.ON_EACH_END),
            ):
                self.log_verbose(
                    f"Executing {len(self.callbacks[own])} {own} callbacks "
                    f'for test "{self.name}".'
                )
                await self.run_callbacks(False, self.callbacks[own])
                if self.parent is not None:
                    self.log_verbose(
                        f"Executing parent's {len(self.parent.callbacks[each])} "
                        f'{each} callbacks for test "{self.name}".'
                    )
                    await self.run_callbacks(False, self.parent.callbacks[each])
        finally:
            self._in_end_phase = False

    # --- State Transitions ---

    def _is_halted(self) -> bool:
        return bool(self.aborted or self.failed or self.errors)

    def initialize(self) -> None:
        """Mark the test as attempted and record its start time."""
        self.log_verbose(f'Initializing test "{self.name}"...')
        self.start_time = get_time()
        self.attempted = True

    def skip(self) -> None:
        """Mark the test as skipped."""
        self.log_verbose(f'Skipping test "{self.name}".')
        self.skipped = True
        self.end_time = get_time()

    async def fail(
        self, error: BaseException | None = None, location: ErrorLocation | None = None
    ) -> None:
        """Fail the test, optionally recording the error that caused it.

        A failed test ran, but ended in an error state anyway, e.g. a group
        with failing children. Does nothing if the test already failed. When
        called from an end-phase callback, the state is updated but the end
        callbacks are not run a second time.
        """
        self.log_verbose(f'Beginning to fail test "{self.name}"...')
        if self.failed:
            self.log_verbose("Ignoring because the test already failed.")
            return
        self.failed = True
        self.success = False
        if error is not None:
            self.add_error(error, location)
        self.log(f'Failing test "{self.name}".')
        if self._in_end_phase:
            return
        await self.do_end_callbacks()
        self.end_time = get_time()

    async def abort(
        self, error: BaseException | None = None, location: ErrorLocation | None = None
    ) -> None:
        """Abort the test: fail it and flag that it was cut short."""
        self.log_verbose(f'Beginning to abort test "{self.name}"...')
        if not self.failed:
            self.aborted = True
            await self.fail(error, location)

    async def exit_test_group(self, child: TestNode) -> None:
        """Abort this group because of a failed child test."""
        self.log_verbose(
            f'Beginning to exit test group "{self.name}" due to a failed child test.'
        )
        if not self.failed:
            self.failed_children.append(child)
            await self.abort()

    async def complete(self) -> None:
        """Mark the test as successful and run its end callbacks.

        If an end callback records an error or aborts the test, the test is
        marked as failed afterwards.
        """
        self.log_verbose(f'Beginning to set success state on test "{self.name}".')
        self.success = True
        self.failed = False
        self.aborted = False
        await self.do_end_callbacks()
        self.end_time = get_time()
        if self.errors or self.failed:
            self.failed = True
            self.success = False
            return
        duration = f"{self.get_duration_seconds():.3f}"
        kind = "test group" if self.is_group else "test"
        self.log(f'Completed {kind} "{self.get_title()}". ({duration}s)')

    # --- Expansion & Filtering ---

    def expand_groups(self) -> None:
        """Evaluate every unexpanded group body in this tree exactly once.

        A body that raises is recorded as an error on its group, which is
        marked attempted and aborted with zero duration, as if it had been
        run and failed immediately.
        """
        self.log_verbose(f'Expanding test groups belonging to test "{self.name}"...')
        try:
            if self.is_group and not self.is_expanded_group:
                self.expand_time = get_time()
                self.is_expanded_group = True
                if self.body is not None:
                    self._evaluate_group_body()
                self.log_verbose(
                    f'Test group "{self.name}" has {len(self.children)} '
                    "child tests after expansion."
                )
            for child in self.children:
                child.expand_groups()
        except Exception as error:  # pylint: disable=broad-except
            self.add_error(error, self)
            self.attempted = True
            self.aborted = True
            self.start_time = get_time()
            self.end_time = self.start_time

    def _evaluate_group_body(self) -> None:
        assert self.body is not None
        root = self.get_root()
        previous = root._expanding_group  # pylint: disable=protected-access
        root._expanding_group = self  # pylint: disable=protected-access
        try:
            self.body_returned_value = self.body(self)
        finally:
            root._expanding_group = previous  # pylint: disable=protected-access
        if inspect.isawaitable(self.body_returned_value):
            logger.warning(
                "The body function of test group %r returned an awaitable; "
                "group bodies must be synchronous.",
                self.name,
            )
            self.log_verbose(
                f'The body function of test group "{self.name}" returned '
                "an awaitable. This might be a mistake!"
            )
            close = getattr(self.body_returned_value, "close", None)
            if close is not None:
                close()

    def apply_filter(self, test_filter: TestFilter) -> bool:
        """Mark tests that should not run because of a filter.

        A test satisfies the filter if the filter returns true for it, or if
        any descendant satisfies it. Tests that satisfy it neither way are
        marked `filtered`. Descendants of a satisfying test are left alone.

        Returns:
            Whether this test satisfied the filter.
        """
        self.log_verbose(f'Applying a filter function to test "{self.name}"...')
        if self.is_group and not self.is_expanded_group:
            self.expand_groups()
        if test_filter(self):
            self.log_verbose(f'Test "{self.name}" satisfied the filter.')
            return True
        any_child_satisfies = False
        for child in self.children:
            if child.apply_filter(test_filter):
                any_child_satisfies = True
        if any_child_satisfies:
            self.log_verbose(f'Test "{self.name}" satisfied the filter via a child.')
            return True
        self.filtered = True
        self.log_verbose(f'Test "{self.name}" did not satisfy the filter.')
        return False

    def reset_filter(self) -> None:
        """Undo `apply_filter` on this test and its descendants."""
        self.log_verbose(f'Resetting filtered state for test "{self.name}".')
        self.filtered = False
        for child in self.children:
            child.reset_filter()

    def reset(self) -> None:
        """Clear the run state of this test and its descendants.

        Structure, flags, tags and filtering are kept, so the tree can be
        run again.
        """
        self.log_verbose(f'Resetting test "{self.name}".')
        self.attempted = False
        self.skipped = False
        self.success = None
        self.aborted = None
        self.failed = None
        self.start_time = None
        self.end_time = None
        self.errors = []
        self.failed_children = []
        for child in self.children:
            child.reset()

    # --- Running ---

    async def run(self) -> None:
        """Run the test and, for groups, every child test in order.

        Never raises: every fault ends up in some test's `errors`.
        """
        try:
            self.log_verbose(f'Beginning to run test "{self.name}".')
            if self.should_skip():
                self.log_verbose("The test was marked to be skipped.")
                self.skip()
                return
            if self.aborted or self.failed:
                self.log_verbose("The test was already marked as failed.")
                return
            if self.is_group and not self.is_expanded_group:
                self.expand_groups()
                if self.aborted:
                    self.log_verbose("The test group failed to expand.")
                    return
            self.initialize()
            await self.do_begin_callbacks()
            if self._is_halted():
                self.log_verbose(
                    "Aborting due to errors found after executing onBegin "
                    "and onEachBegin callbacks."
                )
                await self.abort()
                return
            if self.body is not None and not self.is_expanded_group:
                try:
                    await self._run_body()
                except Exception as error:  # pylint: disable=broad-except
                    self.log_verbose(
                        "Aborting due to an error raised by the test's body function."
                    )
                    await self.abort(error, self)
                    return
                if self._is_halted():
                    self.log_verbose(
                        "Aborting due to errors found after evaluating "
                        "the test's body function."
                    )
                    await self.abort()
                    return
                if self.should_skip():
                    self.log_verbose(
                        "The test was found to be marked for skipping after "
                        "evaluating its body function."
                    )
                    self.skip()
                    return
            if self.is_group and self.children:
                if not await self._run_children():
                    return
            if self.errors or self.failed_children:
                await self.fail()
            elif not self.aborted and not self.failed:
                await self.complete()
        except Exception as error:  # pylint: disable=broad-except
            self.log_verbose(
                "Aborting due to an unhandled error encountered while "
                f'running test "{self.name}".'
            )
            await self._abort_after_unhandled_error(error)

    async def _run_body(self) -> None:
        assert self.body is not None
        self.body_returned_value = self.body(self)
        if inspect.isawaitable(self.body_returned_value):
            self.body_returned_value_resolved = await self.body_returned_value

    async def _run_children(self) -> bool:
        """Run children one after another.

        Returns:
            False when this group was aborted and must stop, True otherwise.
        """
        for child in list(self.children):
            try:
                await child.run()
            except Exception as error:  # pylint: disable=broad-except
                self.log_verbose(
                    "Aborting due to errors encountered while attempting "
                    f'to run the child test "{child.name}".'
                )
                await self.abort(error, child)
                return False
            if (child.aborted or child.failed) and not child.should_skip():
                if self.is_series:
                    self.log_verbose(
                        "Skipping remaining child tests because the "
                        f'child test "{child.name}" failed.'
                    )
                    await self.exit_test_group(child)
                    return False
                self.failed_children.append(child)
            elif self._is_halted():
                # e.g. an onEachEnd callback aborted this group
                self.log_verbose(
                    "Aborting due to errors found after running the "
                    f'child test "{child.name}".'
                )
                await self.abort()
                return False
        return True

    async def _abort_after_unhandled_error(self, error: Exception) -> None:
        try:
            await self.abort(error, self)
        except Exception as abort_error:  # pylint: disable=broad-except
            try:
                self.add_error(abort_error, self)
                self.success = False
                self.failed = True
                self.aborted = True
                self.end_time = get_time()
            except Exception:  # pylint: disable=broad-except
                logger.exception(
                    "Unrecoverable error while aborting test %r", self.name
                )
