"""Execution of single hooks and test cases.

Every error raised by test or hook code, ``SystemExit`` included, is caught
here and converted into an ``ExecutionResult``. Only ``KeyboardInterrupt``
unwinds past the executor.
"""

import logging
import time
from collections.abc import Callable, Iterator
from typing import Any

from .diagnostics import capture
from .models import (
    ExecutionResult,
    LifecycleHook,
    Status,
    TestCase,
    TestCaseResult,
    TestContainer,
)
from .outcome import classify_steps
from .reporter import Reporter

logger = logging.getLogger(__name__)

TEST_METHOD_LABEL = "[TestMethod]"
CONSTRUCT_LABEL = "[Construct]"


class TestExecutor:
    """Runs one test case: fresh instance, test-init, body, test-cleanup.

    Steps run strictly in order and stop at the first failure: a failing
    test-init skips the body and test-cleanup, a failing body skips
    test-cleanup.
    """

    __test__ = False

    def __init__(self, reporter: Reporter):
        self.reporter = reporter

    def invoke(
        self, label: str, name: str, func: Callable[..., Any], *args: Any
    ) -> ExecutionResult:
        """Announce, time and run one callable, reporting its outcome."""
        self.reporter.invocation(label, name)
        _, result = self._call(name, func, *args)
        if result.error is not None:
            self.reporter.diagnostics(result.error)
        self.reporter.invocation_result(result)
        return result

    def run_hook(self, hook: LifecycleHook | None, *args: Any) -> ExecutionResult | None:
        """Run a lifecycle hook, or return None if the slot is empty."""
        if hook is None:
            return None
        return self.invoke(hook.role.label, hook.name, hook.func, *args)

    def run_test(self, container: TestContainer, case: TestCase) -> TestCaseResult:
        """Run one test case of a container and classify it."""
        self.reporter.test_case(case.name)

        if case.ignore:
            logger.debug(f"Skipping ignored test case {container.name}.{case.name}")
            self.reporter.test_ignored()
            return TestCaseResult(name=case.name, status=Status.IGNORED)

        logger.debug(f"Running test case {container.name}.{case.name}")
        instance, constructed = self._call(container.name, container.factory)
        if not constructed.succeeded:
            self.reporter.invocation(CONSTRUCT_LABEL, container.name)
            if constructed.error is not None:
                self.reporter.diagnostics(constructed.error)
            self.reporter.invocation_result(constructed)
            return self._finish(container, case, (constructed,))

        steps: list[ExecutionResult] = []
        for label, name, func in self._steps(container, case):
            result = self.invoke(label, name, func, instance)
            steps.append(result)
            if not result.succeeded:
                break
        # the instance is dropped here and never reused
        return self._finish(container, case, tuple(steps))

    def _finish(
        self,
        container: TestContainer,
        case: TestCase,
        steps: tuple[ExecutionResult, ...],
    ) -> TestCaseResult:
        status = classify_steps(steps)
        if status is Status.FAILED:
            logger.info(f"Test case {container.name}.{case.name} failed")
        self.reporter.test_verdict(status)
        return TestCaseResult(name=case.name, status=status, steps=steps)

    @staticmethod
    def _steps(
        container: TestContainer, case: TestCase
    ) -> Iterator[tuple[str, str, Callable[..., Any]]]:
        """Yield the present steps of a test case in invocation order."""
        if container.test_initialize is not None:
            hook = container.test_initialize
            yield hook.role.label, hook.name, hook.func
        yield TEST_METHOD_LABEL, case.name, case.body
        if container.test_cleanup is not None:
            hook = container.test_cleanup
            yield hook.role.label, hook.name, hook.func

    @staticmethod
    def _call(
        name: str, func: Callable[..., Any], *args: Any
    ) -> tuple[Any, ExecutionResult]:
        started = time.perf_counter()
        try:
            value = func(*args)
        except KeyboardInterrupt:
            raise
        except BaseException as e:
            # SystemExit and other BaseException subclasses raised by test
            # code fail the invocation; only Ctrl+C aborts the run
            elapsed = time.perf_counter() - started
            # drop this frame so the trace starts in the invoked code
            error = capture(e, skip_frames=1)
            logger.debug(f"{name} raised {error.kind}: {error.message}")
            return None, ExecutionResult(Status.FAILED, elapsed, error, name=name)
        return value, ExecutionResult(
            Status.PASSED, time.perf_counter() - started, name=name
        )


__all__ = ["CONSTRUCT_LABEL", "TEST_METHOD_LABEL", "TestExecutor"]
