"""Lifecycle orchestration for test containers.

This module sequences class-init, the container's test cases and
class-cleanup, and folds the outcomes into container and run summaries.
"""

import logging
from collections.abc import Iterable

from .executor import TestExecutor
from .models import ClassSummary, RunSummary, Status, TestCaseResult, TestContainer
from .outcome import Tally, hook_status, hook_succeeded
from .ports import OutputSink
from .registry import TestUnit, discover
from .reporter import Reporter

logger = logging.getLogger(__name__)

IGNORED_CLASS_REASON = "the class is marked ignored"
FAILED_CLASS_INITIALIZE_REASON = "class initialization failed"


class LifecycleOrchestrator:
    """Runs containers one at a time, in order, on a single thread.

    For each container:
    1. Run class-init (absent counts as success)
    2. If the container is ignored or class-init failed, classify every
       test case as ignored without running anything per-test
    3. Otherwise run each test case through the executor
    4. Run class-cleanup, whatever happened before
    5. Report and return the container summary
    """

    def __init__(self, reporter: Reporter, executor: TestExecutor | None = None):
        self.reporter = reporter
        self.executor = executor or TestExecutor(reporter)

    def run_container(self, container: TestContainer) -> ClassSummary:
        """Run one container through its full lifecycle."""
        logger.debug(f"Running container {container.name}")
        self.reporter.heading(container.name)

        class_init = self.executor.run_hook(container.class_initialize)

        tally = Tally()
        results: list[TestCaseResult] = []
        if container.ignore or not hook_succeeded(class_init):
            reason = (
                IGNORED_CLASS_REASON if container.ignore else FAILED_CLASS_INITIALIZE_REASON
            )
            logger.info(f"Ignoring all tests of {container.name} because {reason}")
            self.reporter.container_ignored(reason)
            for case in container.test_cases:
                tally.record(Status.IGNORED)
                results.append(TestCaseResult(name=case.name, status=Status.IGNORED))
        else:
            for case in container.test_cases:
                result = self.executor.run_test(container, case)
                tally.record(result.status)
                results.append(result)

        class_cleanup = self.executor.run_hook(container.class_cleanup)

        summary = ClassSummary(
            name=container.name,
            total=tally.total,
            ran=tally.ran,
            ignored=tally.ignored,
            passed=tally.passed,
            failed=tally.failed,
            class_initialize=hook_status(class_init),
            class_cleanup=hook_status(class_cleanup),
            test_results=tuple(results),
        )
        self.reporter.class_summary(summary)

        if not summary.succeeded:
            logger.info(f"Container {container.name} failed")
        return summary

    def run_unit(self, containers: Iterable[TestContainer]) -> RunSummary:
        """Run already-discovered containers in the order given."""
        summaries = tuple(self.run_container(container) for container in containers)
        run = RunSummary(classes=summaries)
        self.reporter.run_summary(run)
        logger.debug(
            f"Run finished: {len(summaries)} containers, "
            f"{run.passed} passed, {run.failed} failed, {run.ignored} ignored"
        )
        return run

    def run(self, unit: TestUnit) -> RunSummary:
        """Discover and run every container of a unit.

        Raises:
            DuplicateContainerError: If discovery finds a name collision,
                before any container runs.
        """
        return self.run_unit(discover(unit))


def run_tests(unit: TestUnit, sink: OutputSink) -> bool:
    """Convenience wrapper: run a unit and return whether everything succeeded."""
    return LifecycleOrchestrator(Reporter(sink)).run(unit).succeeded


__all__ = [
    "FAILED_CLASS_INITIALIZE_REASON",
    "IGNORED_CLASS_REASON",
    "LifecycleOrchestrator",
    "run_tests",
]
