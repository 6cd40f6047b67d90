"""Outcome classification for invocations, test cases and containers.

Pure decision logic: no side effects, no output.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from .models import ExecutionResult, HookStatus, Status


def classify_steps(steps: Iterable[ExecutionResult]) -> Status:
    """Classify a test case from the steps that were actually invoked.

    Any failed step makes the test case FAILED; otherwise it PASSED.
    Skipped steps are simply absent from ``steps``.
    """
    if any(step.status is Status.FAILED for step in steps):
        return Status.FAILED
    return Status.PASSED


def hook_status(result: ExecutionResult | None) -> HookStatus:
    """Map a class-scoped hook result to its summary status.

    ``None`` means the container declares no hook for the role.
    """
    if result is None:
        return HookStatus.NOT_PRESENT
    if result.succeeded:
        return HookStatus.SUCCEEDED
    return HookStatus.FAILED


def hook_succeeded(result: ExecutionResult | None) -> bool:
    """An absent hook counts as a vacuous success."""
    return result is None or result.succeeded


@dataclass
class Tally:
    """Running counts for one container."""

    ran: int = 0
    passed: int = 0
    failed: int = 0
    ignored: int = 0

    def record(self, status: Status) -> None:
        if status is Status.IGNORED:
            self.ignored += 1
            return
        self.ran += 1
        if status is Status.PASSED:
            self.passed += 1
        else:
            self.failed += 1

    @property
    def total(self) -> int:
        return self.ran + self.ignored


__all__ = ["Tally", "classify_steps", "hook_status", "hook_succeeded"]
