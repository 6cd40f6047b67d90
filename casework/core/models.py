"""Domain models for the casework test engine.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Optional


class Status(Enum):
    """Tri-state outcome of an invocation or a test case."""

    PASSED = "passed"
    FAILED = "failed"
    IGNORED = "ignored"


class HookRole(Enum):
    """Lifecycle roles a hook can fill on a container.

    Class-scoped hooks run once per container with no test instance.
    Test-scoped hooks run around every test case on its fresh instance.
    """

    CLASS_INITIALIZE = "ClassInitialize"
    CLASS_CLEANUP = "ClassCleanup"
    TEST_INITIALIZE = "TestInitialize"
    TEST_CLEANUP = "TestCleanup"

    @property
    def label(self) -> str:
        """Bracketed label printed before each invocation."""
        return f"[{self.value}]"

    @property
    def class_scoped(self) -> bool:
        return self in {HookRole.CLASS_INITIALIZE, HookRole.CLASS_CLEANUP}


class HookStatus(Enum):
    """How a class-scoped hook fared, as shown in the container summary."""

    NOT_PRESENT = "Not present"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"


@dataclass(frozen=True)
class CapturedError:
    """An error captured at the point of invocation.

    The core's normalized representation of a raised exception: enough to
    render diagnostics after the exception object itself has been dropped.
    """

    message: str
    kind: str  # e.g. "ValueError" or "myproject.errors.PaymentError"
    metadata: Mapping[str, str] = field(default_factory=dict)
    source: str | None = None  # module the failing code lives in
    help_link: str | None = None
    stack_trace: str = ""
    cause: Optional["CapturedError"] = None

    def __post_init__(self) -> None:
        """Convert metadata dict to read-only proxy."""
        if isinstance(self.metadata, dict):
            object.__setattr__(self, "metadata", MappingProxyType(self.metadata))

    @property
    def depth(self) -> int:
        """Length of the cause chain below this error."""
        return 0 if self.cause is None else self.cause.depth + 1


@dataclass(frozen=True)
class LifecycleHook:
    """A setup or teardown callable bound to one container role.

    Class-scoped hooks take no arguments; test-scoped hooks take the
    test instance.
    """

    role: HookRole
    name: str
    func: Callable[..., Any]


@dataclass(frozen=True)
class TestCase:
    """A single named unit of test logic.

    ``body`` is called with the fresh test instance created for this case.
    """

    __test__ = False

    name: str
    body: Callable[[Any], Any]
    ignore: bool = False

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("name must be a non-empty string")


@dataclass(frozen=True)
class TestContainer:
    """A named grouping of test cases with optional lifecycle hooks.

    ``factory`` builds one fresh, isolated test instance per test case.
    Test cases are kept in ascending name order.
    """

    __test__ = False

    name: str
    factory: Callable[[], Any]
    test_cases: tuple[TestCase, ...] = ()
    ignore: bool = False
    class_initialize: LifecycleHook | None = None
    class_cleanup: LifecycleHook | None = None
    test_initialize: LifecycleHook | None = None
    test_cleanup: LifecycleHook | None = None

    def __post_init__(self) -> None:
        """Validate container invariants and pin test case order."""
        if not self.name or not self.name.strip():
            raise ValueError("name must be a non-empty string")

        names = [case.name for case in self.test_cases]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ValueError(
                f"Container {self.name} has duplicate test cases: {', '.join(duplicates)}"
            )
        object.__setattr__(
            self,
            "test_cases",
            tuple(sorted(self.test_cases, key=lambda case: case.name)),
        )

        for role, hook in self.hooks().items():
            if hook is not None and hook.role is not role:
                raise ValueError(
                    f"Hook {hook.name} has role {hook.role.value}, "
                    f"cannot fill {role.value}"
                )

    def hooks(self) -> dict[HookRole, LifecycleHook | None]:
        """All hook slots keyed by role, filled or not."""
        return {
            HookRole.CLASS_INITIALIZE: self.class_initialize,
            HookRole.CLASS_CLEANUP: self.class_cleanup,
            HookRole.TEST_INITIALIZE: self.test_initialize,
            HookRole.TEST_CLEANUP: self.test_cleanup,
        }


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of a single hook, constructor or test body invocation."""

    status: Status
    elapsed: float = 0.0  # seconds
    error: CapturedError | None = None
    name: str = ""

    def __post_init__(self) -> None:
        if self.elapsed < 0:
            raise ValueError(f"elapsed must be non-negative, got {self.elapsed}")
        if self.status is Status.FAILED and self.error is None:
            raise ValueError("a failed result must carry the captured error")

    @property
    def succeeded(self) -> bool:
        return self.status is Status.PASSED

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed * 1000


@dataclass(frozen=True)
class TestCaseResult:
    """Outcome of one test case with the results of each invoked step."""

    __test__ = False

    name: str
    status: Status
    steps: tuple[ExecutionResult, ...] = ()

    @property
    def elapsed(self) -> float:
        return sum(step.elapsed for step in self.steps)

    @property
    def errors(self) -> tuple[CapturedError, ...]:
        return tuple(step.error for step in self.steps if step.error is not None)


@dataclass(frozen=True)
class ClassSummary:
    """Aggregate outcome of one container.

    Computed after every test case in the container has been processed.
    """

    name: str
    total: int
    ran: int
    ignored: int
    passed: int
    failed: int
    class_initialize: HookStatus
    class_cleanup: HookStatus
    test_results: tuple[TestCaseResult, ...] = ()

    def __post_init__(self) -> None:
        """Validate that the counts add up."""
        if self.ran != self.passed + self.failed:
            raise ValueError(
                f"ran ({self.ran}) must equal passed ({self.passed}) + failed ({self.failed})"
            )
        if self.total != self.ran + self.ignored:
            raise ValueError(
                f"total ({self.total}) must equal ran ({self.ran}) + ignored ({self.ignored})"
            )

    @property
    def succeeded(self) -> bool:
        """Class init succeeded, no test failed and class cleanup succeeded."""
        return (
            self.class_initialize is not HookStatus.FAILED
            and self.failed == 0
            and self.class_cleanup is not HookStatus.FAILED
        )


@dataclass(frozen=True)
class RunSummary:
    """Aggregate outcome of a whole unit. Empty runs succeed vacuously."""

    classes: tuple[ClassSummary, ...] = ()

    @property
    def succeeded(self) -> bool:
        return all(summary.succeeded for summary in self.classes)

    @property
    def total(self) -> int:
        return sum(summary.total for summary in self.classes)

    @property
    def ran(self) -> int:
        return sum(summary.ran for summary in self.classes)

    @property
    def ignored(self) -> int:
        return sum(summary.ignored for summary in self.classes)

    @property
    def passed(self) -> int:
        return sum(summary.passed for summary in self.classes)

    @property
    def failed(self) -> int:
        return sum(summary.failed for summary in self.classes)

    @property
    def failed_classes(self) -> tuple[str, ...]:
        return tuple(summary.name for summary in self.classes if not summary.succeeded)
