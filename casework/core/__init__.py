"""Core engine of casework.

This package contains zero external dependencies and holds discovery,
lifecycle orchestration, test execution, outcome classification,
diagnostics formatting and reporting. Output and loading are reached
through the ports in ``ports``; implementations live in the adapters
package.
"""

from .errors import CaseworkError, DiscoveryFault, DuplicateContainerError, UnitLoadError
from .models import (
    CapturedError,
    ClassSummary,
    ExecutionResult,
    HookRole,
    HookStatus,
    LifecycleHook,
    RunSummary,
    Status,
    TestCase,
    TestCaseResult,
    TestContainer,
)
from .orchestrator import LifecycleOrchestrator, run_tests
from .registry import (
    TestUnit,
    class_cleanup,
    class_initialize,
    discover,
    discover_module,
    ignore,
    test_cleanup,
    test_initialize,
    test_method,
)

__all__ = [
    "CapturedError",
    "CaseworkError",
    "ClassSummary",
    "DiscoveryFault",
    "DuplicateContainerError",
    "ExecutionResult",
    "HookRole",
    "HookStatus",
    "LifecycleHook",
    "LifecycleOrchestrator",
    "RunSummary",
    "Status",
    "TestCase",
    "TestCaseResult",
    "TestContainer",
    "TestUnit",
    "UnitLoadError",
    "class_cleanup",
    "class_initialize",
    "discover",
    "discover_module",
    "ignore",
    "run_tests",
    "test_cleanup",
    "test_initialize",
    "test_method",
]
