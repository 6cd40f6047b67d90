"""Registration and discovery of test containers.

Containers are registered explicitly on a ``TestUnit``, either by
decorating a class::

    unit = TestUnit("billing")

    @unit.test_class
    class InvoiceTests:
        @class_initialize
        @staticmethod
        def start_database(): ...

        @test_initialize
        def fresh_invoice(self):
            self.invoice = Invoice()

        @test_method
        def totals_are_summed(self):
            ...

        @test_method
        @ignore
        def currency_is_converted(self):
            ...

or by passing callables to ``TestUnit.add_container``. Either way, every
hook and test body is stored as a first-class callable when the container
descriptor is built; nothing is looked up by name at run time.

When several methods claim the same hook role, the first one in
declaration order wins (the class body order of the most derived class
first, then its bases) and the others are ignored.
"""

import functools
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, TypeVar, overload

from .errors import DiscoveryFault, DuplicateContainerError
from .models import HookRole, LifecycleHook, TestCase, TestContainer

logger = logging.getLogger(__name__)

MARKER_ATTRIBUTE = "__casework_marker__"
CLASS_IGNORE_ATTRIBUTE = "__casework_ignore__"

F = TypeVar("F")
C = TypeVar("C", bound=type)


# ============================================================================
# Markers
# ============================================================================


@dataclass
class Marker:
    """Declarative metadata attached to a function by the marker decorators."""

    test: bool = False
    ignore: bool = False
    roles: list[HookRole] = field(default_factory=list)


def _underlying(target: Any) -> Any:
    """Return the plain function behind a staticmethod or classmethod."""
    if isinstance(target, (staticmethod, classmethod)):
        return target.__func__
    return target


def _marker(target: Any) -> Marker:
    func = _underlying(target)
    marker = getattr(func, MARKER_ATTRIBUTE, None)
    if marker is None:
        marker = Marker()
        setattr(func, MARKER_ATTRIBUTE, marker)
    return marker


def marker_of(target: Any) -> Marker | None:
    """Return the marker attached to a function, if any."""
    return getattr(_underlying(target), MARKER_ATTRIBUTE, None)


def test_method(func: F) -> F:
    """Mark a method as a test case."""
    _marker(func).test = True
    return func


def ignore(target: F) -> F:
    """Mark a test method or a whole test class as ignored."""
    if isinstance(target, type):
        setattr(target, CLASS_IGNORE_ATTRIBUTE, True)
    else:
        _marker(target).ignore = True
    return target


def _role_marker(role: HookRole) -> Callable[[F], F]:
    def mark(func: F) -> F:
        marker = _marker(func)
        if role not in marker.roles:
            marker.roles.append(role)
        return func

    mark.__name__ = role.name.lower()
    mark.__qualname__ = mark.__name__
    mark.__doc__ = f"Mark a method as the container's {role.value} hook."
    return mark


class_initialize = _role_marker(HookRole.CLASS_INITIALIZE)
class_cleanup = _role_marker(HookRole.CLASS_CLEANUP)
test_initialize = _role_marker(HookRole.TEST_INITIALIZE)
test_cleanup = _role_marker(HookRole.TEST_CLEANUP)

# keep pytest from collecting the markers when they are imported into test modules
test_method.__test__ = False  # type: ignore[attr-defined]
test_initialize.__test__ = False  # type: ignore[attr-defined]
test_cleanup.__test__ = False  # type: ignore[attr-defined]


# ============================================================================
# Binding class members to callables
# ============================================================================


def _bind_class_scoped(cls: type, member: Any) -> Callable[[], Any]:
    """Class-scoped hooks are called without an instance."""
    if isinstance(member, staticmethod):
        return member.__func__
    if isinstance(member, classmethod):
        return functools.partial(member.__func__, cls)
    return functools.partial(member, cls)


def _bind_instance_scoped(member: Any) -> Callable[[Any], Any]:
    """Test bodies and test-scoped hooks receive the test instance."""
    if isinstance(member, staticmethod):
        func = member.__func__
        return lambda instance: func()
    if isinstance(member, classmethod):
        func = member.__func__
        return lambda instance: func(type(instance))
    return member


def _class_members(cls: type) -> list[tuple[str, Any]]:
    """Members in declaration order, most derived class first.

    A name defined in a subclass shadows the same name in its bases.
    """
    seen: set[str] = set()
    members: list[tuple[str, Any]] = []
    for klass in cls.__mro__:
        if klass is object:
            continue
        for name, member in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            members.append((name, member))
    return members


def container_from_class(
    cls: type, *, name: str | None = None, ignore: bool = False
) -> TestContainer:
    """Build a container descriptor from a marked class.

    Args:
        cls: The class whose methods carry markers. Its zero-argument
            constructor builds each test instance.
        name: Qualified container name. Defaults to ``module.QualName``.
        ignore: Ignore every test case of the container.

    Returns:
        TestContainer with test cases and hooks bound to callables.
    """
    qualified_name = name or f"{cls.__module__}.{cls.__qualname__}"
    ignored = ignore or bool(vars(cls).get(CLASS_IGNORE_ATTRIBUTE, False))

    test_cases: list[TestCase] = []
    hooks: dict[HookRole, LifecycleHook] = {}

    for member_name, member in _class_members(cls):
        marker = marker_of(member)
        if marker is None:
            continue

        if marker.test:
            test_cases.append(
                TestCase(
                    name=member_name,
                    body=_bind_instance_scoped(member),
                    ignore=marker.ignore,
                )
            )

        for role in marker.roles:
            if role in hooks:
                logger.debug(
                    f"Ignoring {member_name} as {role.value} hook of {qualified_name}; "
                    f"{hooks[role].name} was declared first"
                )
                continue
            func = (
                _bind_class_scoped(cls, member)
                if role.class_scoped
                else _bind_instance_scoped(member)
            )
            hooks[role] = LifecycleHook(role=role, name=member_name, func=func)

    return TestContainer(
        name=qualified_name,
        factory=cls,
        test_cases=tuple(test_cases),
        ignore=ignored,
        class_initialize=hooks.get(HookRole.CLASS_INITIALIZE),
        class_cleanup=hooks.get(HookRole.CLASS_CLEANUP),
        test_initialize=hooks.get(HookRole.TEST_INITIALIZE),
        test_cleanup=hooks.get(HookRole.TEST_CLEANUP),
    )


# ============================================================================
# Unit registry
# ============================================================================


def _hook(role: HookRole, func: Callable[..., Any] | None) -> LifecycleHook | None:
    if func is None:
        return None
    return LifecycleHook(role=role, name=getattr(func, "__name__", role.value), func=func)


class TestUnit:
    """A registry of test containers forming one unit of code.

    Class registrations are turned into descriptors when the unit is
    discovered, so marker decorators may be stacked in any order.
    """

    __test__ = False

    def __init__(self, name: str = "unit"):
        self.name = name
        self._registrations: list[Callable[[], TestContainer]] = []

    def __len__(self) -> int:
        return len(self._registrations)

    def __repr__(self) -> str:
        return f"TestUnit({self.name!r}, containers={len(self)})"

    @overload
    def test_class(self, cls: C) -> C: ...

    @overload
    def test_class(
        self, cls: None = None, *, ignore: bool = False, name: str | None = None
    ) -> Callable[[C], C]: ...

    def test_class(
        self, cls: C | None = None, *, ignore: bool = False, name: str | None = None
    ) -> C | Callable[[C], C]:
        """Register a marked class as a test container.

        Usable bare (``@unit.test_class``) or with options
        (``@unit.test_class(ignore=True, name="Billing")``).
        """

        def register(klass: C) -> C:
            self._registrations.append(
                functools.partial(container_from_class, klass, name=name, ignore=ignore)
            )
            return klass

        if cls is None:
            return register
        return register(cls)

    def add_container(
        self,
        name: str,
        test_cases: Iterable[TestCase],
        *,
        factory: Callable[[], Any] = object,
        ignore: bool = False,
        class_initialize: Callable[[], Any] | None = None,
        class_cleanup: Callable[[], Any] | None = None,
        test_initialize: Callable[[Any], Any] | None = None,
        test_cleanup: Callable[[Any], Any] | None = None,
    ) -> TestContainer:
        """Register a container assembled from plain callables.

        Test bodies and test-scoped hooks receive the instance built by
        ``factory``; class-scoped hooks take no arguments.

        Returns:
            The registered container.
        """
        container = TestContainer(
            name=name,
            factory=factory,
            test_cases=tuple(test_cases),
            ignore=ignore,
            class_initialize=_hook(HookRole.CLASS_INITIALIZE, class_initialize),
            class_cleanup=_hook(HookRole.CLASS_CLEANUP, class_cleanup),
            test_initialize=_hook(HookRole.TEST_INITIALIZE, test_initialize),
            test_cleanup=_hook(HookRole.TEST_CLEANUP, test_cleanup),
        )
        self._registrations.append(lambda: container)
        return container

    def containers(self) -> list[TestContainer]:
        """Build every registered container, in registration order.

        Raises:
            DuplicateContainerError: If two containers share a name.
        """
        containers: list[TestContainer] = []
        names: set[str] = set()
        for build in self._registrations:
            container = build()
            if container.name in names:
                raise DuplicateContainerError(
                    f"Container {container.name} is registered more than once in unit {self.name}"
                )
            names.add(container.name)
            containers.append(container)
        return containers


def discover(unit: TestUnit) -> list[TestContainer]:
    """Enumerate a unit's containers in ascending qualified-name order.

    Test cases within each container are already in ascending name order.
    """
    containers = sorted(unit.containers(), key=lambda container: container.name)
    logger.debug(f"Discovered {len(containers)} containers in unit {unit.name}")
    return containers


def unit_of(module: ModuleType, attribute: str = "unit") -> TestUnit:
    """Find the TestUnit a loaded module exposes.

    A module attribute named ``attribute`` wins; otherwise the module must
    hold exactly one TestUnit.

    Raises:
        DiscoveryFault: If the module exposes no TestUnit or several.
    """
    preferred = getattr(module, attribute, None)
    if isinstance(preferred, TestUnit):
        return preferred

    units: list[TestUnit] = []
    for value in vars(module).values():
        if isinstance(value, TestUnit) and all(value is not u for u in units):
            units.append(value)

    if not units:
        raise DiscoveryFault(f"Module {module.__name__} does not define a TestUnit")
    if len(units) > 1:
        raise DiscoveryFault(
            f"Module {module.__name__} defines {len(units)} TestUnits; "
            f"name the one to run '{attribute}'"
        )
    return units[0]


def discover_module(module: ModuleType, attribute: str = "unit") -> list[TestContainer]:
    """Discover the containers of the TestUnit a module exposes."""
    return discover(unit_of(module, attribute))


__all__ = [
    "Marker",
    "TestUnit",
    "class_cleanup",
    "class_initialize",
    "container_from_class",
    "discover",
    "discover_module",
    "ignore",
    "marker_of",
    "test_cleanup",
    "test_initialize",
    "test_method",
    "unit_of",
]
