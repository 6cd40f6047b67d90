"""Unit tests for container registration and discovery."""

import types

import pytest

from casework.core import registry
from casework.core.errors import DiscoveryFault, DuplicateContainerError
from casework.core.models import HookRole, TestCase
from casework.core.registry import TestUnit, discover, discover_module, unit_of


@pytest.fixture
def unit() -> TestUnit:
    """Create an empty unit."""
    return TestUnit("billing")


# ============================================================================
# Class registration
# ============================================================================


class TestClassRegistration:
    """Building containers from marked classes."""

    def test_default_name_is_module_qualified(self, unit: TestUnit) -> None:
        """Containers are named module.QualName by default."""
        @unit.test_class
        class Invoices:
            @registry.test_method
            def totals(self):
                pass

        (container,) = discover(unit)

        assert container.name == f"{__name__}.{Invoices.__qualname__}"

    def test_explicit_name(self, unit: TestUnit) -> None:
        """A name passed to test_class overrides the default."""
        @unit.test_class(name="Billing.Invoices")
        class Invoices:
            pass

        assert discover(unit)[0].name == "Billing.Invoices"

    def test_decorator_returns_class_unchanged(self, unit: TestUnit) -> None:
        """Registration does not wrap the class."""
        class Invoices:
            pass

        assert unit.test_class(Invoices) is Invoices
        assert unit.test_class(ignore=True)(Invoices) is Invoices

    def test_only_marked_methods_become_test_cases(self, unit: TestUnit) -> None:
        """Unmarked methods and attributes are not test cases."""
        @unit.test_class
        class Invoices:
            rate = 0.2

            def helper(self):
                pass

            @registry.test_method
            def totals(self):
                pass

        (container,) = discover(unit)

        assert [case.name for case in container.test_cases] == ["totals"]

    def test_test_cases_are_sorted_by_name(self, unit: TestUnit) -> None:
        """Declaration order does not affect test case order."""
        @unit.test_class
        class Invoices:
            @registry.test_method
            def B_Test(self):
                pass

            @registry.test_method
            def A_Test(self):
                pass

        (container,) = discover(unit)

        assert [case.name for case in container.test_cases] == ["A_Test", "B_Test"]

    def test_test_body_receives_instance(self, unit: TestUnit) -> None:
        """Bound test bodies are called with the test instance."""
        @unit.test_class
        class Invoices:
            @registry.test_method
            def totals(self):
                return self

        (container,) = discover(unit)
        instance = container.factory()

        assert container.test_cases[0].body(instance) is instance

    def test_ignore_marker_on_method(self, unit: TestUnit) -> None:
        """Ignore works stacked above or below test_method."""
        @unit.test_class
        class Invoices:
            @registry.test_method
            @registry.ignore
            def first(self):
                pass

            @registry.ignore
            @registry.test_method
            def second(self):
                pass

            @registry.test_method
            def third(self):
                pass

        (container,) = discover(unit)

        assert [case.ignore for case in container.test_cases] == [True, True, False]

    def test_ignore_marker_on_class(self, unit: TestUnit) -> None:
        """Ignore on a class marks the container ignored, in either order."""
        @unit.test_class(name="A")
        @registry.ignore
        class First:
            pass

        @registry.ignore
        @unit.test_class(name="B")
        class Second:
            pass

        @unit.test_class(name="C", ignore=True)
        class Third:
            pass

        assert [container.ignore for container in discover(unit)] == [True, True, True]

    def test_inherited_test_methods_are_included(self, unit: TestUnit) -> None:
        """Marked methods of base classes become test cases."""
        class Base:
            @registry.test_method
            def inherited(self):
                pass

        @unit.test_class
        class Derived(Base):
            @registry.test_method
            def own(self):
                pass

        (container,) = discover(unit)

        assert [case.name for case in container.test_cases] == ["inherited", "own"]
        assert container.factory is Derived

    def test_override_shadows_base_method(self, unit: TestUnit) -> None:
        """An unmarked override removes the base test case."""
        class Base:
            @registry.test_method
            def flaky(self):
                pass

        @unit.test_class
        class Derived(Base):
            def flaky(self):
                pass

        assert discover(unit)[0].test_cases == ()


# ============================================================================
# Hooks
# ============================================================================


class TestHookRegistration:
    """Filling lifecycle hook slots."""

    def test_all_roles_are_filled(self, unit: TestUnit) -> None:
        """Each marker fills its own slot."""
        @unit.test_class
        class Invoices:
            @registry.class_initialize
            @staticmethod
            def start():
                pass

            @registry.class_cleanup
            @classmethod
            def stop(cls):
                pass

            @registry.test_initialize
            def setup(self):
                pass

            @registry.test_cleanup
            def teardown(self):
                pass

        (container,) = discover(unit)

        assert container.class_initialize.name == "start"
        assert container.class_cleanup.name == "stop"
        assert container.test_initialize.name == "setup"
        assert container.test_cleanup.name == "teardown"
        assert container.class_initialize.role is HookRole.CLASS_INITIALIZE

    def test_first_declared_candidate_wins(self, unit: TestUnit) -> None:
        """Later candidates for a filled role are ignored."""
        @unit.test_class
        class Invoices:
            @registry.test_initialize
            def zeta(self):
                pass

            @registry.test_initialize
            def alpha(self):
                pass

        assert discover(unit)[0].test_initialize.name == "zeta"

    def test_derived_hook_wins_over_base(self, unit: TestUnit) -> None:
        """The most derived class is searched first."""
        class Base:
            @registry.test_initialize
            def base_setup(self):
                pass

        @unit.test_class
        class Derived(Base):
            @registry.test_initialize
            def derived_setup(self):
                pass

        assert discover(unit)[0].test_initialize.name == "derived_setup"

    def test_class_hooks_are_called_without_instance(self, unit: TestUnit) -> None:
        """Static, class and plain class-scoped hooks take no arguments."""
        calls: list[object] = []

        @unit.test_class(name="Static")
        class Static:
            @staticmethod
            @registry.class_initialize
            def start():
                calls.append("static")

        @unit.test_class(name="Class")
        class WithClassmethod:
            @registry.class_initialize
            @classmethod
            def start(cls):
                calls.append(cls)

        @unit.test_class(name="Plain")
        class Plain:
            @registry.class_initialize
            def start(cls):
                calls.append(cls)

        for container in discover(unit):
            container.class_initialize.func()

        assert calls == [WithClassmethod, Plain, "static"]

    def test_static_test_method_ignores_instance(self, unit: TestUnit) -> None:
        """A static test body is called without the instance."""
        @unit.test_class
        class Invoices:
            @registry.test_method
            @staticmethod
            def totals():
                return "ran"

        (container,) = discover(unit)

        assert container.test_cases[0].body(container.factory()) == "ran"

    def test_method_can_be_test_and_hook(self, unit: TestUnit) -> None:
        """A method may carry several markers."""
        @unit.test_class
        class Invoices:
            @registry.test_method
            @registry.test_cleanup
            def check_and_clean(self):
                pass

        (container,) = discover(unit)

        assert container.test_cases[0].name == "check_and_clean"
        assert container.test_cleanup.name == "check_and_clean"

    def test_marker_records_roles_once(self) -> None:
        """Applying the same marker twice records the role once."""
        def setup(self):
            pass

        registry.test_initialize(registry.test_initialize(setup))

        assert registry.marker_of(setup).roles == [HookRole.TEST_INITIALIZE]

    def test_markers_are_hidden_from_pytest(self) -> None:
        """Markers named like tests opt out of collection."""
        assert registry.test_method.__test__ is False
        assert registry.test_initialize.__test__ is False
        assert registry.test_cleanup.__test__ is False


# ============================================================================
# Hand-built containers and discovery
# ============================================================================


class TestAddContainer:
    """Registering containers from plain callables."""

    def test_builds_container_with_hooks(self, unit: TestUnit) -> None:
        """Callables are stored as hooks named after the function."""
        def open_ledger():
            pass

        container = unit.add_container(
            "Ledger",
            [TestCase(name="balance", body=lambda instance: None)],
            factory=dict,
            class_initialize=open_ledger,
        )

        assert container.class_initialize.name == "open_ledger"
        assert container.class_cleanup is None
        assert discover(unit) == [container]

    def test_duplicate_test_case_names_rejected(self, unit: TestUnit) -> None:
        """Two test cases with one name cannot share a container."""
        case = TestCase(name="balance", body=lambda instance: None)

        with pytest.raises(ValueError, match="duplicate test cases"):
            unit.add_container("Ledger", [case, case])


class TestDiscover:
    """Ordering and validation of discovered containers."""

    def test_empty_unit(self, unit: TestUnit) -> None:
        """A unit without containers discovers nothing."""
        assert discover(unit) == []
        assert len(unit) == 0

    def test_containers_sorted_by_name(self, unit: TestUnit) -> None:
        """Registration order does not affect container order."""
        for name in ["Zeta", "Alpha", "Mid"]:
            unit.add_container(name, [])

        assert [container.name for container in discover(unit)] == ["Alpha", "Mid", "Zeta"]

    def test_discovery_is_repeatable(self, unit: TestUnit) -> None:
        """Discovering twice yields equal descriptors."""
        @unit.test_class
        class Invoices:
            @registry.test_method
            def totals(self):
                pass

        first = discover(unit)
        second = discover(unit)

        assert [c.name for c in first] == [c.name for c in second]
        assert first[0].test_cases[0].name == second[0].test_cases[0].name

    def test_duplicate_container_names_rejected(self, unit: TestUnit) -> None:
        """Two containers may not share a qualified name."""
        unit.add_container("Ledger", [])
        unit.add_container("Ledger", [])

        with pytest.raises(DuplicateContainerError, match="Ledger"):
            discover(unit)

    def test_duplicate_container_is_a_discovery_fault(self, unit: TestUnit) -> None:
        unit.add_container("Ledger", [])
        unit.add_container("Ledger", [])

        with pytest.raises(DiscoveryFault):
            discover(unit)


class TestUnitOfModule:
    """Finding the unit a loaded module exposes."""

    def test_prefers_named_attribute(self) -> None:
        """The configured attribute wins over other units."""
        module = types.ModuleType("suite")
        module.unit = TestUnit("main")
        module.other = TestUnit("other")

        assert unit_of(module) is module.unit

    def test_single_unit_under_any_name(self) -> None:
        """A lone unit is found whatever it is called."""
        module = types.ModuleType("suite")
        module.tests = TestUnit("tests")
        module.alias = module.tests

        assert unit_of(module) is module.tests

    def test_no_unit_is_a_discovery_fault(self) -> None:
        """A module without a unit cannot be examined."""
        with pytest.raises(DiscoveryFault, match="does not define a TestUnit"):
            discover_module(types.ModuleType("empty"))

    def test_ambiguous_units_are_a_discovery_fault(self) -> None:
        """Several units without the preferred name are ambiguous."""
        module = types.ModuleType("suite")
        module.first = TestUnit("first")
        module.second = TestUnit("second")

        with pytest.raises(DiscoveryFault, match="defines 2 TestUnits"):
            unit_of(module)

    def test_discover_module_returns_sorted_containers(self) -> None:
        """discover_module runs discovery on the found unit."""
        module = types.ModuleType("suite")
        module.unit = TestUnit("main")
        module.unit.add_container("B", [])
        module.unit.add_container("A", [])

        assert [c.name for c in discover_module(module)] == ["A", "B"]
