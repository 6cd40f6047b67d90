"""Module unit loader adapter.

Implements UnitLoaderPort with importlib. A target is either a path to a
``.py`` file, resolved against the current directory when relative, or a
dotted module name importable from ``sys.path``.
"""

import importlib
import importlib.util
import logging
import sys
from importlib.machinery import ModuleSpec, PathFinder
from pathlib import Path
from types import ModuleType

from casework.core.errors import UnitLoadError
from casework.core.ports import UnitLoaderPort

logger = logging.getLogger(__name__)


def is_path_target(target: str) -> bool:
    """Whether a target names a file rather than a dotted module."""
    return target.endswith(".py") or "/" in target or "\\" in target


def full_unit_path(target: str) -> Path:
    """Resolve a file target against the current working directory."""
    path = Path(target).expanduser()
    if not path.is_absolute():
        path = Path.cwd() / path
    return path.resolve()


def find_spec_without_import(target: str) -> ModuleSpec | None:
    """Find a dotted module on ``sys.path`` without running any package code.

    ``importlib.util.find_spec`` imports every parent package of a dotted
    name. Walking the path finder one segment at a time keeps the parents
    unimported until the unit's companion configuration is active.

    Returns:
        The module spec, or None if the path finder cannot resolve it.
    """
    parts = target.split(".")
    if not all(parts):
        return None

    search_path: list[str] | None = None
    spec: ModuleSpec | None = None
    for index in range(len(parts)):
        if index and search_path is None:
            return None  # parent is a plain module, not a package
        spec = PathFinder.find_spec(".".join(parts[: index + 1]), search_path)
        if spec is None:
            return None
        locations = spec.submodule_search_locations
        search_path = list(locations) if locations is not None else None
    return spec


class ModuleUnitLoader(UnitLoaderPort):
    """Loads a unit of code as a Python module."""

    def __init__(self, add_to_path: bool = True):
        """Initialize module loader.

        Args:
            add_to_path: For file targets, put the file's directory first on
                ``sys.path`` so the unit can import its sibling modules.
        """
        self.add_to_path = add_to_path

    def locate(self, target: str) -> Path | None:
        if is_path_target(target):
            path = full_unit_path(target)
            if not path.is_file():
                raise UnitLoadError(f"Test unit not found: {path}")
            return path

        spec = find_spec_without_import(target)
        if spec is None:
            # meta path finders other than the path finder (built-in and
            # frozen modules, editable installs) need the parent imported
            try:
                spec = importlib.util.find_spec(target)
            except (ImportError, ValueError) as e:
                raise UnitLoadError(f"Test unit not found: {target}") from e
            except Exception as e:
                raise UnitLoadError(f"Test unit raised while being located: {target}") from e
        if spec is None:
            raise UnitLoadError(f"Test unit not found: {target}")
        if spec.origin and spec.has_location:
            return Path(spec.origin)
        return None

    def load(self, target: str) -> ModuleType:
        if is_path_target(target):
            return self._load_file(self.locate(target) or full_unit_path(target))

        try:
            module = importlib.import_module(target)
        except ImportError as e:
            raise UnitLoadError(f"Test unit could not be imported: {target}") from e
        except Exception as e:
            raise UnitLoadError(f"Test unit raised while being imported: {target}") from e
        logger.debug(f"Imported unit module {module.__name__}")
        return module

    def _load_file(self, path: Path) -> ModuleType:
        module_name = path.stem
        existing = sys.modules.get(module_name)
        if existing is not None and getattr(existing, "__file__", None) != str(path):
            raise UnitLoadError(
                f"Cannot load {path}: module name {module_name!r} is already in use"
            )

        spec = importlib.util.spec_from_file_location(module_name, path)
        if spec is None or spec.loader is None:
            raise UnitLoadError(f"Test unit is not a Python module: {path}")

        if self.add_to_path and str(path.parent) not in sys.path:
            sys.path.insert(0, str(path.parent))

        module = importlib.util.module_from_spec(spec)
        # registered before execution so dataclasses and pickling can
        # resolve the module by name while it runs
        sys.modules[module_name] = module
        try:
            spec.loader.exec_module(module)
        except Exception as e:
            del sys.modules[module_name]
            raise UnitLoadError(f"Test unit raised while being imported: {path}") from e

        logger.debug(f"Loaded unit module {module_name} from {path}")
        return module


__all__ = [
    "ModuleUnitLoader",
    "find_spec_without_import",
    "full_unit_path",
    "is_path_target",
]
