"""Port interfaces for the casework engine.

These abstract base classes define the boundaries between the core
engine and external adapters. Implementations live in the adapters/
package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - OutputSink: Line-oriented text sink for reports and diagnostics

2. **Outer Ports** (used by the composition root before the core starts)
   - UnitLoaderPort: Locate and import the unit of code under test
"""

from abc import ABC, abstractmethod
from pathlib import Path
from types import ModuleType, TracebackType


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class OutputSink(ABC):
    """Port for the line-oriented text sink receiving all report output.

    The engine writes to the sink strictly in program order from a single
    thread, so implementations need no synchronization.

    Sinks are context managers; leaving the context closes the sink.
    """

    @abstractmethod
    def write_line(self, text: str = "") -> None:
        """Write one line of text.

        Args:
            text: Line content without a trailing newline. An empty string
                writes a blank line.

        Raises:
            Exception: If the underlying stream cannot be written. The
                engine does not catch sink failures.
        """

    def close(self) -> None:
        """Release any resources held by the sink.

        The default implementation does nothing.
        """

    def __enter__(self) -> "OutputSink":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


# ============================================================================
# OUTER PORTS (Composition root calls these before the core starts)
# ============================================================================


class UnitLoaderPort(ABC):
    """Port for locating and importing a unit of code.

    Loading happens once, before orchestration begins, and is never
    re-entered by the engine.
    """

    @abstractmethod
    def locate(self, target: str) -> Path | None:
        """Resolve a target to the file it would be loaded from.

        Args:
            target: A path to a ``.py`` file or a dotted module name.

        Returns:
            Absolute path of the source file, or None if the target has
            no file location (e.g. a namespace or built-in module).

        Raises:
            UnitLoadError: If the target cannot be found.
        """

    @abstractmethod
    def load(self, target: str) -> ModuleType:
        """Import the target and return the loaded module.

        Args:
            target: A path to a ``.py`` file or a dotted module name.

        Returns:
            The executed module.

        Raises:
            UnitLoadError: If the target cannot be found or raises while
                being imported.
        """


__all__ = ["OutputSink", "UnitLoaderPort"]
