"""Exception hierarchy for the casework engine.

Errors raised by test or hook code never surface through these types; they
are captured as ``ExecutionResult`` values. These exceptions describe faults
of the engine's own inputs.
"""


class CaseworkError(Exception):
    """Base class for all casework errors."""


class DiscoveryFault(CaseworkError):
    """The unit of code cannot be examined for test containers.

    Fatal: raised before any container is processed.
    """


class UnitLoadError(DiscoveryFault):
    """The unit of code could not be located or imported."""


class DuplicateContainerError(DiscoveryFault, ValueError):
    """Two containers were registered under the same qualified name.

    Raised by discovery, before any container runs.
    """


__all__ = [
    "CaseworkError",
    "DiscoveryFault",
    "DuplicateContainerError",
    "UnitLoadError",
]
