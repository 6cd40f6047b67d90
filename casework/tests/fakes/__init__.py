"""Fake implementations of core ports for testing.

These in-memory implementations allow the core engine to be tested
without a console or file system:

- FakeOutputSink: Captured report lines for assertion
- FakeUnitLoader: Pre-built modules served by target name
"""

from .loader import FakeUnitLoader
from .sink import FakeOutputSink

__all__ = [
    "FakeOutputSink",
    "FakeUnitLoader",
]
