"""External adapters for casework.

This package contains everything that touches the outside world and
provides implementations of the core port interfaces.

Adapter Organization:

- sink/: Output sinks for the run report (stdout, file)
- loader/: Locating and importing the unit under test, plus its
  companion configuration
"""
