"""casework

A minimal test-execution engine. Test containers and their test cases are
registered explicitly on a ``TestUnit``; the engine discovers them, runs
lifecycle hooks in a fixed order around each test case, isolates each
outcome and reports nested diagnostics plus aggregate counts.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
