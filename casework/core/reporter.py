"""Human-readable run report.

Writes headings, per-invocation lines, diagnostics and summary tables to
an injected ``OutputSink``.
"""

from .diagnostics import format_error, indent, split_lines
from .models import CapturedError, ClassSummary, ExecutionResult, RunSummary, Status
from .ports import OutputSink

HEADING_RULE = "="
SUBHEADING_RULE = "-"


class Reporter:
    """Formats run progress and results to an output sink."""

    def __init__(self, sink: OutputSink):
        """Initialize reporter.

        Args:
            sink: Destination for every line of output.
        """
        self.sink = sink

    def line(self, text: str = "") -> None:
        """Write text, one sink line per line of text."""
        for line in split_lines(text):
            self.sink.write_line(line)

    def heading(self, *lines: str) -> None:
        """Write lines framed by ``=`` rules."""
        self._framed(HEADING_RULE, lines)

    def subheading(self, *lines: str) -> None:
        """Write lines framed by ``-`` rules."""
        self._framed(SUBHEADING_RULE, lines)

    def _framed(self, rule_character: str, lines: tuple[str, ...]) -> None:
        if not lines:
            return
        rule = rule_character * max(len(line) for line in lines)
        self.sink.write_line()
        self.sink.write_line(rule)
        for line in lines:
            self.sink.write_line(line)
        self.sink.write_line(rule)

    # ------------------------------------------------------------------
    # Invocations
    # ------------------------------------------------------------------

    def invocation(self, label: str, name: str) -> None:
        """Announce a hook or test body call, e.g. ``[TestInitialize] setup()``."""
        self.sink.write_line()
        self.sink.write_line(f"{label} {name}()" if label else f"{name}()")

    def diagnostics(self, error: CapturedError) -> None:
        """Write a captured error, indented under its invocation."""
        self.line(indent(format_error(error)))

    def invocation_result(self, result: ExecutionResult) -> None:
        outcome = "Succeeded" if result.succeeded else "Failed"
        self.sink.write_line(f"  {outcome} ({result.elapsed_ms:,.0f} ms)")

    # ------------------------------------------------------------------
    # Test cases and containers
    # ------------------------------------------------------------------

    def test_case(self, name: str) -> None:
        self.subheading(name.replace("_", " "))

    def test_ignored(self) -> None:
        self.sink.write_line()
        self.sink.write_line("Ignored because the test case is marked ignored")

    def test_verdict(self, status: Status) -> None:
        self.sink.write_line()
        self.sink.write_line("Passed" if status is Status.PASSED else "FAILED")

    def container_ignored(self, reason: str) -> None:
        self.sink.write_line()
        self.sink.write_line(f"Ignoring all tests because {reason}")

    def class_summary(self, summary: ClassSummary) -> None:
        """Write the per-container summary table."""
        self.subheading("Summary")
        self.sink.write_line()
        self.sink.write_line(f"ClassInitialize: {summary.class_initialize.value}")
        self.sink.write_line(f"Total:           {summary.total} tests")
        self.sink.write_line(f"Ran:             {summary.ran} tests")
        self.sink.write_line(f"Ignored:         {summary.ignored} tests")
        self.sink.write_line(f"Passed:          {summary.passed} tests")
        self.sink.write_line(f"Failed:          {summary.failed} tests")
        self.sink.write_line(f"ClassCleanup:    {summary.class_cleanup.value}")

    def run_summary(self, run: RunSummary) -> None:
        """Write totals across every container of the run.

        Nothing is written for a run without containers.
        """
        if not run.classes:
            return
        self.heading("Run Summary")
        self.sink.write_line()
        self.sink.write_line(f"Classes:         {len(run.classes)}")
        self.sink.write_line(f"Total:           {run.total} tests")
        self.sink.write_line(f"Ran:             {run.ran} tests")
        self.sink.write_line(f"Ignored:         {run.ignored} tests")
        self.sink.write_line(f"Passed:          {run.passed} tests")
        self.sink.write_line(f"Failed:          {run.failed} tests")
        for name in run.failed_classes:
            self.sink.write_line(f"Failed class:    {name}")
        self.sink.write_line()
        self.sink.write_line("Succeeded" if run.succeeded else "FAILED")


__all__ = ["HEADING_RULE", "Reporter", "SUBHEADING_RULE"]
