"""Stdout sink adapter.

Implements OutputSink by printing report lines to the terminal.
"""

import sys
from typing import TextIO

from casework.core.ports import OutputSink


class StdoutSink(OutputSink):
    """Prints each report line to a text stream, stdout by default."""

    def __init__(self, stream: TextIO | None = None, flush: bool = True):
        """Initialize stdout sink.

        Args:
            stream: Stream to write to. If None, ``sys.stdout`` is looked up
                on every write so redirection after construction is honored.
            flush: Flush after every line so output interleaves correctly
                with anything the code under test prints.
        """
        self.stream = stream
        self.flush = flush

    def write_line(self, text: str = "") -> None:
        print(text, file=self.stream or sys.stdout, flush=self.flush)
