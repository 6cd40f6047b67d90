"""File sink adapter.

Implements OutputSink by writing the run report to a file, optionally
echoing every line to a second sink (usually stdout).
"""

import logging
from pathlib import Path

from casework.core.ports import OutputSink

logger = logging.getLogger(__name__)


class FileSink(OutputSink):
    """Writes report lines to a UTF-8 text file."""

    def __init__(self, path: str | Path, echo: OutputSink | None = None):
        """Initialize file sink.

        The file is created (or truncated) immediately; parent directories
        are created as needed.

        Args:
            path: Report file path.
            echo: Optional sink that receives every line as well.

        Raises:
            OSError: If the file cannot be opened for writing.
        """
        self.path = Path(path)
        self.echo = echo
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self.path.open("w", encoding="utf-8", newline="\n")
        logger.debug(f"Writing report to {self.path}")

    @property
    def closed(self) -> bool:
        return self._file.closed

    def write_line(self, text: str = "") -> None:
        if self._file.closed:
            raise ValueError(f"Report file {self.path} is already closed")
        self._file.write(text + "\n")
        if self.echo is not None:
            self.echo.write_line(text)

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()
        if self.echo is not None:
            self.echo.close()
