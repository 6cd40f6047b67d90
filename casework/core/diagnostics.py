"""Capture and formatting of errors raised by test and hook code.

``capture`` turns a live exception into a ``CapturedError``; ``format_error``
renders one as indented text:

    <message>
    Type: <kind>
    Data.<key>: <value>
    Source: <module>
    HelpLink: <link>
    StackTrace:
      at <function>()
        in <file>:line <n>
    InnerException:
      <cause, formatted the same way>

Each nested cause is indented two spaces deeper than its container.
"""

import traceback
from collections.abc import Mapping
from types import TracebackType

from .models import CapturedError

INDENT = "  "
LOCATION_SEPARATOR = " in "


def split_lines(text: str) -> list[str]:
    """Split text into lines, unifying line endings.

    ``\\r\\n`` and ``\\r`` become ``\\n`` and one trailing newline is dropped
    before splitting.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    if text.endswith("\n"):
        text = text[:-1]
    return text.split("\n")


def indent(text: str) -> str:
    """Prefix every line of text with two spaces."""
    return "\n".join(INDENT + line for line in split_lines(text))


def format_stack_trace(stack_trace: str) -> str:
    """Normalize a stack trace so each location sits on its own line.

    A frame such as ``at f() in file.py:line 3`` becomes::

        at f()
          in file.py:line 3

    Frames without a location separator are kept as a single line.
    """
    lines: list[str] = []
    for frame in split_lines(stack_trace):
        frame = frame.strip()
        i = frame.find(LOCATION_SEPARATOR)
        if i <= 0:
            lines.append(frame)
            continue
        lines.append(frame[:i])
        lines.append(indent(frame[i + 1 :]))
    return "\n".join(lines)


def format_error(error: CapturedError) -> str:
    """Render a captured error and its cause chain as text."""
    lines = [error.message, f"Type: {error.kind}"]
    for key, value in error.metadata.items():
        lines.append(f"Data.{key}: {value}")
    if error.source and error.source.strip():
        lines.append(f"Source: {error.source}")
    if error.help_link and error.help_link.strip():
        lines.append(f"HelpLink: {error.help_link}")
    if error.stack_trace.strip():
        lines.append("StackTrace:")
        lines.append(indent(format_stack_trace(error.stack_trace)))
    if error.cause is not None:
        lines.append("InnerException:")
        lines.append(indent(format_error(error.cause)))
    return "\n".join(lines)


# ============================================================================
# Capture
# ============================================================================


def capture(exc: BaseException, *, skip_frames: int = 0) -> CapturedError:
    """Snapshot an exception and its cause chain.

    Args:
        exc: The exception to capture.
        skip_frames: Number of outermost traceback frames to drop from the
            top-level exception, used to hide the engine's own call site.
            Causes are always captured whole.

    Returns:
        CapturedError with the cause chain followed through ``__cause__``,
        or ``__context__`` unless context was suppressed.
    """
    return _capture(exc, skip_frames, seen=set())


def _capture(exc: BaseException, skip_frames: int, seen: set[int]) -> CapturedError:
    seen.add(id(exc))

    tb = exc.__traceback__
    for _ in range(skip_frames):
        if tb is None:
            break
        tb = tb.tb_next

    cause = _cause_of(exc)
    return CapturedError(
        message=_message(exc),
        kind=_kind(type(exc)),
        metadata=_metadata(exc),
        source=_source(tb),
        help_link=_help_link(exc),
        stack_trace=_stack_trace(tb),
        cause=_capture(cause, 0, seen) if cause is not None and id(cause) not in seen else None,
    )


def _cause_of(exc: BaseException) -> BaseException | None:
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__


def _safe_str(value: object, fallback: str | None = None) -> str:
    """``str(value)``, or a placeholder if the conversion itself raises."""
    try:
        return str(value)
    except Exception:
        return fallback or f"<unprintable {type(value).__name__} object>"


def _message(exc: BaseException) -> str:
    message = _safe_str(exc, "<exception str() failed>")
    if not message.strip():
        message = f"{type(exc).__name__} raised with no message"
    # PEP 678 notes read as a continuation of the message
    notes = getattr(exc, "__notes__", None)
    if isinstance(notes, list) and notes:
        message = "\n".join([message, *(_safe_str(note) for note in notes)])
    return message


def _kind(exc_type: type[BaseException]) -> str:
    if exc_type.__module__ == "builtins":
        return exc_type.__qualname__
    return f"{exc_type.__module__}.{exc_type.__qualname__}"


def _metadata(exc: BaseException) -> dict[str, str]:
    data = getattr(exc, "data", None)
    if not isinstance(data, Mapping):
        return {}
    return {_safe_str(key): _safe_str(value) for key, value in data.items()}


def _help_link(exc: BaseException) -> str | None:
    link = getattr(exc, "help_link", None)
    return link if isinstance(link, str) else None


def _source(tb: TracebackType | None) -> str | None:
    if tb is None:
        return None
    while tb.tb_next is not None:
        tb = tb.tb_next
    name = tb.tb_frame.f_globals.get("__name__")
    return name if isinstance(name, str) else None


def _stack_trace(tb: TracebackType | None) -> str:
    if tb is None:
        return ""
    return "\n".join(
        f"at {frame.name}(){LOCATION_SEPARATOR}{frame.filename}:line {frame.lineno}"
        for frame in traceback.extract_tb(tb)
    )


__all__ = [
    "capture",
    "format_error",
    "format_stack_trace",
    "indent",
    "split_lines",
]
