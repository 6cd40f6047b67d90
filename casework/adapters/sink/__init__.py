"""Output sink adapters.

Implementations of OutputSink:
- Stdout (terminal)
- File (report file, optionally echoed to another sink)
"""
