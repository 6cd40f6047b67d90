"""Unit tests for core engine logic.

These tests exercise discovery, execution and reporting without a
console or file system. Ports are replaced with in-memory fakes from
tests/fakes/.
"""
