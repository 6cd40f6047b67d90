"""Tests for adapter implementations.

These tests exercise adapters against temporary files, environment
variables and streams to validate correct translation between the core
ports and the outside world.
"""
