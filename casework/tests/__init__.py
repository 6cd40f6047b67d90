"""Test suite for the casework test engine.

Organized into three categories:

1. core/: Unit tests for core engine logic
   - No file system or console access
   - Uses in-memory fakes for ports

2. adapters/: Tests for adapter implementations
   - Exercise sinks and loaders against temporary files
   - Validate adapter behavior and error handling

3. fakes/: Port implementations for testing
   - In-memory implementations of OutputSink and UnitLoaderPort
   - Used by core unit tests
"""
