"""Unit loading adapters.

- module_loader: import a unit by file path or dotted module name
- companion: activate a unit's companion ``.env`` configuration
"""
