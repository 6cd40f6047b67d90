"""Companion configuration for a unit of code.

A unit file may ship a companion environment file named after it, e.g.
``billing_tests.py.env`` next to ``billing_tests.py``. When present, its
variables are loaded into ``os.environ`` before the unit is imported, so
module-level code and test bodies see them. Variables already set in the
environment are left untouched.
"""

import logging
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_SUFFIX = ".env"


def companion_env_path(unit_path: Path, suffix: str = DEFAULT_SUFFIX) -> Path:
    """Path the companion file of a unit would have."""
    return unit_path.with_name(unit_path.name + suffix)


def activate_companion_env(unit_path: Path, suffix: str = DEFAULT_SUFFIX) -> Path | None:
    """Load a unit's companion environment file, if one exists.

    Args:
        unit_path: Source file of the unit.
        suffix: Appended to the unit's file name to form the companion name.

    Returns:
        Path of the activated file, or None if the unit has no companion.
    """
    path = companion_env_path(unit_path, suffix)
    if not path.is_file():
        return None
    load_dotenv(path, override=False)
    logger.info(f"Activated companion configuration {path}")
    return path


__all__ = ["DEFAULT_SUFFIX", "activate_companion_env", "companion_env_path"]
