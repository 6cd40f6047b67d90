"""Configuration loading for casework.

This module provides centralized configuration management:
- Load settings from ``CASEWORK_*`` environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings

Command-line options override these values in the composition root.
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runner configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_prefix="CASEWORK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Log level for engine diagnostics on stderr",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Report output
    banner: bool = Field(
        default=True,
        description="Print the program banner before the run",
    )
    output_path: str = Field(
        default="",
        description="Also write the report to this file (empty: stdout only)",
    )

    # Unit loading
    unit_attribute: str = Field(
        default="unit",
        description="Module attribute holding the TestUnit when a module defines several",
    )
    companion_env: bool = Field(
        default=True,
        description="Activate the unit's companion environment file if present",
    )
    companion_env_suffix: str = Field(
        default=".env",
        description="Suffix appended to the unit file name to find its companion file",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> object:
        """Accept log levels in any case."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @field_validator("unit_attribute")
    @classmethod
    def validate_unit_attribute(cls, v: str) -> str:
        """Ensure the unit attribute is a valid identifier."""
        if not v.isidentifier():
            raise ValueError(f"unit_attribute must be a Python identifier, got {v!r}")
        return v

    @field_validator("companion_env_suffix")
    @classmethod
    def validate_companion_suffix(cls, v: str) -> str:
        """Ensure the companion suffix cannot resolve to the unit itself."""
        if not v.strip():
            raise ValueError("companion_env_suffix must not be empty")
        if "/" in v or "\\" in v:
            raise ValueError("companion_env_suffix must not contain path separators")
        return v


def load_settings(env_file: str | None = None) -> Settings:
    """Load runner settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
