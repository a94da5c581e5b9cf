"""
Configuration management for the log appender.

This module provides configuration loading and validation using Pydantic
settings. The instrumentation key and the rest of the appender settings are
loaded from environment variables or .env files.

The instrumentation key is the one required setting: when it is missing the
appender must fail at setup time, never later when a record is appended.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from errors.exceptions import ConfigurationError

DEFAULT_INGESTION_ENDPOINT = "https://dc.services.visualstudio.com/"

_VALID_LEVELS = {"TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "SEVERE", "CRITICAL"}


class Environment(str, Enum):
    """Supported deployment environments."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


def _detect_environment() -> Environment:
    """
    Detect the current environment from the ENVIRONMENT variable.

    Returns:
        Environment: The detected environment, defaults to DEVELOPMENT if not set.
    """
    env_value = os.environ.get("ENVIRONMENT", "development").lower().strip()
    try:
        return Environment(env_value)
    except ValueError:
        return Environment.DEVELOPMENT


def _get_env_files(environment: Environment) -> Tuple[str, ...]:
    """
    Get the .env files to load for the given environment.

    The base .env file is loaded first, then the environment-specific file
    overrides it.
    """
    env_file_map = {
        Environment.DEVELOPMENT: ".env.development",
        Environment.STAGING: ".env.staging",
        Environment.PRODUCTION: ".env.production",
    }
    return (".env", env_file_map.get(environment, ".env.development"))


class Settings(BaseSettings):
    """
    Appender settings loaded from environment variables.

    instrumentation_key must be provided via the environment or a .env
    file. Everything else has a default.
    """

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Deployment environment (development, staging, production)"
    )

    # Application Insights
    instrumentation_key: str = Field(
        ...,
        description="Instrumentation key of the Application Insights resource"
    )
    ingestion_endpoint: str = Field(
        default=DEFAULT_INGESTION_ENDPOINT,
        description="Base URL of the Application Insights ingestion service"
    )
    send_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Timeout for a single send to the ingestion endpoint"
    )
    role_name: Optional[str] = Field(
        default=None,
        description="Cloud role name attached to every telemetry item"
    )

    # Logging
    appender_level: str = Field(
        default="DEBUG",
        description="Minimum level of records forwarded by the appender"
    )
    log_level: str = Field(
        default="INFO",
        description="Root logging level for local JSON output"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("instrumentation_key")
    @classmethod
    def validate_instrumentation_key(cls, v: str) -> str:
        """Validate that instrumentation_key is not blank."""
        if not v or not v.strip():
            raise ValueError("instrumentation_key cannot be empty")
        return v.strip()

    @field_validator("ingestion_endpoint")
    @classmethod
    def validate_ingestion_endpoint(cls, v: str) -> str:
        """Validate that ingestion_endpoint is an HTTP/HTTPS URL."""
        v = v.strip()
        if not (v.startswith("http://") or v.startswith("https://")):
            raise ValueError("ingestion_endpoint must be a valid HTTP/HTTPS URL")
        return v

    @field_validator("appender_level", "log_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate that the level is a known logging level name."""
        v = v.strip().upper()
        if v not in _VALID_LEVELS:
            raise ValueError(f"level must be one of: {', '.join(sorted(_VALID_LEVELS))}")
        return v


def create_settings_for_environment(environment: Optional[Environment] = None) -> Settings:
    """
    Create Settings for a specific environment.

    Detects the environment from the ENVIRONMENT variable (if not provided)
    and loads the matching environment-specific .env file.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    if environment is None:
        environment = _detect_environment()

    env_files = _get_env_files(environment)
    existing_env_files = [f for f in env_files if Path(f).exists()]
    if not existing_env_files:
        existing_env_files = list(env_files)

    try:
        class EnvironmentSettings(Settings):
            model_config = SettingsConfigDict(
                env_file=tuple(existing_env_files),
                env_file_encoding="utf-8",
                case_sensitive=False,
                extra="ignore"
            )

        return EnvironmentSettings()
    except Exception as e:
        missing_fields = []
        invalid_fields = {}

        if hasattr(e, "errors"):
            for error in e.errors():
                field_name = ".".join(str(loc) for loc in error.get("loc", []))
                if error.get("type", "") == "missing":
                    missing_fields.append(field_name)
                else:
                    invalid_fields[field_name] = error.get("msg", str(error))

        raise ConfigurationError(
            f"Failed to load configuration for environment '{environment.value}'",
            missing_fields=missing_fields,
            invalid_fields=invalid_fields
        ) from e


_settings_cache: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the appender settings singleton.

    Settings are loaded once and cached for subsequent calls.

    Raises:
        ConfigurationError: If required settings are missing or invalid.
    """
    global _settings_cache

    if _settings_cache is None:
        _settings_cache = create_settings_for_environment()

    return _settings_cache


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() reloads."""
    global _settings_cache
    _settings_cache = None
