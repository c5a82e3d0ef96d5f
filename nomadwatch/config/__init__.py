"""
Configuration management for nomadwatch.

This module provides a configuration system that supports:
- YAML configuration files
- Environment variable overrides (NOMADWATCH_ prefix, __ for nesting)
- Type validation and conversion
"""

from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..exceptions import ConfigurationError
from ..options import ConsistencyMode, QueryOptions


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class NomadConfig(BaseModel):
    """Connection settings for the Nomad HTTP API."""

    address: str = Field(
        default="http://127.0.0.1:4646", description="Nomad HTTP API address"
    )
    token: Optional[str] = Field(default=None, description="ACL token")
    region: str = Field(default="", description="Default region for reads")
    namespace: str = Field(default="", description="Default namespace for reads")
    consistency: ConsistencyMode = Field(
        default=ConsistencyMode.DEFAULT, description="Read consistency mode"
    )
    timeout_seconds: float = Field(
        default=30.0, description="Request timeout in seconds", gt=0
    )
    verify_tls: bool = Field(default=True, description="Verify TLS certificates")

    @field_validator("address")
    @classmethod
    def _validate_address(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"address must be an http(s) URL, got {value!r}")
        return value.rstrip("/")

    def default_options(self) -> QueryOptions:
        """Base QueryOptions carrying the configured region and namespace."""
        return QueryOptions(
            region=self.region,
            namespace=self.namespace,
            consistency=self.consistency,
        )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    format: str = Field(default="json", description="Log format (json|console)")

    @field_validator("format")
    @classmethod
    def _validate_format(cls, value: str) -> str:
        if value not in ("json", "console"):
            raise ValueError(f"Invalid log format {value!r}. Choose json or console.")
        return value


class NomadWatchConfig(BaseSettings):
    """Main nomadwatch configuration class."""

    model_config = SettingsConfigDict(
        env_prefix="NOMADWATCH_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    nomad: NomadConfig = Field(default_factory=NomadConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, file_path: Union[str, Path]) -> "NomadWatchConfig":
        """Load configuration from a YAML file; environment variables still apply."""
        try:
            with open(file_path) as f:
                data = yaml.safe_load(f) or {}
            return cls(**data)
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {file_path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML configuration: {e}")
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}")

    @classmethod
    def from_env(cls) -> "NomadWatchConfig":
        """Load configuration from environment variables."""
        try:
            return cls()
        except ValidationError as e:
            raise ConfigurationError(
                f"Environment configuration validation failed: {e}"
            )

    def with_overrides(self, **nomad_overrides: Any) -> "NomadWatchConfig":
        """Return a copy with the given Nomad settings replaced; None values are ignored."""
        updates = {k: v for k, v in nomad_overrides.items() if v is not None}
        if not updates:
            return self
        try:
            nomad = NomadConfig(**{**self.nomad.model_dump(), **updates})
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed: {e}")
        return self.model_copy(update={"nomad": nomad})


__all__ = [
    "LogLevel",
    "LoggingConfig",
    "NomadConfig",
    "NomadWatchConfig",
]
