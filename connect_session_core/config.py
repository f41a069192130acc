"""
Centralized configuration management for the connect session core.

This module provides a unified configuration system with support for:
- Environment variables
- Feature flags
- Validation using Pydantic
"""

import os
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator

from .constants import EnvironmentVariable, LogLevel, Timeouts


class DatabaseConfig(BaseModel):
    """Transaction settings. Connection settings live in db.db_config."""

    transaction_timeout_seconds: float = Field(
        default_factory=lambda: float(
            os.getenv(
                EnvironmentVariable.TRANSACTION_TIMEOUT_SECONDS.value, str(Timeouts.TRANSACTION)
            )
        ),
        description="Execution deadline of a connect session transaction",
    )

    @field_validator("transaction_timeout_seconds")
    def validate_transaction_timeout(cls, v: float) -> float:
        """Validate the deadline is not negative."""
        if v < 0:
            raise ValueError("transaction_timeout_seconds must be >= 0")
        return v


class QueueConfig(BaseModel):
    """Queue configuration for Azure Storage Queues."""

    connection_string: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.AZURE_STORAGE_CONNECTION.value, ""),
        description="Azure Storage connection string",
    )
    logs_queue_name: str = Field(default="logs-queue", description="Logs queue name")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.LOG_LEVEL.value, LogLevel.INFO.value),
        description="Logging level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format string",
    )

    @field_validator("level")
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {level.value for level in LogLevel}
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class FeatureFlags(BaseModel):
    """Feature flags for controlling framework behavior."""

    enable_logs_queue: bool = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.ENABLE_LOGS_QUEUE.value, "false").lower()
        == "true",
        description="Ship structured logs to the Azure logs queue",
    )
    enable_operation_context: bool = Field(
        default=True, description="Enable ENTER/EXIT operation logging at the boundary"
    )


class ConnectConfig(BaseModel):
    """Connect session issuance settings."""

    connect_url: str = Field(
        default_factory=lambda: os.getenv(
            EnvironmentVariable.CONNECT_URL.value, "http://localhost:3009"
        ),
        description="Base URL of the connect UI that consumes session tokens",
    )
    session_ttl_minutes: int = Field(
        default=30, description="Lifetime of a connect session token in minutes"
    )
    token_prefix: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.TOKEN_PREFIX.value, "cs"),
        description="Prefix of issued bearer tokens",
    )
    operation_expiration_minutes: int = Field(
        default=5, description="Expiration of the auth operation log context in minutes"
    )

    @field_validator("connect_url")
    def validate_connect_url(cls, v: str) -> str:
        """The connect URL must be absolute."""
        parts = urlsplit(v)
        if not parts.scheme or not parts.netloc:
            raise ValueError(f"connect_url must be an absolute URL, got: {v}")
        return v


class SecurityConfig(BaseModel):
    """Security-related configuration."""

    hash_key: Optional[str] = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.HASH_KEY.value) or None,
        description="Key used to derive token verifiers (HMAC-SHA256)",
    )


class AppConfig(BaseModel):
    """Main application configuration."""

    environment: str = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.APP_ENV.value, "development"),
        description="Application environment",
    )
    debug: bool = Field(
        default_factory=lambda: os.getenv(EnvironmentVariable.DEBUG.value, "false").lower()
        == "true",
        description="Debug mode",
    )

    # Sub-configurations
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    queue: QueueConfig = Field(default_factory=QueueConfig, description="Queue configuration")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    features: FeatureFlags = Field(default_factory=FeatureFlags, description="Feature flags")
    connect: ConnectConfig = Field(
        default_factory=ConnectConfig, description="Connect session configuration"
    )
    security: SecurityConfig = Field(
        default_factory=SecurityConfig, description="Security configuration"
    )

    # Custom configuration
    custom: Dict[str, Any] = Field(default_factory=dict, description="Custom configuration values")

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create configuration from environment variables."""
        return cls()

    def get_custom(self, key: str, default: Any = None) -> Any:
        """Get a custom configuration value."""
        return self.custom.get(key, default)

    def set_custom(self, key: str, value: Any) -> None:
        """Set a custom configuration value."""
        self.custom[key] = value


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def set_config(config: AppConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset the global configuration instance."""
    global _config
    _config = None
