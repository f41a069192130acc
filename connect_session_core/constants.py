"""
Constants and enums for the connect session core.

This module centralizes all magic strings and constants used throughout
the package to ensure consistency and maintainability.
"""

from enum import Enum


class LogLevel(str, Enum):
    """Standard logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class EnvironmentVariable(str, Enum):
    """Standard environment variable names."""

    AZURE_STORAGE_CONNECTION = "AzureWebJobsStorage"
    APP_ENV = "APP_ENV"
    LOG_LEVEL = "LOG_LEVEL"
    DEBUG = "DEBUG"
    ENABLE_LOGS_QUEUE = "ENABLE_LOGS_QUEUE"
    CONNECT_URL = "CONNECT_URL"
    TOKEN_PREFIX = "TOKEN_PREFIX"
    HASH_KEY = "HASH_KEY"
    TRANSACTION_TIMEOUT_SECONDS = "TRANSACTION_TIMEOUT_SECONDS"


class EntityType(str, Enum):
    """Entities a private key can be bound to."""

    CONNECT_SESSION = "connect_session"


class OperationType(str, Enum):
    """Operation families recorded by the log context provider."""

    AUTH = "auth"


class OperationAction(str, Enum):
    """Actions within an operation family."""

    CREATE_CONNECTION = "create_connection"


class WireErrorCode(str, Enum):
    """Error codes exposed in HTTP response bodies."""

    INVALID_QUERY_PARAMS = "invalid_query_params"
    INVALID_BODY = "invalid_body"
    FORBIDDEN = "forbidden"
    SERVER_ERROR = "server_error"
    UNAUTHORIZED = "unauthorized"


SESSION_TOKEN_QUERY_PARAM = "session_token"

# Display name given to keys issued for connect sessions
CONNECT_SESSION_KEY_DISPLAY_NAME = ""


class Limits:
    """System limits and thresholds."""

    MAX_KEY_LENGTH = 255
    MAX_DISPLAY_NAME_LENGTH = 255
    TOKEN_RANDOM_BYTES = 32


class Timeouts:
    """Timeout values in seconds."""

    TRANSACTION = 30


class ReplyMessage:
    """Messages returned to callers. Internal detail is logged, never returned."""

    DOCS_CONNECT_FORBIDDEN = "You are not allowed to override the docs connect url"
    CONNECT_SESSION_FAILED = "Failed to create connect session"
    SESSION_TOKEN_FAILED = "Failed to create session token"
    INTEGRATION_NOT_FOUND = "Integration does not exist"
    INVALID_JSON = "Invalid JSON"


class TenantHeader(str, Enum):
    """Headers the gateway sets after authenticating a caller."""

    ACCOUNT_ID = "x-account-id"
    ENVIRONMENT_ID = "x-environment-id"
    PLAN = "x-plan"
