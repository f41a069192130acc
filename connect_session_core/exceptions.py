"""
Consolidated exception system with error codes, context, and correlation support.

This module provides a unified exception hierarchy for connect session issuance,
with automatic logging and correlation ID tracking. Errors that reach the HTTP
boundary are translated to wire codes by the API layer; internal details
(causes, tracebacks, storage messages) stay in the logs.
"""

import threading
import traceback
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from .schemas.http_schemas import FieldError

# Removed logger import to avoid circular dependency - calling code should handle logging

_thread_local = threading.local()


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # System errors (1xxx)
    INTERNAL_ERROR = "1000"
    DATABASE_ERROR = "1001"
    CONNECTION_ERROR = "1002"
    CONFIGURATION_ERROR = "1003"
    TIMEOUT_ERROR = "1004"

    # Validation errors (2xxx)
    VALIDATION_FAILED = "2000"
    INVALID_FORMAT = "2001"
    MISSING_REQUIRED = "2002"
    TYPE_MISMATCH = "2003"
    CONSTRAINT_VIOLATION = "2004"

    # Resource errors (3xxx)
    NOT_FOUND = "3000"
    DUPLICATE = "3001"
    CONFLICT = "3002"
    EXPIRED = "3004"

    # Business logic errors (4xxx)
    BUSINESS_RULE_VIOLATION = "4000"
    PERMISSION_DENIED = "4003"


class BaseError(Exception):
    """Base exception with context, error codes, logging, and error chaining."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context: Any,
    ):
        """
        Initialize base error with rich context.

        Args:
            message: Human-readable error message
            error_code: Standardized error code from ErrorCode enum
            status_code: HTTP status code for API responses
            cause: Original exception that caused this error
            **context: Additional context information
        """
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.cause = cause
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.error_id = str(uuid.uuid4())
        self.context = context

        correlation_id = get_correlation_id()
        if correlation_id:
            self.context["correlation_id"] = correlation_id

        self.context["error_id"] = self.error_id

        if cause:
            self.context["cause"] = {
                "type": type(cause).__name__,
                "message": str(cause),
                "traceback": traceback.format_exception(type(cause), cause, cause.__traceback__),
            }

        self._log_error()

        super().__init__(message)

    def _log_error(self) -> None:
        """Log error with appropriate level based on status code."""
        # Import logger here to avoid circular dependency at module load time
        from .utils.logger import get_logger

        logger = get_logger()

        log_data = {
            "error_id": self.error_id,
            "error_code": self.error_code.value,
            "status_code": self.status_code,
            "error_message": self.message,
            "timestamp": self.timestamp,
            "context": {k: v for k, v in self.context.items() if k not in ["cause", "traceback"]},
        }

        if "correlation_id" in self.context:
            log_data["correlation_id"] = self.context["correlation_id"]

        if self.status_code >= 500:
            logger.error(
                f"Error {self.error_code}: {self.message}", extra=log_data, exc_info=self.cause
            )
        elif self.status_code >= 400:
            logger.warning(f"Client error {self.error_code}: {self.message}", extra=log_data)
        else:
            logger.info(f"Error {self.error_code}: {self.message}", extra=log_data)

    @property
    def retryable(self) -> bool:
        """Whether the caller may retry the same request."""
        return bool(self.context.get("retryable", False))

    def to_dict(
        self, include_cause: bool = False, include_traceback: bool = False
    ) -> Dict[str, Any]:
        """
        Convert to dict for internal diagnostics.

        Args:
            include_cause: Include cause information (useful for debugging)
            include_traceback: Include full traceback (only in debug mode)

        Returns:
            Dictionary representation suitable for JSON serialization
        """
        result: Dict[str, Any] = {
            "error": {
                "id": self.error_id,
                "code": self.error_code.value,
                "message": self.message,
                "timestamp": self.timestamp,
                "context": {
                    k: v
                    for k, v in self.context.items()
                    if k not in ["cause", "error_id", "correlation_id"]
                },
            }
        }

        if "correlation_id" in self.context:
            result["error"]["correlation_id"] = self.context["correlation_id"]

        if include_cause and "cause" in self.context:
            result["error"]["cause"] = {
                "type": self.context["cause"]["type"],
                "message": self.context["cause"]["message"],
            }
            if include_traceback:
                result["error"]["cause"]["traceback"] = self.context["cause"]["traceback"]

        return result

    def add_context(self, **kwargs: Any) -> "BaseError":
        """
        Add additional context to the error (fluent interface).

        Returns:
            Self for method chaining
        """
        self.context.update(kwargs)
        return self

    @property
    def error_chain(self) -> List[Exception]:
        """Get the full chain of errors."""
        chain: List[Exception] = [self]
        current = self.cause
        while current:
            chain.append(current)
            current = getattr(current, "cause", None)
        return chain


# Layer-specific base exceptions
class RepositoryError(BaseError):
    """Repository layer errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.DATABASE_ERROR,
        status_code: int = 500,
        cause: Optional[Exception] = None,
        **context,
    ):
        """Initialize repository error with database context."""
        super().__init__(message, error_code, status_code, cause, **context)


class ServiceError(BaseError):
    """Service layer errors."""

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        operation: Optional[str] = None,
        cause: Optional[Exception] = None,
        **context,
    ):
        """Initialize service error with operation context."""
        if operation:
            context["operation"] = operation
        super().__init__(message, error_code, 500, cause, **context)


class ValidationError(BaseError):
    """Validation errors."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_FAILED,
        cause: Optional[Exception] = None,
        **context,
    ):
        """Initialize validation error with field context."""
        if field:
            context["field"] = field
        super().__init__(message, error_code, 400, cause, **context)


# Factory functions for common error patterns
def not_found(
    resource_type: str, cause: Optional[Exception] = None, **identifiers
) -> RepositoryError:
    """
    Factory for not found errors.

    Args:
        resource_type: Type of resource (e.g., 'ConnectSession', 'Integration')
        cause: Original exception if any
        **identifiers: Resource identifiers (e.g., connect_session_id='123')

    Returns:
        Configured RepositoryError instance with 404 status
    """
    id_parts = [f"{k}={v}" for k, v in identifiers.items()]
    message = f"{resource_type} not found"
    if id_parts:
        message += f": {', '.join(id_parts)}"

    return RepositoryError(
        message,
        error_code=ErrorCode.NOT_FOUND,
        status_code=404,
        cause=cause,
        resource_type=resource_type,
        **identifiers,
    )


def duplicate(
    resource_type: str, cause: Optional[Exception] = None, **identifiers
) -> RepositoryError:
    """
    Factory for duplicate resource errors.

    Args:
        resource_type: Type of resource (e.g., 'Integration')
        cause: Original exception if any
        **identifiers: Resource identifiers

    Returns:
        Configured RepositoryError instance with 409 status
    """
    id_parts = [f"{k}={v}" for k, v in identifiers.items()]
    message = f"Duplicate {resource_type}"
    if id_parts:
        message += f": {', '.join(id_parts)}"

    return RepositoryError(
        message,
        error_code=ErrorCode.DUPLICATE,
        status_code=409,
        cause=cause,
        resource_type=resource_type,
        **identifiers,
    )


def permission_denied(
    action: str, resource: str, cause: Optional[Exception] = None, **context
) -> "PermissionDeniedError":
    """
    Factory for permission denied errors.

    Args:
        action: Action that was denied (e.g., 'override')
        resource: Resource being accessed
        cause: Original exception if any
        **context: Additional context

    Returns:
        Configured PermissionDeniedError instance
    """
    return PermissionDeniedError(
        f"Permission denied: {action} on {resource}",
        cause=cause,
        action=action,
        resource=resource,
        **context,
    )


# Correlation ID management
def set_correlation_id(correlation_id: str) -> None:
    """Set the correlation ID for the current thread."""
    _thread_local.correlation_id = correlation_id


def get_correlation_id() -> Optional[str]:
    """Get the current thread's correlation ID."""
    return getattr(_thread_local, "correlation_id", None)


def clear_correlation_id() -> None:
    """Clear the current thread's correlation ID."""
    if hasattr(_thread_local, "correlation_id"):
        delattr(_thread_local, "correlation_id")


# ==================== CONNECT SESSION EXCEPTIONS ====================


class FieldErrorsMixin:
    """Carries the collected field errors of a rejected request body."""

    field_errors: List["FieldError"]

    def _set_field_errors(self, field_errors: Optional[List["FieldError"]]) -> Dict[str, Any]:
        self.field_errors = list(field_errors or [])
        return {"paths": [list(e.path) for e in self.field_errors]}


class SchemaValidationError(FieldErrorsMixin, ValidationError):
    """Raised when a request body or query string does not match its schema."""

    def __init__(
        self,
        message: str = "Invalid request body",
        field_errors: Optional[List["FieldError"]] = None,
        **kwargs,
    ):
        paths = self._set_field_errors(field_errors)
        super().__init__(message, error_code=ErrorCode.VALIDATION_FAILED, **paths, **kwargs)


class ReferenceNotFoundError(FieldErrorsMixin, ValidationError):
    """Raised when a request references integrations the tenant does not have."""

    def __init__(
        self,
        message: str = "Integration does not exist",
        field_errors: Optional[List["FieldError"]] = None,
        **kwargs,
    ):
        paths = self._set_field_errors(field_errors)
        super().__init__(message, error_code=ErrorCode.NOT_FOUND, **paths, **kwargs)


class PermissionDeniedError(BaseError):
    """Raised when the tenant's plan does not grant a requested capability."""

    def __init__(self, message: str = "Permission denied", **kwargs):
        super().__init__(
            message=message, error_code=ErrorCode.PERMISSION_DENIED, status_code=403, **kwargs
        )


class PersistenceError(RepositoryError):
    """Raised when a storage write fails. Always retryable by the caller."""

    def __init__(self, message: str = "Persistence failure", **kwargs):
        kwargs.setdefault("retryable", True)
        super().__init__(message, error_code=ErrorCode.DATABASE_ERROR, status_code=500, **kwargs)


class IssuanceError(BaseError):
    """Raised when a credential cannot be generated or stored."""

    def __init__(self, message: str = "Credential issuance failed", **kwargs):
        kwargs.setdefault("retryable", True)
        super().__init__(
            message=message, error_code=ErrorCode.INTERNAL_ERROR, status_code=500, **kwargs
        )


class TransactionTimeoutError(BaseError):
    """Raised when a transaction exceeds its execution deadline."""

    def __init__(self, message: str = "Transaction deadline exceeded", **kwargs):
        kwargs.setdefault("retryable", True)
        super().__init__(
            message=message, error_code=ErrorCode.TIMEOUT_ERROR, status_code=500, **kwargs
        )


class CredentialNotFoundError(BaseError):
    """Raised when no stored key matches a presented token."""

    def __init__(self, message: str = "Credential not found", **kwargs):
        super().__init__(message=message, error_code=ErrorCode.NOT_FOUND, status_code=404, **kwargs)


class CredentialExpiredError(BaseError):
    """Raised when a presented token is past its expiry."""

    def __init__(self, message: str = "Credential has expired", **kwargs):
        super().__init__(message=message, error_code=ErrorCode.EXPIRED, status_code=401, **kwargs)
