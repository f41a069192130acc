"""
Enums used across the connect_session_core package.

This module contains enum definitions that are used by multiple modules
to avoid circular import issues.
"""

import enum


class IssuanceStage(str, enum.Enum):
    """Stages a connect session request passes through inside its transaction."""

    RECEIVED = "received"
    VALIDATED = "validated"
    REFERENCES_CHECKED = "references_checked"
    PERMISSION_CHECKED = "permission_checked"
    SESSION_WRITTEN = "session_written"
    CREDENTIAL_WRITTEN = "credential_written"
    COMMITTED = "committed"

    # Terminal failures
    VALIDATION_FAILED = "validation_failed"
    REFERENCE_NOT_FOUND = "reference_not_found"
    FORBIDDEN = "forbidden"
    PERSISTENCE_FAILED = "persistence_failed"

    @property
    def is_failure(self) -> bool:
        return self in _FAILURE_STAGES


_FAILURE_STAGES = frozenset(
    {
        IssuanceStage.VALIDATION_FAILED,
        IssuanceStage.REFERENCE_NOT_FOUND,
        IssuanceStage.FORBIDDEN,
        IssuanceStage.PERSISTENCE_FAILED,
    }
)


class IssuanceOutcome(str, enum.Enum):
    """Discriminator of a connect session issuance result."""

    CREATED = "created"
    INVALID_BODY = "invalid_body"
    FORBIDDEN = "forbidden"
    SERVER_ERROR = "server_error"


class FieldErrorKind(str, enum.Enum):
    """Why a field was rejected. Both kinds share the `invalid_body` wire code."""

    SCHEMA = "schema"
    REFERENCE = "reference"


class GateDecision(str, enum.Enum):
    """Decision of the overrides permission gate."""

    ALLOWED = "allowed"
    DENIED = "denied"
