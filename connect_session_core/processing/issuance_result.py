"""
Result of a connect session issuance attempt.

The transaction body returns one of these instead of writing a response;
the HTTP boundary only translates it.
"""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field

from ..enums import IssuanceOutcome, IssuanceStage
from ..schemas.connect_session_schemas import ConnectSessionToken
from ..schemas.http_schemas import FieldError


class SessionIssuanceResult(BaseModel):
    """
    Outcome of issuing a connect session.

    Exactly one of ``data`` (created), ``errors`` (invalid body) or
    ``message`` (forbidden, server error) is populated.
    """

    outcome: IssuanceOutcome = Field(description="Result discriminator")
    stage: IssuanceStage = Field(description="Stage the attempt ended in")
    completed_stage: Optional[IssuanceStage] = Field(
        default=None, description="Last stage passed before the attempt ended"
    )
    status_code: int = Field(description="HTTP status for the reply")

    data: Optional[ConnectSessionToken] = Field(default=None, description="Token payload")
    errors: List[FieldError] = Field(default_factory=list, description="Rejected fields")
    message: Optional[str] = Field(default=None, description="Caller facing message")

    error_type: Optional[str] = Field(default=None, description="Internal failure type")
    retryable: bool = Field(default=False, description="Whether retrying may succeed")
    connect_session_id: Optional[str] = Field(default=None, description="Created session")

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), description="Result creation timestamp"
    )

    @property
    def success(self) -> bool:
        return self.outcome == IssuanceOutcome.CREATED

    @classmethod
    def created(
        cls, data: ConnectSessionToken, connect_session_id: str
    ) -> "SessionIssuanceResult":
        return cls(
            outcome=IssuanceOutcome.CREATED,
            stage=IssuanceStage.CREDENTIAL_WRITTEN,
            completed_stage=IssuanceStage.SESSION_WRITTEN,
            status_code=201,
            data=data,
            connect_session_id=connect_session_id,
        )

    @classmethod
    def invalid_body(
        cls,
        errors: List[FieldError],
        stage: IssuanceStage = IssuanceStage.VALIDATION_FAILED,
        error_type: Optional[str] = None,
        completed_stage: Optional[IssuanceStage] = IssuanceStage.RECEIVED,
    ) -> "SessionIssuanceResult":
        """
        Create a 400 result.

        Args:
            errors: Collected field errors, in report order
            stage: VALIDATION_FAILED for schema errors, REFERENCE_NOT_FOUND for unknown keys
            error_type: Name of the internal failure type
            completed_stage: RECEIVED for schema errors, VALIDATED for unknown keys
        """
        return cls(
            outcome=IssuanceOutcome.INVALID_BODY,
            stage=stage,
            status_code=400,
            errors=errors,
            error_type=error_type,
            completed_stage=completed_stage,
        )

    @classmethod
    def forbidden(cls, message: str, error_type: Optional[str] = None) -> "SessionIssuanceResult":
        return cls(
            outcome=IssuanceOutcome.FORBIDDEN,
            stage=IssuanceStage.FORBIDDEN,
            completed_stage=IssuanceStage.REFERENCES_CHECKED,
            status_code=403,
            message=message,
            error_type=error_type,
        )

    @classmethod
    def server_error(
        cls,
        message: str,
        error_type: Optional[str] = None,
        retryable: bool = True,
        completed_stage: Optional[IssuanceStage] = None,
    ) -> "SessionIssuanceResult":
        return cls(
            outcome=IssuanceOutcome.SERVER_ERROR,
            stage=IssuanceStage.PERSISTENCE_FAILED,
            completed_stage=completed_stage,
            status_code=500,
            message=message,
            error_type=error_type,
            retryable=retryable,
        )
