"""
Operation log contexts.

Before a connect session is written, an operation log context describing the
authorization attempt is created and its id is stored on the session. The
later authorization flow appends to that context. The default getter records
the context as a structured log entry.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..constants import OperationAction, OperationType
from ..schemas.tenant_schemas import TenantScope
from ..utils.logger import get_logger


class OperationDescriptor(BaseModel):
    """What kind of operation a log context tracks."""

    model_config = ConfigDict(frozen=True)

    type: OperationType = OperationType.AUTH
    action: OperationAction = OperationAction.CREATE_CONNECTION


class LogContext(BaseModel):
    """Handle of a created log context."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Operation id stored on the connect session")
    operation: OperationDescriptor
    expires_at: Optional[datetime] = None


class LogContextGetter:
    """Creates operation log contexts. Subclass to persist them elsewhere."""

    def create(
        self,
        operation: OperationDescriptor,
        meta: Dict[str, Any],
        tenant: TenantScope,
        expires_at: Optional[datetime] = None,
    ) -> LogContext:
        """
        Create a log context for an operation.

        Args:
            operation: Operation type and action
            meta: Free-form metadata, e.g. the mapped end user
            tenant: Tenant the operation runs for
            expires_at: When the operation is considered abandoned

        Returns:
            LogContext carrying the new operation id
        """
        log_context = LogContext(id=str(uuid.uuid4()), operation=operation, expires_at=expires_at)

        get_logger().info(
            "Operation log context created",
            extra={
                "operation_id": log_context.id,
                "operation_type": operation.type.value,
                "operation_action": operation.action.value,
                "tenant_account": tenant.account_id,
                "tenant_environment": tenant.environment_id,
                "expires_at": expires_at.isoformat() if expires_at else None,
                "meta": meta,
            },
        )

        return log_context


_default_getter = LogContextGetter()


def get_log_context_getter() -> LogContextGetter:
    return _default_getter
