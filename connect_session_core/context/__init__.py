"""Context management for operations, tenant isolation and log contexts."""

from .log_context import LogContext, LogContextGetter, OperationDescriptor, get_log_context_getter
from .operation_context import OperationContext, OperationHandler, operation
from .tenant_context import TenantContext, tenant_aware, tenant_context

__all__ = [
    "LogContext",
    "LogContextGetter",
    "OperationDescriptor",
    "get_log_context_getter",
    "operation",
    "OperationContext",
    "OperationHandler",
    "TenantContext",
    "tenant_aware",
    "tenant_context",
]
