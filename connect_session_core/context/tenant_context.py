"""
Tenant context management for connect session issuance.

The authenticated tenant scope (account, environment, plan) is resolved
upstream and carried through a request in thread-local storage so that
loggers and operations can tag their output without threading it through
every call.

IMPORTANT: Always import this module as 'connect_session_core.context.tenant_context'
to avoid multiple module instances which would break tenant isolation.
"""

import threading
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Generator, Optional, Union

from ..exceptions import ErrorCode, ValidationError
from ..schemas.tenant_schemas import TenantScope
from ..utils.logger import get_logger


class TenantContext:
    """
    Manages tenant context throughout the application using thread-local storage.
    """

    # Use thread-local storage for tenant context
    _thread_local = threading.local()

    @classmethod
    def set_current_tenant(cls, tenant: TenantScope) -> None:
        """
        Set the current tenant scope for the execution context.

        Args:
            tenant: Resolved tenant scope

        Raises:
            ValidationError: If tenant is not a TenantScope
        """
        if not isinstance(tenant, TenantScope):
            raise ValidationError(
                "tenant must be a TenantScope",
                error_code=ErrorCode.MISSING_REQUIRED,
                field="tenant",
                value=type(tenant).__name__,
            )

        cls._thread_local.tenant = tenant
        get_logger().debug(
            "Current tenant set",
            extra={"tenant_account": tenant.account_id, "tenant_environment": tenant.environment_id},
        )

    @classmethod
    def get_current_tenant(cls) -> Optional[TenantScope]:
        """
        Get the current tenant scope from the execution context.

        Returns:
            Current tenant scope or None if not set
        """
        return getattr(cls._thread_local, "tenant", None)

    @classmethod
    def get_current_environment_id(cls) -> Optional[str]:
        tenant = cls.get_current_tenant()
        return tenant.environment_id if tenant else None

    @classmethod
    def clear_current_tenant(cls) -> None:
        """
        Clear the current tenant scope from the execution context.
        """
        if hasattr(cls._thread_local, "tenant"):
            delattr(cls._thread_local, "tenant")


@contextmanager
def tenant_context(tenant: TenantScope) -> Generator[TenantScope, None, None]:
    """
    Context manager for tenant operations.

    Sets the current tenant for the duration of the context and restores the
    previous one afterward.

    Args:
        tenant: Resolved tenant scope

    Yields:
        The tenant scope
    """
    previous_tenant = TenantContext.get_current_tenant()
    TenantContext.set_current_tenant(tenant)
    try:
        yield tenant
    finally:
        if previous_tenant is not None:
            TenantContext.set_current_tenant(previous_tenant)
        else:
            TenantContext.clear_current_tenant()


def tenant_aware(tenant: Union[Optional[TenantScope], Callable] = None):
    """
    Parameterized decorator to make a function tenant-aware.

    Uses the tenant passed to the decorator or the one already in context.

    Raises:
        ValidationError: If no tenant is available
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            effective_tenant = tenant or TenantContext.get_current_tenant()

            if effective_tenant is None:
                # ValidationError will automatically log via BaseError.__init__
                raise ValidationError(
                    "No tenant provided for tenant-aware function",
                    error_code=ErrorCode.MISSING_REQUIRED,
                    field="tenant",
                )

            with tenant_context(effective_tenant):
                return func(*args, **kwargs)

        return wrapper

    # Handle usage as @tenant_aware (without args)
    if callable(tenant):
        func = tenant
        tenant = None
        return decorator(func)

    return decorator
