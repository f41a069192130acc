"""Pydantic schemas."""

from .connect_session_schemas import (
    ConnectSessionCreate,
    ConnectSessionRead,
    ConnectSessionToken,
    EmptyQuery,
    IntegrationConfigDefaults,
    IntegrationOverride,
    PostConnectSessionsBody,
)
from .end_user_schemas import EndUser, EndUserInput, OrganizationInput, end_user_to_meta, to_end_user
from .http_schemas import ErrorEnvelope, FieldError, field_errors_from_pydantic
from .integration_schemas import IntegrationCreate, IntegrationRead
from .plan_schemas import PlanRead, can_override_docs_connect_url
from .private_key_schemas import PrivateKeyRead
from .tenant_schemas import TenantScope

__all__ = [
    "ConnectSessionCreate",
    "ConnectSessionRead",
    "ConnectSessionToken",
    "EmptyQuery",
    "IntegrationConfigDefaults",
    "IntegrationOverride",
    "PostConnectSessionsBody",
    "EndUser",
    "EndUserInput",
    "OrganizationInput",
    "end_user_to_meta",
    "to_end_user",
    "ErrorEnvelope",
    "FieldError",
    "field_errors_from_pydantic",
    "IntegrationCreate",
    "IntegrationRead",
    "PlanRead",
    "can_override_docs_connect_url",
    "PrivateKeyRead",
    "TenantScope",
]
