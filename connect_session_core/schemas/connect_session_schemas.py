"""
Pydantic schemas for connect sessions.

Covers the create request body (unknown fields rejected), the repository
create/read models and the token payload returned to the caller.
"""

from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from ..constants import Limits
from .end_user_schemas import EndUser, EndUserInput, OrganizationInput

IntegrationKey = Annotated[
    str, StringConstraints(pattern=r"^[a-zA-Z0-9~:.@ _-]+$", max_length=Limits.MAX_KEY_LENGTH)
]


class ConnectionConfigDefaults(BaseModel):
    """Open object: keys besides oauth_scopes_override are passed through."""

    model_config = ConfigDict(extra="allow")

    oauth_scopes_override: Optional[str] = None


class IntegrationConfigDefaults(BaseModel):
    model_config = ConfigDict(extra="forbid")

    user_scopes: Optional[str] = None
    authorization_params: Optional[Dict[str, str]] = None
    connection_config: Optional[ConnectionConfigDefaults] = None


class IntegrationOverride(BaseModel):
    docs_connect: Optional[str] = None


class PostConnectSessionsBody(BaseModel):
    """Body of ``POST /connect/sessions``."""

    model_config = ConfigDict(extra="forbid")

    end_user: Optional[EndUserInput] = None
    organization: Optional[OrganizationInput] = None
    allowed_integrations: Optional[List[IntegrationKey]] = None
    integrations_config_defaults: Optional[Dict[IntegrationKey, IntegrationConfigDefaults]] = None
    overrides: Optional[Dict[IntegrationKey, IntegrationOverride]] = None

    @property
    def references_integrations(self) -> bool:
        """Whether the body names integrations that must be checked."""
        return bool(
            self.allowed_integrations is not None
            or self.integrations_config_defaults is not None
            or self.overrides is not None
        )


class EmptyQuery(BaseModel):
    """The create endpoint takes no query parameters."""

    model_config = ConfigDict(extra="forbid")


class ConnectSessionCreate(BaseModel):
    """Parameters of a session write."""

    account_id: str
    environment_id: str
    end_user_id: Optional[str] = None
    end_user: Optional[EndUser] = None
    allowed_integrations: Optional[List[str]] = None
    integrations_config_defaults: Optional[Dict[str, Dict[str, Any]]] = None
    overrides: Optional[Dict[str, Dict[str, Any]]] = None
    operation_id: Optional[str] = None


class ConnectSessionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    account_id: str
    environment_id: str
    end_user_id: Optional[str] = None
    end_user: Optional[Dict[str, Any]] = None
    allowed_integrations: Optional[List[str]] = None
    integrations_config_defaults: Optional[Dict[str, Dict[str, Any]]] = None
    overrides: Optional[Dict[str, Dict[str, Any]]] = None
    operation_id: Optional[str] = None
    created_at: datetime

    @property
    def is_unrestricted(self) -> bool:
        return self.allowed_integrations is None


class ConnectSessionToken(BaseModel):
    """``data`` of a successful create response."""

    token: str = Field(..., description="Bearer session token, shown once")
    connect_link: str = Field(..., description="Absolute connect URL carrying the token")
    expires_at: str = Field(..., description="Token expiry, ISO-8601 UTC")
