"""
End user value objects and the mapper building them from request input.

The mapped EndUser is opaque to session issuance: it is stored on the
session and copied into the operation metadata unchanged.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from ..constants import Limits


class EndUserInput(BaseModel):
    """`end_user` object of the create request."""

    model_config = ConfigDict(extra="forbid")

    id: Optional[str] = Field(None, min_length=1, max_length=Limits.MAX_DISPLAY_NAME_LENGTH)
    email: Optional[EmailStr] = None
    display_name: Optional[str] = Field(None, max_length=Limits.MAX_DISPLAY_NAME_LENGTH)
    tags: Optional[Dict[str, str]] = None


class OrganizationInput(BaseModel):
    """`organization` object of the create request."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(..., min_length=0, max_length=Limits.MAX_DISPLAY_NAME_LENGTH)
    display_name: Optional[str] = Field(None, max_length=Limits.MAX_DISPLAY_NAME_LENGTH)


class EndUserOrganization(BaseModel):
    organization_id: str
    display_name: Optional[str] = None


class EndUser(BaseModel):
    """End user on whose behalf integrations are authorized."""

    model_config = ConfigDict(frozen=True)

    end_user_id: Optional[str] = None
    email: Optional[str] = None
    display_name: Optional[str] = None
    tags: Optional[Dict[str, str]] = None
    organization: Optional[EndUserOrganization] = None


def to_end_user(
    end_user: EndUserInput, organization: Optional[OrganizationInput] = None
) -> EndUser:
    """Map request input to an EndUser. Pure, no side effects."""
    return EndUser(
        end_user_id=end_user.id,
        email=end_user.email,
        display_name=end_user.display_name,
        tags=end_user.tags,
        organization=(
            EndUserOrganization(
                organization_id=organization.id, display_name=organization.display_name
            )
            if organization
            else None
        ),
    )


def end_user_to_meta(end_user: EndUser) -> Dict[str, Any]:
    """Operation metadata describing an end user."""
    meta: Dict[str, Any] = {
        "end_user_id": end_user.end_user_id,
        "end_user_email": end_user.email,
    }
    if end_user.organization:
        meta["organization_id"] = end_user.organization.organization_id
    return meta
