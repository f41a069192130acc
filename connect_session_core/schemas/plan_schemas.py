"""Resolved plan of a tenant and the capabilities it grants."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PlanRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    name: str = Field(default="free", description="Plan name")
    can_override_docs_connect_url: bool = Field(
        default=False, description="Tenant may replace the documentation link shown in connect"
    )


def can_override_docs_connect_url(plan: Optional[PlanRead]) -> bool:
    """Capability check on an already-resolved plan. No plan grants nothing."""
    return bool(plan and plan.can_override_docs_connect_url)
