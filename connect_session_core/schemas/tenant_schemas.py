"""Tenant scope a request is authenticated for."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .plan_schemas import PlanRead


class TenantScope(BaseModel):
    """Account, environment and plan resolved by authentication upstream."""

    model_config = ConfigDict(frozen=True)

    account_id: str = Field(..., min_length=1, description="Owning account")
    environment_id: str = Field(..., min_length=1, description="Owning environment")
    plan: Optional[PlanRead] = Field(default=None, description="Resolved plan, if any")
