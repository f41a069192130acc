"""Pydantic schemas for configured integrations."""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class IntegrationCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")

    account_id: str = Field(..., min_length=1)
    environment_id: str = Field(..., min_length=1)
    unique_key: str = Field(..., min_length=1, max_length=255)
    provider: str = Field(..., min_length=1, max_length=100)
    display_name: Optional[str] = None
    config: Optional[Dict[str, Any]] = None


class IntegrationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    account_id: str
    environment_id: str
    unique_key: str
    provider: str
    display_name: Optional[str] = None
    created_at: datetime
