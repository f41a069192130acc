"""Pydantic schemas for issued private keys (never carries the raw token)."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from ..constants import EntityType
from ..db.db_base import as_utc


class PrivateKeyRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    display_name: str
    account_id: str
    environment_id: str
    entity_type: EntityType
    entity_id: str
    expires_at: Optional[datetime] = None
    created_at: datetime

    @field_validator("expires_at", "created_at")
    @classmethod
    def ensure_utc(cls, v):
        """SQLite hands back naive datetimes; they were written as UTC."""
        return as_utc(v) if v is not None else v
