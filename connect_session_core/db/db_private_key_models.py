"""
Private key model.

Stores the verifier of a bearer token, never the token itself.
"""

from sqlalchemy import Column, DateTime, Index, String

from .db_base import TimestampMixin, UUIDMixin
from .db_config import Base


class PrivateKey(Base, UUIDMixin, TimestampMixin):
    """Bearer credential bound to exactly one entity, with its own expiry."""

    __tablename__ = "private_keys"

    display_name = Column(String(255), nullable=False, default="")
    account_id = Column(String(100), nullable=False)
    environment_id = Column(String(100), nullable=False)

    entity_type = Column(String(50), nullable=False)
    entity_id = Column(String(100), nullable=False)

    hash = Column(String(128), nullable=False, unique=True)

    expires_at = Column(DateTime(timezone=True), nullable=True, index=True)
    last_access_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (Index("ix_private_key_entity", "entity_type", "entity_id"),)
