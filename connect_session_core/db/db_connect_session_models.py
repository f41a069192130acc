"""
Connect session model.

Just the data structure - no business logic or class methods.
"""

from sqlalchemy import Column, Index, String

from .db_base import JSON, TimestampMixin, UUIDMixin
from .db_config import Base


class ConnectSession(Base, UUIDMixin, TimestampMixin):
    """An in-progress end user authorization flow, scoped to an account and environment."""

    __tablename__ = "connect_sessions"

    account_id = Column(String(100), nullable=False)
    environment_id = Column(String(100), nullable=False, index=True)

    # Attached later by the authorization flow
    end_user_id = Column(String(255), nullable=True)
    end_user = Column(JSON, nullable=True)

    # NULL means every integration of the environment is allowed
    allowed_integrations = Column(JSON, nullable=True)
    integrations_config_defaults = Column(JSON, nullable=True)
    overrides = Column(JSON, nullable=True)

    operation_id = Column(String(100), nullable=True)

    __table_args__ = (Index("ix_connect_session_tenant", "account_id", "environment_id"),)
