"""
Integration configuration model.

One row per third-party integration configured in an environment.
"""

from sqlalchemy import Boolean, Column, Index, String, text

from .db_base import JSON, TimestampMixin, UUIDMixin
from .db_config import Base


class Integration(Base, UUIDMixin, TimestampMixin):
    """Simple integration model - just data, no logic."""

    __tablename__ = "integrations"

    account_id = Column(String(100), nullable=False)
    environment_id = Column(String(100), nullable=False, index=True)
    unique_key = Column(String(255), nullable=False)
    provider = Column(String(100), nullable=False)
    display_name = Column(String(255), nullable=True)
    deleted = Column(Boolean, nullable=False, default=False)

    config = Column(JSON, nullable=True)

    __table_args__ = (
        # Soft-deleted rows release their key
        Index(
            "ix_integration_key",
            "environment_id",
            "unique_key",
            unique=True,
            postgresql_where=text("deleted = false"),
            sqlite_where=text("deleted = 0"),
        ),
    )
