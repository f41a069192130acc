"""Repositories over the caller's SQLAlchemy session."""

from .base_repository import BaseRepository
from .connect_session_repository import ConnectSessionRepository

__all__ = ["BaseRepository", "ConnectSessionRepository"]
