"""
Repository for connect session data access operations.
"""

from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db.db_connect_session_models import ConnectSession
from ..exceptions import not_found
from ..schemas.connect_session_schemas import ConnectSessionCreate, ConnectSessionRead
from ..utils.logger import ContextAwareLogger
from .base_repository import BaseRepository


class ConnectSessionRepository(BaseRepository[ConnectSession]):
    """Repository for connect session data access operations."""

    def __init__(self, session: Session, logger: Optional[ContextAwareLogger] = None):
        super().__init__(session, ConnectSession, logger)

    def create(self, data: ConnectSessionCreate) -> ConnectSessionRead:
        """
        Write one connect session row.

        An absent or empty allow-list is stored as NULL, which grants every
        integration of the environment.

        Args:
            data: Session parameters

        Returns:
            The stored session with its generated id

        Raises:
            PersistenceError: If the write fails
        """
        with self._session_operation("create") as session:
            connect_session = ConnectSession(
                account_id=data.account_id,
                environment_id=data.environment_id,
                end_user_id=data.end_user_id,
                end_user=data.end_user.model_dump(mode="json") if data.end_user else None,
                allowed_integrations=list(data.allowed_integrations)
                if data.allowed_integrations
                else None,
                integrations_config_defaults=data.integrations_config_defaults,
                overrides=data.overrides,
                operation_id=data.operation_id,
            )
            session.add(connect_session)

        self.logger.debug(
            "Connect session created",
            extra={"connect_session_id": connect_session.id, "operation_id": data.operation_id},
        )
        return ConnectSessionRead.model_validate(connect_session)

    def get_by_id(
        self, connect_session_id: str, account_id: str, environment_id: str
    ) -> ConnectSessionRead:
        """
        Get a connect session within its account and environment.

        Raises:
            RepositoryError: If no such session exists in that scope
        """
        with self._session_operation("get_by_id", connect_session_id, is_read_only=True) as session:
            query = select(ConnectSession).where(
                ConnectSession.id == connect_session_id,
                ConnectSession.account_id == account_id,
                ConnectSession.environment_id == environment_id,
            )
            connect_session = session.execute(query).scalar_one_or_none()
            if not connect_session:
                raise not_found(
                    "ConnectSession",
                    connect_session_id=connect_session_id,
                    environment_id=environment_id,
                )
            return ConnectSessionRead.model_validate(connect_session)

    def list_for_environment(
        self, environment_id: str, limit: int = 100, offset: int = 0
    ) -> List[ConnectSessionRead]:
        """Sessions of an environment, oldest first."""
        with self._session_operation("list_for_environment", is_read_only=True) as session:
            query = select(ConnectSession).where(ConnectSession.environment_id == environment_id)
            query = self._apply_ordering(query)
            query = self._apply_pagination(query, limit, offset)
            return [
                ConnectSessionRead.model_validate(connect_session)
                for connect_session in session.execute(query).scalars().all()
            ]
