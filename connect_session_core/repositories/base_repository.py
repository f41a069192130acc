"""
Base repository implementation with common functionality for all repositories.

Repositories receive a session owned by the caller. They flush so constraint
violations surface early but never commit or roll back; the transaction
owner does that.
"""

from contextlib import contextmanager
from typing import Any, Generic, NoReturn, Optional, Type, TypeVar

from sqlalchemy import asc, desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..context.tenant_context import TenantContext
from ..exceptions import BaseError, PersistenceError
from ..utils.logger import ContextAwareLogger, get_logger

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Base repository with common functionality for all repositories."""

    def __init__(
        self,
        session: Session,
        entity_class: Type[T],
        logger: Optional[ContextAwareLogger] = None,
    ):
        """
        Initialize the base repository.

        Args:
            session: SQLAlchemy session for database operations
            entity_class: SQLAlchemy model class this repository handles
            logger: Optional logger instance
        """
        self.session = session
        self.entity_class = entity_class
        self.logger = logger or get_logger()
        self.entity_name = entity_class.__name__

    def _handle_db_error(
        self,
        e: Exception,
        operation_name: str,
        entity_id: Optional[str] = None,
        **context: Any,
    ) -> NoReturn:
        """
        Map a database failure to a PersistenceError.

        Args:
            e: The original exception
            operation_name: Name of the operation that failed
            entity_id: Optional entity ID involved in the operation
            **context: Additional context for the error

        Raises:
            BaseError: Our own errors unchanged, anything else as PersistenceError
        """
        # Already one of ours, preserve the error code
        if isinstance(e, BaseError):
            raise e

        error_context = {
            "operation_name": operation_name,
            "entity_type": self.entity_name,
            "environment": TenantContext.get_current_environment_id(),
            **context,
        }
        if entity_id:
            error_context["entity_id"] = entity_id

        if isinstance(e, IntegrityError):
            error_message = str(e.orig).lower() if getattr(e, "orig", None) else str(e).lower()
            if "foreign key" in error_message:
                constraint = "foreign_key"
            elif "unique" in error_message or "duplicate" in error_message:
                constraint = "unique"
            else:
                constraint = "other"

            raise PersistenceError(
                f"Constraint violation writing {self.entity_name}",
                cause=e,
                constraint=constraint,
                **error_context,
            )

        if isinstance(e, SQLAlchemyError):
            raise PersistenceError(
                f"Database error for {self.entity_name}",
                cause=e,
                **error_context,
            )

        raise PersistenceError(
            f"Unexpected error for {self.entity_name}",
            cause=e,
            **error_context,
        )

    @contextmanager
    def _session_operation(
        self, operation_name: str, entity_id: Optional[str] = None, is_read_only: bool = False
    ):
        """
        Context manager for operations on the caller's session with error handling.

        Args:
            operation_name: Name of the operation for error reporting
            entity_id: Optional ID of the entity being operated on
            is_read_only: If True, skip the flush

        Yields:
            The existing session

        Raises:
            PersistenceError: If there's a database error
        """
        try:
            yield self.session
            # Commit and rollback belong to the transaction owner
            if not is_read_only:
                self.session.flush()
        except Exception as e:
            self._handle_db_error(e, operation_name, entity_id)

    @staticmethod
    def _apply_pagination(query, limit: int = 100, offset: int = 0):
        return query.offset(offset).limit(limit)

    def _apply_ordering(self, query, sort_by: Optional[str] = None, sort_direction: str = "asc"):
        """
        Apply ordering to a query.

        Args:
            query: SQLAlchemy select
            sort_by: Field to sort by, defaults to created_at
            sort_direction: 'asc' or 'desc'

        Returns:
            Query with ordering applied
        """
        sort_field = getattr(self.entity_class, sort_by or "created_at")

        if sort_direction.lower() == "asc":
            return query.order_by(asc(sort_field))
        return query.order_by(desc(sort_field))
