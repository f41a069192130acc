"""
Generic CRUD helpers shared by the repositories and utilities.

These functions never commit: they flush inside the caller's transaction so
that a later failure in the same unit of work rolls every write back.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import PersistenceError, not_found
from ..utils.logger import get_logger

T = TypeVar("T")


def create_record(session: Session, model_class: Type[T], data: Dict[str, Any]) -> T:
    """
    Generic create operation for any model.

    Args:
        session: Database session owning the transaction
        model_class: SQLAlchemy model class
        data: Column values

    Returns:
        Created record instance, flushed so generated values are populated

    Raises:
        PersistenceError: If the insert fails
    """
    logger = get_logger()

    now = datetime.now(timezone.utc)
    if hasattr(model_class, "created_at"):
        data.setdefault("created_at", now)
    if hasattr(model_class, "updated_at"):
        data.setdefault("updated_at", now)

    try:
        record = model_class(**data)
        session.add(record)
        session.flush()
    except SQLAlchemyError as e:
        raise PersistenceError(
            f"Failed to create {model_class.__name__}",
            cause=e,
            model=model_class.__name__,
        ) from e

    logger.debug(
        f"Created {model_class.__name__}",
        extra={"model": model_class.__name__, "record_id": getattr(record, "id", None)},
    )

    return record


def _apply_filters(query, model_class, filters: Optional[Dict[str, Any]]):
    for key, value in (filters or {}).items():
        if hasattr(model_class, key) and value is not None:
            query = query.filter(getattr(model_class, key) == value)
    return query


def get_record(session: Session, model_class: Type[T], filters: Dict[str, Any]) -> Optional[T]:
    """
    Generic get operation for any model.

    Args:
        session: Database session
        model_class: SQLAlchemy model class
        filters: Equality filters; None values are ignored

    Returns:
        Record instance or None
    """
    return _apply_filters(session.query(model_class), model_class, filters).first()


def update_record(
    session: Session,
    model_class: Type[T],
    record_id: str,
    data: Dict[str, Any],
) -> T:
    """
    Generic update operation for any model.

    Args:
        session: Database session owning the transaction
        model_class: SQLAlchemy model class
        record_id: Record ID to update
        data: Update data dictionary

    Returns:
        Updated record instance

    Raises:
        RepositoryError: If the record does not exist
        PersistenceError: If the update fails
    """
    record = get_record(session, model_class, {"id": record_id})
    if not record:
        raise not_found(model_class.__name__, record_id=record_id)

    try:
        for key, value in data.items():
            if hasattr(record, key) and value is not None:
                setattr(record, key, value)

        if hasattr(record, "updated_at"):
            record.updated_at = datetime.now(timezone.utc)

        session.flush()
    except SQLAlchemyError as e:
        raise PersistenceError(
            f"Failed to update {model_class.__name__}",
            cause=e,
            model=model_class.__name__,
            record_id=record_id,
        ) from e

    return record


def list_records(
    session: Session,
    model_class: Type[T],
    filters: Optional[Dict[str, Any]] = None,
    limit: Optional[int] = None,
    offset: Optional[int] = None,
    order_by: Optional[str] = None,
) -> List[T]:
    """
    Generic list operation for any model.

    Args:
        session: Database session
        model_class: SQLAlchemy model class
        filters: Optional equality filters
        limit: Optional limit
        offset: Optional offset
        order_by: Optional ascending order column, defaults to created_at ascending

    Returns:
        List of record instances
    """
    query = _apply_filters(session.query(model_class), model_class, filters)

    if order_by and hasattr(model_class, order_by):
        query = query.order_by(getattr(model_class, order_by))
    elif hasattr(model_class, "created_at"):
        query = query.order_by(model_class.created_at.asc())  # type: ignore[attr-defined]

    if offset:
        query = query.offset(offset)
    if limit:
        query = query.limit(limit)

    return query.all()


def count_records(
    session: Session,
    model_class: Type[T],
    filters: Optional[Dict[str, Any]] = None,
) -> int:
    """
    Generic count operation for any model.

    Args:
        session: Database session
        model_class: SQLAlchemy model class
        filters: Optional equality filters

    Returns:
        Count of records
    """
    return _apply_filters(session.query(model_class), model_class, filters).count()
