"""
Configuration store access for integrations.

``list_integrations`` is the read the session issuer performs inside its
transaction; it is authoritative for which integration keys exist.
"""

from typing import List, Set

from sqlalchemy.orm import Session

from ..db.db_integration_models import Integration
from ..exceptions import duplicate
from ..schemas.integration_schemas import IntegrationCreate, IntegrationRead
from .crud_helpers import create_record, get_record, list_records


def list_integrations(session: Session, environment_id: str) -> List[IntegrationRead]:
    """Integrations configured in an environment, oldest first. Deleted ones are skipped."""
    records = list_records(
        session, Integration, filters={"environment_id": environment_id, "deleted": False}
    )
    return [IntegrationRead.model_validate(record) for record in records]


def integration_keys(integrations: List[IntegrationRead]) -> Set[str]:
    return {integration.unique_key for integration in integrations}


def create_integration(session: Session, integration_create: IntegrationCreate) -> IntegrationRead:
    """
    Configure a new integration in an environment.

    Raises:
        RepositoryError: If the key is already used in the environment
    """
    existing = get_record(
        session,
        Integration,
        {
            "environment_id": integration_create.environment_id,
            "unique_key": integration_create.unique_key,
            "deleted": False,
        },
    )
    if existing:
        raise duplicate(
            "Integration",
            environment_id=integration_create.environment_id,
            unique_key=integration_create.unique_key,
        )

    record = create_record(session, Integration, integration_create.model_dump())
    return IntegrationRead.model_validate(record)
