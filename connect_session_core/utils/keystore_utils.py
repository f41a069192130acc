"""
Private key issuance and lookup.

A private key is a random bearer token bound to one entity (a connect
session) with its own expiry. The raw token is returned once by
``create_private_key``; only its verifier is written to the database.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from ..config import get_config
from ..constants import EntityType, Limits
from ..db.db_base import as_utc
from ..db.db_private_key_models import PrivateKey
from ..exceptions import (
    CredentialExpiredError,
    CredentialNotFoundError,
    IssuanceError,
    PersistenceError,
)
from ..schemas.private_key_schemas import PrivateKeyRead
from .crud_helpers import create_record, get_record, update_record
from .hash_utils import hash_value
from .logger import get_logger


def generate_token(entity_type: EntityType, prefix: Optional[str] = None) -> str:
    """
    Generate a new bearer token.

    The random part is 32 bytes from the OS CSPRNG, hex encoded.
    """
    if prefix is None:
        prefix = get_config().connect.token_prefix
    return f"{prefix}_{entity_type.value}_{secrets.token_hex(Limits.TOKEN_RANDOM_BYTES)}"


def create_private_key(
    session: Session,
    display_name: str,
    account_id: str,
    environment_id: str,
    entity_type: EntityType,
    entity_id: str,
    ttl: Optional[timedelta] = None,
) -> Tuple[str, PrivateKeyRead]:
    """
    Issue a private key bound to an entity.

    Args:
        session: Database session owning the transaction
        display_name: Label of the key
        account_id: Owning account
        environment_id: Owning environment
        entity_type: Kind of entity the key is bound to
        entity_id: ID of that entity
        ttl: Lifetime; None issues a key without expiry

    Returns:
        Tuple of (raw token, stored key metadata)

    Raises:
        IssuanceError: If the token cannot be generated or stored
    """
    try:
        token = generate_token(entity_type)
    except Exception as e:
        raise IssuanceError(
            "Failed to generate private key", cause=e, entity_type=entity_type.value
        ) from e

    now = datetime.now(timezone.utc)
    expires_at = now + ttl if ttl is not None else None

    try:
        record = create_record(
            session,
            PrivateKey,
            {
                "display_name": display_name,
                "account_id": account_id,
                "environment_id": environment_id,
                "entity_type": entity_type.value,
                "entity_id": entity_id,
                "hash": hash_value(token),
                "expires_at": expires_at,
                "created_at": now,
            },
        )
    except PersistenceError as e:
        raise IssuanceError(
            "Failed to store private key",
            cause=e,
            entity_type=entity_type.value,
            entity_id=entity_id,
        ) from e

    get_logger().info(
        "Private key issued",
        extra={
            "private_key_id": record.id,
            "entity_type": entity_type.value,
            "entity_id": entity_id,
            "expires_at": expires_at.isoformat() if expires_at else None,
        },
    )

    return token, PrivateKeyRead.model_validate(record)


def get_private_key(session: Session, token: str, entity_type: EntityType) -> PrivateKeyRead:
    """
    Resolve a presented token to its key metadata and record the access.

    Raises:
        CredentialNotFoundError: If no key matches the token
        CredentialExpiredError: If the key is past its expiry
    """
    record = get_record(
        session, PrivateKey, {"hash": hash_value(token), "entity_type": entity_type.value}
    )
    if not record:
        raise CredentialNotFoundError(entity_type=entity_type.value)

    now = datetime.now(timezone.utc)
    if record.expires_at is not None and as_utc(record.expires_at) <= now:
        raise CredentialExpiredError(
            private_key_id=record.id,
            expires_at=as_utc(record.expires_at).isoformat(),
        )

    record = update_record(session, PrivateKey, record.id, {"last_access_at": now})
    return PrivateKeyRead.model_validate(record)
