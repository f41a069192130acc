"""
Connect session issuance.

``generate_session`` is the body of the issuance transaction: it validates
integration references, applies the overrides gate, writes the session and
issues its token on the session it is given, and reports the outcome as a
``SessionIssuanceResult``. ``ConnectSessionIssuer`` owns the transaction and
commits only when that result is a success.
"""

import time
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..config import get_config
from ..constants import CONNECT_SESSION_KEY_DISPLAY_NAME, EntityType, ReplyMessage
from ..context.log_context import LogContextGetter, OperationDescriptor, get_log_context_getter
from ..db.db_config import DatabaseManager, get_db_manager
from ..enums import GateDecision, IssuanceStage
from ..exceptions import (
    BaseError,
    IssuanceError,
    PermissionDeniedError,
    PersistenceError,
    ReferenceNotFoundError,
    TransactionTimeoutError,
)
from ..repositories.connect_session_repository import ConnectSessionRepository
from ..schemas.connect_session_schemas import ConnectSessionCreate, PostConnectSessionsBody
from ..schemas.end_user_schemas import end_user_to_meta, to_end_user
from ..schemas.plan_schemas import can_override_docs_connect_url
from ..schemas.tenant_schemas import TenantScope
from ..utils.integration_utils import integration_keys, list_integrations
from ..utils.keystore_utils import create_private_key
from ..utils.logger import get_logger
from .issuance_result import SessionIssuanceResult
from .reference_checks import check_integrations_exist, gate_overrides
from .response_composer import compose_session_reply

AUTH_OPERATION = OperationDescriptor()


def _validate_references(session: Session, body: PostConnectSessionsBody, tenant: TenantScope) -> None:
    """
    Validate integration references and the overrides gate.

    Raises:
        ReferenceNotFoundError: If the allow-list, defaults or overrides name unknown keys
        PermissionDeniedError: If a documentation link override is not allowed
    """
    if not body.references_integrations:
        return

    known_keys = integration_keys(list_integrations(session, tenant.environment_id))

    # The allow-list is reported on its own before the maps are looked at
    allowed_errors = check_integrations_exist(
        body.allowed_integrations, known_keys, ["allowed_integrations"]
    )
    if allowed_errors:
        raise ReferenceNotFoundError(field_errors=allowed_errors)

    map_errors = (
        check_integrations_exist(
            body.integrations_config_defaults, known_keys, ["integrations_config_defaults"]
        )
        or []
    ) + (check_integrations_exist(body.overrides, known_keys, ["overrides"]) or [])
    if map_errors:
        raise ReferenceNotFoundError(field_errors=map_errors)

    decision = gate_overrides(body.overrides, can_override_docs_connect_url(tenant.plan))
    if decision == GateDecision.DENIED:
        raise PermissionDeniedError(
            ReplyMessage.DOCS_CONNECT_FORBIDDEN,
            action="override_docs_connect",
            resource="connect_session",
        )


def _stored_defaults(body: PostConnectSessionsBody) -> Optional[Dict[str, Dict[str, Any]]]:
    """Per-integration defaults in their stored shape."""
    if body.integrations_config_defaults is None:
        return None

    stored: Dict[str, Dict[str, Any]] = {}
    for key, defaults in body.integrations_config_defaults.items():
        entry: Dict[str, Any] = {
            "user_scopes": defaults.user_scopes,
            "authorization_params": defaults.authorization_params,
            "connectionConfig": (
                defaults.connection_config.model_dump(exclude_none=True)
                if defaults.connection_config is not None
                else None
            ),
        }
        stored[key] = {k: v for k, v in entry.items() if v is not None}
    return stored


def _stored_overrides(body: PostConnectSessionsBody) -> Optional[Dict[str, Dict[str, Any]]]:
    if body.overrides is None:
        return None
    return {key: override.model_dump(exclude_none=True) for key, override in body.overrides.items()}


def generate_session(
    session: Session,
    body: PostConnectSessionsBody,
    tenant: TenantScope,
    log_context_getter: Optional[LogContextGetter] = None,
) -> SessionIssuanceResult:
    """
    Issue a connect session inside the caller's transaction.

    Checks run in a fixed order and the first failing step ends the attempt:
    allow-list references, defaults and overrides references, overrides
    gate, session write, token issuance. Nothing is committed here.

    Args:
        session: Session owning the transaction
        body: Validated request body
        tenant: Authenticated tenant scope
        log_context_getter: Provider of the operation log context

    Returns:
        SessionIssuanceResult describing the outcome
    """
    config = get_config()
    log_context_getter = log_context_getter or get_log_context_getter()

    try:
        _validate_references(session, body, tenant)
    except ReferenceNotFoundError as e:
        return SessionIssuanceResult.invalid_body(
            e.field_errors,
            stage=IssuanceStage.REFERENCE_NOT_FOUND,
            error_type=type(e).__name__,
            completed_stage=IssuanceStage.VALIDATED,
        )
    except PermissionDeniedError as e:
        return SessionIssuanceResult.forbidden(e.message, error_type=type(e).__name__)

    end_user = to_end_user(body.end_user, body.organization) if body.end_user else None
    log_context = log_context_getter.create(
        AUTH_OPERATION,
        meta={"connect_session": end_user_to_meta(end_user) if end_user else None},
        tenant=tenant,
        expires_at=datetime.now(timezone.utc)
        + timedelta(minutes=config.connect.operation_expiration_minutes),
    )

    try:
        connect_session = ConnectSessionRepository(session).create(
            ConnectSessionCreate(
                account_id=tenant.account_id,
                environment_id=tenant.environment_id,
                end_user_id=None,
                end_user=end_user,
                allowed_integrations=body.allowed_integrations or None,
                integrations_config_defaults=_stored_defaults(body),
                overrides=_stored_overrides(body),
                operation_id=log_context.id,
            )
        )
    except PersistenceError as e:
        return SessionIssuanceResult.server_error(
            ReplyMessage.CONNECT_SESSION_FAILED,
            error_type=type(e).__name__,
            retryable=e.retryable,
            completed_stage=IssuanceStage.PERMISSION_CHECKED,
        )

    try:
        token, private_key = create_private_key(
            session,
            display_name=CONNECT_SESSION_KEY_DISPLAY_NAME,
            account_id=tenant.account_id,
            environment_id=tenant.environment_id,
            entity_type=EntityType.CONNECT_SESSION,
            entity_id=connect_session.id,
            ttl=timedelta(minutes=config.connect.session_ttl_minutes),
        )
        reply = compose_session_reply(token, private_key)
    except IssuanceError as e:
        return SessionIssuanceResult.server_error(
            ReplyMessage.SESSION_TOKEN_FAILED,
            error_type=type(e).__name__,
            retryable=e.retryable,
            completed_stage=IssuanceStage.SESSION_WRITTEN,
        )

    return SessionIssuanceResult.created(reply, connect_session_id=connect_session.id)


class ConnectSessionIssuer:
    """Runs ``generate_session`` in its own transaction."""

    def __init__(
        self,
        db_manager: Optional[DatabaseManager] = None,
        log_context_getter: Optional[LogContextGetter] = None,
        timeout_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the issuer.

        Args:
            db_manager: Database manager, defaults to the global one
            log_context_getter: Provider of operation log contexts
            timeout_seconds: Transaction deadline, defaults to config; 0 disables it
            clock: Monotonic clock used for the deadline
        """
        self.db_manager = db_manager or get_db_manager()
        self.log_context_getter = log_context_getter or get_log_context_getter()
        if timeout_seconds is None:
            timeout_seconds = get_config().database.transaction_timeout_seconds
        self.timeout_seconds = timeout_seconds
        self.clock = clock
        self.logger = get_logger()

    def issue(self, body: PostConnectSessionsBody, tenant: TenantScope) -> SessionIssuanceResult:
        """
        Issue a connect session atomically.

        The session row and its token are committed together or not at all.
        Rejections are returned unchanged. Any other failure, a deadline
        overrun included, is reported as a retryable server error; its
        detail is logged only.
        """
        started = self.clock()

        try:
            with self.db_manager.transaction(timeout_seconds=self.timeout_seconds) as session:
                result = generate_session(session, body, tenant, self.log_context_getter)
                if result.stage.is_failure:
                    session.rollback()
                    return result

                elapsed = self.clock() - started
                if self.timeout_seconds and elapsed > self.timeout_seconds:
                    raise TransactionTimeoutError(
                        elapsed_seconds=round(elapsed, 3), timeout_seconds=self.timeout_seconds
                    )
        except BaseError as e:
            return SessionIssuanceResult.server_error(
                ReplyMessage.CONNECT_SESSION_FAILED, error_type=type(e).__name__, retryable=e.retryable
            )
        except SQLAlchemyError as e:
            self.logger.error(
                "Connect session transaction failed",
                extra={"error_type": type(e).__name__, "error_detail": str(e)},
                exc_info=e,
            )
            return SessionIssuanceResult.server_error(
                ReplyMessage.CONNECT_SESSION_FAILED, error_type=type(e).__name__
            )
        except Exception as e:
            self.logger.exception(
                "Connect session issuance failed",
                extra={"error_type": type(e).__name__, "error_detail": str(e)},
            )
            return SessionIssuanceResult.server_error(
                ReplyMessage.CONNECT_SESSION_FAILED, error_type=type(e).__name__
            )

        self.logger.info(
            "Connect session issued",
            extra={
                "connect_session_id": result.connect_session_id,
                "duration_ms": round((self.clock() - started) * 1000, 2),
            },
        )
        return result.model_copy(
            update={"stage": IssuanceStage.COMMITTED, "completed_stage": result.stage}
        )
