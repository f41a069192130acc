"""
Unit tests for connect session issuance.

Covers the check order, the all-or-nothing write of session and token, and
the mapping of storage failures to retryable server errors.
"""

import itertools
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock, patch

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from connect_session_core.constants import EntityType
from connect_session_core.context.log_context import LogContext, LogContextGetter, OperationDescriptor
from connect_session_core.db import ConnectSession, DatabaseManager, PrivateKey
from connect_session_core.enums import FieldErrorKind, IssuanceOutcome, IssuanceStage
from connect_session_core.exceptions import IssuanceError, PersistenceError
from connect_session_core.processing.session_issuer import ConnectSessionIssuer, generate_session
from connect_session_core.schemas import PostConnectSessionsBody, TenantScope
from connect_session_core.utils.keystore_utils import get_private_key
from tests.fixtures.factories import IntegrationFactory


def _body(**fields) -> PostConnectSessionsBody:
    return PostConnectSessionsBody.model_validate(fields)


def _session_count(session: Session) -> int:
    return session.query(ConnectSession).count()


def _key_count(session: Session) -> int:
    return session.query(PrivateKey).count()


@pytest.fixture(autouse=True)
def tables(db_session: Session):
    """Every test here issues against a fresh schema."""
    yield


@pytest.fixture
def integrations(db_session: Session):
    return [
        IntegrationFactory.create(unique_key="github"),
        IntegrationFactory.create(unique_key="slack"),
    ]


@pytest.fixture
def issuer(db_manager: DatabaseManager) -> ConnectSessionIssuer:
    return ConnectSessionIssuer(db_manager=db_manager)


class TestSuccessfulIssuance:
    """Test sessions that are created."""

    def test_unrestricted_session(self, issuer, tenant, db_session: Session):
        result = issuer.issue(_body(), tenant)

        assert result.outcome == IssuanceOutcome.CREATED
        assert result.status_code == 201
        assert result.stage == IssuanceStage.COMMITTED

        row = db_session.get(ConnectSession, result.connect_session_id)
        assert row.allowed_integrations is None
        assert row.account_id == tenant.account_id
        assert row.environment_id == tenant.environment_id
        assert row.end_user_id is None

    def test_token_bound_to_session(self, issuer, tenant, db_session: Session):
        result = issuer.issue(_body(), tenant)

        private_key = get_private_key(db_session, result.data.token, EntityType.CONNECT_SESSION)

        assert private_key.entity_id == result.connect_session_id
        assert private_key.display_name == ""

    def test_expiry_is_thirty_minutes(self, issuer, tenant):
        before = datetime.now(timezone.utc)
        result = issuer.issue(_body(), tenant)
        after = datetime.now(timezone.utc)

        expires_at = datetime.fromisoformat(result.data.expires_at.replace("Z", "+00:00"))
        assert result.data.expires_at.endswith("Z")
        # Millisecond truncation may shave up to 1ms
        assert before + timedelta(seconds=1800) - timedelta(milliseconds=1) <= expires_at
        assert expires_at <= after + timedelta(seconds=1800)

    def test_connect_link_carries_token(self, issuer, tenant):
        result = issuer.issue(_body(), tenant)

        assert result.data.connect_link == (
            f"http://localhost:3009/?session_token={result.data.token}"
        )

    def test_allow_list_and_defaults_stored(self, issuer, tenant, integrations, db_session):
        result = issuer.issue(
            _body(
                allowed_integrations=["github"],
                integrations_config_defaults={
                    "github": {
                        "user_scopes": "repo",
                        "connection_config": {"oauth_scopes_override": "read:user"},
                    }
                },
            ),
            tenant,
        )

        row = db_session.get(ConnectSession, result.connect_session_id)
        assert row.allowed_integrations == ["github"]
        assert row.integrations_config_defaults == {
            "github": {"user_scopes": "repo", "connectionConfig": {"oauth_scopes_override": "read:user"}}
        }

    def test_empty_allow_list_is_unrestricted(self, issuer, tenant, db_session):
        result = issuer.issue(_body(allowed_integrations=[]), tenant)

        assert result.success
        assert db_session.get(ConnectSession, result.connect_session_id).allowed_integrations is None

    def test_end_user_stored(self, issuer, tenant, db_session):
        result = issuer.issue(
            _body(end_user={"id": "u1", "email": "a@b.co"}, organization={"id": "org1"}), tenant
        )

        row = db_session.get(ConnectSession, result.connect_session_id)
        assert row.end_user["end_user_id"] == "u1"
        assert row.end_user["organization"]["organization_id"] == "org1"
        assert row.end_user_id is None

    def test_docs_connect_override_with_capability(
        self, issuer, privileged_tenant, integrations, db_session
    ):
        result = issuer.issue(
            _body(overrides={"github": {"docs_connect": "https://docs.example.com"}}),
            privileged_tenant,
        )

        assert result.success
        row = db_session.get(ConnectSession, result.connect_session_id)
        assert row.overrides == {"github": {"docs_connect": "https://docs.example.com"}}

    def test_not_idempotent(self, issuer, tenant, db_session):
        first = issuer.issue(_body(), tenant)
        second = issuer.issue(_body(), tenant)

        assert first.connect_session_id != second.connect_session_id
        assert first.data.token != second.data.token
        assert _session_count(db_session) == 2

    def test_log_context_id_stored(self, db_manager, tenant, db_session):
        getter = Mock(spec=LogContextGetter)
        getter.create.return_value = LogContext(id="op-123", operation=OperationDescriptor())
        issuer = ConnectSessionIssuer(db_manager=db_manager, log_context_getter=getter)

        result = issuer.issue(_body(end_user={"id": "u1", "email": "a@b.co"}), tenant)

        assert db_session.get(ConnectSession, result.connect_session_id).operation_id == "op-123"
        kwargs = getter.create.call_args.kwargs
        assert kwargs["meta"] == {
            "connect_session": {"end_user_id": "u1", "end_user_email": "a@b.co"}
        }
        assert kwargs["tenant"] == tenant


class TestRejectedIssuance:
    """Test bodies rejected before anything is written."""

    def test_unknown_allowed_integration(self, issuer, tenant, integrations, db_session):
        result = issuer.issue(_body(allowed_integrations=["github", "unknown"]), tenant)

        assert result.outcome == IssuanceOutcome.INVALID_BODY
        assert result.status_code == 400
        assert result.stage == IssuanceStage.REFERENCE_NOT_FOUND
        assert result.error_type == "ReferenceNotFoundError"
        assert [e.path for e in result.errors] == [["allowed_integrations", 1]]
        assert result.errors[0].kind == FieldErrorKind.REFERENCE
        assert _session_count(db_session) == 0
        assert _key_count(db_session) == 0

    def test_allow_list_reported_alone(self, issuer, tenant, integrations):
        result = issuer.issue(
            _body(
                allowed_integrations=["nope"],
                integrations_config_defaults={"missing": {}},
                overrides={"gone": {}},
            ),
            tenant,
        )

        assert [e.path for e in result.errors] == [["allowed_integrations", 0]]

    def test_defaults_then_overrides_errors(self, issuer, tenant, integrations):
        result = issuer.issue(
            _body(
                integrations_config_defaults={"github": {}, "missing": {}},
                overrides={"gone": {}, "slack": {}},
            ),
            tenant,
        )

        assert [e.path for e in result.errors] == [
            ["integrations_config_defaults", "missing"],
            ["overrides", "gone"],
        ]
        assert all(e.message == "Integration does not exist" for e in result.errors)

    def test_deleted_integration_is_unknown(self, issuer, tenant, db_session):
        IntegrationFactory.create(unique_key="legacy", deleted=True)

        result = issuer.issue(_body(allowed_integrations=["legacy"]), tenant)

        assert result.outcome == IssuanceOutcome.INVALID_BODY

    def test_other_environment_integration_is_unknown(self, issuer, tenant, db_session):
        IntegrationFactory.create(unique_key="github", environment_id="env_other")

        result = issuer.issue(_body(allowed_integrations=["github"]), tenant)

        assert result.outcome == IssuanceOutcome.INVALID_BODY

    def test_docs_connect_override_without_capability(self, issuer, tenant, integrations, db_session):
        result = issuer.issue(
            _body(overrides={"github": {"docs_connect": "https://docs.example.com"}}), tenant
        )

        assert result.outcome == IssuanceOutcome.FORBIDDEN
        assert result.status_code == 403
        assert result.message == "You are not allowed to override the docs connect url"
        assert _session_count(db_session) == 0

    def test_tenant_without_plan_cannot_override(self, issuer, integrations, db_session):
        tenant = TenantScope(account_id="acc_test_1", environment_id="env_test_1")
        result = issuer.issue(
            _body(overrides={"github": {"docs_connect": "https://docs.example.com"}}), tenant
        )

        assert result.outcome == IssuanceOutcome.FORBIDDEN

    def test_references_checked_before_gate(self, issuer, tenant, integrations):
        result = issuer.issue(
            _body(overrides={"unknown": {"docs_connect": "https://docs.example.com"}}), tenant
        )

        assert result.outcome == IssuanceOutcome.INVALID_BODY
        assert [e.path for e in result.errors] == [["overrides", "unknown"]]


class TestFailedIssuance:
    """Test that storage failures leave nothing behind."""

    def test_credential_failure_rolls_back_session(self, issuer, tenant, db_session):
        with patch(
            "connect_session_core.processing.session_issuer.create_private_key",
            side_effect=IssuanceError("keystore down"),
        ):
            result = issuer.issue(_body(), tenant)

        assert result.outcome == IssuanceOutcome.SERVER_ERROR
        assert result.status_code == 500
        assert result.message == "Failed to create session token"
        assert result.retryable is True
        assert result.data is None
        assert _session_count(db_session) == 0
        assert _key_count(db_session) == 0

    def test_session_write_failure(self, issuer, tenant, db_session):
        with patch(
            "connect_session_core.processing.session_issuer.ConnectSessionRepository.create",
            side_effect=PersistenceError("insert failed"),
        ):
            result = issuer.issue(_body(), tenant)

        assert result.outcome == IssuanceOutcome.SERVER_ERROR
        assert result.message == "Failed to create connect session"
        assert result.error_type == "PersistenceError"
        assert _key_count(db_session) == 0

    def test_storage_error_text_not_returned(self, issuer, tenant, db_session):
        with patch(
            "connect_session_core.processing.session_issuer.list_integrations",
            side_effect=OperationalError("SELECT", {}, Exception("connection reset by peer")),
        ):
            result = issuer.issue(_body(allowed_integrations=["github"]), tenant)

        assert result.outcome == IssuanceOutcome.SERVER_ERROR
        assert "connection reset" not in result.message
        assert result.retryable is True

    def test_deadline_exceeded_rolls_back(self, db_manager, tenant, db_session):
        clock = itertools.count(0, 10).__next__
        issuer = ConnectSessionIssuer(db_manager=db_manager, timeout_seconds=5, clock=clock)

        result = issuer.issue(_body(), tenant)

        assert result.outcome == IssuanceOutcome.SERVER_ERROR
        assert result.error_type == "TransactionTimeoutError"
        assert result.retryable is True
        assert _session_count(db_session) == 0
        assert _key_count(db_session) == 0

    def test_log_context_failure_is_server_error(self, db_manager, tenant, db_session):
        getter = Mock(spec=LogContextGetter)
        getter.create.side_effect = RuntimeError("log store unreachable")
        issuer = ConnectSessionIssuer(db_manager=db_manager, log_context_getter=getter)

        result = issuer.issue(_body(end_user={"id": "u1"}), tenant)

        assert result.outcome == IssuanceOutcome.SERVER_ERROR
        assert result.status_code == 500
        assert result.message == "Failed to create connect session"
        assert result.error_type == "RuntimeError"
        assert "unreachable" not in result.message
        assert _session_count(db_session) == 0
        assert _key_count(db_session) == 0

    def test_zero_timeout_disables_deadline(self, db_manager, tenant):
        clock = itertools.count(0, 1000).__next__
        issuer = ConnectSessionIssuer(db_manager=db_manager, timeout_seconds=0, clock=clock)

        assert issuer.issue(_body(), tenant).success


class TestGenerateSession:
    """Test the transaction body on its own."""

    def test_does_not_commit(self, db_manager, tenant, db_session):
        session = db_manager.session_factory()
        try:
            result = generate_session(session, _body(), tenant)
            assert result.stage == IssuanceStage.CREDENTIAL_WRITTEN
            session.rollback()
        finally:
            session.close()

        assert _session_count(db_session) == 0

    def test_skips_integration_lookup_without_references(self, db_manager, tenant):
        session = db_manager.session_factory()
        try:
            with patch(
                "connect_session_core.processing.session_issuer.list_integrations"
            ) as list_integrations:
                generate_session(session, _body(end_user={"id": "u1"}), tenant)
            session.rollback()
        finally:
            session.close()

        list_integrations.assert_not_called()


class TestIssuanceStages:
    """Test the last stage an attempt passed before it ended."""

    def test_committed_after_credential(self, issuer, tenant):
        result = issuer.issue(_body(), tenant)

        assert result.stage == IssuanceStage.COMMITTED
        assert result.completed_stage == IssuanceStage.CREDENTIAL_WRITTEN

    def test_reference_failure_after_validation(self, issuer, tenant):
        result = issuer.issue(_body(allowed_integrations=["unknown"]), tenant)

        assert result.stage == IssuanceStage.REFERENCE_NOT_FOUND
        assert result.completed_stage == IssuanceStage.VALIDATED

    def test_forbidden_after_references(self, issuer, tenant, integrations):
        result = issuer.issue(
            _body(overrides={"github": {"docs_connect": "https://docs.example.com"}}), tenant
        )

        assert result.stage == IssuanceStage.FORBIDDEN
        assert result.completed_stage == IssuanceStage.REFERENCES_CHECKED

    def test_session_write_failure_after_permission(self, issuer, tenant):
        with patch(
            "connect_session_core.processing.session_issuer.ConnectSessionRepository.create",
            side_effect=PersistenceError("insert failed"),
        ):
            result = issuer.issue(_body(), tenant)

        assert result.stage == IssuanceStage.PERSISTENCE_FAILED
        assert result.completed_stage == IssuanceStage.PERMISSION_CHECKED

    def test_credential_failure_after_session_write(self, issuer, tenant):
        with patch(
            "connect_session_core.processing.session_issuer.create_private_key",
            side_effect=IssuanceError("keystore down"),
        ):
            result = issuer.issue(_body(), tenant)

        assert result.stage == IssuanceStage.PERSISTENCE_FAILED
        assert result.completed_stage == IssuanceStage.SESSION_WRITTEN

    def test_failure_stages(self):
        assert IssuanceStage.FORBIDDEN.is_failure
        assert IssuanceStage.VALIDATION_FAILED.is_failure
        assert not IssuanceStage.CREDENTIAL_WRITTEN.is_failure
        assert not IssuanceStage.COMMITTED.is_failure
