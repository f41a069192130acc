"""
Unit tests for configuration store access.
"""

import pytest
from sqlalchemy.orm import Session

from connect_session_core.exceptions import ErrorCode, RepositoryError
from connect_session_core.schemas import IntegrationCreate
from connect_session_core.utils.integration_utils import (
    create_integration,
    integration_keys,
    list_integrations,
)
from tests.fixtures.factories import IntegrationFactory


class TestListIntegrations:
    """Test list_integrations."""

    def test_scoped_to_environment(self, db_session: Session):
        IntegrationFactory.create(unique_key="github", environment_id="env_test_1")
        IntegrationFactory.create(unique_key="slack", environment_id="env_other")

        integrations = list_integrations(db_session, "env_test_1")

        assert integration_keys(integrations) == {"github"}

    def test_skips_deleted(self, db_session: Session):
        IntegrationFactory.create(unique_key="github")
        IntegrationFactory.create(unique_key="legacy", deleted=True)

        assert integration_keys(list_integrations(db_session, "env_test_1")) == {"github"}

    def test_empty_environment(self, db_session: Session):
        assert list_integrations(db_session, "env_empty") == []


class TestCreateIntegration:
    """Test create_integration."""

    def test_create(self, db_session: Session):
        created = create_integration(
            db_session,
            IntegrationCreate(
                account_id="acc_test_1",
                environment_id="env_test_1",
                unique_key="github",
                provider="github",
            ),
        )

        assert created.id is not None
        assert created.unique_key == "github"

    def test_duplicate_key_in_environment(self, db_session: Session):
        IntegrationFactory.create(unique_key="github")

        with pytest.raises(RepositoryError) as exc_info:
            create_integration(
                db_session,
                IntegrationCreate(
                    account_id="acc_test_1",
                    environment_id="env_test_1",
                    unique_key="github",
                    provider="github",
                ),
            )

        assert exc_info.value.error_code == ErrorCode.DUPLICATE

    def test_key_reusable_after_soft_delete(self, db_session: Session):
        IntegrationFactory.create(unique_key="github", deleted=True)

        created = create_integration(
            db_session,
            IntegrationCreate(
                account_id="acc_test_1",
                environment_id="env_test_1",
                unique_key="github",
                provider="github",
            ),
        )

        assert created.unique_key == "github"
        assert [i.id for i in list_integrations(db_session, "env_test_1")] == [created.id]
