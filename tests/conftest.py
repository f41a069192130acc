"""
Shared test fixtures.

This module provides the database setup, configuration, tenant scopes and
factory wiring used across the test suite.
"""

import pytest
from sqlalchemy.orm import Session

from connect_session_core.config import AppConfig, ConnectConfig, SecurityConfig, reset_config, set_config
from connect_session_core.context.tenant_context import TenantContext
from connect_session_core.db import DatabaseConfig, DatabaseManager, import_all_models
from connect_session_core.db.db_config import Base, close_db, initialize_db
from connect_session_core.exceptions import clear_correlation_id
from connect_session_core.schemas import PlanRead, TenantScope
from connect_session_core.utils.logger import reset_logging
from tests.fixtures.factories import configure_factories

TEST_CONNECT_URL = "http://localhost:3009"
TEST_HASH_KEY = "test-hash-key"


@pytest.fixture(autouse=True)
def app_config():
    """Deterministic configuration for every test."""
    config = AppConfig(
        connect=ConnectConfig(connect_url=TEST_CONNECT_URL, token_prefix="cs"),
        security=SecurityConfig(hash_key=TEST_HASH_KEY),
    )
    set_config(config)
    yield config
    reset_config()
    reset_logging()


@pytest.fixture(autouse=True)
def clean_thread_context():
    """Tenant scope and correlation ids never leak between tests."""
    yield
    TenantContext.clear_current_tenant()
    clear_correlation_id()


@pytest.fixture(scope="session")
def db_config(tmp_path_factory) -> DatabaseConfig:
    """
    SQLite file database configuration for testing.

    A file rather than :memory: so each transaction gets its own connection.
    """
    return DatabaseConfig(
        db_type="sqlite",
        database=str(tmp_path_factory.mktemp("db") / "connect_sessions.db"),
        echo=False,
        development_mode=True,
    )


@pytest.fixture(scope="session")
def db_manager(db_config: DatabaseConfig) -> DatabaseManager:
    """Create and initialize database manager with all models."""
    import_all_models()
    manager = initialize_db(db_config)
    yield manager
    close_db()


@pytest.fixture(scope="function")
def db_session(db_manager: DatabaseManager) -> Session:
    """
    Create a database session for each test.

    Tables are created fresh for the test and dropped afterwards. Factories
    are bound to this session and commit what they create.
    """
    Base.metadata.create_all(db_manager.engine)
    session = db_manager.get_session()
    configure_factories(session)

    yield session

    session.rollback()
    db_manager.close_session()
    Base.metadata.drop_all(db_manager.engine)


@pytest.fixture
def account_id() -> str:
    return "acc_test_1"


@pytest.fixture
def environment_id() -> str:
    return "env_test_1"


@pytest.fixture
def tenant(account_id: str, environment_id: str) -> TenantScope:
    """Tenant on a plan without the docs connect override capability."""
    return TenantScope(account_id=account_id, environment_id=environment_id, plan=PlanRead())


@pytest.fixture
def privileged_tenant(account_id: str, environment_id: str) -> TenantScope:
    """Tenant whose plan may override the docs connect url."""
    return TenantScope(
        account_id=account_id,
        environment_id=environment_id,
        plan=PlanRead(name="enterprise", can_override_docs_connect_url=True),
    )
