"""
Factory Boy factories for generating consistent test data.
"""

from datetime import datetime, timedelta, timezone

import factory

from connect_session_core.constants import EntityType
from connect_session_core.db import ConnectSession, Integration, PrivateKey

# ==================== BASE FACTORIES ====================


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Base factory with common patterns."""

    class Meta:
        abstract = True
        sqlalchemy_session_persistence = "commit"


# ==================== INTEGRATION FACTORIES ====================


class IntegrationFactory(BaseFactory):
    """Factory for integrations configured in an environment."""

    class Meta:
        model = Integration

    id = factory.Faker("uuid4")
    account_id = "acc_test_1"
    environment_id = "env_test_1"
    unique_key = factory.Sequence(lambda n: f"integration-{n}")
    provider = "github"
    display_name = factory.LazyAttribute(lambda o: o.unique_key.title())
    deleted = False
    config = factory.LazyFunction(dict)


# ==================== CONNECT SESSION FACTORIES ====================


class ConnectSessionFactory(BaseFactory):
    """Factory for stored connect sessions."""

    class Meta:
        model = ConnectSession

    id = factory.Faker("uuid4")
    account_id = "acc_test_1"
    environment_id = "env_test_1"
    end_user_id = None
    end_user = None
    allowed_integrations = None
    integrations_config_defaults = None
    overrides = None
    operation_id = factory.Faker("uuid4")


class PrivateKeyFactory(BaseFactory):
    """Factory for private keys. The hash is a placeholder, not a real verifier."""

    class Meta:
        model = PrivateKey

    id = factory.Faker("uuid4")
    display_name = ""
    account_id = "acc_test_1"
    environment_id = "env_test_1"
    entity_type = EntityType.CONNECT_SESSION.value
    entity_id = factory.Faker("uuid4")
    hash = factory.Faker("sha256")
    expires_at = factory.LazyFunction(lambda: datetime.now(timezone.utc) + timedelta(minutes=30))


# ==================== FACTORY CONFIGURATION ====================


def configure_factories(session):
    """Configure all factories to use the provided session."""
    factories = [
        IntegrationFactory,
        ConnectSessionFactory,
        PrivateKeyFactory,
    ]

    for factory_class in factories:
        factory_class._meta.sqlalchemy_session = session
