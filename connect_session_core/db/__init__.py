"""
SQLAlchemy models and database wiring.

This module provides a common entry point for all models.
"""

from .db_base import (
    JSON,
    TimestampMixin,
    UUIDMixin,
    as_utc,
    utc_now,
)
from .db_config import (
    Base,
    DatabaseConfig,
    DatabaseManager,
    close_db,
    get_db_manager,
    get_development_config,
    get_production_config,
    import_all_models,
    initialize_db,
    set_db_manager,
)
from .db_connect_session_models import ConnectSession
from .db_integration_models import Integration
from .db_private_key_models import PrivateKey

__all__ = [
    # Base definitions
    "Base",
    "JSON",
    "TimestampMixin",
    "UUIDMixin",
    "as_utc",
    "utc_now",
    # Configuration
    "DatabaseConfig",
    "DatabaseManager",
    "close_db",
    "get_db_manager",
    "get_development_config",
    "get_production_config",
    "import_all_models",
    "initialize_db",
    "set_db_manager",
    # Models
    "ConnectSession",
    "Integration",
    "PrivateKey",
]
