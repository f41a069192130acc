"""Utility modules for the connect session core."""

# Logging utilities
from .json_utils import dumps, loads
from .logger import (
    AzureQueueHandler,
    ContextAwareLogger,
    TenantContextFilter,
    configure_logging,
    get_logger,
)

__all__ = [
    "dumps",
    "loads",
    "AzureQueueHandler",
    "ContextAwareLogger",
    "TenantContextFilter",
    "configure_logging",
    "get_logger",
]
