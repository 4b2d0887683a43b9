"""Core utilities for listkeeper.

This module provides the shared browser session pool, centralized
configuration and the exception types used across the package.
"""

from listkeeper.core.browser import SessionPool
from listkeeper.core.config import Config, get_owner_id, get_store_credentials, load_config
from listkeeper.core.errors import (
    AuthenticationError,
    AutomationError,
    ConfigError,
    ConversationServiceError,
    ListkeeperError,
    SelectionError,
)

__all__ = [
    # Browser
    "SessionPool",
    # Config
    "Config",
    "load_config",
    "get_store_credentials",
    "get_owner_id",
    # Errors
    "ListkeeperError",
    "ConfigError",
    "AuthenticationError",
    "AutomationError",
    "SelectionError",
    "ConversationServiceError",
]
