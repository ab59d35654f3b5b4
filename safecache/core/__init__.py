"""Core infrastructure for safecache."""

from safecache.core.config import ConfigSource, Settings, settings
from safecache.core.exceptions import (
    CacheConnectError,
    CacheConnectTimeoutError,
    ConfigurationError,
    SafeCacheError,
)

__all__ = [
    # Config
    "ConfigSource",
    "Settings",
    "settings",
    # Exceptions
    "SafeCacheError",
    "ConfigurationError",
    "CacheConnectError",
    "CacheConnectTimeoutError",
]
