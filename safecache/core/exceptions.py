"""Exception hierarchy for safecache.

Cache operations never raise these to callers. They are raised internally
during startup and absorbed by the facade, except ConfigurationError which
signals a wiring mistake when the facade is constructed.
"""

from typing import Any


class SafeCacheError(Exception):
    """Base exception for all safecache errors."""

    code: str = "SAFECACHE_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(SafeCacheError):
    """Configuration error (invalid timeout, invalid policy values)."""

    code: str = "CONFIGURATION_ERROR"


class CacheConnectError(SafeCacheError):
    """Initial connection to the cache backend failed."""

    code: str = "CACHE_CONNECT_FAILED"


class CacheConnectTimeoutError(CacheConnectError):
    """Initial connection did not complete within the connect timeout."""

    code: str = "CACHE_CONNECT_TIMEOUT"
