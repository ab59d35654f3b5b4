"""safecache - a Redis cache that is never a hard dependency.

safecache owns a single Redis connection for an application, makes one
bounded connect attempt at startup, and turns every cache failure into a
cache miss instead of an exception.

Basic usage:
    >>> from safecache import CacheFacade, settings
    >>> cache = CacheFacade(settings)
    >>> await cache.start()
    >>> await cache.set("greeting", "hello", ttl=60)
    >>> await cache.get("greeting")
    "hello"
"""

from dotenv import load_dotenv

load_dotenv()

from safecache.cache import CacheFacade, CacheState
from safecache.core import (
    CacheConnectError,
    CacheConnectTimeoutError,
    ConfigSource,
    ConfigurationError,
    SafeCacheError,
    Settings,
    settings,
)
from safecache.core.lifecycle import LifecycleManager
from safecache.utils.service_factory import create_cache

__version__ = "0.1.0"

__all__ = [
    # Main interface
    "CacheFacade",
    "CacheState",
    "LifecycleManager",
    "create_cache",
    # Configuration
    "ConfigSource",
    "Settings",
    "settings",
    # Exceptions
    "SafeCacheError",
    "ConfigurationError",
    "CacheConnectError",
    "CacheConnectTimeoutError",
    # Version
    "__version__",
]
