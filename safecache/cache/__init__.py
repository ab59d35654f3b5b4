"""Fail-safe Redis cache facade.

The cache is designed so that Redis being disabled, unreachable,
misconfigured or dropped never surfaces as an error to the application.

Key Features:
    - One-shot startup connect bounded by a 5 second timeout
    - Linear reconnection backoff capped at 3 attempts
    - Liveness re-checked before every operation
    - Fixed fallback results instead of exceptions

Usage:
    >>> from safecache.cache import CacheFacade
    >>> from safecache.core.config import settings
    >>>
    >>> cache = CacheFacade(settings)
    >>> await cache.start()
    >>>
    >>> value = await cache.get("user:42")
    >>> if value is None:
    >>>     value = await load_user(42)
    >>>     await cache.set("user:42", value, ttl=300)
    >>>
    >>> await cache.stop()
"""

from safecache.cache.models import CacheConfig, CacheState, ReconnectPolicy
from safecache.cache.service import CacheFacade
from safecache.cache.transport import (
    CacheHandle,
    HandleFactory,
    HandleObserver,
    LinearBackoff,
    RedisHandle,
    create_redis_handle,
)

__all__ = [
    "CacheFacade",
    "CacheConfig",
    "CacheState",
    "ReconnectPolicy",
    "CacheHandle",
    "HandleFactory",
    "HandleObserver",
    "LinearBackoff",
    "RedisHandle",
    "create_redis_handle",
]
