"""Fail-safe Redis facade with a one-shot connection lifecycle."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from safecache.cache.models import CacheConfig, CacheState, ReconnectPolicy
from safecache.cache.transport import (
    CacheHandle,
    HandleFactory,
    HandleObserver,
    create_redis_handle,
)
from safecache.core.config import ConfigSource
from safecache.core.defaults import CONNECT_TIMEOUT_SECONDS, TTL_KEY_MISSING
from safecache.core.exceptions import (
    CacheConnectError,
    CacheConnectTimeoutError,
    ConfigurationError,
)
from safecache.observability.logging import LogEvents, get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class CacheFacade:
    """Redis cache that never becomes a hard dependency.

    Lifecycle:
        start() reads DISABLE_REDIS and REDIS_URL once and makes exactly one
        connect attempt, bounded by ``connect_timeout``. A failed or timed-out
        attempt leaves the facade unavailable for the rest of the process;
        operations never reconnect lazily.

    Operations:
        set/get/delete/exists/expire/ttl check the handle's own ``is_open``
        before every call. When the cache is unavailable, or the call raises,
        they return a fixed fallback instead of propagating:

            set -> False, get -> None, delete -> False,
            exists -> False, expire -> False, ttl -> -2

    Design Philosophy:
        Cache is an OPTIONAL optimization. Callers treat every fallback as
        a cache miss, never as a fatal error.
    """

    def __init__(
        self,
        source: ConfigSource,
        connect_timeout: float = CONNECT_TIMEOUT_SECONDS,
        reconnect: ReconnectPolicy | None = None,
        handle_factory: HandleFactory | None = None,
    ):
        """Initialize the facade without touching the network.

        Args:
            source: Configuration lookup for DISABLE_REDIS and REDIS_URL
            connect_timeout: Bound on the initial connect in seconds
            reconnect: Reconnection policy handed to the transport
            handle_factory: Builds the handle (defaults to a Redis handle)

        Raises:
            ConfigurationError: If connect_timeout is not positive
        """
        if connect_timeout <= 0:
            raise ConfigurationError(
                "connect_timeout must be positive",
                details={"connect_timeout": connect_timeout},
            )

        self.source = source
        self.connect_timeout = connect_timeout
        self.reconnect = reconnect or ReconnectPolicy()
        self.handle_factory = handle_factory or create_redis_handle

        self.config: CacheConfig | None = None
        self._handle: CacheHandle | None = None
        self._state = CacheState.UNAVAILABLE
        self._started = False

    @property
    def state(self) -> CacheState:
        """Effective state, downgraded when the transport has closed."""
        if self._state == CacheState.CONNECTED and not self.is_connected():
            return CacheState.UNAVAILABLE
        return self._state

    def is_connected(self) -> bool:
        """Check if the handle is present and reports itself open."""
        return self._handle is not None and self._handle.is_open

    async def start(self) -> CacheState:
        """Resolve configuration and attempt the single connection.

        Never raises for backend problems: a disabled flag, a malformed URL,
        a refused connection or a timeout all end in a logged state.

        Returns:
            The resulting CacheState
        """
        if self._started:
            logger.debug(LogEvents.CACHE_ALREADY_STARTED, state=self._state.value)
            return self._state
        self._started = True

        config = CacheConfig.from_source(
            self.source,
            connect_timeout=self.connect_timeout,
            reconnect=self.reconnect,
        )
        self.config = config

        if config.disabled:
            logger.info(
                LogEvents.CACHE_DISABLED,
                reason="DISABLE_REDIS is set; skipping connection",
            )
            self._state = CacheState.DISABLED
            return self._state

        self._state = CacheState.CONNECTING
        logger.info(
            LogEvents.CACHE_CONNECTING,
            url=config.safe_url,
            timeout=config.connect_timeout,
        )

        try:
            self._handle = self.handle_factory(config, HandleObserver(config.safe_url))
            await self._connect(self._handle, config.connect_timeout)
        except Exception as e:
            logger.warning(
                LogEvents.CACHE_CONNECT_FAILED, url=config.safe_url, error=str(e)
            )
            logger.warning(
                LogEvents.CACHE_PROCEEDING_WITHOUT_CACHE,
                reason="Proceeding without Redis; cache operations will be skipped",
            )
            await self._discard_handle()
            self._state = CacheState.UNAVAILABLE
            return self._state

        self._state = CacheState.CONNECTED
        logger.info(LogEvents.CACHE_CONNECTED, url=config.safe_url)
        return self._state

    async def stop(self) -> None:
        """Close the handle gracefully, if there is one.

        Errors are logged; shutdown must not fail the process.
        """
        handle = self._handle
        if handle is None:
            return

        self._handle = None
        if self._state == CacheState.CONNECTED:
            self._state = CacheState.UNAVAILABLE

        try:
            await handle.quit()
            logger.info(LogEvents.CACHE_CLOSED)
        except Exception as e:
            logger.error(LogEvents.CACHE_CLOSE_FAILED, error=str(e))

    async def set(self, key: str, value: str, ttl: int | None = None) -> bool:
        """Store a value, with expiry applied atomically when ttl is given.

        Args:
            key: Cache key
            value: Value to store
            ttl: Time-to-live in seconds (None or 0 = no expiry)

        Returns:
            True if the backend accepted the write, False otherwise
        """

        async def command(handle: CacheHandle) -> bool:
            if ttl:
                await handle.set_with_ttl(key, value, ttl)
            else:
                await handle.set(key, value)
            return True

        return await self._guarded("set", key, command, False)

    async def get(self, key: str) -> str | None:
        """Get a value, or None on a miss or when the cache is unavailable."""
        return await self._guarded("get", key, lambda h: h.get(key), None)

    async def delete(self, key: str) -> bool:
        """Delete a key.

        Returns:
            True if the backend processed the delete (even for a missing key)
        """

        async def command(handle: CacheHandle) -> bool:
            await handle.delete(key)
            return True

        return await self._guarded("delete", key, command, False)

    async def exists(self, key: str) -> bool:
        """Check if a key exists."""

        async def command(handle: CacheHandle) -> bool:
            return await handle.exists(key) == 1

        return await self._guarded("exists", key, command, False)

    async def expire(self, key: str, seconds: int) -> bool:
        """Set or overwrite the expiration on an existing key."""

        async def command(handle: CacheHandle) -> bool:
            await handle.expire(key, seconds)
            return True

        return await self._guarded("expire", key, command, False)

    async def ttl(self, key: str) -> int:
        """Get the remaining time-to-live of a key.

        Returns:
            Seconds to live, -1 if the key has no expiry, or -2 if the key
            is missing or the cache is unavailable
        """
        return await self._guarded("ttl", key, lambda h: h.ttl(key), TTL_KEY_MISSING)

    async def _guarded(
        self,
        operation: str,
        key: str,
        command: Callable[[CacheHandle], Awaitable[T]],
        unavailable: T,
    ) -> T:
        """Run a command against the live handle, degrading on any failure.

        Args:
            operation: Operation name for logging
            key: Key the operation targets
            command: Coroutine function issuing the transport call
            unavailable: Result when the cache is down or the call fails

        Returns:
            The command result, or ``unavailable``
        """
        handle = self._handle
        if handle is None or not handle.is_open:
            logger.debug(LogEvents.CACHE_UNAVAILABLE, operation=operation, key=key)
            return unavailable

        try:
            return await command(handle)
        except Exception as e:
            logger.error(
                LogEvents.CACHE_OPERATION_FAILED,
                operation=operation,
                key=key,
                error=str(e),
            )
            return unavailable

    async def _connect(self, handle: CacheHandle, timeout: float) -> None:
        """Race the connect against an independent timeout.

        Raises:
            CacheConnectTimeoutError: If the connect did not settle in time
            CacheConnectError: If the transport rejected the connection
        """
        try:
            await asyncio.wait_for(handle.connect(), timeout=timeout)
        except asyncio.TimeoutError as e:
            raise CacheConnectTimeoutError(
                f"Redis connection timeout after {timeout}s",
                details={"timeout": timeout},
            ) from e
        except Exception as e:
            raise CacheConnectError(str(e) or type(e).__name__) from e

    async def _discard_handle(self) -> None:
        """Release a partially constructed handle; errors are ignored."""
        handle = self._handle
        self._handle = None
        if handle is None:
            return
        try:
            await handle.disconnect()
        except Exception as e:
            logger.debug(LogEvents.CACHE_DISCARD_FAILED, error=str(e))
