"""Cache transport: the handle the facade owns and how it is built.

The facade only talks to a ``CacheHandle``. The default implementation,
``RedisHandle``, wraps a single-connection ``redis.asyncio.Redis`` client
configured with a bounded connect timeout and a linear reconnection backoff
(``LinearBackoff`` driven by redis-py's ``Retry``). Once the retry ceiling is
exhausted the connection error surfaces and the handle reports itself closed.

Lifecycle observers (error, ready, reconnecting, end) are attached when the
handle is built. They only log and never raise.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol, TypeVar

from redis.asyncio import Redis
from redis.asyncio.retry import Retry
from redis.backoff import AbstractBackoff
from redis.exceptions import ConnectionError

from safecache.cache.models import CacheConfig, ReconnectPolicy
from safecache.observability.logging import LogEvents, get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class CacheHandle(Protocol):
    """Session with the cache backend as seen by the facade."""

    @property
    def is_open(self) -> bool: ...

    async def connect(self) -> None: ...

    async def disconnect(self) -> None: ...

    async def quit(self) -> None: ...

    async def set(self, key: str, value: str) -> Any: ...

    async def set_with_ttl(self, key: str, value: str, seconds: int) -> Any: ...

    async def get(self, key: str) -> str | None: ...

    async def delete(self, key: str) -> int: ...

    async def exists(self, key: str) -> int: ...

    async def expire(self, key: str, seconds: int) -> bool: ...

    async def ttl(self, key: str) -> int: ...


class HandleObserver:
    """Passive lifecycle observers attached to a handle at construction.

    Every callback only logs. None of them raise, so a transport event can
    never crash the process.
    """

    def __init__(self, redis_url: str):
        self.redis_url = redis_url

    def on_error(self, error: BaseException) -> None:
        logger.error(LogEvents.CACHE_ERROR, url=self.redis_url, error=str(error))

    def on_ready(self) -> None:
        logger.info(LogEvents.CACHE_READY, url=self.redis_url)

    def on_reconnecting(self, attempt: int, delay: float) -> None:
        logger.warning(
            LogEvents.CACHE_RECONNECTING,
            url=self.redis_url,
            attempt=attempt,
            delay=delay,
        )

    def on_end(self) -> None:
        logger.warning(LogEvents.CACHE_CONNECTION_ENDED, url=self.redis_url)


class LinearBackoff(AbstractBackoff):
    """Linear backoff capped at ``policy.max_delay``.

    redis-py calls ``compute`` once per failed attempt, before sleeping,
    so this is also where reconnect attempts are reported.
    """

    def __init__(self, policy: ReconnectPolicy, observer: HandleObserver | None = None):
        self.policy = policy
        self.observer = observer

    def compute(self, failures: int) -> float:
        delay = self.policy.delay_for(failures)
        if self.observer is not None:
            self.observer.on_reconnecting(failures, delay)
        return delay

    def __deepcopy__(self, memo: dict[int, Any]) -> "LinearBackoff":
        # Connections deep-copy their Retry; the observer must stay shared
        return LinearBackoff(self.policy, self.observer)


class RedisHandle:
    """CacheHandle over a single-connection ``redis.asyncio.Redis`` client."""

    def __init__(self, client: Redis, observer: HandleObserver):
        self.client = client
        self.observer = observer
        self._open = False

    @property
    def is_open(self) -> bool:
        """True between a successful connect and close or retry exhaustion."""
        return self._open

    async def connect(self) -> None:
        """Open the dedicated connection and verify it with PING."""
        try:
            await self.client.initialize()
            await self.client.ping()
        except Exception as e:
            self.observer.on_error(e)
            raise
        self._open = True
        self.observer.on_ready()

    async def disconnect(self) -> None:
        """Drop the connection without waiting for in-flight commands."""
        was_open = self._open
        self._open = False
        await self.client.aclose()
        if was_open:
            self.observer.on_end()

    async def quit(self) -> None:
        """Send QUIT after in-flight commands, then release the client."""
        was_open = self._open
        self._open = False
        try:
            await self.client.quit()
        finally:
            await self.client.aclose()
            if was_open:
                self.observer.on_end()

    async def set(self, key: str, value: str) -> Any:
        return await self._run(self.client.set(key, value))

    async def set_with_ttl(self, key: str, value: str, seconds: int) -> Any:
        # SET ... EX applies value and expiry atomically
        return await self._run(self.client.set(key, value, ex=seconds))

    async def get(self, key: str) -> str | None:
        return await self._run(self.client.get(key))

    async def delete(self, key: str) -> int:
        return await self._run(self.client.delete(key))

    async def exists(self, key: str) -> int:
        return await self._run(self.client.exists(key))

    async def expire(self, key: str, seconds: int) -> bool:
        return await self._run(self.client.expire(key, seconds))

    async def ttl(self, key: str) -> int:
        return await self._run(self.client.ttl(key))

    async def _run(self, command: Awaitable[T]) -> T:
        """Await a command, marking the handle closed once retries are exhausted."""
        try:
            return await command
        except ConnectionError as e:
            was_open = self._open
            self._open = False
            self.observer.on_error(e)
            if was_open:
                self.observer.on_end()
            raise


HandleFactory = Callable[[CacheConfig, HandleObserver], CacheHandle]


def create_redis_handle(config: CacheConfig, observer: HandleObserver) -> RedisHandle:
    """Build the default RedisHandle for a configuration snapshot.

    Args:
        config: Resolved cache configuration
        observer: Lifecycle observers to attach

    Returns:
        Unconnected RedisHandle

    Raises:
        ValueError: If the Redis URL is malformed
    """
    retry = Retry(
        LinearBackoff(config.reconnect, observer),
        config.reconnect.max_attempts,
    )
    client = Redis.from_url(
        config.redis_url,
        single_connection_client=True,
        socket_connect_timeout=config.connect_timeout,
        retry=retry,
        retry_on_error=[ConnectionError],
        decode_responses=True,
    )
    return RedisHandle(client, observer)
