"""Cache configuration snapshot, reconnection policy and state models."""

from enum import Enum

from pydantic import BaseModel, Field

from safecache.core.config import ConfigSource
from safecache.core.defaults import (
    CONNECT_TIMEOUT_SECONDS,
    DEFAULT_REDIS_URL,
    DISABLE_FLAG_KEY,
    DISABLE_FLAG_TRUTHY_VALUES,
    ENDPOINT_KEY,
    RECONNECT_MAX_ATTEMPTS,
    RECONNECT_MAX_DELAY_SECONDS,
    RECONNECT_STEP_SECONDS,
)


class CacheState(str, Enum):
    """Connection state of the cache facade.

    Pattern:
        start() -> (flag set) -> disabled
        start() -> connecting -> (connect ok) -> connected
        start() -> connecting -> (error/timeout) -> unavailable
        connected -> (transport closed) -> unavailable
    """

    DISABLED = "disabled"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    UNAVAILABLE = "unavailable"


class ReconnectPolicy(BaseModel):
    """Linear reconnection backoff with an attempt ceiling.

    Attributes:
        max_attempts: Retries before the transport gives up and reports closed
        step: Delay added per attempt in seconds
        max_delay: Upper bound on a single delay in seconds
    """

    max_attempts: int = Field(
        default=RECONNECT_MAX_ATTEMPTS, ge=0, description="Reconnect attempt ceiling"
    )
    step: float = Field(
        default=RECONNECT_STEP_SECONDS, gt=0, description="Backoff step (seconds)"
    )
    max_delay: float = Field(
        default=RECONNECT_MAX_DELAY_SECONDS, gt=0, description="Backoff cap (seconds)"
    )

    def delay_for(self, attempt: int) -> float:
        """Backoff before the given (1-based) reconnect attempt."""
        return min(attempt * self.step, self.max_delay)


class CacheConfig(BaseModel):
    """Configuration snapshot resolved once at startup.

    Attributes:
        disable_flag: Raw DISABLE_REDIS value, if any
        redis_url: Redis connection URL
        connect_timeout: Bound on the initial connect, in seconds
        reconnect: Reconnection policy handed to the transport
    """

    disable_flag: str | None = Field(default=None, description="Raw disable flag")
    redis_url: str = Field(default=DEFAULT_REDIS_URL, description="Redis connection URL")
    connect_timeout: float = Field(
        default=CONNECT_TIMEOUT_SECONDS, gt=0, description="Connect timeout (seconds)"
    )
    reconnect: ReconnectPolicy = Field(default_factory=ReconnectPolicy)

    @property
    def disabled(self) -> bool:
        """True only for the exact values "true" and "1"."""
        return self.disable_flag in DISABLE_FLAG_TRUTHY_VALUES

    @property
    def safe_url(self) -> str:
        """Redis URL with credentials removed, for logging."""
        if "@" not in self.redis_url:
            return self.redis_url
        scheme, sep, rest = self.redis_url.partition("://")
        if not sep:
            return self.redis_url.split("@")[-1]
        return f"{scheme}://{rest.split('@')[-1]}"

    @classmethod
    def from_source(
        cls,
        source: ConfigSource,
        connect_timeout: float = CONNECT_TIMEOUT_SECONDS,
        reconnect: ReconnectPolicy | None = None,
    ) -> "CacheConfig":
        """Resolve the snapshot from a configuration source.

        Args:
            source: Key lookup returning optional strings
            connect_timeout: Bound on the initial connect
            reconnect: Reconnection policy (defaults if None)

        Returns:
            CacheConfig with the endpoint defaulted when unset or empty
        """
        return cls(
            disable_flag=source.get(DISABLE_FLAG_KEY),
            redis_url=source.get(ENDPOINT_KEY) or DEFAULT_REDIS_URL,
            connect_timeout=connect_timeout,
            reconnect=reconnect or ReconnectPolicy(),
        )
