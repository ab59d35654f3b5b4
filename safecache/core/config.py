"""Configuration management for safecache.

This module provides configuration loading from environment variables
(and an optional .env file) with validation and type safety, plus the
ConfigSource protocol the cache facade reads its two keys through.
"""

from typing import Protocol, runtime_checkable

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from safecache.core.defaults import DISABLE_FLAG_KEY, ENDPOINT_KEY


@runtime_checkable
class ConfigSource(Protocol):
    """Key lookup returning an optional string.

    Satisfied by ``dict[str, str]``, ``os.environ`` and ``Settings``.
    """

    def get(self, key: str) -> str | None: ...


class Settings(BaseSettings):
    """Application configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Redis Cache
    disable_redis: str | None = Field(
        default=None,
        description="Set to 'true' or '1' to skip connecting to Redis entirely",
    )
    redis_url: str | None = Field(
        default=None,
        description="Redis URL (unset = redis://localhost:6379)",
    )

    def get(self, key: str) -> str | None:
        """Look up a cache configuration value by its environment variable name.

        Args:
            key: Environment variable name (e.g. ``REDIS_URL``)

        Returns:
            The configured string, or None if unset or not a cache key
        """
        if key == DISABLE_FLAG_KEY:
            return self.disable_redis
        if key == ENDPOINT_KEY:
            return self.redis_url
        return None


# Global settings instance
settings = Settings()
