"""Pytest configuration and fixtures for safecache tests."""

import time
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError

from safecache.cache import CacheFacade


class InMemoryHandle:
    """CacheHandle backed by a dict, following Redis command semantics.

    Used where a test needs real read-after-write behavior without a
    Redis server. Every command is recorded in ``calls``.
    """

    def __init__(self, fail_connect: Exception | None = None):
        self.fail_connect = fail_connect
        self.is_open = False
        self.calls: list[str] = []
        self._data: dict[str, tuple[str, float | None]] = {}

    async def connect(self) -> None:
        self.calls.append("connect")
        if self.fail_connect is not None:
            raise self.fail_connect
        self.is_open = True

    async def disconnect(self) -> None:
        self.calls.append("disconnect")
        self.is_open = False

    async def quit(self) -> None:
        self.calls.append("quit")
        self.is_open = False

    def _live(self, key: str) -> tuple[str, float | None] | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        expires_at = entry[1]
        if expires_at is not None and expires_at <= time.monotonic():
            del self._data[key]
            return None
        return entry

    async def set(self, key: str, value: str) -> bool:
        self.calls.append("set")
        self._data[key] = (value, None)
        return True

    async def set_with_ttl(self, key: str, value: str, seconds: int) -> bool:
        self.calls.append("set_with_ttl")
        self._data[key] = (value, time.monotonic() + seconds)
        return True

    async def get(self, key: str) -> str | None:
        self.calls.append("get")
        entry = self._live(key)
        return entry[0] if entry else None

    async def delete(self, key: str) -> int:
        self.calls.append("delete")
        return 1 if self._data.pop(key, None) is not None else 0

    async def exists(self, key: str) -> int:
        self.calls.append("exists")
        return 1 if self._live(key) else 0

    async def expire(self, key: str, seconds: int) -> bool:
        self.calls.append("expire")
        entry = self._live(key)
        if entry is None:
            return False
        self._data[key] = (entry[0], time.monotonic() + seconds)
        return True

    async def ttl(self, key: str) -> int:
        self.calls.append("ttl")
        entry = self._live(key)
        if entry is None:
            return -2
        if entry[1] is None:
            return -1
        return max(1, round(entry[1] - time.monotonic()))


@pytest.fixture
def memory_handle() -> InMemoryHandle:
    """In-memory handle that connects successfully."""
    return InMemoryHandle()


@pytest.fixture
def refusing_handle() -> InMemoryHandle:
    """In-memory handle whose connect() is refused."""
    return InMemoryHandle(fail_connect=ConnectionError("Connection refused"))


@pytest.fixture
def mock_handle() -> MagicMock:
    """AsyncMock-based handle whose connect() opens it."""
    handle = MagicMock()
    handle.is_open = False

    async def connect() -> None:
        handle.is_open = True

    handle.connect = AsyncMock(side_effect=connect)
    handle.disconnect = AsyncMock()
    handle.quit = AsyncMock()
    handle.set = AsyncMock(return_value=True)
    handle.set_with_ttl = AsyncMock(return_value=True)
    handle.get = AsyncMock(return_value=None)
    handle.delete = AsyncMock(return_value=1)
    handle.exists = AsyncMock(return_value=1)
    handle.expire = AsyncMock(return_value=True)
    handle.ttl = AsyncMock(return_value=-1)
    return handle


@pytest.fixture
async def connected_cache(memory_handle) -> CacheFacade:
    """Started facade over the in-memory handle."""
    cache = CacheFacade({}, handle_factory=lambda config, observer: memory_handle)
    await cache.start()
    yield cache
    await cache.stop()
