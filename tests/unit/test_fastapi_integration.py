"""Unit tests for FastAPI lifespan and dependency wiring."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from safecache.cache import CacheFacade, CacheState
from safecache.core.lifecycle import LifecycleManager, ShutdownPhase
from safecache.integrations.fastapi import CacheDep, create_lifespan


def build_app(cache: CacheFacade) -> FastAPI:
    """Small app that reads through and writes to the shared cache."""
    app = FastAPI(lifespan=create_lifespan(cache))

    @app.put("/items/{key}")
    async def put_item(key: str, value: str, cache: CacheDep) -> dict:
        return {"stored": await cache.set(key, value, ttl=60)}

    @app.get("/items/{key}")
    async def get_item(key: str, cache: CacheDep) -> dict:
        return {"value": await cache.get(key), "cached": cache.is_connected()}

    return app


class TestLifespan:
    """Tests for create_lifespan."""

    @pytest.mark.asyncio
    async def test_lifespan_starts_and_stops_cache(self, memory_handle):
        cache = CacheFacade({}, handle_factory=lambda config, observer: memory_handle)
        app = FastAPI()

        async with create_lifespan(cache)(app):
            assert app.state.cache is cache
            assert isinstance(app.state.lifecycle_manager, LifecycleManager)
            assert cache.state == CacheState.CONNECTED

        assert memory_handle.calls == ["connect", "quit"]
        assert app.state.lifecycle_manager.state.phase == ShutdownPhase.COMPLETE

    @pytest.mark.asyncio
    async def test_lifespan_with_unreachable_cache(self, refusing_handle):
        """Test the app still starts when Redis is down."""
        cache = CacheFacade({}, handle_factory=lambda config, observer: refusing_handle)
        app = FastAPI()

        async with create_lifespan(cache)(app):
            assert cache.state == CacheState.UNAVAILABLE

        assert app.state.lifecycle_manager.state.phase == ShutdownPhase.COMPLETE


class TestCacheDependency:
    """Tests for get_cache / CacheDep."""

    def test_requests_use_shared_cache(self, memory_handle):
        cache = CacheFacade({}, handle_factory=lambda config, observer: memory_handle)

        with TestClient(build_app(cache)) as client:
            response = client.put("/items/greeting", params={"value": "hello"})
            assert response.status_code == 200
            assert response.json() == {"stored": True}

            response = client.get("/items/greeting")
            assert response.json() == {"value": "hello", "cached": True}

        assert memory_handle.calls[-1] == "quit"

    def test_requests_degrade_when_disabled(self):
        cache = CacheFacade({"DISABLE_REDIS": "1"})

        with TestClient(build_app(cache)) as client:
            response = client.put("/items/greeting", params={"value": "hello"})
            assert response.json() == {"stored": False}

            response = client.get("/items/greeting")
            assert response.status_code == 200
            assert response.json() == {"value": None, "cached": False}
