"""FastAPI wiring: lifespan startup/shutdown and a request dependency."""

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from safecache.cache.service import CacheFacade
from safecache.core.lifecycle import LifecycleManager

logger = logging.getLogger(__name__)


def create_lifespan(
    cache: CacheFacade,
    install_signal_handlers: bool = False,
) -> Callable[[FastAPI], AbstractAsyncContextManager[None]]:
    """Build a lifespan that owns the cache for the app's lifetime.

    Startup sequence:
        1. Start the cache facade (single bounded connect attempt)
        2. Publish it on ``app.state.cache`` and ``app.state.lifecycle_manager``

    Shutdown sequence (via LifecycleManager):
        1. Close the cache connection gracefully
        2. Log completion

    Args:
        cache: The process-wide cache facade
        install_signal_handlers: Also handle SIGTERM/SIGINT directly

    Returns:
        Lifespan callable for ``FastAPI(lifespan=...)``
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        manager = LifecycleManager(cache=cache)
        await manager.startup()

        if install_signal_handlers:
            try:
                manager.install_signal_handlers()
            except Exception as e:
                # Signal handlers may fail in some environments (e.g., tests, non-main thread)
                logger.warning(f"Could not install signal handlers: {e}")

        app.state.cache = cache
        app.state.lifecycle_manager = manager

        yield

        await manager.shutdown()

    return lifespan


def get_cache(request: Request) -> CacheFacade:
    """Dependency injection for the shared cache facade."""
    cache: CacheFacade = request.app.state.cache
    return cache


CacheDep = Annotated[CacheFacade, Depends(get_cache)]
