"""Startup and graceful shutdown handling for the shared cache facade.

This module replaces a framework-managed singleton with an explicitly
constructed manager that owns the one CacheFacade of a process and ensures:
- Exactly one startup connect attempt
- Exactly one graceful close, even when several signals arrive
- Shutdown progress and failures are logged, never raised

Usage with FastAPI:
    >>> from safecache.integrations.fastapi import create_lifespan
    >>> app = FastAPI(lifespan=create_lifespan(cache))

Standalone usage:
    >>> manager = LifecycleManager(cache)
    >>> await manager.startup()
    >>> manager.install_signal_handlers()
    >>> # ... application runs ...
    >>> await manager.shutdown()
"""

import asyncio
import logging
import signal
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

from safecache.core.defaults import SHUTDOWN_TIMEOUT_SECONDS

if TYPE_CHECKING:
    from safecache.cache.models import CacheState
    from safecache.cache.service import CacheFacade

logger = logging.getLogger(__name__)


class ShutdownPhase(Enum):
    """Shutdown phases for tracking progress."""

    NOT_STARTED = "not_started"
    SIGNAL_RECEIVED = "signal_received"
    CLOSING_CONNECTIONS = "closing_connections"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class ShutdownState:
    """Tracks shutdown progress and timing."""

    phase: ShutdownPhase = ShutdownPhase.NOT_STARTED
    started_at: datetime | None = None
    completed_at: datetime | None = None
    signal_received: str | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def duration_seconds(self) -> float | None:
        """Calculate shutdown duration in seconds."""
        if self.started_at is None:
            return None
        end = self.completed_at or datetime.now(timezone.utc)
        return (end - self.started_at).total_seconds()


class LifecycleManager:
    """Manages the cache facade lifecycle with graceful shutdown support.

    Shutdown sequence:
    1. Receive signal (SIGTERM/SIGINT) or explicit shutdown() call
    2. Close the cache connection, bounded by shutdown_timeout
    3. Log completion

    Thread Safety:
        The shutdown method uses asyncio.Lock to prevent concurrent
        shutdown attempts from multiple signal handlers.

    Error Handling:
        Shutdown continues even if individual steps fail. All errors
        are logged and collected in ShutdownState.errors.
    """

    def __init__(
        self,
        cache: "CacheFacade | None" = None,
        shutdown_timeout: float = SHUTDOWN_TIMEOUT_SECONDS,
        on_shutdown_start: Callable[[], Coroutine[Any, Any, None]] | None = None,
        on_shutdown_complete: Callable[[], Coroutine[Any, Any, None]] | None = None,
    ) -> None:
        """Initialize lifecycle manager.

        Args:
            cache: The process-wide cache facade. If None, startup and the
                close step are skipped.
            shutdown_timeout: Maximum seconds to wait for the cache to close
            on_shutdown_start: Optional async callback invoked when shutdown begins
            on_shutdown_complete: Optional async callback invoked after shutdown
        """
        self.cache = cache
        self.shutdown_timeout = shutdown_timeout
        self.on_shutdown_start = on_shutdown_start
        self.on_shutdown_complete = on_shutdown_complete

        self.state = ShutdownState()
        self._shutdown_event = asyncio.Event()
        self._shutdown_lock = asyncio.Lock()
        self._signal_handlers_installed = False

    @property
    def is_shutting_down(self) -> bool:
        """Check if shutdown is in progress."""
        return self.state.phase not in (
            ShutdownPhase.NOT_STARTED,
            ShutdownPhase.COMPLETE,
            ShutdownPhase.FAILED,
        )

    @property
    def shutdown_requested(self) -> bool:
        """Check if shutdown signal was received."""
        return self._shutdown_event.is_set()

    async def startup(self) -> "CacheState | None":
        """Start the cache facade (one connect attempt, never raises).

        Returns:
            Resulting cache state, or None when no cache is managed
        """
        if self.cache is None:
            logger.debug("No cache configured, skipping startup")
            return None

        state = await self.cache.start()
        logger.info(f"Cache startup finished in state '{state.value}'")
        return state

    def install_signal_handlers(self) -> None:
        """Install signal handlers for graceful shutdown.

        Handles SIGTERM (Kubernetes/Docker) and SIGINT (Ctrl+C).
        Safe to call multiple times; subsequent calls are no-ops.

        Note:
            Signal handlers can only be installed from the main thread
            while an event loop is running.
        """
        if self._signal_handlers_installed:
            logger.debug("Signal handlers already installed, skipping")
            return

        loop = asyncio.get_running_loop()

        def create_handler(sig: signal.Signals) -> Callable[[], None]:
            def handler() -> None:
                asyncio.create_task(self._handle_signal(sig))

            return handler

        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, create_handler(sig))
            logger.debug(f"Installed handler for {sig.name}")

        self._signal_handlers_installed = True
        logger.info("Signal handlers installed for graceful shutdown")

    def remove_signal_handlers(self) -> None:
        """Remove installed signal handlers.

        Called automatically during shutdown to prevent recursive signals.
        """
        if not self._signal_handlers_installed:
            return

        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.remove_signal_handler(sig)
                logger.debug(f"Removed handler for {sig.name}")
            except (ValueError, RuntimeError):
                # Handler may not exist or loop may be closing
                pass

        self._signal_handlers_installed = False

    async def _handle_signal(self, sig: signal.Signals) -> None:
        """Handle shutdown signal."""
        signal_name = sig.name
        logger.info(f"Received {signal_name}, initiating graceful shutdown")

        self.state.signal_received = signal_name
        self._shutdown_event.set()

        await self.shutdown()

    async def close_cache(self) -> bool:
        """Close the cache connection.

        Returns:
            True if close finished in time, False otherwise
        """
        if self.cache is None:
            logger.debug("No cache configured, skipping connection close")
            return True

        try:
            logger.info("Closing cache connection")
            await asyncio.wait_for(self.cache.stop(), timeout=self.shutdown_timeout)
            return True

        except asyncio.TimeoutError:
            error_msg = f"Timed out closing cache after {self.shutdown_timeout}s"
            logger.error(error_msg)
            self.state.errors.append(error_msg)
            return False

        except Exception as e:
            error_msg = f"Failed to close cache: {e}"
            logger.error(error_msg)
            self.state.errors.append(error_msg)
            return False

    async def shutdown(self) -> ShutdownState:
        """Execute graceful shutdown sequence.

        This method is idempotent; calling multiple times returns
        the existing ShutdownState without re-executing shutdown.

        Returns:
            ShutdownState with shutdown results and timing
        """
        async with self._shutdown_lock:
            if self.state.phase in (ShutdownPhase.COMPLETE, ShutdownPhase.FAILED):
                logger.debug("Shutdown already completed")
                return self.state

            self._shutdown_event.set()
            self.state.phase = ShutdownPhase.SIGNAL_RECEIVED
            self.state.started_at = datetime.now(timezone.utc)
            logger.info("Starting graceful shutdown sequence")

            if self.on_shutdown_start:
                try:
                    await self.on_shutdown_start()
                except Exception as e:
                    error_msg = f"on_shutdown_start callback failed: {e}"
                    logger.error(error_msg)
                    self.state.errors.append(error_msg)

            self.remove_signal_handlers()

            self.state.phase = ShutdownPhase.CLOSING_CONNECTIONS
            await self.close_cache()

            self.state.completed_at = datetime.now(timezone.utc)
            if self.state.errors:
                self.state.phase = ShutdownPhase.FAILED
                logger.warning(
                    f"Shutdown completed with {len(self.state.errors)} errors "
                    f"in {self.state.duration_seconds:.1f}s"
                )
            else:
                self.state.phase = ShutdownPhase.COMPLETE
                logger.info(
                    f"Graceful shutdown completed in {self.state.duration_seconds:.1f}s"
                )

            if self.on_shutdown_complete:
                try:
                    await self.on_shutdown_complete()
                except Exception as e:
                    error_msg = f"on_shutdown_complete callback failed: {e}"
                    logger.error(error_msg)
                    self.state.errors.append(error_msg)

            return self.state

    async def wait_for_shutdown(self) -> None:
        """Block until shutdown is requested."""
        await self._shutdown_event.wait()
