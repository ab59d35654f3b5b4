"""Factory for the process-wide CacheFacade."""

import logging

from safecache.cache.models import ReconnectPolicy
from safecache.cache.service import CacheFacade
from safecache.cache.transport import HandleFactory
from safecache.core.config import ConfigSource, settings
from safecache.core.defaults import CONNECT_TIMEOUT_SECONDS

logger = logging.getLogger(__name__)


async def create_cache(
    source: ConfigSource | None = None,
    handle_factory: HandleFactory | None = None,
    connect_timeout: float = CONNECT_TIMEOUT_SECONDS,
    reconnect: ReconnectPolicy | None = None,
    start: bool = True,
) -> CacheFacade:
    """Create the single CacheFacade an application shares.

    Construct this once at process startup and pass it to consumers
    instead of reaching for a module-level global.

    Args:
        source: Configuration lookup (defaults to environment Settings)
        handle_factory: Optional handle factory (defaults to Redis)
        connect_timeout: Bound on the initial connect in seconds
        reconnect: Reconnection policy (defaults if None)
        start: Run the startup connect attempt before returning

    Returns:
        Configured CacheFacade, started unless ``start`` is False
    """
    if source is None:
        source = settings

    cache = CacheFacade(
        source,
        connect_timeout=connect_timeout,
        reconnect=reconnect,
        handle_factory=handle_factory,
    )

    if start:
        state = await cache.start()
        logger.info(f"Cache facade created in state '{state.value}'")

    return cache
