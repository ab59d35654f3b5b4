"""Centralized default values and configuration constants.

All magic numbers and hardcoded thresholds should be defined here
to avoid duplication and ensure consistency across the codebase.
"""

# =============================================================================
# CONFIGURATION KEYS
# =============================================================================

DISABLE_FLAG_KEY = "DISABLE_REDIS"
ENDPOINT_KEY = "REDIS_URL"

# Only these exact values disable the cache
DISABLE_FLAG_TRUTHY_VALUES = frozenset({"true", "1"})

DEFAULT_REDIS_URL = "redis://localhost:6379"

# =============================================================================
# CONNECTION LIFECYCLE
# =============================================================================

CONNECT_TIMEOUT_SECONDS = 5.0  # Bounds both the socket connect and the connect race

# Reconnection backoff: min(attempt * step, max_delay), at most max_attempts retries
RECONNECT_MAX_ATTEMPTS = 3
RECONNECT_STEP_SECONDS = 0.1
RECONNECT_MAX_DELAY_SECONDS = 3.0

# =============================================================================
# TTL SENTINELS (Redis TTL command conventions)
# =============================================================================

TTL_NO_EXPIRY = -1
TTL_KEY_MISSING = -2  # Also returned when the cache is unavailable

# =============================================================================
# SHUTDOWN
# =============================================================================

SHUTDOWN_TIMEOUT_SECONDS = 30.0
