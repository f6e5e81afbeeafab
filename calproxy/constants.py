"""Constants module for CalProxy configuration.

Contains the upstream endpoint layout, cache and transport defaults, and the
fixed response markers used throughout the application.
"""

from typing import FrozenSet, Tuple

# Upstream calendar API
DEFAULT_UPSTREAM_BASE_URL = "https://calman02.barrierefrei.berlin/calendar/api/v1"
UPSTREAM_EVENTS_PATH = "/events?show_past=true"
UPSTREAM_GENRES_PATH = "/genres"
UPSTREAM_EVENT_PATH_PREFIX = "/event/"
UPSTREAM_SUCCESS_STATUS = 200
ALLOWED_UPSTREAM_SCHEMES: FrozenSet[str] = frozenset({"http", "https"})

# Cache defaults
DEFAULT_CACHE_TTL_SECONDS = 300

# Transport defaults
DEFAULT_UPSTREAM_TIMEOUT_SECONDS = 10.0
DEFAULT_POOL_MAX_CONNECTIONS = 100
DEFAULT_POOL_MAX_KEEPALIVE_CONNECTIONS = 20
DEFAULT_POOL_KEEPALIVE_EXPIRY = 30.0

# Listener defaults
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_TIMEOUT_KEEP_ALIVE = 30

# Inbound routes
API_PREFIX = "/api/calendar"

# Response markers
CACHE_STATUS_HEADER = "X-Cache"
JSON_MEDIA_TYPE = "application/json"

# CORS policy applied to every response
DEFAULT_CORS_ALLOW_ORIGINS: Tuple[str, ...] = ("*",)
DEFAULT_CORS_ALLOW_METHODS: Tuple[str, ...] = ("GET", "OPTIONS")
DEFAULT_CORS_ALLOW_HEADERS: Tuple[str, ...] = ("Content-Type",)
