"""Enums module for CalProxy.

Contains all enumeration classes used throughout the application.
"""

from enum import StrEnum


class CacheSource(StrEnum):
    """Where a served payload came from, surfaced as the ``X-Cache`` header."""
    Hit = "HIT"
    Miss = "MISS"


class ErrorKind(StrEnum):
    """Coarse failure categories of the read-through path."""
    InvalidKey = "invalid_key"
    UpstreamUnavailable = "upstream_unavailable"
    UpstreamError = "upstream_error"
    UpstreamReadFailure = "upstream_read_failure"
    Internal = "internal_error"
