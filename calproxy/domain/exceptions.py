"""Custom exception hierarchy for CalProxy application.

Every failure of the read-through path is raised as one of these types and
translated into an HTTP response only at the interface layer.
"""

from typing import Optional, Dict, Any

from ..enums import ErrorKind


class CalProxyException(Exception):
    """Base exception for all CalProxy-specific exceptions."""

    kind: ErrorKind = ErrorKind.Internal

    def __init__(
        self,
        message: str,
        request_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.request_id = request_id
        self.details = details or {}


class InvalidKeyError(CalProxyException):
    """Raised when a resource key or identifier fails validation."""

    kind = ErrorKind.InvalidKey

    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        request_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, request_id, details)
        self.key = key


class UpstreamFailure(CalProxyException):
    """Base exception for failures talking to the origin API."""

    def __init__(
        self,
        message: str,
        upstream_url: Optional[str] = None,
        request_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, request_id, details)
        self.upstream_url = upstream_url


class UpstreamUnavailableError(UpstreamFailure):
    """Raised when the transport could not complete the call (connect, DNS, timeout)."""

    kind = ErrorKind.UpstreamUnavailable


class UpstreamStatusError(UpstreamFailure):
    """Raised when the origin answered with a non-success status."""

    kind = ErrorKind.UpstreamError

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        upstream_url: Optional[str] = None,
        request_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, upstream_url, request_id, details)
        self.status_code = status_code


class UpstreamReadFailureError(UpstreamFailure):
    """Raised when the origin's response body could not be fully read."""

    kind = ErrorKind.UpstreamReadFailure


class ConfigurationError(CalProxyException):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        request_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, request_id, details)
        self.config_key = config_key
