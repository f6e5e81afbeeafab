"""Outbound HTTP access to the origin calendar API."""

from .http_client_factory import HttpClientFactory
from .transport import HttpxUpstreamTransport, UpstreamResponse, UpstreamTransport

__all__ = [
    "HttpClientFactory",
    "HttpxUpstreamTransport",
    "UpstreamResponse",
    "UpstreamTransport",
]
