"""
HTTP client factory for the upstream transport.
Handles configuration and initialization of the shared httpx client.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from ...config import Settings
from ...logging import info as log_info, LogRecord, LogEvent


@dataclass
class ConnectionLimits:
    """Connection pool configuration."""

    max_keepalive: int
    max_connections: int
    keepalive_expiry: float

    @classmethod
    def from_settings(cls, settings: Settings) -> "ConnectionLimits":
        return cls(
            max_keepalive=min(
                settings.pool_max_keepalive_connections, settings.pool_max_connections
            ),
            max_connections=settings.pool_max_connections,
            keepalive_expiry=settings.pool_keepalive_expiry,
        )


class HttpClientFactory:
    """Factory for creating the configured httpx client."""

    @staticmethod
    def create_client(
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> httpx.AsyncClient:
        """
        Create the async client used for every upstream call.

        Args:
            settings: Application settings
            transport: Optional httpx transport, used by tests to stub the origin

        Returns:
            Configured httpx client
        """
        limits = ConnectionLimits.from_settings(settings)
        client_kwargs = HttpClientFactory._build_httpx_config(settings, limits)
        if transport is not None:
            client_kwargs["transport"] = transport
        return httpx.AsyncClient(**client_kwargs)

    @staticmethod
    def _build_httpx_config(
        settings: Settings, limits: ConnectionLimits
    ) -> Dict[str, Any]:
        """Build httpx client configuration.

        The timeout applies to every phase of every call; callers cannot
        override it per request.
        """
        return {
            "limits": httpx.Limits(
                max_keepalive_connections=limits.max_keepalive,
                max_connections=limits.max_connections,
                keepalive_expiry=limits.keepalive_expiry,
            ),
            "timeout": httpx.Timeout(settings.upstream_timeout_seconds),
            "headers": HttpClientFactory.get_default_headers(settings),
            "follow_redirects": True,
        }

    @staticmethod
    async def close_client(client: Optional[httpx.AsyncClient]) -> None:
        """
        Properly close an HTTP client to avoid resource leaks.

        Args:
            client: HTTP client to close
        """
        if not client:
            return
        try:
            await client.aclose()
        except (httpx.HTTPError, RuntimeError) as e:
            logging.warning(f"Error closing HTTP client: {e}")

    @staticmethod
    def get_default_headers(settings: Settings) -> Dict[str, str]:
        """
        Get default headers for upstream requests.

        Args:
            settings: Application settings

        Returns:
            Dictionary of default headers
        """
        return {
            "Accept": "application/json",
            "User-Agent": f"{settings.app_name}/{settings.app_version}",
        }

    @staticmethod
    def log_client_configuration(client: httpx.AsyncClient, settings: Settings) -> None:
        config_info = {
            "client_type": type(client).__name__,
            "upstream_base_url": settings.upstream_base_url,
            "timeout_seconds": settings.upstream_timeout_seconds,
            "pool_max_keepalive": settings.pool_max_keepalive_connections,
            "pool_max_connections": settings.pool_max_connections,
        }
        log_info(
            LogRecord(
                event=LogEvent.HTTP_CLIENT.value,
                message="HTTP client configured",
                data=config_info,
            )
        )
