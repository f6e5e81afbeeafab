import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request

from ...config import Settings
from ...logging import init_logging, info as log_info, LogRecord, LogEvent
from ...application.cache import CacheStatistics, FreshnessCache
from ...application.fetcher import ReadThroughFetcher
from ...application.resources import CalendarResources
from ...domain.exceptions import CalProxyException
from ...infrastructure.upstream import HttpClientFactory, HttpxUpstreamTransport
from .cors import CORSHeadersMiddleware
from .middleware import logging_middleware
from .errors import log_and_return_error_response
from .routes.calendar import router as calendar_router
from .routes.health import router as health_router
from .routes.monitoring import router as monitoring_router


def create_app(
    settings: Settings,
    http_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Creates and configures the FastAPI application instance.

    The freshness cache, the upstream client and the fetcher are built once
    in the lifespan and shared by every request through ``app.state``; they
    live exactly as long as the server.

    Args:
        settings: Configuration settings object
        http_transport: Optional httpx transport replacing the network, for tests

    Returns:
        Fully configured FastAPI application instance
    """
    init_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = HttpClientFactory.create_client(settings, transport=http_transport)
        HttpClientFactory.log_client_configuration(client, settings)
        app.state.http_client = client
        app.state.fetcher = ReadThroughFetcher(
            cache=FreshnessCache(),
            transport=HttpxUpstreamTransport(client),
            ttl_seconds=settings.cache_ttl_seconds,
            timeout_seconds=settings.upstream_timeout_seconds,
            statistics=CacheStatistics(),
        )
        log_info(
            LogRecord(
                event=LogEvent.APP_STARTUP.value,
                message=f"{settings.app_name} gateway ready",
                data={
                    "upstream_base_url": settings.upstream_base_url,
                    "cache_ttl_seconds": settings.cache_ttl_seconds,
                    "upstream_timeout_seconds": settings.upstream_timeout_seconds,
                },
            )
        )
        try:
            yield
        finally:
            logging.info("Closing upstream HTTP client")
            await HttpClientFactory.close_client(client)
            log_info(
                LogRecord(
                    event=LogEvent.APP_SHUTDOWN.value,
                    message=f"{settings.app_name} gateway stopped",
                    data=app.state.fetcher.statistics.get_stats(),
                )
            )

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=None,
        redoc_url=None,
        description="Read-through caching gateway in front of the calendar API.",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.resources = CalendarResources(settings.upstream_base_url)

    app.middleware("http")(logging_middleware)
    app.add_middleware(
        CORSHeadersMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    app.include_router(calendar_router, tags=["Calendar"])
    app.include_router(health_router, tags=["Health"])
    app.include_router(monitoring_router, tags=["Monitoring"])

    @app.exception_handler(CalProxyException)
    async def calproxy_exception_handler(request: Request, exc: CalProxyException):
        return await log_and_return_error_response(request, exc)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        return await log_and_return_error_response(request, exc)

    return app
