"""Common FastAPI middleware utilities for CalProxy HTTP interface."""

import time
import uuid
from typing import Awaitable, Callable

from fastapi import Request
from fastapi.responses import Response

from ...constants import CACHE_STATUS_HEADER
from ...logging import debug, LogRecord, LogEvent
from .errors import log_and_return_error_response


async def logging_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Attach request ID and timing headers, and log request start and completion.

    This middleware:
    1. Generates a per-request UUID (``X-Request-ID``)
    2. Measures wall-clock latency (``X-Response-Time-ms``)
    3. Stores identifiers on ``request.state`` for downstream handlers
    4. Turns exceptions no route handler caught into a 500 response, so
       outer middleware still decorates it
    """
    if not hasattr(request.state, "request_id"):
        request.state.request_id = str(uuid.uuid4())
    if not hasattr(request.state, "start_time_monotonic"):
        request.state.start_time_monotonic = time.monotonic()

    debug(
        LogRecord(
            event=LogEvent.REQUEST_START.value,
            message=f"{request.method} {request.url.path}",
            request_id=request.state.request_id,
            data={"client_ip": request.client.host if request.client else "unknown"},
        )
    )

    try:
        response = await call_next(request)
    except Exception as e:
        response = await log_and_return_error_response(
            request, e, request_id=request.state.request_id
        )

    duration_ms = (time.monotonic() - request.state.start_time_monotonic) * 1000
    response.headers["X-Request-ID"] = request.state.request_id
    response.headers["X-Response-Time-ms"] = str(duration_ms)

    debug(
        LogRecord(
            event=LogEvent.REQUEST_COMPLETED.value,
            message=f"{request.method} {request.url.path} -> {response.status_code}",
            request_id=request.state.request_id,
            data={
                "status_code": response.status_code,
                "duration_ms": duration_ms,
                "cache": response.headers.get(CACHE_STATUS_HEADER),
            },
        )
    )
    return response
