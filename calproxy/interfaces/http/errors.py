import time
from typing import Dict, Optional, Tuple

from fastapi import Request
from fastapi.responses import PlainTextResponse

from ...domain.exceptions import CalProxyException, UpstreamFailure, UpstreamStatusError
from ...enums import ErrorKind
from ...logging import error, warning, LogRecord, LogEvent


STATUS_CODE_ERROR_MAP: Dict[ErrorKind, int] = {
    ErrorKind.InvalidKey: 400,
    ErrorKind.UpstreamUnavailable: 502,
    ErrorKind.UpstreamError: 502,
    ErrorKind.UpstreamReadFailure: 502,
    ErrorKind.Internal: 500,
}

# Stable, coarse reasons; origin details never reach the client.
PUBLIC_ERROR_MESSAGES: Dict[ErrorKind, str] = {
    ErrorKind.InvalidKey: "Invalid event id",
    ErrorKind.UpstreamUnavailable: "Upstream unavailable",
    ErrorKind.UpstreamError: "Upstream error",
    ErrorKind.UpstreamReadFailure: "Failed to read upstream response",
    ErrorKind.Internal: "Internal server error",
}


def get_error_details_from_exception(exc: BaseException) -> Tuple[ErrorKind, str, int]:
    """Maps caught exceptions to error kind, public message and status code."""
    kind = exc.kind if isinstance(exc, CalProxyException) else ErrorKind.Internal
    return kind, PUBLIC_ERROR_MESSAGES[kind], STATUS_CODE_ERROR_MAP[kind]


def build_error_response(kind: ErrorKind, message: str, status_code: int) -> PlainTextResponse:
    return PlainTextResponse(
        message,
        status_code=status_code,
        headers={"X-Content-Type-Options": "nosniff", "X-Error-Type": kind.value},
    )


async def log_and_return_error_response(
    request: Request,
    caught_exception: BaseException,
    request_id: Optional[str] = None,
) -> PlainTextResponse:
    """Log a failed request once and turn it into its outward response."""
    kind, message, status_code = get_error_details_from_exception(caught_exception)
    request_id = request_id or getattr(request.state, "request_id", "unknown")
    start_time_mono = getattr(request.state, "start_time_monotonic", time.monotonic())
    duration_ms = (time.monotonic() - start_time_mono) * 1000

    log_data = {
        "status_code": status_code,
        "duration_ms": duration_ms,
        "error_type": kind.value,
        "path": request.url.path,
        "client_ip": request.client.host if request.client else "unknown",
    }
    if isinstance(caught_exception, UpstreamFailure):
        log_data["upstream_url"] = caught_exception.upstream_url
    if isinstance(caught_exception, UpstreamStatusError):
        log_data["upstream_status"] = caught_exception.status_code

    if kind is ErrorKind.InvalidKey:
        warning(
            LogRecord(
                event=LogEvent.REQUEST_REJECTED.value,
                message=f"Request rejected: {message}",
                request_id=request_id,
                data=log_data,
            )
        )
    else:
        error(
            LogRecord(
                event=LogEvent.REQUEST_FAILURE.value,
                message=f"Request failed: {message}",
                request_id=request_id,
                data=log_data,
            ),
            exc=caught_exception,
        )
    return build_error_response(kind, message, status_code)
