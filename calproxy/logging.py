import dataclasses
import enum
import json
import logging
import os
import traceback
from datetime import datetime, timezone
from logging.handlers import QueueHandler, QueueListener
import queue
import sys
from typing import Any, Dict, Optional, Tuple, List
from logging import Handler

from .config import Settings


_REDACT_KEYS: set[str] = set()
_MAX_DATA_STRING_LENGTH = 5000

_logger: Optional[logging.Logger] = None
_log_listener: Optional[QueueListener] = None


def _sanitize_for_json(obj: Any) -> Any:
    """Recursively sanitize an object for JSON serialization.

    Converts non-serializable types (bytes, dataclasses, enums) into
    JSON-compatible structures while redacting sensitive fields:
    - Bytes: Decoded as UTF-8 with replacement characters
    - Dataclasses: Converted to dictionaries
    - Dictionaries: Redacts keys listed in _REDACT_KEYS and drops null values
    - Lists/sets/tuples: Recursively sanitizes each element
    - Anything else that json cannot encode: Converted via repr()

    Args:
        obj (Any): Input object to sanitize.

    Returns:
        Any: JSON-serializable structure with sensitive data redacted.
    """
    if isinstance(obj, bytes):
        return obj.decode("utf-8", "replace")
    if isinstance(obj, enum.Enum):
        return obj.value
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return _sanitize_for_json(dataclasses.asdict(obj))
    if isinstance(obj, dict):
        redacted = {}
        for k, v in obj.items():
            if isinstance(k, str) and k.lower() in _REDACT_KEYS:
                redacted[k] = "***REDACTED***"
            else:
                sanitized_value = _sanitize_for_json(v)
                if sanitized_value is not None:
                    redacted[k] = sanitized_value
        return redacted
    if isinstance(obj, (list, tuple, set)):
        return [_sanitize_for_json(x) for x in obj if x is not None]
    try:
        json.dumps(obj)
        return obj
    except (TypeError, ValueError):
        return repr(obj)


def _json_dumps_compact(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, separators=(",", ":"))


class LogEvent(enum.Enum):
    """Enumeration of structured log events emitted throughout CalProxy.

    These constants are used in ``LogRecord.event`` so log consumers can
    filter on request lifecycle, cache outcomes and upstream failures.
    """

    APP_STARTUP = "app_startup"
    APP_SHUTDOWN = "app_shutdown"
    REQUEST_START = "request_start"
    REQUEST_COMPLETED = "request_completed"
    REQUEST_FAILURE = "request_failure"
    REQUEST_REJECTED = "request_rejected"
    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
    CACHE_STORE = "cache_store"
    UPSTREAM_FAILURE = "upstream_failure"
    HTTP_CLIENT = "http_client"


@dataclasses.dataclass
class LogError:
    """Structured representation of an exception attached to a log entry.

    Attributes:
        name: Exception class name.
        message: Human-readable description.
        stack_trace: Full traceback string (may be ``None`` when suppressed).
        args: JSON-safe serialization of ``Exception.args``.
    """

    name: str
    message: str
    stack_trace: Optional[str] = None
    args: Optional[Tuple[Any, ...]] = None


@dataclasses.dataclass
class LogRecord:
    """Primary payload transported via the logging system.

    Attributes:
        event: Identifier from :class:`LogEvent` or custom tag.
        message: Short human-readable summary.
        request_id: Correlator generated per HTTP request.
        data: Arbitrary contextual dictionary (sanitized/truncated).
        error: Optional :class:`LogError` with exception details.
    """

    event: str
    message: str
    request_id: Optional[str] = None
    data: Optional[Dict[str, Any]] = None
    error: Optional[LogError] = None


class JSONFormatter(logging.Formatter):
    """Formatter that outputs log records as compact JSON lines.

    Injects timestamp, level and logger name, serializes an attached
    :class:`LogRecord`, truncates oversized strings and redacts configured
    sensitive fields.
    """

    include_stack_traces = True

    def format(self, record: logging.LogRecord) -> str:
        header: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(
                record.created, timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
        }
        log_payload = getattr(record, "log_record", None)
        if isinstance(log_payload, LogRecord):
            detail = _sanitize_for_json(dataclasses.asdict(log_payload))
            if isinstance(detail.get("data"), dict):
                for key, value in detail["data"].items():
                    if isinstance(value, str) and len(value) > _MAX_DATA_STRING_LENGTH:
                        detail["data"][key] = (
                            value[:_MAX_DATA_STRING_LENGTH] + "...[truncated]"
                        )
            if not self.include_stack_traces and isinstance(detail.get("error"), dict):
                detail["error"].pop("stack_trace", None)
            header["detail"] = detail
        else:
            header["message"] = record.getMessage()
            if record.exc_info:
                exc_type, exc_value, exc_tb = record.exc_info
                error_info: Dict[str, Any] = {
                    "name": exc_type.__name__ if exc_type else "UnknownError",
                    "message": str(exc_value),
                }
                if self.include_stack_traces:
                    error_info["stack_trace"] = "".join(
                        traceback.format_exception(exc_type, exc_value, exc_tb)
                    )
                header["error"] = _sanitize_for_json(error_info)
        return _json_dumps_compact(_sanitize_for_json(header))


class ConsoleJSONFormatter(JSONFormatter):
    """Variant of :class:`JSONFormatter` tuned for interactive consoles.

    Drops stack traces for brevity while preserving the JSON structure.
    """

    include_stack_traces = False


def _file_handler(path: str, level: int = logging.NOTSET) -> Handler:
    log_dir = os.path.dirname(path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
    handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())
    return handler


def init_logging(settings: Settings) -> logging.Logger:
    """Route application and uvicorn loggers through a queue-backed JSON pipeline.

    Idempotent: a listener left running by a previous call is stopped first.
    """
    global _logger
    global _REDACT_KEYS
    shutdown_logging()

    log_queue: queue.Queue = queue.Queue(-1)
    queue_handler = QueueHandler(log_queue)

    console_handler = logging.StreamHandler(stream=sys.stdout)
    console_handler.setFormatter(
        ConsoleJSONFormatter() if settings.log_pretty_console else JSONFormatter()
    )
    handlers: List[Handler] = [console_handler]

    if settings.log_file_path:
        try:
            handlers.append(_file_handler(settings.log_file_path))
        except OSError as e:
            logging.getLogger(settings.app_name).warning(
                "Failed to configure file logging: %s", e
            )

    if settings.error_log_file_path:
        try:
            handlers.append(_file_handler(settings.error_log_file_path, logging.ERROR))
        except OSError as e:
            logging.getLogger(settings.app_name).warning(
                "Failed to configure error file logging: %s", e
            )

    global _log_listener
    _log_listener = QueueListener(log_queue, *handlers)
    _log_listener.start()

    for logger_name in [
        "",
        settings.app_name,
        "uvicorn",
        "uvicorn.error",
        "uvicorn.access",
    ]:
        logger = logging.getLogger(logger_name)
        logger.handlers = [queue_handler]
        logger.propagate = logger_name == ""
        logger.setLevel(
            logging.WARNING
            if logger_name == ""
            else settings.log_level.upper()
            if logger_name == settings.app_name
            else "INFO"
        )
    _logger = logging.getLogger(settings.app_name)
    _REDACT_KEYS = {k.lower() for k in settings.redact_log_fields}
    return _logger


def shutdown_logging() -> None:
    """Safely shutdown logging system, flushing all messages."""
    global _log_listener
    if _log_listener:
        _log_listener.stop()
        _log_listener = None


def _log(level: int, record: LogRecord, exc: Optional[BaseException] = None) -> None:
    """Attach exception details to ``record`` and emit it at ``level``."""
    if exc:
        sanitized = _sanitize_for_json(exc.args)
        record.error = LogError(
            name=type(exc).__name__,
            message=str(exc),
            stack_trace="".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            ),
            args=tuple(sanitized) if isinstance(sanitized, list) else (sanitized,),
        )
        if not record.message:
            record.message = str(exc) or "An unspecified error occurred"

    if _logger:
        _logger.log(level=level, msg=record.message, extra={"log_record": record})


def debug(record: LogRecord) -> None:
    _log(logging.DEBUG, record)


def info(record: LogRecord) -> None:
    _log(logging.INFO, record)


def warning(record: LogRecord, exc: Optional[BaseException] = None) -> None:
    _log(logging.WARNING, record, exc=exc)


def error(record: LogRecord, exc: Optional[BaseException] = None) -> None:
    _log(logging.ERROR, record, exc=exc)
