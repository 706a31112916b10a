"""Logging setup for songlib: correlation ids, request loggers and formatters."""

import contextvars
import logging
import sys
import traceback
import uuid
from collections.abc import MutableMapping
from pathlib import Path
from typing import Any

from pythonjsonlogger import jsonlogger

# Hey future me, every request gets a correlation id (from X-Correlation-ID or a fresh UUID)
# that ends up on every log line of that request. contextvars is asyncio-safe - each task
# sees its own value. The default "" covers startup logs and anything outside a request.
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)

REQUEST_LOGGER_NAME = "songlib.requests"

# Libraries that log every connection/request at INFO; only their warnings are kept.
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio", "aiosqlite", "uvicorn.access")

# LogRecord attribute → key in the JSON line.
JSON_RECORD_FIELDS = {
    "levelname": "level",
    "name": "logger",
    "module": "module",
    "funcName": "function",
    "lineno": "line",
}


def get_correlation_id() -> str:
    """Return the correlation id of the running request ("" outside a request)."""
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Pin the correlation id for the current context.

    Args:
        correlation_id: Id to use; a UUID4 is generated when None

    Returns:
        The id now in effect
    """
    value = correlation_id or str(uuid.uuid4())
    correlation_id_var.set(value)
    return value


class CorrelationIdFilter(logging.Filter):
    """Stamp ``correlation_id`` on records that don't carry one yet."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "correlation_id", ""):
            record.correlation_id = get_correlation_id()
        return True


# Hey future me, the stock LoggerAdapter.process() REPLACES a call's extra= with the
# adapter's own (before 3.13's merge_extra). The core logs fields like error_type through
# this adapter, so per-call fields are merged on top of the request context instead.
class RequestLoggerAdapter(logging.LoggerAdapter):  # type: ignore[type-arg]
    """LoggerAdapter that keeps per-call ``extra`` fields next to the request context."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **(kwargs.get("extra") or {})}
        return msg, kwargs


# The request adapter is what the HTTP layer hands to the catalog core. The core never
# calls logging.getLogger() itself - it logs through whatever it was given.
def get_request_logger(
    correlation_id: str | None = None, **context: Any
) -> RequestLoggerAdapter:
    """Build the logger passed explicitly into catalog operations.

    Args:
        correlation_id: Correlation ID to stamp on every record (defaults to the current one)
        **context: Extra fields (path, method, ...) attached to every record

    Returns:
        RequestLoggerAdapter over the ``songlib.requests`` logger
    """
    extra = {"correlation_id": correlation_id or get_correlation_id(), **context}
    return RequestLoggerAdapter(logging.getLogger(REQUEST_LOGGER_NAME), extra)


class CompactExceptionFormatter(logging.Formatter):
    """Human-readable formatter with short exception chains.

    The chain is printed root cause first. Each exception gets one ``╰─►``
    line, followed only by the frames from songlib's own files.
    """

    def formatException(self, ei: Any) -> str:
        exc_value = ei[1]
        if exc_value is None:
            return ""

        chain: list[BaseException] = []
        exc: BaseException | None = exc_value
        while exc is not None and exc not in chain:
            chain.append(exc)
            exc = exc.__cause__ or exc.__context__

        lines: list[str] = []
        for link in reversed(chain):
            lines.append(f"╰─► {type(link).__name__}: {link}")
            lines.extend(self._own_frames(link))
        return "\n".join(lines)

    @staticmethod
    def _own_frames(exc: BaseException) -> list[str]:
        if exc.__traceback__ is None:
            return []
        lines = []
        for frame in traceback.extract_tb(exc.__traceback__):
            if "/site-packages/" in frame.filename or "songlib" not in frame.filename:
                continue
            lines.append(
                f'    File "{Path(frame.filename).name}", line {frame.lineno}, in {frame.name}'
            )
            if frame.line:
                lines.append(f"      {frame.line.strip()}")
        return lines


class CustomJsonFormatter(jsonlogger.JsonFormatter):  # type: ignore[misc]
    """One JSON object per line, with source location and correlation id."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)

        log_record["timestamp"] = self.formatTime(record, self.datefmt)
        for attribute, key in JSON_RECORD_FIELDS.items():
            log_record[key] = getattr(record, attribute)

        correlation_id = getattr(record, "correlation_id", "")
        if correlation_id:
            log_record["correlation_id"] = correlation_id
        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)


# Listen future me, call this ONCE at startup (lifecycle.lifespan does). It replaces the
# root handlers, so tests can call it repeatedly without stacking handlers.
def configure_logging(
    log_level: str = "INFO",
    json_format: bool = False,
    app_name: str = "songlib",
) -> None:
    """Install the stdout handler on the root logger.

    Args:
        log_level: Root level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: JSON lines instead of the compact text format
        app_name: Logged once so the first line says which app started
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.addFilter(CorrelationIdFilter())
    if json_format:
        handler.setFormatter(
            CustomJsonFormatter(
                "%(timestamp)s %(level)s %(name)s %(message)s",
                datefmt="%Y-%m-%dT%H:%M:%S",
            )
        )
    else:
        handler.setFormatter(
            CompactExceptionFormatter(
                fmt="%(asctime)s │ %(levelname)-7s │ %(name)s:%(lineno)d │ %(message)s",
                datefmt="%H:%M:%S",
            )
        )

    root = logging.getLogger()
    for old_handler in list(root.handlers):
        root.removeHandler(old_handler)
    root.addHandler(handler)
    root.setLevel(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger(__name__).info(
        "Logging configured for %s",
        app_name,
        extra={"log_level": log_level, "json_format": json_format},
    )
