"""Observability infrastructure for structured logging."""

from songlib.infrastructure.observability.logging import (
    RequestLoggerAdapter,
    configure_logging,
    get_correlation_id,
    get_request_logger,
    set_correlation_id,
)
from songlib.infrastructure.observability.middleware import RequestLoggingMiddleware

__all__ = [
    "RequestLoggerAdapter",
    "RequestLoggingMiddleware",
    "configure_logging",
    "get_correlation_id",
    "get_request_logger",
    "set_correlation_id",
]
