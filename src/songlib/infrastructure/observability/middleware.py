"""HTTP middleware that ties every request to a correlation id and logs its outcome."""

import logging
import time
from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from songlib.infrastructure.observability.logging import (
    get_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


# Hey future me, this wraps the whole router stack. The correlation id is pinned first so
# every log line below (service, repository, provider client) carries it, and it goes back
# out in the response header for the client to quote in bug reports.
class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line when a request arrives and one when it is answered."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        """Pin the correlation id, run the request and log the result.

        Args:
            request: Incoming request
            call_next: Rest of the ASGI chain

        Returns:
            The downstream response with the correlation header set
        """
        set_correlation_id(request.headers.get(CORRELATION_HEADER))
        fields = {"method": request.method, "path": request.url.path}

        logger.info(
            "→ %s %s",
            request.method,
            request.url.path,
            extra={
                **fields,
                "query_params": str(request.query_params),
                "client_ip": request.client.host if request.client else "unknown",
            },
        )

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "Unhandled error in %s %s",
                request.method,
                request.url.path,
                extra={
                    **fields,
                    "duration_ms": _elapsed_ms(started),
                    "error_type": type(e).__name__,
                },
            )
            raise

        duration_ms = _elapsed_ms(started)
        logger.info(
            "%s %s %s → %d (%dms)",
            "✓" if response.status_code < 400 else "✗",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
            extra={**fields, "status_code": response.status_code, "duration_ms": duration_ms},
        )

        response.headers[CORRELATION_HEADER] = get_correlation_id()
        return response
