"""Map catalog exceptions onto HTTP responses.

Hey future me - server-side failures (provider errors, TransactionFailedError,
InternalError, any other DomainException) answer with a FIXED generic message.
Their .message is a diagnostic for the log only; it can mention SQL, table names
or row counts and must never reach the client.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from songlib.domain.exceptions import (
    DomainException,
    EntityNotFoundException,
    ExternalServiceError,
    InternalError,
    TransactionFailedError,
    ValidationException,
)

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "Internal server error"
GENERIC_CREATE_ERROR = "Failed to add song"
GENERIC_PROVIDER_ERROR = "Music info provider is unavailable"

# exception type → (status, body detail). Starlette picks the handler along the
# exception's MRO, so subclasses like ProviderBadResponseError land on their base.
SERVER_SIDE_ERRORS: dict[type[DomainException], tuple[int, str]] = {
    ExternalServiceError: (status.HTTP_502_BAD_GATEWAY, GENERIC_PROVIDER_ERROR),
    TransactionFailedError: (status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_CREATE_ERROR),
    InternalError: (status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_SERVER_ERROR),
    DomainException: (status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_SERVER_ERROR),
}


def _detail(status_code: int, detail: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail})


# exc.errors() may hold the raw body as bytes under "input" (malformed JSON), and
# JSONResponse can't serialize bytes or exception objects.
def _sanitize_validation_errors(
    errors: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Make pydantic validation errors JSON-safe.

    Args:
        errors: Output of RequestValidationError.errors()

    Returns:
        Same structure with bytes decoded, tuples turned into lists and
        exceptions turned into their message
    """

    def clean(value: Any) -> Any:
        if isinstance(value, bytes):
            return value.decode("utf-8", errors="replace")
        if isinstance(value, dict):
            return {key: clean(item) for key, item in value.items()}
        if isinstance(value, list | tuple):
            return [clean(item) for item in value]
        if isinstance(value, Exception):
            return str(value)
        return value

    return [clean(error) for error in errors]


def _server_side_handler(status_code: int, detail: str) -> Any:
    async def handler(request: Request, exc: DomainException) -> JSONResponse:
        logger.error(
            "%s at %s: %s",
            type(exc).__name__,
            request.url.path,
            exc.message,
            exc_info=exc,
            extra={
                "path": request.url.path,
                "error": exc.message,
                "error_type": type(exc).__name__,
            },
        )
        return _detail(status_code, detail)

    return handler


# Listen future me, call this once in create_app() before the router is mounted.
def register_exception_handlers(app: FastAPI) -> None:
    """Install the handlers that translate exceptions into status codes.

    Client-side errors (ValidationException, EntityNotFoundException) echo their
    message. Server-side ones, including stray ValueErrors, answer with a generic
    text.

    Args:
        app: Application to register on
    """

    @app.exception_handler(ValidationException)
    async def validation_exception_handler(
        request: Request, exc: ValidationException
    ) -> JSONResponse:
        logger.warning(
            "Rejected request to %s: %s",
            request.url.path,
            exc.message,
            extra={"path": request.url.path, "error": exc.message},
        )
        return _detail(status.HTTP_400_BAD_REQUEST, exc.message)

    # Routers turn value-object ValueErrors into ValidationException, so one reaching
    # here came from somewhere unexpected and its text is not meant for the client.
    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        logger.error(
            "Unexpected ValueError at %s: %s",
            request.url.path,
            exc,
            exc_info=exc,
            extra={"path": request.url.path, "error_type": type(exc).__name__},
        )
        return _detail(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_SERVER_ERROR)

    @app.exception_handler(EntityNotFoundException)
    async def not_found_handler(
        request: Request, exc: EntityNotFoundException
    ) -> JSONResponse:
        logger.info(
            "%s %s not found (%s)",
            exc.entity_type,
            exc.entity_id,
            request.url.path,
            extra={
                "path": request.url.path,
                "entity_type": exc.entity_type,
                "entity_id": exc.entity_id,
            },
        )
        return _detail(status.HTTP_404_NOT_FOUND, exc.message)

    for exc_type, (status_code, detail) in SERVER_SIDE_ERRORS.items():
        app.add_exception_handler(exc_type, _server_side_handler(status_code, detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = _sanitize_validation_errors(list(exc.errors()))
        logger.warning(
            "Malformed request to %s: %s",
            request.url.path,
            errors,
            extra={"path": request.url.path, "errors": errors},
        )
        return _detail(status.HTTP_422_UNPROCESSABLE_ENTITY, errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.info
        log(
            "HTTP %d at %s: %s",
            exc.status_code,
            request.url.path,
            exc.detail,
            extra={"path": request.url.path, "status_code": exc.status_code},
        )
        return _detail(exc.status_code, exc.detail)
