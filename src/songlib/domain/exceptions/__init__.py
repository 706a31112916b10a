"""Failure kinds raised by the song catalog core."""

from typing import Any


class DomainException(Exception):
    """Root of every catalog failure; carries a diagnostic message."""

    # Hey future me, message is stored as an attribute so handlers can read it without
    # parsing str(exception). Don't raise this directly - always use a subclass so callers
    # (and the HTTP exception handlers) can tell the failure kinds apart.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class EntityNotFoundException(DomainException):
    """No song (or other entity) exists under the given id."""

    # entity_type and entity_id are kept separately so the 404 handler can log them
    # structured. Update/delete raise this when zero rows were affected.
    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(f"{entity_type} with id {entity_id} not found")
        self.entity_type = entity_type
        self.entity_id = entity_id


class ValidationException(DomainException):
    """Raised when an argument is invalid.

    Covers filter columns outside the allowlist, verse indexes out of range,
    bad pagination bounds and updates that name no field. Always raised
    before any query is issued.

    HTTP Status: 400
    """

    pass


class TransactionFailedError(DomainException):
    """The atomic create (group + song + link) could not complete.

    The transaction has been rolled back when this is raised; no partial
    rows are visible.

    HTTP Status: 500
    """

    pass


class InternalError(DomainException):
    """Unexpected persistence failure.

    Also raised when an update or delete by primary key reports more than
    one affected row. The message is diagnostic only and must never be
    sent to the client verbatim.

    HTTP Status: 500
    """

    pass


class ExternalServiceError(DomainException):
    """The external metadata provider call failed.

    HTTP Status: 502 (only reachable with the strict enrichment policy)
    """

    pass


class ProviderUnavailableError(ExternalServiceError):
    """Provider could not be reached (connect error, timeout, not configured)."""

    pass


class ProviderBadResponseError(ExternalServiceError):
    """Provider answered with a non-success status or an unparsable body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


__all__ = [
    "DomainException",
    "EntityNotFoundException",
    "ValidationException",
    "TransactionFailedError",
    "InternalError",
    "ExternalServiceError",
    "ProviderUnavailableError",
    "ProviderBadResponseError",
]
