"""Tests for the exception → HTTP status mapping."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from songlib.api.exception_handlers import (
    GENERIC_SERVER_ERROR,
    _sanitize_validation_errors,
    register_exception_handlers,
)
from songlib.domain.exceptions import (
    DomainException,
    EntityNotFoundException,
    InternalError,
    ProviderBadResponseError,
    TransactionFailedError,
    ValidationException,
)

ERRORS = {
    "validation": ValidationException("bad cursor"),
    "not-found": EntityNotFoundException("Song", 3),
    "provider": ProviderBadResponseError("status 503 from http://secret-host", 503),
    "transaction": TransactionFailedError("INSERT INTO group_song failed"),
    "internal": InternalError("SELECT * FROM songs: database is locked"),
    "other": DomainException("something odd in the songs table"),
    "value": ValueError("invalid literal for int() with base 10: 'songs'"),
}


@pytest.fixture
def client() -> TestClient:
    """App whose routes raise each exception kind."""
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/raise/{kind}")
    async def raise_error(kind: str) -> None:
        raise ERRORS[kind]

    return TestClient(app)


@pytest.mark.parametrize(
    ("kind", "status_code"),
    [
        ("validation", 400),
        ("not-found", 404),
        ("provider", 502),
        ("transaction", 500),
        ("internal", 500),
        ("other", 500),
        ("value", 500),
    ],
)
def test_status_codes(client: TestClient, kind: str, status_code: int) -> None:
    """Test each exception kind maps to its status code."""
    assert client.get(f"/raise/{kind}").status_code == status_code


@pytest.mark.parametrize("kind", ["provider", "transaction", "internal", "other", "value"])
def test_server_side_messages_not_leaked(client: TestClient, kind: str) -> None:
    """Test diagnostics of server-side failures never reach the body."""
    body = client.get(f"/raise/{kind}").text

    assert str(ERRORS[kind]) not in body
    assert "songs" not in body and "secret-host" not in body


def test_client_side_messages_are_shown(client: TestClient) -> None:
    """Test validation and not-found messages are meant for the caller."""
    assert client.get("/raise/validation").json() == {"detail": "bad cursor"}
    assert client.get("/raise/not-found").json() == {"detail": "Song with id 3 not found"}
    assert client.get("/raise/internal").json() == {"detail": GENERIC_SERVER_ERROR}


def test_sanitize_validation_errors() -> None:
    """Test bytes inside validation errors are decoded."""
    errors = [{"loc": ("body",), "input": b"{bad json", "ctx": {"raw": [b"x"]}}]

    sanitized = _sanitize_validation_errors(errors)

    assert sanitized[0]["input"] == "{bad json"
    assert sanitized[0]["ctx"] == {"raw": ["x"]}
    assert sanitized[0]["loc"] == ["body"]


def test_stray_value_error_gets_generic_message(client: TestClient) -> None:
    """Test a ValueError outside the value objects answers 500 without its text."""
    response = client.get("/raise/value")

    assert response.json() == {"detail": GENERIC_SERVER_ERROR}
