"""Unit tests for RequestLoggingMiddleware."""

from unittest.mock import patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from songlib.infrastructure.observability.logging import get_correlation_id
from songlib.infrastructure.observability.middleware import (
    CORRELATION_HEADER,
    RequestLoggingMiddleware,
)


class TestRequestLoggingMiddleware:
    """Test suite for RequestLoggingMiddleware."""

    @pytest.fixture
    def app(self) -> FastAPI:
        """Create a FastAPI app with middleware for testing."""
        app = FastAPI()
        app.add_middleware(RequestLoggingMiddleware)

        @app.get("/test")
        async def test_endpoint():
            return {"correlation_id": get_correlation_id()}

        @app.get("/error")
        async def error_endpoint():
            raise RuntimeError("Test error")

        return app

    @pytest.fixture
    def client(self, app: FastAPI) -> TestClient:
        """Create a test client."""
        return TestClient(app)

    def test_correlation_id_from_header(self, client: TestClient):
        """Test the incoming header is used for the request and echoed back."""
        response = client.get("/test", headers={CORRELATION_HEADER: "abc-123"})

        assert response.json() == {"correlation_id": "abc-123"}
        assert response.headers[CORRELATION_HEADER] == "abc-123"

    def test_correlation_id_generated(self, client: TestClient):
        """Test a fresh id is generated when the client sends none."""
        response = client.get("/test")

        generated = response.headers[CORRELATION_HEADER]
        assert len(generated) == 36
        assert response.json() == {"correlation_id": generated}

    def test_successful_request_logs_completion(self, client: TestClient):
        """Test that requests log start and completion with status and duration."""
        with patch(
            "songlib.infrastructure.observability.middleware.logger"
        ) as mock_logger:
            client.get("/test")

        assert mock_logger.info.call_count == 2
        completion_extra = mock_logger.info.call_args_list[1].kwargs["extra"]
        assert completion_extra["status_code"] == 200
        assert "duration_ms" in completion_extra

    def test_exception_is_logged_and_reraised(self, client: TestClient):
        """Test unhandled exceptions are logged before propagating."""
        with patch(
            "songlib.infrastructure.observability.middleware.logger"
        ) as mock_logger:
            with pytest.raises(RuntimeError):
                client.get("/error")

        mock_logger.exception.assert_called_once()
        assert mock_logger.exception.call_args.kwargs["extra"]["error_type"] == "RuntimeError"
