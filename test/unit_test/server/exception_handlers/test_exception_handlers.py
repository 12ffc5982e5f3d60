"""
Unit tests for server exception handlers.

Tests cover the Conductor error envelope for service errors, request
validation failures and unhandled exceptions.
"""

import json
from unittest.mock import Mock, patch

import pytest
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from conductor.core.errors import CONDUCTOR_ERRORS, ConductorError, conflict, not_found, service_unavailable
from conductor.server.exception_handlers import setup_exception_handlers
from conductor.server.exception_handlers.global_handler import (
    conductor_error_handler,
    global_exception_handler,
    validation_exception_handler,
)

HANDLER = "conductor.server.exception_handlers.global_handler"


def _body(response: JSONResponse) -> dict:
    return json.loads(response.body)


@pytest.fixture
def mock_request():
    """Create a mock request object."""
    request = Mock(spec=Request)
    request.method = "GET"
    request.url.path = "/api/v1/commons/catalog"
    request.query_params = {"sort": "title"}
    request.client = Mock()
    request.client.host = "127.0.0.1"
    return request


class TestGlobalExceptionHandler:
    """Test suite for global exception handler."""

    @pytest.mark.asyncio
    async def test_exception_handler_logs_error(self, mock_request):
        """Test that exception handler logs errors with request context."""
        exc = ValueError("Test error")

        with patch(f"{HANDLER}.logger") as mock_logger, patch(f"{HANDLER}.log_error") as mock_log_error:
            await global_exception_handler(mock_request, exc)

        mock_logger.error.assert_called_once()
        call_args = mock_logger.error.call_args
        assert "Unhandled exception" in call_args[0][0]
        extra = call_args[1]["extra"]
        assert extra["error_type"] == "ValueError"
        assert extra["path"] == "/api/v1/commons/catalog"
        assert extra["query_params"] == {"sort": "title"}
        assert extra["client"] == "127.0.0.1"
        mock_log_error.assert_called_once()
        assert mock_log_error.call_args[0][:2] == ("ValueError", "Test error")

    @pytest.mark.asyncio
    async def test_exception_handler_returns_envelope(self, mock_request):
        """Test that unhandled errors render as err6 with an error ID."""
        exc = RuntimeError("Test error")

        with patch(f"{HANDLER}.logger"), patch(f"{HANDLER}.log_error"):
            response = await global_exception_handler(mock_request, exc)

        assert isinstance(response, JSONResponse)
        assert response.status_code == 500
        body = _body(response)
        assert body["err"] is True
        assert body["errCode"] == "err6"
        assert body["errMsg"] == CONDUCTOR_ERRORS["err6"]
        assert body["error_id"] == id(exc)
        assert body["error_type"] == "RuntimeError"

    @pytest.mark.asyncio
    async def test_exception_handler_without_client(self, mock_request):
        mock_request.client = None

        with patch(f"{HANDLER}.logger") as mock_logger, patch(f"{HANDLER}.log_error"):
            await global_exception_handler(mock_request, KeyError("missing"))

        assert mock_logger.error.call_args[1]["extra"]["client"] == "unknown"


class TestConductorErrorHandler:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "exc, status, code",
        [
            (not_found(), 404, "err11"),
            (service_unavailable(), 503, "err16"),
            (ConductorError("err77", 400), 400, "err77"),
        ],
    )
    async def test_renders_status_and_code(self, mock_request, exc, status, code):
        with patch(f"{HANDLER}.logger"):
            response = await conductor_error_handler(mock_request, exc)

        assert response.status_code == status
        body = _body(response)
        assert body == {"err": True, "errMsg": CONDUCTOR_ERRORS[code], "errCode": code}

    @pytest.mark.asyncio
    async def test_conflict_has_message_only(self, mock_request):
        with patch(f"{HANDLER}.logger"):
            response = await conductor_error_handler(mock_request, conflict("A batch job is already running."))

        assert response.status_code == 409
        assert _body(response) == {"err": True, "errMsg": "A batch job is already running."}

    @pytest.mark.asyncio
    async def test_server_errors_logged_as_errors(self, mock_request):
        with patch(f"{HANDLER}.logger") as mock_logger:
            await conductor_error_handler(mock_request, service_unavailable())
            await conductor_error_handler(mock_request, not_found())

        mock_logger.error.assert_called_once()
        mock_logger.debug.assert_called_once()

    @pytest.mark.asyncio
    async def test_details_merged_into_body(self, mock_request):
        exc = ConductorError("err1", 400, details={"field": "title"})

        with patch(f"{HANDLER}.logger"):
            response = await conductor_error_handler(mock_request, exc)

        assert _body(response)["field"] == "title"


class TestValidationExceptionHandler:
    @pytest.mark.asyncio
    async def test_validation_error_is_err1(self, mock_request):
        exc = RequestValidationError([{"loc": ("body", "title"), "msg": "Field required", "type": "missing"}])

        with patch(f"{HANDLER}.logger"):
            response = await validation_exception_handler(mock_request, exc)

        assert response.status_code == 400
        body = _body(response)
        assert body["errCode"] == "err1"
        assert body["errMsg"] == CONDUCTOR_ERRORS["err1"]
        assert body["errors"][0]["loc"] == ["body", "title"]


class TestSetupExceptionHandlers:
    """Test suite for setup_exception_handlers."""

    def test_setup_registers_all_handlers(self):
        app = FastAPI()

        setup_exception_handlers(app)

        assert app.exception_handlers[ConductorError] is conductor_error_handler
        assert app.exception_handlers[RequestValidationError] is validation_exception_handler
        assert app.exception_handlers[Exception] is global_exception_handler
