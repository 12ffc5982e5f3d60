"""
Unit tests for Logfire middleware.

This test suite covers:
- Request/response processing
- Timing header injection
- Error tracking
- Slow request detection
"""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import Request
from starlette.responses import Response

from conductor.server.middleware.logfire_middleware import SLOW_REQUEST_MS, LogfireMiddleware


@pytest.fixture
def mock_request():
    request = AsyncMock(spec=Request)
    request.method = "GET"
    request.url.path = "/api/v1/commons/catalog"
    request.state = MagicMock()
    return request


class TestLogfireMiddlewareDispatch:
    """Test LogfireMiddleware.dispatch method."""

    @pytest.mark.asyncio
    async def test_middleware_processes_successful_request(self, mock_request):
        """Test that middleware reports successful requests."""

        async def call_next(request):
            return Response(content="ok", status_code=200)

        middleware = LogfireMiddleware(app=AsyncMock())

        with patch("conductor.server.middleware.logfire_middleware.log_api_request") as mock_log:
            response = await middleware.dispatch(mock_request, call_next)

        assert response.status_code == 200
        mock_log.assert_called_once()
        assert mock_log.call_args[1]["method"] == "GET"
        assert mock_log.call_args[1]["path"] == "/api/v1/commons/catalog"
        assert mock_log.call_args[1]["status_code"] == 200
        assert mock_log.call_args[1]["duration_ms"] >= 0

    @pytest.mark.asyncio
    async def test_middleware_adds_process_time_header(self, mock_request):
        """Test that middleware adds the X-Process-Time header."""

        async def call_next(request):
            return Response(content="ok", status_code=201)

        middleware = LogfireMiddleware(app=AsyncMock())

        with patch("conductor.server.middleware.logfire_middleware.log_api_request"):
            response = await middleware.dispatch(mock_request, call_next)

        assert float(response.headers["X-Process-Time"]) >= 0

    @pytest.mark.asyncio
    async def test_middleware_reports_failed_request(self, mock_request):
        """Test that an exception is logged as a 500 and re-raised."""

        async def call_next(request):
            raise RuntimeError("boom")

        middleware = LogfireMiddleware(app=AsyncMock())

        with (
            patch("conductor.server.middleware.logfire_middleware.log_api_request") as mock_log,
            patch("conductor.server.middleware.logfire_middleware.logger") as mock_logger,
        ):
            with pytest.raises(RuntimeError):
                await middleware.dispatch(mock_request, call_next)

        assert mock_log.call_args[1]["status_code"] == 500
        mock_logger.error.assert_called_once()

    @pytest.mark.asyncio
    async def test_middleware_warns_on_slow_request(self, mock_request):
        """Test that requests slower than the threshold are logged as warnings."""

        async def call_next(request):
            return Response(content="ok", status_code=200)

        middleware = LogfireMiddleware(app=AsyncMock())
        start = 1000.0
        times = iter([start, start + (SLOW_REQUEST_MS + 500) / 1000])

        with (
            patch("conductor.server.middleware.logfire_middleware.log_api_request"),
            patch("conductor.server.middleware.logfire_middleware.logger") as mock_logger,
            patch("conductor.server.middleware.logfire_middleware.time.time", side_effect=lambda: next(times)),
        ):
            await middleware.dispatch(mock_request, call_next)

        mock_logger.warning.assert_called_once()
        assert "Slow API request" in mock_logger.warning.call_args[0][0]
