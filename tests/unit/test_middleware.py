"""Unit tests for middleware."""
import pytest
import structlog
from unittest.mock import Mock

from app.middleware.logging import LoggingMiddleware, resolve_request_id


def make_request(method="POST", path="/api/v1/checkin", headers=None):
    mock_request = Mock()
    mock_request.state = Mock()
    mock_request.method = method
    mock_request.url = Mock()
    mock_request.url.path = path
    mock_request.client = Mock()
    mock_request.client.host = "127.0.0.1"
    mock_request.query_params = {}
    mock_request.headers = headers or {}
    return mock_request


def make_response(status_code=200):
    mock_response = Mock()
    mock_response.headers = {}
    mock_response.status_code = status_code
    return mock_response


@pytest.mark.unit
class TestLoggingMiddleware:
    """Test logging middleware."""

    @pytest.mark.asyncio
    async def test_request_id_added_to_state_and_headers(self):
        mock_request = make_request()
        mock_response = make_response()

        async def mock_call_next(request):
            # request_id is available to handlers
            assert isinstance(request.state.request_id, str)
            return mock_response

        middleware = LoggingMiddleware(Mock())
        response = await middleware.dispatch(mock_request, mock_call_next)

        assert response.headers["X-Request-ID"] == mock_request.state.request_id

    @pytest.mark.asyncio
    async def test_request_ids_are_unique(self):
        middleware = LoggingMiddleware(Mock())
        ids = set()

        for _ in range(5):
            mock_request = make_request()
            mock_response = make_response()

            async def mock_call_next(request):
                return mock_response

            await middleware.dispatch(mock_request, mock_call_next)
            ids.add(mock_request.state.request_id)

        assert len(ids) == 5

    @pytest.mark.asyncio
    async def test_scanner_id_bound_to_log_context(self):
        mock_request = make_request(headers={"X-Scanner-ID": "door-3"})
        seen = {}

        async def mock_call_next(request):
            seen.update(structlog.contextvars.get_contextvars())
            return make_response(409)

        middleware = LoggingMiddleware(Mock())
        await middleware.dispatch(mock_request, mock_call_next)

        assert seen["scanner_id"] == "door-3"
        assert seen["path"] == "/api/v1/checkin"
        assert seen["request_id"] == mock_request.state.request_id

    @pytest.mark.asyncio
    async def test_exception_is_reraised(self):
        mock_request = make_request()

        async def mock_call_next(request):
            raise RuntimeError("boom")

        middleware = LoggingMiddleware(Mock())

        with pytest.raises(RuntimeError, match="boom"):
            await middleware.dispatch(mock_request, mock_call_next)

    @pytest.mark.asyncio
    async def test_caller_request_id_is_reused(self):
        """A scanner retrying a request can keep its original request id."""
        mock_request = make_request(headers={"X-Request-ID": "scan-7f3a-retry"})
        mock_response = make_response(409)

        async def mock_call_next(request):
            return mock_response

        middleware = LoggingMiddleware(Mock())
        response = await middleware.dispatch(mock_request, mock_call_next)

        assert mock_request.state.request_id == "scan-7f3a-retry"
        assert response.headers["X-Request-ID"] == "scan-7f3a-retry"


@pytest.mark.unit
class TestResolveRequestId:

    def test_usable_id_kept(self):
        assert resolve_request_id("  abc-123 ") == "abc-123"

    @pytest.mark.parametrize("incoming", [None, "", "   ", "x" * 129, "bad\nid"])
    def test_unusable_id_replaced(self, incoming):
        request_id = resolve_request_id(incoming)

        assert request_id != incoming
        assert len(request_id) == 36
