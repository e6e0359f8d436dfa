"""
Tests for request and correlation id propagation.
"""

import logging
import pytest

from umrah_feedback.middleware.correlation import CorrelationLogFilter, request_id_ctx


class TestCorrelationIds:
    """Ids echoed on responses and reused as error trace ids."""

    @pytest.mark.asyncio
    async def test_client_ids_echoed(self, client):
        response = await client.get(
            "/health",
            headers={"X-Request-ID": "req-123", "X-Correlation-ID": "session-9"},
        )

        assert response.headers["x-request-id"] == "req-123"
        assert response.headers["x-correlation-id"] == "session-9"

    @pytest.mark.asyncio
    async def test_ids_generated_when_absent(self, client):
        response = await client.get("/health")

        request_id = response.headers["x-request-id"]
        assert len(request_id) == 12
        assert response.headers["x-correlation-id"] == request_id

    @pytest.mark.asyncio
    async def test_error_trace_id_is_request_id(self, client):
        response = await client.get(
            "/api/v2/functions/analyse_surveys",
            headers={"X-Request-ID": "req-401"},
        )

        assert response.status_code == 401
        assert response.headers["x-trace-id"] == "req-401"

    @pytest.mark.asyncio
    async def test_context_cleared_after_request(self, client):
        await client.get("/health", headers={"X-Request-ID": "req-123"})

        assert request_id_ctx.get() == ""


class TestCorrelationLogFilter:
    """Log records carry the ids the log format expects."""

    def _record(self):
        return logging.LogRecord("test", logging.INFO, __file__, 1, "message", None, None)

    def test_outside_request(self):
        record = self._record()

        assert CorrelationLogFilter().filter(record) is True
        assert record.request_id == "unknown"
        assert record.correlation_id == "unknown"

    def test_inside_request(self):
        token = request_id_ctx.set("req-5")
        try:
            record = self._record()
            CorrelationLogFilter().filter(record)
        finally:
            request_id_ctx.reset(token)

        assert record.request_id == "req-5"
