"""
Request ids for log lines and error responses.

Each request gets a request id (``X-Request-ID``, generated when the client
sends none) and a correlation id (``X-Correlation-ID``, kept across a
dashboard session). Both are bound to context variables for the duration
of the request, stamped on every log record, and echoed on the response.
Error bodies carry the request id as ``X-Trace-ID``.
"""

import uuid
import logging
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"
UNKNOWN_ID = "unknown"

correlation_id_ctx: ContextVar[str] = ContextVar("correlation_id", default="")
request_id_ctx: ContextVar[str] = ContextVar("request_id", default="")


def generate_id() -> str:
    return uuid.uuid4().hex[:12]


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Binds request and correlation ids while the request is handled."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_id()
        correlation_id = request.headers.get(CORRELATION_ID_HEADER) or request_id

        request_token = request_id_ctx.set(request_id)
        correlation_token = correlation_id_ctx.set(correlation_id)
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(request_token)
            correlation_id_ctx.reset(correlation_token)

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response


def get_correlation_id() -> str:
    return correlation_id_ctx.get() or UNKNOWN_ID


def get_request_id() -> str:
    return request_id_ctx.get() or UNKNOWN_ID


class CorrelationLogFilter(logging.Filter):
    """Adds ``request_id`` and ``correlation_id`` to every record for the log format."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        record.correlation_id = get_correlation_id()
        return True
