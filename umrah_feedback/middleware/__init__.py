"""
Middleware modules for the feedback API.

- Correlation ID tracking for request tracing and log context
- CORS policy that leaves the analysis function's own headers alone
"""

from .correlation import (
    CorrelationIdMiddleware,
    CorrelationLogFilter,
    correlation_id_ctx,
    request_id_ctx,
)
from .cors import FunctionAwareCORSMiddleware

__all__ = [
    "CorrelationIdMiddleware",
    "CorrelationLogFilter",
    "FunctionAwareCORSMiddleware",
    "correlation_id_ctx",
    "request_id_ctx",
]
