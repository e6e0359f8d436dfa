"""
Error taxonomy and JSON error handling.

Every failure leaving the API is rendered as ``{"error": "<message>"}``
with a non-2xx status. The machine-readable code and a trace id travel in
response headers so clients keep the simple body shape.
"""

from typing import Optional, Dict
from enum import Enum
from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import uuid
from datetime import datetime

logger = logging.getLogger(__name__)


def _get_trace_id() -> str:
    """Get trace ID from correlation context or generate a new one."""
    from umrah_feedback.middleware.correlation import UNKNOWN_ID, get_request_id

    request_id = get_request_id()
    if request_id and request_id != UNKNOWN_ID:
        return request_id
    return str(uuid.uuid4())[:12]


class ErrorCode(str, Enum):
    """Standardized error codes for the feedback API."""

    # Authentication & Authorization
    AUTHORIZATION_MISSING = "AUTH_001"
    UNAUTHORIZED = "AUTH_002"
    FORBIDDEN = "AUTH_003"

    # Validation
    VALIDATION_ERROR = "VAL_001"

    # Resource
    NOT_FOUND = "RES_001"
    CONFLICT = "RES_002"

    # Storage
    CORPUS_FETCH_FAILED = "DB_001"
    SNAPSHOT_DELETE_FAILED = "DB_002"
    SNAPSHOT_INSERT_FAILED = "DB_003"

    # Server
    INTERNAL_ERROR = "SRV_001"


class FeedbackAPIError(HTTPException):
    """
    Base exception for the feedback API.

    Usage:
        raise FeedbackAPIError(
            status_code=404,
            code=ErrorCode.NOT_FOUND,
            detail="Survey not found",
        )
    """

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        detail: str,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.code = code
        self.trace_id = _get_trace_id()
        self.timestamp = datetime.utcnow().isoformat() + "Z"
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class AuthorizationMissingError(FeedbackAPIError):
    """No bearer token on the request (401). Raised before any data access."""

    def __init__(self, detail: str = "Missing authorization header"):
        super().__init__(
            status_code=401,
            code=ErrorCode.AUTHORIZATION_MISSING,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class UnauthorizedError(FeedbackAPIError):
    """Bearer token present but unusable (401)."""

    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=401,
            code=ErrorCode.UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class ForbiddenError(FeedbackAPIError):
    """Permission denied (403)."""

    def __init__(self, detail: str = "Permission denied"):
        super().__init__(status_code=403, code=ErrorCode.FORBIDDEN, detail=detail)


class NotFoundError(FeedbackAPIError):
    """Resource not found (404)."""

    def __init__(self, resource: str, resource_id: str):
        super().__init__(
            status_code=404,
            code=ErrorCode.NOT_FOUND,
            detail=f"{resource} with ID {resource_id} was not found",
        )


class ConflictError(FeedbackAPIError):
    """Resource conflict (409)."""

    def __init__(self, detail: str):
        super().__init__(status_code=409, code=ErrorCode.CONFLICT, detail=detail)


class StorageError(FeedbackAPIError):
    """A storage call failed. The underlying exception is kept on ``cause``."""

    def __init__(self, code: ErrorCode, detail: str, cause: Optional[BaseException] = None):
        self.cause = cause
        if cause is not None:
            detail = f"{detail}: {cause}"
        super().__init__(status_code=500, code=code, detail=detail)


class CorpusFetchError(StorageError):
    """Reading survey records failed; nothing is analysed or written."""

    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__(ErrorCode.CORPUS_FETCH_FAILED, "Failed to fetch surveys", cause)


class SnapshotDeleteError(StorageError):
    """Clearing prior trend rows failed. Logged, never surfaced."""

    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__(ErrorCode.SNAPSHOT_DELETE_FAILED, "Failed to clear previous trend history", cause)


class SnapshotInsertError(StorageError):
    """Writing the new trend snapshot failed; the run as a whole failed."""

    def __init__(self, cause: Optional[BaseException] = None):
        super().__init__(ErrorCode.SNAPSHOT_INSERT_FAILED, "Failed to save trend history", cause)


# Exception handlers for FastAPI

def error_response(
    status_code: int,
    message: str,
    code: ErrorCode = ErrorCode.INTERNAL_ERROR,
    trace_id: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Render the uniform ``{"error": message}`` body."""
    response_headers = {
        "X-Error-Code": code.value,
        "X-Trace-ID": trace_id or _get_trace_id(),
    }
    if headers:
        response_headers.update(headers)
    return JSONResponse(
        status_code=status_code,
        content={"error": message},
        headers=response_headers,
    )


def render_exception(exc: Exception, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    """Convert any exception into the error body, logging server-side failures."""
    if isinstance(exc, FeedbackAPIError):
        if exc.status_code >= 500:
            logger.error("%s: %s", exc.code.value, exc.detail, exc_info=exc)
        else:
            logger.warning("%s: %s", exc.code.value, exc.detail)
        merged = dict(exc.headers or {})
        merged.update(headers or {})
        return error_response(exc.status_code, str(exc.detail), exc.code, exc.trace_id, merged)

    trace_id = _get_trace_id()
    logger.error("Unhandled exception: %s", exc, exc_info=exc, extra={"trace_id": trace_id})

    from umrah_feedback.config import settings
    message = str(exc) if settings.DEBUG and str(exc) else "An unexpected error occurred"
    return error_response(500, message, ErrorCode.INTERNAL_ERROR, trace_id, headers)


async def handle_feedback_exception(request: Request, exc: FeedbackAPIError) -> JSONResponse:
    return render_exception(exc)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle framework HTTPExceptions (404 routes, 405 methods)."""
    code_map = {
        401: ErrorCode.UNAUTHORIZED,
        403: ErrorCode.FORBIDDEN,
        404: ErrorCode.NOT_FOUND,
        409: ErrorCode.CONFLICT,
        422: ErrorCode.VALIDATION_ERROR,
    }
    code = code_map.get(exc.status_code, ErrorCode.INTERNAL_ERROR)
    return error_response(exc.status_code, str(exc.detail), code, headers=getattr(exc, "headers", None))


async def handle_validation_exception(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Flatten pydantic errors into a single readable message."""
    parts = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        parts.append(f"{field}: {error['msg']}" if field else error["msg"])
    message = "Request validation failed"
    if parts:
        message = f"{message}: {'; '.join(parts)}"
    return error_response(422, message, ErrorCode.VALIDATION_ERROR)


async def handle_generic_exception(request: Request, exc: Exception) -> JSONResponse:
    return render_exception(exc)


def register_exception_handlers(app) -> None:
    """Attach the JSON error handlers to an application."""
    app.add_exception_handler(FeedbackAPIError, handle_feedback_exception)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_exception)
    app.add_exception_handler(Exception, handle_generic_exception)
