"""
Umrah Feedback Insights API - Main Application

- Survey collection for pilgrims
- Problem-trend analysis over free-text answers for administrators
- Conditional API docs (disabled in production by default)
- Logging carries correlation ids, never credentials
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
import logging

from umrah_feedback.api.v2.router import api_router
from umrah_feedback.api.v2 import trends
from umrah_feedback.config import settings
from umrah_feedback.database import init_db
from umrah_feedback.exceptions import register_exception_handlers
from umrah_feedback.middleware.correlation import CorrelationIdMiddleware, CorrelationLogFilter
from umrah_feedback.middleware.cors import FunctionAwareCORSMiddleware

APP_VERSION = "1.0.0"

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
)
for _handler in logging.getLogger().handlers:
    _handler.addFilter(CorrelationLogFilter())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    logger.info("Starting Umrah Feedback API...")
    logger.info("Environment: %s", settings.ENVIRONMENT)
    try:
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        # Exception text may contain the connection string
        logger.error("Database initialization failed: %s", type(e).__name__)
        logger.warning("App starting without database - some features may not work")
    yield
    logger.info("Shutting down Umrah Feedback API...")


docs_url = "/docs" if settings.DOCS_ENABLED else None
redoc_url = "/redoc" if settings.DOCS_ENABLED else None

app = FastAPI(
    title="Umrah Feedback API",
    description="Pilgrim feedback collection and problem-trend analytics",
    version=APP_VERSION,
    docs_url=docs_url,
    redoc_url=redoc_url,
    lifespan=lifespan,
)

allowed_origins = settings.allowed_origins

LEGACY_ANALYSE_PATH = "/functions/v1/analyse_surveys"
FUNCTION_PATHS = ("/api/v2" + trends.ANALYSE_PATH, LEGACY_ANALYSE_PATH)


def install_cors(target: FastAPI, origins: list[str]) -> None:
    """Apply the origin policy to every route except the analysis function."""
    target.add_middleware(
        FunctionAwareCORSMiddleware,
        # The analysis function sends its own wildcard CORS headers
        exempt_paths=FUNCTION_PATHS,
        allow_origins=origins,
        # Bearer tokens only, so wildcard origins never need credentials
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )


install_cors(app, allowed_origins)
app.add_middleware(CorrelationIdMiddleware)

register_exception_handlers(app)

app.include_router(api_router, prefix="/api/v2")

# Old function URL used by deployed clients
app.add_api_route(
    LEGACY_ANALYSE_PATH,
    trends.analyse_surveys,
    methods=["GET", "POST"],
    include_in_schema=False,
)
app.add_api_route(
    LEGACY_ANALYSE_PATH,
    trends.analyse_surveys_preflight,
    methods=["OPTIONS"],
    include_in_schema=False,
)


@app.get("/")
async def root():
    """Root endpoint - API info."""
    response = {
        "name": "Umrah Feedback API",
        "version": APP_VERSION,
        "health": "/health",
    }
    if settings.DOCS_ENABLED:
        response["docs"] = "/docs"
    return response


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": APP_VERSION,
        "environment": settings.ENVIRONMENT,
    }


# For running with uvicorn directly (development only)
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "umrah_feedback.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
