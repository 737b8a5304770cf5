"""FastAPI application entry point for the schemacheck API.

This module creates and configures the FastAPI application with the usage
oracle injected at startup and structured request logging.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..core import StructlogMiddleware, configure_logging, get_logger
from ..core.config import Settings, get_settings
from ..usage import create_usage_oracle
from .check.router import router as check_router
from .dependencies import get_usage_oracle_unsafe, set_usage_oracle
from .health.router import router as health_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the usage oracle on startup and release it on shutdown."""
    settings = get_settings()
    configure_logging(
        environment=settings.environment,
        log_level=settings.log_level,
        json_logs=settings.json_logs or settings.is_production,
    )

    if get_usage_oracle_unsafe() is None:
        try:
            oracle = create_usage_oracle(settings.usage)
        except Exception as e:
            logger.error("Failed to initialize usage oracle", error=str(e))
            raise
        set_usage_oracle(oracle)

    logger.info(
        "schemacheck API started",
        environment=settings.environment,
        usage_backend=settings.usage.backend_type,
    )

    yield

    logger.info("Shutting down schemacheck API")
    set_usage_oracle(None)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = settings or get_settings()

    app = FastAPI(
        title="schemacheck API",
        description="""
        Usage-aware validation of API schema changes.

        **Features:**
        - Structural diff of two schema versions
        - Severity classification informed by recorded field usage
        - Deterministic, ordered results for CI
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )

    if settings.log_requests:
        app.add_middleware(StructlogMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health_router, tags=["health"])
    app.include_router(check_router, tags=["check"])

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint with API information."""
        return {
            "name": "schemacheck API",
            "version": __version__,
            "status": "running",
            "docs": "/docs",
            "health": "/health",
            "check": "/check",
        }

    return app


def run() -> None:
    """Serve the API with uvicorn using configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
