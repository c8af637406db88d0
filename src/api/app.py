"""
FastAPI Application Factory.

Usage:
    # Development
    uvicorn api.app:create_app --factory --reload

    # Production
    uvicorn api.app:app --host 0.0.0.0 --port 8080 --workers 4

    # Or use the convenience function
    from api.app import create_app
    app = create_app()
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import get_settings
from core.logging import configure_logging_from_settings, get_logger
from core.middleware import RequestTracingMiddleware
from scoring.tables import get_compatibility_tables


logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.

    Runs on startup:
    - Initialize logging
    - Load the compatibility tables (fails fast on a broken table file)
    """
    settings = get_settings()

    configure_logging_from_settings(settings)

    logger.info(
        "Starting outfit rating API",
        environment=settings.environment,
        host=settings.host,
        port=settings.port,
    )

    tables = get_compatibility_tables()
    logger.info("Compatibility tables ready", version=tables.version)

    yield  # Application is running

    logger.info("Shutting down outfit rating API")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application
    """
    settings = get_settings()

    app = FastAPI(
        title="Outfit Rating API",
        description="""
        Table-driven compatibility scoring for outfits picked from a wardrobe.

        ## Main Endpoints

        - `POST /api/outfits/rate` - Score an outfit with feedback
        - `POST /api/outfits/alternatives` - Suggest swaps for the weakest piece
        - `GET /api/outfits/tables` - Loaded table metadata

        ## Health Checks

        - `/health` - Basic health check
        - `/health/detailed` - Detailed health with table status
        - `/ready` - Kubernetes readiness probe
        - `/live` - Kubernetes liveness probe
        """,
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # =========================================================================
    # Middleware (order matters - first added = outermost)
    # =========================================================================

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request tracing (adds X-Request-ID, logs timing)
    app.add_middleware(RequestTracingMiddleware)

    # =========================================================================
    # Routes
    # =========================================================================

    from api.routes.health import router as health_router
    app.include_router(health_router, tags=["Health"])

    from api.routes.outfits import router as outfits_router
    app.include_router(outfits_router)

    return app


# Create default app instance for uvicorn
# Usage: uvicorn api.app:app
app = create_app()
