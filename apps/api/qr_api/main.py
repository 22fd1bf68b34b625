"""Query Router - FastAPI application."""

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from qr_api.api.v1.endpoints.routing import get_catalog
from qr_api.api.v1.router import api_router
from qr_api.config import get_settings
from qr_api.observability.logging import configure_logging
from qr_api.observability.otel import setup_telemetry

logger = structlog.get_logger()
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler."""
    # Startup
    configure_logging(settings)
    logger.info("Starting Query Router API", version=settings.app_version)
    setup_telemetry(settings)
    # Fail fast on a misconfigured catalog
    catalog = get_catalog()
    logger.info(
        "Routing catalog ready",
        models=len(catalog.models),
        default_model=catalog.default_model,
    )
    yield
    # Shutdown
    logger.info("Shutting down Query Router API")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Query classification, model recommendation and cost estimation",
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if settings.debug else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router, prefix="/api/v1")


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "healthy", "version": settings.app_version}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs" if settings.debug else "disabled",
    }
