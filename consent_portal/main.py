"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from consent_portal import __version__
from consent_portal.api.v1.router import api_router
from consent_portal.core.config import settings
from consent_portal.core.logging import setup_logging
from consent_portal.db.init_db import create_tables, init_db
from consent_portal.db.session import AsyncSessionLocal
from consent_portal.middleware.api_key import APIKeyMiddleware
from consent_portal.middleware.rate_limit import RateLimitMiddleware

# Setup logging
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown events."""
    logger.info(f"Starting Consent Portal API (env={settings.env})")

    if settings.init_db_on_startup and settings.is_dev:
        logger.info("Initializing database...")
        await create_tables()
        async with AsyncSessionLocal() as session:
            await init_db(session)

    yield

    logger.info("Shutting down Consent Portal API")


# Create FastAPI application
app = FastAPI(
    title="Consent Portal API",
    description="Patient consent management for federated learning research",
    version=__version__,
    docs_url="/docs" if settings.is_dev else None,
    redoc_url="/redoc" if settings.is_dev else None,
    openapi_url="/openapi.json" if settings.is_dev else None,
    lifespan=lifespan,
)

# Rate limiting runs inside the API key gate
app.add_middleware(RateLimitMiddleware, enabled=settings.rate_limit_enabled)

app.add_middleware(APIKeyMiddleware, api_key=settings.public_api_key)

# CORS middleware (configure appropriately for production)
if settings.is_dev:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://localhost:5173"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions."""
    logger.exception(f"Unhandled exception: {exc}")

    # Don't expose internal errors in production
    if settings.is_prod:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": str(exc)},
    )


# Include API router
app.include_router(api_router, prefix="/api/v1")


# Root endpoint
@app.get("/", include_in_schema=False)
async def root() -> dict:
    """Service information."""
    return {
        "service": "Consent Portal API",
        "version": __version__,
        "docs": "/docs" if settings.is_dev else "Disabled in production",
    }
