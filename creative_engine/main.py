"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, cast

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from creative_engine.api.v1.router import api_router
from creative_engine.config import settings
from creative_engine.core.database import close_db, init_db
from creative_engine.core.logging import setup_logging
from creative_engine.services.container import build_services

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    setup_logging()

    logger.info(
        "Starting Creative Engine",
        extra={
            "environment": settings.environment,
            "version": settings.app_version,
            "spec_cache_ttl_hours": settings.spec_cache_ttl_hours,
        },
    )

    if settings.environment == "development":
        await init_db()
        logger.info("Development database initialized")

    app.state.services = build_services()

    yield

    logger.info("Shutting down Creative Engine")
    await close_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "Creative performance analysis, platform policy validation and "
            "test/scale/pause lifecycle tracking for ad creatives"
        ),
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        cast(Any, CORSMiddleware),
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.api_v1_prefix)

    @app.get(
        "/health",
        summary="Health check",
        description="Return service health status and backend version information.",
    )
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()
