"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.dependencies import get_health_monitor
from .api.errors import register_exception_handlers
from .api.routes import addresses, geofences, health, hotspots, routes
from .config import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    monitor = None
    if settings.maps_api_key and settings.health_check_interval_seconds > 0:
        monitor = get_health_monitor()
        monitor.start()
    else:
        logger.info("Periodic health monitor disabled")
    try:
        yield
    finally:
        if monitor is not None:
            monitor.stop()


def create_app() -> FastAPI:
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    if settings.frontend_allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(settings.frontend_allowed_origins),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    register_exception_handlers(app)

    # Root endpoint for diagnostics
    @app.get("/")
    def root():
        return {
            "service": settings.app_name,
            "status": "running",
            "api_prefix": settings.api_prefix,
            "health": f"{settings.api_prefix}/health",
            "docs": "/docs",
        }

    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(addresses.router, prefix=settings.api_prefix)
    app.include_router(routes.router, prefix=settings.api_prefix)
    app.include_router(geofences.router, prefix=settings.api_prefix)
    app.include_router(hotspots.router, prefix=settings.api_prefix)
    return app


app = create_app()
