"""Main FastAPI application for the weather dashboard."""

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from weather_dashboard.api.endpoints import router as weather_router
from weather_dashboard.api.websocket import router as dashboard_router
from weather_dashboard.config import (
    HOST, PORT, DEBUG, DEFAULT_CITY, OPENWEATHER_API_KEY,
    RATE_LIMIT_ENABLED, RATE_LIMIT_REQUESTS_PER_SECOND
)
from weather_dashboard.logging_config import configure_logging
from weather_dashboard.middleware.rate_limit import RateLimitMiddleware

configure_logging()
logger = logging.getLogger(__name__)

STATIC_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "static")


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    if not OPENWEATHER_API_KEY:
        logger.warning("OPENWEATHER_API_KEY is not set, weather requests will be rejected upstream")
    logger.info(f"Starting Weather Dashboard (default city: {DEFAULT_CITY})")
    try:
        yield
    finally:
        logger.info("Shutting down Weather Dashboard")


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="Weather Dashboard",
        description="Current conditions and 5-day forecast from the OpenWeather API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(
        RateLimitMiddleware,
        calls=RATE_LIMIT_REQUESTS_PER_SECOND,
        enabled=RATE_LIMIT_ENABLED
    )

    app.include_router(weather_router)
    app.include_router(dashboard_router)

    app.mount("/static", StaticFiles(directory=STATIC_PATH), name="static")

    @app.get("/", tags=["root"])
    async def root():
        """Serve the dashboard page."""
        return FileResponse(os.path.join(STATIC_PATH, "index.html"))

    @app.get("/api", tags=["root"])
    async def api_info() -> dict:
        """API information endpoint.

        Returns:
            Basic service information
        """
        return {
            "message": "Weather Dashboard",
            "docs": "/docs",
            "weather": "/weather",
            "dashboard": "/ws/dashboard",
            "health": "/weather/health"
        }

    return app


app = create_app()


def main() -> None:
    """Main entry point for the application."""
    logger.info(f"Starting server on {HOST}:{PORT}")
    uvicorn.run(
        "weather_dashboard.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
        log_level="info" if not DEBUG else "debug"
    )


if __name__ == "__main__":
    main()
