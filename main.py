#!/usr/bin/env python3
"""
AcadCentral Department Portal
Remote mirror service entry point
"""

import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from acadcentral.app import create_app, health_status
from acadcentral.config import get_settings
from acadcentral.database.connection import (
    check_database_health,
    close_database_connections,
    init_database,
)
from acadcentral.utils.helpers import setup_logging

# Configure logging
logger = logging.getLogger(__name__)

# Global app instance
app_instance: Optional[FastAPI] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events"""

    # Startup
    logger.info("🚀 Starting AcadCentral mirror service...")

    # Initialize database; a mirror without its tables cannot serve anything
    await init_database()
    database = await check_database_health()
    if database["status"] != "healthy":
        logger.warning(f"⚠️ Mirror database check failed: {database['database']}")

    logger.info("🎉 Mirror startup complete!")

    yield

    # Shutdown
    logger.info("🛑 Shutting down mirror service...")
    await close_database_connections()
    logger.info("✅ Mirror shutdown complete")


def create_main_app() -> FastAPI:
    """Create the top-level application with the mirror API mounted under /api"""

    settings = get_settings()

    main_app = FastAPI(
        title=settings.APP_NAME,
        description="Remote mirror for the AcadCentral department portal",
        version=settings.VERSION,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan
    )

    # Mount the mirror API
    main_app.mount("/api", create_app())

    # Health check endpoint
    @main_app.get("/health")
    async def health_check():
        """Service health check, same body as /api/health"""
        return health_status()

    return main_app


async def run_server():
    """Run the mirror server"""
    settings = get_settings()

    config = uvicorn.Config(
        app=app_instance,
        host=settings.HOST,
        port=settings.PORT,
        log_level="info" if settings.DEBUG else "warning",
        access_log=settings.DEBUG,
        loop="asyncio"
    )

    server = uvicorn.Server(config)
    await server.serve()


def main():
    """Main entry point"""
    # Setup logging
    setup_logging()

    settings = get_settings()
    logger.info(f"Starting mirror in {settings.ENVIRONMENT} mode on port {settings.PORT}")

    try:
        asyncio.run(run_server())
    except KeyboardInterrupt:
        logger.info("Mirror stopped by user")
    except Exception as e:
        logger.error(f"Mirror failed to start: {e}")
        sys.exit(1)


# Create app instance for uvicorn
app_instance = create_main_app()

if __name__ == "__main__":
    main()
