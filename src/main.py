"""
FastAPI Production Application

Main entry point for the Storefront Admin API.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
import structlog

from src.config import get_settings
from src.config.logging import configure_logging
from src.database.connection import init_database, close_database
from src.serving.api import create_api_app
from src.serving.cache import init_redis, close_redis
from src.storage import init_storage, close_storage

settings = get_settings()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    configure_logging()

    logger.info("Starting Storefront Admin API", environment=settings.app_env)

    await init_database()
    init_storage()

    # The dashboard works without redis; only the last-known analytics
    # fallback is lost.
    try:
        await init_redis()
    except Exception as e:
        logger.warning("Redis init failed", error=str(e))

    yield

    logger.info("Shutting down...")
    await close_storage()
    await close_redis()
    await close_database()


app = create_api_app(lifespan=lifespan)


@app.get("/api/v1/info")
async def api_info():
    """API information endpoint."""
    return {
        "name": "Storefront Admin API",
        "version": settings.version,
        "environment": settings.app_env,
        "documentation": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
