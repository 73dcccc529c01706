"""
FastAPI Application Factory

Creates and configures the dashboard API application.
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from src.config import get_settings
from src.serving.api.errors import register_error_handlers
from src.serving.api.middleware import (
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from src.serving.api.routes import (
    analytics_router,
    health_router,
    orders_router,
    products_router,
    settings_router,
)

settings = get_settings()


def create_api_app(lifespan: Optional[object] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        lifespan: Startup/shutdown context; omitted in tests, where
            dependencies are overridden instead

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Storefront Admin API",
        description="Analytics, catalog management and settings for the store dashboard",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.security.rate_limit_requests,
        window_seconds=settings.security.rate_limit_window_seconds,
    )

    register_error_handlers(app)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(analytics_router, prefix="/api/v1/analytics", tags=["Analytics"])
    app.include_router(products_router, prefix="/api/v1/products", tags=["Products"])
    app.include_router(orders_router, prefix="/api/v1/orders", tags=["Orders"])
    app.include_router(settings_router, prefix="/api/v1/settings", tags=["Settings"])

    return app
