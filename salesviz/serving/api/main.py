"""
FastAPI Application Factory

Creates and configures the dashboard API application.
"""

from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from prometheus_client import make_asgi_app

from salesviz.config import get_settings
from salesviz.serving.api.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from salesviz.serving.api.routes import (
    dashboard_router,
    health_router,
    salespeople_router,
)


def create_api_app(lifespan: Optional[Callable] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        lifespan: Startup/shutdown handler; the caller must then provide
            ``app.state.refresher`` itself when omitted

    Returns:
        Configured FastAPI app instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Sales Dashboard API",
        description="Sales transaction aggregates for dashboard rendering",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(dashboard_router, prefix="/api/v1/dashboard", tags=["Dashboard"])
    app.include_router(salespeople_router, prefix="/api/v1/salespeople", tags=["Salespeople"])

    # Refresh and change-notification counters
    app.mount("/metrics", make_asgi_app())

    @app.get("/api/v1/info")
    async def api_info() -> Dict[str, Any]:
        """API information, including the public dashboard URL when configured."""
        return {
            "name": settings.app_name,
            "version": settings.version,
            "environment": settings.app_env,
            "display_url": settings.dashboard.display_url,
        }

    return app
