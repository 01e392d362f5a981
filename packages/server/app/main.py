"""
Parley API Server

Entry point for the FastAPI application.
"""

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import get_settings
from app.core.logging import configure_logging
from app.core.middleware import CSRFMiddleware, RequestLoggingMiddleware, SecurityHeadersMiddleware
from app.core.redis import close_redis
from app.api import router as api_router
from app.api.auth import router as auth_router

settings = get_settings()
configure_logging(settings.log_level, settings.log_format)
log = structlog.get_logger()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Parley",
        description="Multi-tenant conversation workspace with organization-scoped search.",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    # Middleware (last added runs outermost)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(CSRFMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-CSRF-Token", "X-Request-ID"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(auth_router, prefix="/auth", tags=["Authentication"])
    app.include_router(api_router, prefix="/api")

    @app.get("/health", tags=["System"])
    async def health_check():
        """Liveness check endpoint."""
        return {"status": "ok"}

    @app.get("/ready", tags=["System"])
    async def readiness_check():
        """Readiness check endpoint."""
        return {"status": "ready"}

    @app.on_event("startup")
    async def on_startup():
        log.info("parley.starting", debug=settings.debug)

    @app.on_event("shutdown")
    async def on_shutdown():
        log.info("parley.shutting_down")
        await close_redis()

    return app


app = create_app()
