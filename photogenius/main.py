"""
Photo Genius - Main Application

FastAPI application with:
- POST /api/remove-background relay to the fal.ai background removal model
- Structured logging with structlog
- Prometheus metrics
- Global exception handling
"""

import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from photogenius.core.config import Settings, get_settings
from photogenius.core.logging import setup_logging, get_logger, LogContext
from photogenius.core.exceptions import register_exception_handlers
from photogenius.core.metrics import set_app_info, http_requests_total, http_request_duration_seconds
from photogenius.api.dependencies import build_gateway
from photogenius.api.routes import api_router
from photogenius.engines.removal.services import RemovalProvider

logger = get_logger(__name__)


def create_app(
    app_settings: Optional[Settings] = None,
    provider: Optional[RemovalProvider] = None,
) -> FastAPI:
    """
    Build the application.

    Settings are read once here; the gateway receives the credential at
    construction and never looks at the environment again.
    """
    app_settings = app_settings or get_settings()

    setup_logging(
        log_level=app_settings.LOG_LEVEL,
        json_format=app_settings.LOG_FORMAT_JSON
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "application_starting",
            app_name=app_settings.APP_NAME,
            version=app_settings.APP_VERSION,
            environment=app_settings.ENVIRONMENT,
            provider_configured=app.state.gateway.is_configured
        )
        if not app.state.gateway.is_configured:
            logger.warning("fal_key_missing", message="FAL_KEY is not set; removal requests will fail")

        set_app_info(
            version=app_settings.APP_VERSION,
            environment=app_settings.ENVIRONMENT
        )

        yield

        logger.info("application_shutdown_complete")

    app = FastAPI(
        title=app_settings.APP_NAME,
        description="Upload a photo, remove its background, download the cutout.",
        version=app_settings.APP_VERSION,
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json"
    )
    app.state.settings = app_settings
    app.state.gateway = build_gateway(app_settings, provider)

    # =========================================================================
    # Middleware
    # =========================================================================
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def add_request_context(request: Request, call_next):
        """Bind a request id to the logs and record timing metrics."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        start_time = time.time()

        with LogContext(request_id=request_id):
            response = await call_next(request)

        duration = time.time() - start_time
        http_request_duration_seconds.labels(
            method=request.method,
            endpoint=request.url.path
        ).observe(duration)
        http_requests_total.labels(
            method=request.method,
            endpoint=request.url.path,
            status=response.status_code
        ).inc()

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(duration)
        return response

    register_exception_handlers(app)
    app.include_router(api_router)

    @app.get("/", tags=["root"])
    async def root():
        """Root endpoint with API information."""
        return {
            "name": app_settings.APP_NAME,
            "version": app_settings.APP_VERSION,
            "environment": app_settings.ENVIRONMENT,
            "docs": "/api/docs",
            "remove_background": "/api/remove-background",
            "metrics": "/api/metrics"
        }

    @app.get("/health", tags=["health"])
    async def health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": app_settings.APP_VERSION
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "photogenius.main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().DEBUG,
        log_level="info"
    )
