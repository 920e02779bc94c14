"""
FastAPI application entry point for the Patient Registration API.

This module provides the main FastAPI application with:
- Account registration endpoint
- Health and readiness endpoints
- Request logging with correlation IDs
- Prometheus metrics
- CORS and security headers
- Account storage lifecycle (in-memory or PostgreSQL)
"""

import time
import uuid
import structlog
import uvicorn
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, Any

from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from prometheus_client import CONTENT_TYPE_LATEST

from api.src.config import get_settings, Settings
from api.src.dependencies import (
    close_account_repository,
    get_account_repository,
    init_account_repository,
)
from api.src.routers.registration import MESSAGE_REGISTRATION_FAILED, auth_router
from shared.logging import bind_context, clear_context, configure_logging
from shared.metrics import get_metrics, get_metrics_handler

# Get settings
settings: Settings = get_settings()

configure_logging(
    log_level=settings.log_level,
    json_logs=settings.log_format == "json",
    service_name=settings.app_name,
    environment=settings.environment,
)

# Initialize logger
logger = structlog.get_logger(__name__)

metrics = get_metrics()

# ============================================================================
# Lifespan Management
# ============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager for startup and shutdown events.

    Handles:
    - Account repository initialization (and PostgreSQL schema)
    - Graceful shutdown and resource cleanup
    """
    logger.info(
        "application_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment
    )

    try:
        await init_account_repository(settings)

        logger.info(
            "application_started",
            app_name=settings.app_name,
            storage_backend=settings.storage_backend
        )

        yield

    except Exception as e:
        logger.error("application_startup_failed", error=str(e), exc_info=True)
        raise

    finally:
        logger.info("application_shutting_down")

        try:
            await close_account_repository()
            logger.info("application_shutdown_complete")
        except Exception as e:
            logger.error("application_shutdown_failed", error=str(e), exc_info=True)

# ============================================================================
# FastAPI Application
# ============================================================================

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Account registration service.",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
    debug=settings.debug,
)

# ============================================================================
# Middleware Configuration
# ============================================================================

# CORS Middleware
if settings.cors_enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request logging, correlation IDs and metrics."""

    async def dispatch(self, request: Request, call_next):
        """Process request and log details."""
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        method = request.method
        path = request.url.path

        clear_context()
        bind_context(correlation_id=correlation_id)

        start_time = time.perf_counter()
        logger.info("request_started", method=method, path=path)

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.error(
                "request_failed",
                method=method,
                path=path,
                error=str(e),
                duration=f"{duration:.3f}s",
                exc_info=True
            )
            raise

        duration = time.perf_counter() - start_time

        metrics.http_requests.labels(
            method=method,
            endpoint=path,
            status=response.status_code
        ).inc()
        metrics.http_request_duration.labels(method=method, endpoint=path).observe(duration)

        logger.info(
            "request_completed",
            method=method,
            path=path,
            status_code=response.status_code,
            duration=f"{duration:.3f}s"
        )

        response.headers["X-Correlation-ID"] = correlation_id
        return response


app.add_middleware(RequestLoggingMiddleware)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        if settings.security_headers_enabled:
            response.headers["X-Content-Type-Options"] = "nosniff"
            response.headers["X-Frame-Options"] = "DENY"
            response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
            response.headers["Cache-Control"] = "no-store"

        return response


app.add_middleware(SecurityHeadersMiddleware)

# ============================================================================
# Exception Handlers
# ============================================================================

@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions without leaking internals."""
    logger.error(
        "unexpected_exception",
        path=request.url.path,
        error_type=type(exc).__name__,
        exc_info=True
    )
    if request.url.path == settings.register_path:
        content = {"message": MESSAGE_REGISTRATION_FAILED}
    else:
        content = {"detail": "Internal server error"}
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=content
    )

# ============================================================================
# Health and Readiness Endpoints
# ============================================================================

@app.get("/health", tags=["Health"], response_class=JSONResponse)
async def health_check() -> Dict[str, Any]:
    """
    Health check endpoint.

    Returns basic health status without checking dependencies.
    """
    return {
        "status": "healthy",
        "service": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment
    }


@app.get("/ready", tags=["Health"], response_class=JSONResponse)
async def readiness_check() -> JSONResponse:
    """
    Readiness check endpoint.

    Verifies the account store is reachable.
    """
    try:
        storage_ok = await get_account_repository().ping()
    except RuntimeError:
        storage_ok = False

    checks = {"storage": "healthy" if storage_ok else "unhealthy"}
    all_healthy = all(value == "healthy" for value in checks.values())

    return JSONResponse(
        status_code=status.HTTP_200_OK if all_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if all_healthy else "not_ready",
            "service": settings.app_name,
            "version": settings.app_version,
            "checks": checks
        }
    )

# ============================================================================
# Metrics Endpoint
# ============================================================================

if settings.metrics_enabled:
    metrics_handler = get_metrics_handler(metrics.registry)

    @app.get("/metrics", tags=["Monitoring"], response_class=PlainTextResponse)
    async def metrics_endpoint() -> Response:
        """Prometheus metrics endpoint."""
        return Response(content=metrics_handler(), media_type=CONTENT_TYPE_LATEST)

# ============================================================================
# API Router Registration
# ============================================================================

app.include_router(auth_router, prefix=settings.api_prefix)

# ============================================================================
# Application Entry Point
# ============================================================================

if __name__ == "__main__":
    logger.info(
        "starting_uvicorn_server",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )

    uvicorn.run(
        "api.src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )
