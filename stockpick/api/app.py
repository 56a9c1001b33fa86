"""API application factory."""

from __future__ import annotations

import time
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from stockpick.context import AppContext, build_context
from stockpick.core.config import settings
from stockpick.core.exceptions import register_exception_handlers
from stockpick.core.logging import get_logger, request_id_var
from stockpick.schemas.common import ErrorResponse

from .routes import analysis, catalog, health, portfolio, quota, screening


logger = get_logger("api")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Check the store on startup and release resources on shutdown."""
    context: AppContext = app.state.context
    try:
        if not await context.store.ping():
            logger.warning("Document store is not reachable at startup")
    except Exception as e:
        logger.warning(f"Store check failed (may be ok in tests): {e}")

    yield

    try:
        await context.close()
    except Exception as e:
        logger.warning(f"Resource cleanup failed: {e}")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add security headers to all responses."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = (
            "geolocation=(), microphone=(), camera=()"
        )
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Add request ID to all requests for tracing."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        request_id_var.set(request_id)

        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id

        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration of every request."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.monotonic()

        response = await call_next(request)

        duration = time.monotonic() - start_time

        # Path only; query strings are not logged
        path = request.url.path

        logger.info(
            f"{request.method} {path} -> {response.status_code} ({duration:.3f}s)",
            extra={
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": int(duration * 1000),
            },
        )

        return response


def create_api_app(context: Optional[AppContext] = None) -> FastAPI:
    """Create and configure the API application.

    ``context`` lets tests inject a store and AI provider; by default the
    configured backends are wired.
    """
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Instrument screening, AI analysis and portfolio ledger API",
        root_path=settings.root_path,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=lifespan,
        responses={
            401: {"model": ErrorResponse, "description": "Unauthorized"},
            403: {"model": ErrorResponse, "description": "Forbidden"},
            404: {"model": ErrorResponse, "description": "Not Found"},
            409: {"model": ErrorResponse, "description": "Conflict"},
            422: {"model": ErrorResponse, "description": "Validation Error"},
            429: {"model": ErrorResponse, "description": "Quota Exceeded"},
            500: {"model": ErrorResponse, "description": "Internal Server Error"},
            503: {"model": ErrorResponse, "description": "Service Unavailable"},
        },
    )
    app.state.context = context or build_context()

    # Add middlewares (order matters - first added is outermost)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
        expose_headers=["X-Request-ID"],
        max_age=600,
    )

    register_exception_handlers(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(catalog.router)
    app.include_router(screening.router)
    app.include_router(analysis.router)
    app.include_router(portfolio.router)
    app.include_router(quota.router)

    return app
