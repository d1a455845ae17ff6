"""
Inkwell Backend — FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn inkwell.main:app).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────┐ ┌────────┐ ┌────────────┐ ┌─────────┐ ┌──────┐ │
    │  │ CORS │→│ Req ID │→│ Rate Limit │→│ Logging │→│ GZip │ │
    │  └──────┘ └────────┘ └────────────┘ └─────────┘ └──────┘ │
    │                                                          │
    │  Routes:                                                 │
    │  articles · moderation · author applications · SEO       │
    │  preferences · reading history · audit · users · health  │
    │                                                          │
    │  Exception Handlers:                                     │
    │  InkwellError → its own status │ 422 body → 400 │ * → 500 │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, the server still starts so the
       health check can report what is missing)

    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from inkwell import __version__
from inkwell.config import settings
from inkwell.database import dispose_engine
from inkwell.exceptions import (
    AuthenticationError,
    InkwellError,
    RateLimitExceededError,
    error_body,
)
from inkwell.middleware.logging import RequestLoggingMiddleware
from inkwell.middleware.rate_limit import RateLimitMiddleware
from inkwell.middleware.request_id import RequestIDMiddleware, request_id_var
from inkwell.routes import (
    articles,
    audit,
    author_applications,
    health,
    moderation,
    preferences,
    reading_history,
    seo,
    user_admin,
)

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: 2026-01-31T10:00:00 [INFO] inkwell.services.moderation_service: ...

    Everything goes to stdout; the container runtime collects it.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every operation
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Inkwell Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Authenticated endpoints answer 401 until this is fixed
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    logger.info("Site: %s (default locale %s)", settings.site_url, settings.default_locale)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Inkwell Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    # The catch-all handler runs outside the request-id middleware
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Every failure leaves the API in the same envelope:
        {"success": false, "error": ..., "code": ..., "message": ...,
         "details": ..., "request_id": ...}

    Handler hierarchy:
        InkwellError            → exc.status_code (400/401/403/404/409/429/500)
        RequestValidationError  → 400 VALIDATION_ERROR (FastAPI default is 422)
        HTTPException           → its status (unknown route, wrong method)
        Exception (fallback)    → 500 INTERNAL_ERROR

    Server-side errors never expose their context in the response; it is
    logged instead.
    """

    @app.exception_handler(InkwellError)
    async def handle_inkwell_error(request: Request, exc: InkwellError):
        rid = _request_id(request)
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, exc.code, exc.message, exc.context)
        elif exc.status_code >= 409:
            logger.warning("[%s] %s: %s", rid, exc.code, exc.message)
        else:
            logger.info("[%s] %s: %s", rid, exc.code, exc.message)

        headers = {}
        if isinstance(exc, AuthenticationError):
            headers["WWW-Authenticate"] = "Bearer"
        if isinstance(exc, RateLimitExceededError):
            headers["Retry-After"] = str(exc.retry_after)
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.to_body(rid),
            headers=headers or None,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Malformed body, path or query parameter."""
        rid = _request_id(request)
        errors = jsonable_encoder(exc.errors())
        logger.info("[%s] Request validation failed: %d error(s)", rid, len(errors))
        return JSONResponse(
            status_code=400,
            content=error_body(
                "validation_error",
                "VALIDATION_ERROR",
                "Request validation failed",
                details={"errors": errors},
                request_id=rid,
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        rid = _request_id(request)
        code = "NOT_FOUND" if exc.status_code == 404 else f"HTTP_{exc.status_code}"
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(
                "not_found" if exc.status_code == 404 else "http_error",
                code,
                str(exc.detail),
                request_id=rid,
            ),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Stack trace goes to the log only, never into the response."""
        rid = _request_id(request)
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content=error_body(
                "internal_server_error",
                "INTERNAL_ERROR",
                "An unexpected error occurred. Please try again or contact support.",
                request_id=rid,
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Assemble middleware, exception handlers and routers into one app."""
    app = FastAPI(
        title="Inkwell API",
        description=(
            "Bilingual (Thai/English) publishing platform: article moderation, "
            "author applications, reading history and SEO metadata."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition (last added = outermost)

    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Outermost, so rate-limited and error responses still carry CORS headers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[
            "X-Request-ID",
            "X-Total-Count",
            "Retry-After",
        ],
    )

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(seo.router)
    app.include_router(articles.router)
    app.include_router(moderation.router)
    app.include_router(author_applications.router)
    app.include_router(preferences.router)
    app.include_router(reading_history.router)
    app.include_router(audit.router)
    app.include_router(user_admin.router)

    return app


# uvicorn expects `inkwell.main:app` to be importable
app = create_app()
