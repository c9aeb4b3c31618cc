"""
Toolhub Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn toolhub.main:app).

Application Architecture:
    ┌───────────────────────────────────────────────────────────┐
    │                       FastAPI App                         │
    │                                                           │
    │  Middleware Chain:                                        │
    │  ┌────────────┐ ┌───────────┐ ┌──────────────────────┐    │
    │  │  Req ID    │→│  Logging  │→│ Submission RateLimit │    │
    │  └────────────┘ └───────────┘ └──────────────────────┘    │
    │                                                           │
    │  Routes:                                                  │
    │  ┌────────────┐ ┌───────────┐ ┌───────────────┐ ┌───────┐ │
    │  │ /api/tools │ │ /api/tags │ │ /api/requests │ │/health│ │
    │  └────────────┘ └───────────┘ └───────────────┘ └───────┘ │
    │  ┌─────────────────────────────────────────────────────┐  │
    │  │ /api/admin/{requests,tools,tags,users}  (admin key) │  │
    │  └─────────────────────────────────────────────────────┘  │
    │                                                           │
    │  Exception Handlers:                                      │
    │  ┌─────────────────────────────────────────────────────┐  │
    │  │ Validation→400 │ Auth→401 │ NotFound→404 │          │  │
    │  │ Transition/Conflict→409 │ RateLimit→429 │ Store→500 │  │
    │  └─────────────────────────────────────────────────────┘  │
    └───────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, not fatal)
    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from toolhub import __version__
from toolhub.config import settings
from toolhub.database import dispose_engine
from toolhub.exceptions import (
    AuthenticationError,
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    RateLimitExceededError,
    ToolhubError,
    ValidationError,
)
from toolhub.middleware.logging import RequestLoggingMiddleware
from toolhub.middleware.rate_limit import SubmissionRateLimitMiddleware
from toolhub.middleware.request_id import RequestIDMiddleware, request_id_var
from toolhub.routes import (
    admin_requests,
    admin_tags,
    admin_tools,
    admin_users,
    health,
    requests,
    tags,
    tools,
)

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup, before anything else logs.
    """
    log_format = (
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
        force=True,
    )

    # Third-party loggers that are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
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
    logger.info("Toolhub Backend %s starting up...", __version__)

    # A missing admin key only disables /api/admin/*; the public catalog keeps working
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Toolhub Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    exc: ToolhubError,
    include_details: bool = True,
    headers: dict = None,
) -> JSONResponse:
    content = {
        "error": error,
        "message": exc.message,
        "request_id": request_id_var.get(""),
    }
    if include_details and exc.context:
        content["details"] = exc.context
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError         → 400 Bad Request
        AuthenticationError     → 401 Unauthorized
        NotFoundError           → 404 Not Found
        InvalidTransitionError  → 409 Conflict
        ConflictError           → 409 Conflict
        RateLimitExceededError  → 429 Too Many Requests
        PersistenceError        → 500 Internal Server Error (generic message)
        ToolhubError (base)     → 500 Internal Server Error
        Exception (fallback)    → 500 Internal Server Error

    Persistence and unexpected errors are logged with their context but the
    client only gets a generic message and the request ID.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return _error_response(
            401, "unauthorized", exc,
            include_details=False,
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc, include_details=False)

    @app.exception_handler(InvalidTransitionError)
    async def handle_invalid_transition(request: Request, exc: InvalidTransitionError):
        logger.info("[%s] Rejected transition: %s", request_id_var.get(""), exc.message)
        return _error_response(409, "invalid_transition", exc)

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        return _error_response(409, "conflict", exc)

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return _error_response(
            429, "rate_limit_exceeded", exc,
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(request: Request, exc: PersistenceError):
        rid = request_id_var.get("")
        logger.error("[%s] Persistence error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(ToolhubError)
    async def handle_toolhub_error(request: Request, exc: ToolhubError):
        rid = request_id_var.get("")
        logger.error("[%s] Unhandled application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Tests call this for a fresh app (and fresh rate-limit state) per client.
    """
    app = FastAPI(
        title="Toolhub API",
        description=(
            "Directory of AI tools: browse and search the catalog, suggest new tools, "
            "and review suggestions into catalog entries."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → RateLimit → GZip → CORS
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
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(SubmissionRateLimitMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(tools.router)
    app.include_router(tags.router)
    app.include_router(requests.router)
    app.include_router(admin_requests.router)
    app.include_router(admin_tools.router)
    app.include_router(admin_tags.router)
    app.include_router(admin_users.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
