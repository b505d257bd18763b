"""
SIA API: FastAPI Application Factory
====================================

What:  Builds the FastAPI application: shared components, middleware,
       exception handlers and routes.
How:   `create_app(settings)` constructs the Database, TokenIssuer and
       PasswordHasher once and stores them on `app.state`; nothing else in
       the package holds process-wide state. Tests call `create_app()` with
       their own Settings.
Who:   uvicorn (`uvicorn sia_api.main:app`) and the test suite.

Lifecycle:
    Startup:
    1. Configure logging
    2. Check security-sensitive settings (logged, not fatal)
    3. Wait for the database (tenacity retry)
    4. Create tables when DB_CREATE_TABLES is set
    Shutdown:
    1. Dispose the database engine
"""

import logging
import sys
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from sqlalchemy.exc import SQLAlchemyError

from sia_api import __version__
from sia_api.config import Settings
from sia_api.database import Database
from sia_api.exceptions import (
    ConflictError,
    DatabaseError,
    InvalidCredentialsError,
    NotFoundError,
    SIAError,
    StorageTimeoutError,
    UnauthorizedError,
    ValidationError,
)
from sia_api.middleware.access_guard import AccessGuardMiddleware
from sia_api.middleware.logging import RequestLoggingMiddleware
from sia_api.middleware.rate_limit import RateLimitMiddleware
from sia_api.middleware.request_id import RequestIDMiddleware, request_id_var
from sia_api.responses import error_response
from sia_api.routes import auth, health
from sia_api.routes.resources import resource_routers
from sia_api.security import PasswordHasher, TokenIssuer

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configures the root logger once at startup: one stdout handler, level
    from LOG_LEVEL, chatty third-party loggers lowered to WARNING.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
    for noisy in ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    database: Database = app.state.database

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings)
    logger.info("SIA API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Not fatal: the service still answers health checks.
        logger.error("Configuration error: %s", e)

    try:
        await database.wait_until_ready()
        if settings.db_create_tables:
            await database.create_all()
            logger.info("Database tables ensured")
    except (OSError, SQLAlchemyError) as e:
        logger.error("Database unavailable at startup: %s", e)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("SIA API shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _field_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    """Framework validation errors as `[{"field": ..., "message": ...}]`."""
    collected = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        collected.append({
            "field": ".".join(loc) or "body",
            "message": err.get("msg", "Invalid value"),
        })
    return collected


def register_exception_handlers(app: FastAPI) -> None:
    """
    Maps every exception to the single error body.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400 validation_error
        ConflictError                            → 409 (or its status_code)
        InvalidCredentialsError                  → 401 invalid_credentials
        UnauthorizedError (tokens)               → 401 unauthorized
        NotFoundError                            → 404 not_found
        StorageTimeoutError                      → 503 service_unavailable
        DatabaseError                            → 500 server_error
        SIAError / Exception                     → 500 internal_server_error

    500 responses carry a fixed message; the real error is logged with the
    request id.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.info("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return error_response(400, "validation_error", exc.message, {"errors": exc.errors})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return await handle_validation_error(
            request, ValidationError("Validation failed", errors=_field_errors(exc))
        )

    @app.exception_handler(ConflictError)
    async def handle_conflict(request: Request, exc: ConflictError):
        return error_response(exc.status_code, "conflict", exc.message)

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        code = "invalid_credentials" if isinstance(exc, InvalidCredentialsError) else "unauthorized"
        return error_response(401, code, exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, "not_found", exc.message)

    @app.exception_handler(StorageTimeoutError)
    async def handle_storage_timeout(request: Request, exc: StorageTimeoutError):
        logger.error("[%s] Storage timeout | Context: %s", request_id_var.get(""), exc.context)
        return error_response(
            503,
            "service_unavailable",
            exc.message,
            headers={"Retry-After": "1"},
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return error_response(
            500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(SIAError)
    async def handle_app_error(request: Request, exc: SIAError):
        logger.error(
            "[%s] Unhandled application error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return error_response(
            500, "internal_server_error", "An unexpected error occurred. Please try again later."
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), exc, exc_info=True)
        return error_response(
            500, "internal_server_error", "An unexpected error occurred. Please try again later."
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Assembles the application around one Settings instance.

    Middleware is added innermost first; Starlette runs the last one added
    first. Resulting request order:
        CORS → RequestID → Logging → RateLimit → GZip → AccessGuard → route
    """
    settings = settings or Settings()

    app = FastAPI(
        title="SIA User Management API",
        description="Accounts, roles, permissions, orders and transactions behind JWT auth.",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = Database(settings)
    app.state.token_issuer = TokenIssuer(settings.jwt_secret_key, settings.jwt_algorithm)
    app.state.password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.started_at = time.monotonic()

    # ── Middleware ────────────────────────────────────────────────────────
    app.add_middleware(AccessGuardMiddleware)
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window,
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )

    # ── Exception Handlers ────────────────────────────────────────────────
    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(auth.router)
    for router in resource_routers():
        app.include_router(router)

    return app


# uvicorn entry point: `uvicorn sia_api.main:app`
app = create_app()
