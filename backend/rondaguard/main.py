"""
RondaGuard Backend - FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers, routers and the
       lifespan that owns the Database façade.
Who:   uvicorn (`uvicorn rondaguard.main:app`) and the route tests.

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, not fatal)
    3. Create the Database (bounded pool) unless one was injected
    4. Probe the database once and log the result

    Shutdown:
    1. Dispose the Database (closes every pooled connection)

Error mapping:
    RondaGuardError subclasses → their status_code and kind
    DatabaseError / unexpected → 500 with a generic message
    TransientStoreError        → 503 with Retry-After when known
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from rondaguard import __version__
from rondaguard.config import settings
from rondaguard.database import Database
from rondaguard.exceptions import DatabaseError, RondaGuardError, TransientStoreError
from rondaguard.middleware.logging import RequestLoggingMiddleware
from rondaguard.middleware.request_id import RequestIDMiddleware, request_id_var
from rondaguard.routes import auth, health, rounds, settings as settings_routes, tasks, templates, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process.

    Format: 2025-01-15T12:00:00 [INFO] rondaguard.services.upsert_engine: task t-1 inserted
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every statement or connection
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Own the Database for the lifetime of the process."""
    setup_logging()
    logger.info("=" * 60)
    logger.info("RondaGuard Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    if getattr(app.state, "database", None) is None:
        app.state.database = Database.from_settings(settings)
    database: Database = app.state.database

    try:
        await database.ping()
        logger.info("Database reachable (pool size %d)", settings.db_pool_size)
    except RondaGuardError as e:
        # Requests will surface TransientStoreError until the store comes back
        logger.error("Database not reachable at startup: %s | %s", e.message, e.context)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("RondaGuard Backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to JSON error responses.

    Handler hierarchy:
        TransientStoreError → 503 + Retry-After
        DatabaseError       → 500, generic message, context logged only
        RondaGuardError     → exc.status_code, message and context returned
        Exception           → 500, stack trace logged only
    """

    @app.exception_handler(TransientStoreError)
    async def handle_transient_store_error(request: Request, exc: TransientStoreError):
        """Store unreachable or pool exhausted; the caller may retry."""
        rid = request_id_var.get("")
        logger.warning("[%s] Transient store error: %s | Context: %s", rid, exc.message, exc.context)
        headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else {}
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.kind,
                "message": exc.message,
                "request_id": rid,
            },
            headers=headers,
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Generic message to the client, details in the server log."""
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.kind,
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(RondaGuardError)
    async def handle_application_error(request: Request, exc: RondaGuardError):
        """Client-correctable errors: validation, auth, not found, conflict."""
        rid = request_id_var.get("")
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s | Context: %s", rid, exc.kind, exc.message, exc.context)
            details = None
        else:
            logger.warning("[%s] %s: %s", rid, exc.kind, exc.message)
            # Driver details never leave the server
            details = {k: v for k, v in exc.context.items() if k != "driver_error"} or None
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.kind,
                "message": exc.message,
                "details": details,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: generic 500, full stack trace in the log."""
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

def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database: an already-built Database (tests inject a SQLite one);
                  when None, the lifespan builds one from settings.
    """
    app = FastAPI(
        title="RondaGuard API",
        description=(
            "Security round management: users, checklist templates, tasks, "
            "round logs with photo evidence, and tenant settings."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.database = database

    # Middleware executes in reverse order of addition:
    # RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_origins_list != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )

    # Base64 photos and signatures make list responses large
    app.add_middleware(GZipMiddleware, minimum_size=500)

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(templates.router)
    app.include_router(tasks.router)
    app.include_router(rounds.router)
    app.include_router(settings_routes.router)
    app.include_router(health.router)

    return app


app = create_app()
