"""
BottleNet Backend: FastAPI Application Factory
================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers; the
       lifespan owns the DocumentStore for the lifetime of the process.
Who:   uvicorn (uvicorn bottlenet.main:app) and the test suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Logging → GZip → CORS    │
    │                                                     │
    │  Routes:                                            │
    │    /api/hello   /api/users   /api/messages/...      │
    │    /health                                          │
    │                                                     │
    │  Exception Handlers:                                │
    │    Validation→400  NotFound→404                     │
    │    NoUsersAvailable→500  Database→500               │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config check → DocumentStore (unless injected)
              → optional table creation
    Shutdown: dispose the store's engine (only if the lifespan created it)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from bottlenet import __version__
from bottlenet.config import settings
from bottlenet.database import init_models
from bottlenet.exceptions import (
    BottleNetError,
    DatabaseError,
    NotFoundError,
    NoUsersAvailableError,
    ValidationError,
)
from bottlenet.middleware.logging import RequestLoggingMiddleware
from bottlenet.middleware.request_id import RequestIDMiddleware, request_id_var
from bottlenet.routes import health, hello, messages, users
from bottlenet.store import DocumentStore

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
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Own the process-wide DocumentStore.

    A store injected through create_app(store=...) is left untouched (the
    caller created it, the caller disposes it). Otherwise one is built from
    settings on startup and disposed on shutdown.
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("BottleNet Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        raise

    owns_store = getattr(app.state, "store", None) is None
    if owns_store:
        app.state.store = DocumentStore.from_url(settings.database_url)
        logger.info(
            "Document store initialized (operation timeout %.1fs)",
            app.state.store.timeout,
        )

    if settings.db_auto_create:
        await init_models(app.state.store.engine)
        logger.info("Database tables ensured")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("BottleNet Backend shutting down...")
    if owns_store:
        await app.state.store.close()
        app.state.store = None
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception hierarchy to HTTP responses.

    Handler hierarchy:
        ValidationError / RequestValidationError → 400
        NotFoundError                            → 404
        NoUsersAvailableError                    → 500
        DatabaseError (and subclasses)           → 500, generic message
        BottleNetError (base)                    → 500
        Exception (fallback)                     → 500, stack trace logged

    Response bodies never carry driver errors or stack traces; those go to
    the server log only.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed or incomplete body/query: 400 instead of FastAPI's 422."""
        rid = request_id_var.get("")
        missing = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
        logger.warning("[%s] Invalid request payload: %s", rid, missing)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": "Invalid request payload",
                "details": {"fields": missing},
                "request_id": rid,
            },
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        logger.info("[%s] Not found: %s", rid, exc.message)
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(NoUsersAvailableError)
    async def handle_no_users(request: Request, exc: NoUsersAvailableError):
        rid = request_id_var.get("")
        logger.error("[%s] Recipient selection failed: %s | Context: %s",
                     rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "no_users_available",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(BottleNetError)
    async def handle_app_error(request: Request, exc: BottleNetError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
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
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(store: Optional[DocumentStore] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        store: Pre-built DocumentStore (tests). When omitted, the lifespan
               builds one from settings.database_url.
    """
    app = FastAPI(
        title="BottleNet API",
        description=(
            "Message-in-a-bottle backend: send a message to a random user, "
            "respond to it, drop it back into the sea, or keep it."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.store = store

    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(hello.router)
    app.include_router(users.router)
    app.include_router(messages.router)
    app.include_router(health.router)

    return app


app = create_app()
