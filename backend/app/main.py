"""
Daylog Backend — FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers;
       lifespan() handles startup checks and shutdown cleanup.
Who:   uvicorn (uvicorn app.main:app), the test suite.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware:  Request ID → Logging → GZip → CORS         │
    │                                                          │
    │  Routes:                                                 │
    │    /api/notes  /api/habits  /api/diaries  /api/upload    │
    │    /uploads/{path}  /  /health                           │
    │                                                          │
    │  Exception Handlers:                                     │
    │    AuthenticationError→401  InvalidArgumentError→400     │
    │    NotFoundError→404  DuplicateOperationError→400        │
    │    InternalError→500  RequestValidationError→400         │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging, configuration check, storage directory
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from app import __version__
from app.config import settings
from app.database import dispose_engine
from app.exceptions import (
    AuthenticationError,
    DaylogError,
    DuplicateOperationError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
)
from app.middleware.logging import RequestLoggingMiddleware
from app.middleware.request_id import RequestIDMiddleware, request_id_var
from app.routes import diaries, habits, health, notes, uploads

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process.

    Called once at startup, before anything else logs. Third-party loggers
    that log every operation are raised to WARNING.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("Daylog Backend v%s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving; /health reports the database state
        logger.error("Configuration error: %s", str(e))

    storage = Path(settings.storage_root)
    storage.mkdir(parents=True, exist_ok=True)
    logger.info("Storage directory: %s", storage.resolve())

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Daylog Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    exc: DaylogError,
    message: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    suggestion: Optional[str] = None,
) -> JSONResponse:
    """Build the structured error body: {code, error, message, request_id, ...}."""
    content: Dict[str, Any] = {
        "code": exc.status_code,
        "error": exc.error_code,
        "message": message or exc.message,
        "request_id": request_id_var.get(""),
    }
    if details:
        content["details"] = details
    if suggestion:
        content["suggestion"] = suggestion
    return JSONResponse(status_code=exc.status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map application exceptions to HTTP responses.

    Handler hierarchy:
        AuthenticationError      → 401 (+ suggestion)
        InvalidArgumentError     → 400 (+ details)
        RequestValidationError   → 400 invalid_argument (+ details.errors)
        NotFoundError            → 404
        DuplicateOperationError  → 400
        InternalError            → 500 server_error, generic message
        DaylogError (base)       → its own status/error code
        Exception (fallback)     → 500 internal_server_error

    Stack traces, SQL and file paths are logged server-side only.
    """

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        logger.warning("[%s] Authentication error: %s", request_id_var.get(""), exc.message)
        return error_response(exc, suggestion=exc.suggestion)

    @app.exception_handler(InvalidArgumentError)
    async def handle_invalid_argument(request: Request, exc: InvalidArgumentError):
        logger.warning("[%s] Invalid argument: %s", request_id_var.get(""), exc.message)
        return error_response(exc, details=exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Malformed JSON, wrong field types or unparseable query parameters."""
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())),
                "message": err.get("msg", ""),
            }
            for err in exc.errors()
        ]
        message = "Invalid request"
        if errors:
            message = f"Invalid request: {errors[0]['field']}: {errors[0]['message']}"
        logger.warning("[%s] Request validation failed: %s", request_id_var.get(""), message)
        return error_response(
            InvalidArgumentError(message=message),
            details={"errors": errors},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(exc)

    @app.exception_handler(DuplicateOperationError)
    async def handle_duplicate_operation(request: Request, exc: DuplicateOperationError):
        logger.warning("[%s] Duplicate operation: %s", request_id_var.get(""), exc.message)
        return error_response(exc)

    @app.exception_handler(InternalError)
    async def handle_internal_error(request: Request, exc: InternalError):
        """Store or file system failure; generic message to the client."""
        rid = request_id_var.get("")
        logger.error(
            "[%s] %s: %s | Context: %s", rid, type(exc).__name__, exc.message, exc.context
        )
        return error_response(
            exc, message="An internal error occurred. Please try again later."
        )

    @app.exception_handler(DaylogError)
    async def handle_daylog_error(request: Request, exc: DaylogError):
        logger.error("[%s] Application error: %s", request_id_var.get(""), exc.message)
        return error_response(exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "code": 500,
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Middleware executes in reverse order of addition, so the last one added
    (RequestIDMiddleware) sees the request first.
    """
    app = FastAPI(
        title="Daylog API",
        description=(
            "Personal notes, habit check-ins and daily diary entries, scoped to "
            "an anonymous per-client identity token."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials="*" not in settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(notes.router)
    app.include_router(habits.router)
    app.include_router(diaries.router)
    app.include_router(uploads.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
app = create_app()
