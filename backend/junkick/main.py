"""
Junkick Backend — FastAPI Application Factory
===============================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes middleware registration, route mounting, error rendering
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn (uvicorn junkick.main:app) and by the test suite.

Application Architecture:
    ┌───────────────────────────────────────────────────────────┐
    │                       FastAPI App                         │
    │                                                           │
    │  Middleware Chain:                                        │
    │  ┌────────────┐ ┌────────┐ ┌─────────┐ ┌──────┐ ┌──────┐  │
    │  │ Rate Limit │→│ Req ID │→│ Logging │→│ GZip │→│ CORS │  │
    │  └────────────┘ └────────┘ └─────────┘ └──────┘ └──────┘  │
    │                                                           │
    │  Routes (under API_PREFIX):                               │
    │  /auth  /users  /projects  /applications  /roles ...      │
    │  Routes (root): /health                                   │
    │                                                           │
    │  Exception Handlers:                                      │
    │  JunkickError → its status │ RequestValidation → 400      │
    │  HTTPException → 404/405   │ Exception → 500              │
    └───────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, warn on unsafe config, construct the
              Database (unless one was injected) and store it on app.state
    Shutdown: dispose the Database this app constructed
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from junkick import __version__
from junkick.config import settings
from junkick.database import Database
from junkick.exceptions import DatabaseError, JunkickError, RateLimitExceededError
from junkick.middleware.logging import RequestLoggingMiddleware
from junkick.middleware.rate_limit import RateLimitMiddleware
from junkick.middleware.request_id import RequestIDMiddleware, request_id_var
from junkick.routes import applications, auth, dictionaries, health, projects, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging once for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] junkick.services.project_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-statement / per-request chatter from libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Junkick Backend starting up...")

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: local development runs with the default secret
        logger.warning("Configuration warning: %s", str(e))

    owns_database = getattr(app.state, "database", None) is None
    if owns_database:
        app.state.database = Database(settings.database_url)
    logger.info("Database: %s", app.state.database.engine.url.render_as_string(hide_password=True))
    logger.info("API mounted at %s", settings.api_prefix or "/")
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Junkick Backend shutting down...")
    if owns_database:
        await app.state.database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None) or request_id_var.get("") or None


def error_response(
    request: Request,
    status_code: int,
    message: str,
    code: str,
    details: Any = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """Render the standard error envelope."""
    body: Dict[str, Any] = {"message": message, "code": code}
    if details is not None:
        body["details"] = details
    body["requestId"] = _request_id(request)
    return JSONResponse(status_code=status_code, content={"error": body}, headers=headers)


def _field_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    """pydantic error list → [{"field": "teamSize", "message": ..., "code": ...}]"""
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        errors.append({
            "field": ".".join(location) or "request",
            "message": error.get("msg", "Invalid value"),
            "code": error.get("type", "invalid"),
        })
    return errors


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the `{"error": {...}}` envelope.

    Handler hierarchy:
        DatabaseError           → 500, generic message (details logged only)
        JunkickError (base)     → exc.status_code, exc.code, exc.details
        RequestValidationError  → 400 VALIDATION_ERROR, per-field details
        HTTPException           → 404 ROUTE_NOT_FOUND / 405 METHOD_NOT_ALLOWED
        Exception (fallback)    → 500 INTERNAL_SERVER_ERROR

    Internal details (SQL, stack traces) never reach the response body.
    """

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s", _request_id(request), exc.message, exc.context)
        return error_response(
            request, 500, "An internal error occurred. Please try again later.", exc.code
        )

    @app.exception_handler(JunkickError)
    async def handle_junkick_error(request: Request, exc: JunkickError):
        if exc.status_code >= 500:
            logger.error("[%s] %s: %s", _request_id(request), exc.code, exc.message)
        else:
            logger.info("[%s] %s: %s", _request_id(request), exc.code, exc.message)
        headers = None
        if isinstance(exc, RateLimitExceededError):
            headers = {"Retry-After": str(exc.retry_after)}
        return error_response(
            request, exc.status_code, exc.message, exc.code, exc.details, headers
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        details = _field_errors(exc)
        logger.info("[%s] Validation failed: %s", _request_id(request), details)
        return error_response(request, 400, "Validation failed", "VALIDATION_ERROR", details)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error_response(
                request, 404, f"Route {request.method} {request.url.path} not found", "ROUTE_NOT_FOUND"
            )
        if exc.status_code == 405:
            return error_response(request, 405, "Method not allowed", "METHOD_NOT_ALLOWED")
        return error_response(request, exc.status_code, str(exc.detail), "HTTP_ERROR")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", _request_id(request), str(exc), exc_info=True)
        return error_response(
            request,
            500,
            "An unexpected error occurred. Please try again or contact support.",
            "INTERNAL_SERVER_ERROR",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(database: Optional[Database] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database: Pre-built persistence client. When given (tests, embedding),
                  the lifespan uses it and leaves disposing it to the caller.
    """
    app = FastAPI(
        title="Junkick API",
        description=(
            "Project-collaboration marketplace: publish projects, assemble teams "
            "and handle applications."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    if database is not None:
        app.state.database = database

    # Executed in reverse order of addition:
    # RequestID → RateLimit → Logging → GZip → CORS
    # (RequestID outermost so 429 bodies carry a requestId)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Total-Count", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    prefix = settings.api_prefix
    for module in (auth, users, projects, applications, dictionaries):
        app.include_router(module.router, prefix=prefix)
    app.include_router(health.router)

    return app


# uvicorn expects `junkick.main:app` to be importable
app = create_app()
