"""
SnipShelf Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn snipshelf.main:app`) and the test client.

Application Architecture:
    ┌──────────────────────────────────────────────────────┐
    │                   FastAPI App                        │
    │                                                      │
    │  Middleware Chain:                                   │
    │  ┌────────────┐ ┌────────────────┐ ┌──────────────┐  │
    │  │  Req ID    │→│ Authentication │→│  Logging     │  │
    │  └────────────┘ └────────────────┘ └──────────────┘  │
    │                                                      │
    │  Routes:                                             │
    │  ┌────────────────────┐ ┌───────────────────┐ ┌────┐ │
    │  │ /_actions/*Coll... │ │ /_actions/*Snip.. │ │/hea│ │
    │  └────────────────────┘ └───────────────────┘ └────┘ │
    │                                                      │
    │  Exception Handlers:                                 │
    │  ┌────────────────────────────────────────────────┐  │
    │  │ 400 BAD_REQUEST │ 401 UNAUTHORIZED │ 404 │ 500  │  │
    │  └────────────────────────────────────────────────┘  │
    └──────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from snipshelf import __version__
from snipshelf.config import settings
from snipshelf.database import dispose_engine
from snipshelf.exceptions import DatabaseError, SnipShelfError, UnauthorizedError
from snipshelf.middleware.authentication import AuthenticationMiddleware
from snipshelf.middleware.logging import RequestLoggingMiddleware
from snipshelf.middleware.request_id import RequestIDMiddleware, request_id_var
from snipshelf.routes import collections, health, snippets

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Structured Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Called once during app startup, before any other initialization.
    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Third-party loggers are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:  logging, configuration check, readiness log.
    Shutdown: dispose the database engine (close pooled connections).
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("SnipShelf Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: /health reports the database state
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    logger.info("Trusting principal header: %s", settings.auth_user_header)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("SnipShelf Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(code: str, message: str, details=None) -> dict:
    body = {"code": code, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to the uniform error body.

    Handler hierarchy:
        RequestValidationError  → 400 BAD_REQUEST (input shape rejected by pydantic)
        UnauthorizedError       → 401 UNAUTHORIZED
        DatabaseError           → 500 (generic message, context logged only)
        SnipShelfError (base)   → exc.status_code / exc.code
        Exception (fallback)    → 500 INTERNAL_SERVER_ERROR

    Security: stack traces, SQL and ownership details never reach the client.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        issues = [
            {
                "loc": [str(part) for part in err.get("loc", ())],
                "msg": err.get("msg", ""),
                "type": err.get("type", ""),
            }
            for err in exc.errors()
        ]
        logger.info("[%s] Rejected input for %s: %d issue(s)",
                    request_id_var.get(""), request.url.path, len(issues))
        return JSONResponse(
            status_code=400,
            content=_error_body("BAD_REQUEST", "Input failed validation.", {"issues": issues}),
        )

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("[%s] Database error: %s | Context: %s",
                     request_id_var.get(""), exc.message, exc.context)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(SnipShelfError)
    async def handle_app_error(request: Request, exc: SnipShelfError):
        # NOT_FOUND context holds the requested id; keep it server-side
        details = exc.context if exc.code == "BAD_REQUEST" else None
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.code, exc.message, details),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "INTERNAL_SERVER_ERROR",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Assemble middleware, exception handlers and routers into a FastAPI app."""
    app = FastAPI(
        title="SnipShelf API",
        description=(
            "Personal snippet manager. Organize reusable code and text snippets into "
            "collections. Every action is scoped to the authenticated user."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added = first to execute:
    # RequestID → Authentication → Logging → GZip → CORS → routes
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(AuthenticationMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(collections.router)
    app.include_router(snippets.router)
    app.include_router(health.router)

    return app


# uvicorn expects `snipshelf.main:app`
app = create_app()
