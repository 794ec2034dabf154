"""
Inkwell Backend: FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn inkwell.main:app).
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌────────────┐  │
    │  │  Req ID  │→│ Logging  │→│ GZip │→│    CORS    │  │
    │  └──────────┘ └──────────┘ └──────┘ └────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────┐ ┌─────────────────┐  │
    │  │ /register .. │ │ /post .. │ │ GET /health     │  │
    │  └──────────────┘ └──────────┘ └─────────────────┘  │
    │  Static: /uploads → settings.upload_dir             │
    │                                                     │
    │  Exception Handlers:                                │
    │  400 validation │ 401 auth │ 403 owner │ 404 │ 500  │
    └─────────────────────────────────────────────────────┘

Collaborators on app.state (see inkwell.dependencies):
    settings, token_codec, auth_guard, file_service, post_service

Lifecycle:
    Startup:  logging → config validation → create tables
    Shutdown: dispose database engine
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
from fastapi.staticfiles import StaticFiles

from inkwell import __version__
from inkwell.config import Settings, settings as default_settings
from inkwell.database import create_tables, dispose_engine
from inkwell.exceptions import (
    InkwellError,
    ValidationError,
    AuthenticationError,
    ForbiddenError,
    NotFoundError,
    DatabaseError,
    FileStorageError,
)
from inkwell.middleware.request_id import RequestIDMiddleware, request_id_var
from inkwell.middleware.logging import RequestLoggingMiddleware
from inkwell.routes import auth, posts, health
from inkwell.services.auth_guard import AuthGuard
from inkwell.services.file_service import PUBLIC_PREFIX, FileService
from inkwell.services.post_service import PostService
from inkwell.services.token_service import SessionTokenCodec

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    When:    Called once during app startup (before any other initialization).
    Format:  %(asctime)s [%(levelname)s] %(name)s: %(message)s
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup sequence:
        1. Setup logging
        2. Validate critical configuration (logged, not fatal)
        3. Create tables that do not exist yet
    Shutdown sequence:
        1. Dispose database engine (close all pooled connections)
    """
    config: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(config.log_level)
    logger.info("=" * 60)
    logger.info("Inkwell Backend starting up...")

    try:
        config.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    await create_tables()

    logger.info("Uploads directory: %s", app.state.file_service.upload_root)
    logger.info("Server ready at http://%s:%d", config.backend_host, config.backend_port)
    logger.info("=" * 60)

    yield  # Application runs here

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Inkwell Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details: Optional[dict] = None) -> dict:
    body = {"error": error, "message": message, "request_id": request_id_var.get("")}
    if details:
        body["details"] = details
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError          → 400 Bad Request (client can fix the input)
        RequestValidationError   → 400 Bad Request (malformed body or params)
        AuthenticationError      → 401 Unauthorized
        ForbiddenError           → 403 Forbidden
        NotFoundError            → 404 Not Found
        FileStorageError         → 500 Internal Server Error
        DatabaseError            → 500 Internal Server Error
        InkwellError (base)      → 500 Internal Server Error
        Exception (fallback)     → 500 Internal Server Error

    Exception handlers never put stack traces, paths or SQL in a response.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", exc.message, exc.context),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content=_error_body("validation_error", "Request is malformed", {"errors": errors}),
        )

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return JSONResponse(
            status_code=401,
            content=_error_body("unauthenticated", exc.message),
        )

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        return JSONResponse(
            status_code=403,
            content=_error_body("forbidden", exc.message),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc.message),
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", "An internal error occurred. Please try again later."),
        )

    @app.exception_handler(FileStorageError)
    async def handle_file_storage_error(request: Request, exc: FileStorageError):
        logger.error(
            "[%s] File storage error: %s | Context: %s",
            request_id_var.get(""), exc.message, exc.context,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc.message),
        )

    @app.exception_handler(InkwellError)
    async def handle_inkwell_error(request: Request, exc: InkwellError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: generic 500 body, full stack trace in the server log only."""
        logger.error(
            "[%s] Unexpected error: %s",
            request_id_var.get(""),
            str(exc),
            exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "server_error",
                "An unexpected error occurred. Please try again or contact support.",
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(config: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Settings to build the app from; defaults to the environment
            singleton. The database engine always follows the environment
            (DATABASE_URL); tests override get_db_session instead.

    Returns: Fully configured FastAPI instance ready to receive requests.
    """
    config = config or default_settings

    app = FastAPI(
        title="Inkwell API",
        description=(
            "Blogging backend: user registration, cookie sessions, and posts "
            "with uploaded cover images. Only a post's author may change it."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Collaborators ─────────────────────────────────────────────────────
    token_codec = SessionTokenCodec(config.jwt_secret, config.jwt_algorithm)
    file_service = FileService(config.upload_dir, config.max_file_size)

    app.state.settings = config
    app.state.token_codec = token_codec
    app.state.auth_guard = AuthGuard(token_codec)
    app.state.file_service = file_service
    app.state.post_service = PostService(file_service)

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition (last added = outermost)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins_list,
        allow_credentials=True,     # Session cookie travels cross-origin
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(posts.router)
    app.include_router(health.router)

    # Cover images: "uploads/<name>" on a post is served at "/uploads/<name>"
    app.mount(
        f"/{PUBLIC_PREFIX}",
        StaticFiles(directory=str(file_service.upload_root)),
        name=PUBLIC_PREFIX,
    )

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `inkwell.main:app` to be importable
app = create_app()
