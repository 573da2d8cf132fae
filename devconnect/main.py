"""
DevConnect Backend - FastAPI Application Factory
===================================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings, database) wires settings, the database, services,
       middleware, exception handlers and routers onto one app.
Who:   uvicorn (`uvicorn devconnect.main:app`) and the test fixtures, which
       pass their own Settings and Database.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware:  RateLimit → RequestID → AccessLog → GZip   │
    │               → CORS                                     │
    │                                                          │
    │  Routes:      /auth  /profile  /requests  /user  /health │
    │                                                          │
    │  Errors:      DevConnectError → its status code          │
    │               RequestValidationError → 400               │
    │               IntegrityError → 409                       │
    │               unknown route → 404 envelope               │
    │               anything else → 500                        │
    └──────────────────────────────────────────────────────────┘

Error envelope:
    {"error": "<code>", "message": "...", "details": {...}?,
     "request_id": "...", "stack": "..."?}     (stack outside production only)
"""

import logging
import sys
import traceback
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from devconnect import __version__
from devconnect.config import Settings, get_settings
from devconnect.database import Database
from devconnect.exceptions import DevConnectError
from devconnect.middleware.logging import RequestLoggingMiddleware
from devconnect.middleware.rate_limit import RateLimitMiddleware
from devconnect.middleware.request_id import RequestIDMiddleware, request_id_var
from devconnect.routes import auth, health, profile, requests, users
from devconnect.services.user_service import UserService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure the root logger once at startup.

    Format: 2024-01-15T12:00:00 [INFO] devconnect.access: GET /user/feed 200 ...
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Configure logging
        2. Validate production-only settings (logged, not fatal)
        3. Create tables when AUTO_CREATE_TABLES is set (dev convenience;
           production uses `alembic upgrade head`)

    Shutdown:
        Dispose the engine so pooled connections are closed.
    """
    settings: Settings = app.state.settings
    database: Database = app.state.database

    setup_logging(settings)
    logger.info("=" * 60)
    logger.info("DevConnect Backend %s starting (%s)", __version__, settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: /health stays reachable and the log names the problem
        logger.error("Configuration error: %s", str(e))

    if settings.auto_create_tables:
        await database.create_all()
        logger.info("Database tables ensured (auto_create_tables=true)")

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("DevConnect Backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    # The catch-all handler runs outside RequestIDMiddleware, after the
    # ContextVar has been reset; request.state still holds the id
    return getattr(request.state, "request_id", "") or request_id_var.get("")


def error_body(
    request: Request,
    error: str,
    message: str,
    details: Optional[Any] = None,
    exc: Optional[BaseException] = None,
) -> Dict[str, Any]:
    """Build the uniform error envelope."""
    body: Dict[str, Any] = {"error": error, "message": message}
    if details:
        body["details"] = details
    body["request_id"] = _request_id(request)

    settings: Settings = request.app.state.settings
    if exc is not None and not settings.is_production:
        body["stack"] = "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        )
    return body


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to HTTP responses.

    Handler hierarchy:
        DevConnectError         → exc.status_code / exc.error_code
        RequestValidationError  → 400 validation_error (per-field details)
        IntegrityError          → 409 conflict
        SQLAlchemyError         → 500 server_error
        StarletteHTTPException  → its status (404 → "Route <path> not found")
        Exception               → 500 internal_server_error

    4xx responses carry `details`; 5xx responses carry a generic message and
    the real error goes to the log.
    """

    @app.exception_handler(DevConnectError)
    async def handle_devconnect_error(request: Request, exc: DevConnectError):
        rid = _request_id(request)
        headers = {}
        if exc.is_client_error:
            logger.warning(
                "[%s] %s %s → %d %s: %s",
                rid, request.method, request.url.path, exc.status_code, exc.error_code, exc.message,
            )
            message, details = exc.message, exc.context
            retry_after = getattr(exc, "retry_after", None)
            if retry_after is not None:
                headers["Retry-After"] = str(retry_after)
        else:
            logger.error(
                "[%s] %s %s → %d %s: %s | Context: %s",
                rid, request.method, request.url.path, exc.status_code, exc.error_code,
                exc.message, exc.context,
            )
            message, details = "An internal error occurred. Please try again later.", None

        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(request, exc.error_code, message, details, exc),
            headers=headers or None,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        details = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
                "message": err.get("msg", "Invalid value"),
            }
            for err in exc.errors()
        ]
        logger.warning(
            "[%s] %s %s → 400 validation_error: %s",
            _request_id(request), request.method, request.url.path, details,
        )
        return JSONResponse(
            status_code=400,
            content=error_body(request, "validation_error", "Validation failed", {"errors": details}, exc),
        )

    @app.exception_handler(IntegrityError)
    async def handle_integrity_error(request: Request, exc: IntegrityError):
        logger.warning(
            "[%s] %s %s → 409 integrity error: %s",
            _request_id(request), request.method, request.url.path, exc.orig,
        )
        return JSONResponse(
            status_code=409,
            content=error_body(request, "conflict", "Resource already exists", None, exc),
        )

    @app.exception_handler(SQLAlchemyError)
    async def handle_database_error(request: Request, exc: SQLAlchemyError):
        logger.error(
            "[%s] Database error on %s %s: %s",
            _request_id(request), request.method, request.url.path, str(exc), exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=error_body(
                request, "server_error", "An internal error occurred. Please try again later.", None, exc
            ),
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            error, message = "not_found", f"Route {request.url.path} not found"
        elif exc.status_code == 405:
            error, message = "method_not_allowed", f"Method {request.method} not allowed on {request.url.path}"
        else:
            error, message = "http_error", str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(request, error, message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error on %s %s: %s",
            _request_id(request), request.method, request.url.path, str(exc), exc_info=True,
        )
        return JSONResponse(
            status_code=500,
            content=error_body(
                request,
                "internal_server_error",
                "An unexpected error occurred. Please try again or contact support.",
                None,
                exc,
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    """
    Assemble the application.

    Args:
        settings: defaults to get_settings() (environment / .env)
        database: defaults to Database(settings); tests pass a pre-built one
    """
    settings = settings or get_settings()
    database = database or Database(settings)

    app = FastAPI(
        title="DevConnect API",
        description=(
            "Developer matching backend: accounts, profiles and the "
            "connect / accept / reject connection-request workflow."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.database = database
    app.state.user_service = UserService(settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → RateLimit → AccessLog → GZip → CORS
    # (429 responses carry the request id)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,  # auth cookie
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.rate_limit_requests,
        window_seconds=settings.rate_limit_window,
    )
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(profile.router)
    app.include_router(requests.router)
    app.include_router(users.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn devconnect.main:app
app = create_app()
