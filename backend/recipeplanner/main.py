"""
RecipePlanner Backend - FastAPI Application Factory
====================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn recipeplanner.main:app).
When:  Once at server startup; the returned app handles all subsequent requests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain:                                       │
    │  ┌──────────┐ ┌──────────┐ ┌──────┐ ┌──────┐             │
    │  │  Req ID  │→│ Logging  │→│ GZip │→│ CORS │             │
    │  └──────────┘ └──────────┘ └──────┘ └──────┘             │
    │                                                          │
    │  Routes:                                                 │
    │  ┌───────────┐ ┌──────────────┐ ┌────────────────┐       │
    │  │ /api/auth │ │ /api/recipes │ │ /api/meal-plans│       │
    │  └───────────┘ └──────────────┘ └────────────────┘       │
    │  ┌───────────────────┐ ┌─────────┐                       │
    │  │ /api/shopping-list│ │ /health │                       │
    │  └───────────────────┘ └─────────┘                       │
    │                                                          │
    │  app.state:                                              │
    │    token_codec, password_hasher, auth_service,           │
    │    recipe_source                                         │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, not fatal)
    3. Log startup complete

    Shutdown:
    1. Close the recipe API client
    2. Dispose database engine (close all connections)
    3. Log shutdown complete
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

from recipeplanner import __version__
from recipeplanner.config import Settings, settings
from recipeplanner.database import dispose_engine
from recipeplanner.exceptions import (
    DatabaseError,
    DuplicateUserError,
    InvalidCredentialsError,
    InvalidCurrentPasswordError,
    NotFoundError,
    NotFoundOrForbiddenError,
    RecipePlannerError,
    UnauthenticatedError,
    UpstreamUnavailableError,
    ValidationError,
)
from recipeplanner.middleware.logging import RequestLoggingMiddleware
from recipeplanner.middleware.request_id import RequestIDMiddleware, request_id_var
from recipeplanner.routes import auth, health, meal_plans, recipes, shopping_list
from recipeplanner.services.auth_service import AuthService
from recipeplanner.services.password_service import PasswordHasher
from recipeplanner.services.spoonacular_service import SpoonacularService
from recipeplanner.services.token_service import TokenCodec

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: Optional[str] = None) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s

    Called once during app startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level or settings.log_level, logging.INFO),
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
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    # httpx logs full request URLs at INFO, and ours carry the Spoonacular apiKey
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        1. Setup logging
        2. Validate critical configuration
        3. Log successful startup

    Shutdown:
        1. Close the shared httpx client of the recipe source
        2. Dispose database engine (close all pooled connections)
    """
    app_settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("RecipePlanner Backend %s starting up...", __version__)

    try:
        app_settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")
        # Keep serving: health checks and the unaffected routes still work

    logger.info("Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", app_settings.backend_host, app_settings.backend_port)
    logger.info("=" * 60)

    yield  # Application runs here

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("RecipePlanner Backend shutting down...")
    await app.state.recipe_source.aclose()
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, error: str, message: str, details=None) -> JSONResponse:
    content = {
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError / RequestValidationError  → 400 validation_error
        DuplicateUserError                        → 400 duplicate_user
        InvalidCredentialsError                   → 400 invalid_credentials
        InvalidCurrentPasswordError               → 400 invalid_current_password
        UnauthenticatedError                      → 401 unauthenticated
        NotFoundError / NotFoundOrForbiddenError  → 404 not_found
        UpstreamUnavailableError (+ breaker open) → 503 upstream_unavailable
        DatabaseError                             → 500 server_error
        RecipePlannerError (base)                 → 500 server_error
        Exception (fallback)                      → 500 internal_server_error

    Security: handlers never put stack traces, SQL or token details in the
    response. `context` goes to the log only, except a ValidationError's
    list of field errors, which the client needs.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, {"errors": exc.errors})

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed body, path or query: reported like our own ValidationError."""
        errors = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ())[1:]) or "body",
                "message": error.get("msg", "Invalid value"),
            }
            for error in exc.errors()
        ]
        logger.warning("[%s] Request validation failed: %d error(s)", request_id_var.get(""), len(errors))
        return _error_response(400, "validation_error", "Validation failed", {"errors": errors})

    @app.exception_handler(DuplicateUserError)
    async def handle_duplicate_user(request: Request, exc: DuplicateUserError):
        return _error_response(400, "duplicate_user", exc.message)

    @app.exception_handler(InvalidCredentialsError)
    async def handle_invalid_credentials(request: Request, exc: InvalidCredentialsError):
        return _error_response(400, "invalid_credentials", exc.message)

    @app.exception_handler(InvalidCurrentPasswordError)
    async def handle_invalid_current_password(request: Request, exc: InvalidCurrentPasswordError):
        return _error_response(400, "invalid_current_password", exc.message)

    @app.exception_handler(UnauthenticatedError)
    async def handle_unauthenticated(request: Request, exc: UnauthenticatedError):
        return _error_response(401, "unauthenticated", exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(NotFoundOrForbiddenError)
    async def handle_not_found_or_forbidden(request: Request, exc: NotFoundOrForbiddenError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(UpstreamUnavailableError)
    async def handle_upstream_unavailable(request: Request, exc: UpstreamUnavailableError):
        """Spoonacular failed or the breaker is open; CircuitBreakerOpenError lands here too."""
        rid = request_id_var.get("")
        logger.error("[%s] Recipe API unavailable: %s | Context: %s", rid, exc.message, exc.context)
        response = _error_response(503, "upstream_unavailable", exc.message)
        recovery_time = getattr(exc, "recovery_time", None)
        if recovery_time:
            response.headers["Retry-After"] = str(recovery_time)
        return response

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        """Generic message to the user, details logged server-side."""
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return _error_response(
            500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(RecipePlannerError)
    async def handle_application_error(request: Request, exc: RecipePlannerError):
        rid = request_id_var.get("")
        logger.error("[%s] Unhandled application error %s: %s", rid, type(exc).__name__, exc.message)
        return _error_response(
            500, "server_error", "An internal error occurred. Please try again later."
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: generic 500 with a request ID; stack trace to the log only."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Defaults to the module-level `settings`. Tests pass
                      their own to get a separate codec/hasher.

    The shared collaborators are built here, once, and kept on app.state:
        token_codec      signing secret from settings; nothing else holds it
        password_hasher  bcrypt with the configured cost
        auth_service     the two above plus the users table
        recipe_source    Spoonacular client with its circuit breaker
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title="RecipePlanner API",
        description=(
            "Recipe search, saved recipes, weekly meal plans and a shopping list. "
            "Authenticate with the token from /api/auth/login in the x-auth-token header."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Shared Collaborators ──────────────────────────────────────────────
    token_codec = TokenCodec.from_settings(app_settings)
    password_hasher = PasswordHasher(rounds=app_settings.bcrypt_rounds)
    app.state.settings = app_settings
    app.state.token_codec = token_codec
    app.state.password_hasher = password_hasher
    app.state.auth_service = AuthService(
        hasher=password_hasher,
        codec=token_codec,
        min_password_length=app_settings.min_password_length,
    )
    app.state.recipe_source = SpoonacularService.from_settings(app_settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition:
    # RequestID → Logging → GZip → CORS → route

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )

    # Don't compress small responses (overhead > savings)
    app.add_middleware(GZipMiddleware, minimum_size=500)

    app.add_middleware(RequestLoggingMiddleware)

    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(recipes.router)
    app.include_router(meal_plans.router)
    app.include_router(shopping_list.router)
    app.include_router(health.router)

    return app


# ── Application Instance ─────────────────────────────────────────────────
# uvicorn expects `recipeplanner.main:app` to be importable
app = create_app()
