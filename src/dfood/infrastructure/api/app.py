"""FastAPI application factory and configuration.

This module provides the application factory function for creating
and configuring the FastAPI application with all middleware, routes,
and lifecycle handlers.
"""

import asyncio
from contextlib import asynccontextmanager, suppress
from datetime import timedelta
from http import HTTPStatus
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from dfood.core.config import Settings, get_settings
from dfood.core.logging import (
    bind_correlation_id,
    clear_context,
    configure_logging,
    get_logger,
    new_correlation_id,
)
from dfood.domain.services import AuthErrorKind, AuthServiceError
from dfood.infrastructure.api.middleware import RateLimitMiddleware, RateLimitStorage
from dfood.infrastructure.auth import (
    InMemoryRevocationStore,
    JWTService,
    run_revocation_sweeper,
)
from dfood.infrastructure.persistence.database import (
    close_database,
    get_db_manager,
    init_database,
)

logger = get_logger(__name__)

STATUS_BY_KIND = {
    AuthErrorKind.BAD_REQUEST: 400,
    AuthErrorKind.UNAUTHORIZED: 401,
    AuthErrorKind.FORBIDDEN: 403,
    AuthErrorKind.NOT_FOUND: 404,
    AuthErrorKind.CONFLICT: 409,
    AuthErrorKind.INTERNAL: 500,
}


def error_response(
    status_code: int, message: str, headers: dict[str, str] | None = None
) -> JSONResponse:
    """Build the JSON error body shared by all failed requests."""
    return JSONResponse(
        status_code=status_code,
        content={"error": HTTPStatus(status_code).phrase, "message": message},
        headers=headers,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Initializes the database and runs the revocation sweeper for the
    lifetime of the application.
    """
    settings: Settings = app.state.settings

    configure_logging(settings)
    logger.info(
        "Starting dfood",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
    )

    try:
        await init_database()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    sweeper: asyncio.Task | None = None
    if settings.revocation_sweep_interval_seconds > 0:
        sweeper = asyncio.create_task(
            run_revocation_sweeper(
                app.state.revocation_store, settings.revocation_sweep_interval_seconds
            )
        )
        logger.info(
            "Revocation sweeper started",
            interval_seconds=settings.revocation_sweep_interval_seconds,
        )

    yield

    logger.info("Shutting down dfood")

    if sweeper is not None:
        sweeper.cancel()
        with suppress(asyncio.CancelledError):
            await sweeper

    await close_database()
    logger.info("Database connection closed")


def create_app(
    settings: Settings | None = None,
    jwt_service: JWTService | None = None,
    rate_limit_storage: RateLimitStorage | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Overrides the environment settings.
        jwt_service: Overrides the token service; its revocation store becomes
            the application's store.
        rate_limit_storage: Overrides the rate limit buckets.

    Returns:
        FastAPI: Configured FastAPI application instance.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Authentication service of the dfood food-delivery backend",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
        lifespan=lifespan,
    )

    if jwt_service is None:
        jwt_service = JWTService(
            secret_key=settings.secret_key,
            revocation_store=InMemoryRevocationStore(),
            access_token_lifetime=timedelta(minutes=settings.access_token_expire_minutes),
            refresh_token_lifetime=timedelta(days=settings.refresh_token_expire_days),
        )

    # One token service and revocation set per process, shared by all requests
    app.state.settings = settings
    app.state.jwt_service = jwt_service
    app.state.revocation_store = jwt_service.revocation_store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_health_check(app)
    register_routes(app)
    register_exception_handlers(app)
    register_middleware(app, rate_limit_storage)

    return app


def register_health_check(app: FastAPI) -> None:
    """Register health check endpoints.

    Args:
        app: FastAPI application instance.
    """
    settings: Settings = app.state.settings

    @app.get("/health", tags=["health"])
    async def health_check():
        """Basic health check; does not touch the database."""
        return {"status": "healthy", "service": settings.app_name, "version": settings.app_version}

    @app.get("/ready", tags=["health"])
    async def readiness_check():
        """Readiness check including database connectivity."""
        if await get_db_manager().check_connection():
            return {
                "status": "ready",
                "service": settings.app_name,
                "version": settings.app_version,
                "database": "connected",
            }
        return JSONResponse(
            status_code=503,
            content={
                "status": "not_ready",
                "service": settings.app_name,
                "database": "disconnected",
            },
        )

    @app.get("/live", tags=["health"])
    async def liveness_check():
        return {"status": "alive", "service": settings.app_name, "version": settings.app_version}


def register_routes(app: FastAPI) -> None:
    """Register API routes.

    Args:
        app: FastAPI application instance.
    """
    from dfood.infrastructure.api.routes import auth_router

    settings: Settings = app.state.settings
    app.include_router(auth_router, prefix=f"{settings.api_prefix}/auth", tags=["auth"])


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers.

    Auth failures, HTTP errors and validation errors all share the
    ``{"error", "message"}`` body.
    """

    @app.exception_handler(AuthServiceError)
    async def auth_error_handler(request: Request, exc: AuthServiceError):
        status_code = STATUS_BY_KIND[exc.kind]
        headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
        return error_response(status_code, exc.message, headers)

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return error_response(exc.status_code, str(exc.detail), exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        field = ".".join(str(part) for part in first.get("loc", ())[1:])
        message = first.get("msg", "Invalid request")
        return error_response(400, f"{field}: {message}" if field else message)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions."""
        logger.error(
            "Unhandled exception",
            path=str(request.url),
            method=request.method,
            error=str(exc),
            exc_type=type(exc).__name__,
        )
        settings: Settings = request.app.state.settings
        return error_response(
            500, str(exc) if settings.debug else "An unexpected error occurred"
        )


def register_middleware(app: FastAPI, rate_limit_storage: RateLimitStorage | None = None) -> None:
    """Register rate limiting and request logging middleware.

    Args:
        app: FastAPI application instance.
        rate_limit_storage: Buckets to use instead of a fresh storage.
    """
    app.add_middleware(
        RateLimitMiddleware,
        settings=app.state.settings,
        storage=rate_limit_storage,
    )

    @app.middleware("http")
    async def logging_middleware(request: Request, call_next):
        """Log every request and tag it with a correlation ID."""
        correlation_id = request.headers.get("X-Correlation-ID") or new_correlation_id()
        bind_correlation_id(correlation_id)

        logger.info("Request started", method=request.method, path=request.url.path)

        try:
            response = await call_next(request)
            logger.info(
                "Request completed",
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
            )
            response.headers["X-Correlation-ID"] = correlation_id
            return response
        finally:
            clear_context()


app = create_app()
