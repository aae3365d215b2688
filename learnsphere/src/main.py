"""
FastAPI application entry point for the LearnSphere API.

This module provides the main FastAPI application with:
- Health, readiness and Prometheus metrics endpoints
- JWT authentication, learning, content and history routers
- Request/response logging with correlation ids
- CORS, security headers, and rate limiting
- MongoDB (or in-memory) storage lifecycle
- Graceful startup and shutdown
"""

import structlog
import uvicorn
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from pymongo import AsyncMongoClient
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from learnsphere.shared.logging import configure_logging
from learnsphere.src.config import Settings, get_settings
from learnsphere.src.middleware import (
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
    configure_limiter,
)
from learnsphere.src.repositories import Repositories, memory_repositories, mongo_repositories
from learnsphere.src.routers import admin, auth, health, history, learning
from learnsphere.src.services.auth_service import AuthService
from learnsphere.src.services.demo_users import seed_demo_users
from learnsphere.src.services.learning_service import LearningService
from learnsphere.src.services.response_cache import ResponseCache
from learnsphere.src.services.sonar_client import SonarClient

# Initialize logger
logger = structlog.get_logger(__name__)

# ============================================================================
# Lifespan Management
# ============================================================================


async def open_storage(app: FastAPI, settings: Settings) -> Repositories:
    """Connect to MongoDB (or build the in-memory store) and return the repositories."""
    if settings.storage_backend == "memory":
        logger.info("initializing_memory_storage")
        app.state.mongo_client = None
        return memory_repositories()

    logger.info("initializing_mongo_client", database=settings.mongo_database)
    client = AsyncMongoClient(
        settings.mongo_url,
        tz_aware=True,
        serverSelectionTimeoutMS=settings.mongo_server_selection_timeout_ms,
    )
    app.state.mongo_client = client

    await client.admin.command("ping")
    logger.info("database_connected", database=settings.mongo_database)

    repositories = mongo_repositories(client[settings.mongo_database])
    await repositories.ensure_indexes()
    return repositories


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan manager for startup and shutdown events.

    Handles:
    - Storage initialization (MongoDB client and indexes, or in-memory store)
    - Service, cache and Sonar client initialization
    - Demo account seeding for the in-memory store
    - Graceful shutdown and resource cleanup
    """
    settings: Settings = app.state.settings
    app.state.mongo_client = None
    app.state.sonar_client = None

    logger.info(
        "application_starting",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        storage_backend=settings.storage_backend
    )

    # ========================================================================
    # Startup: Initialize Resources
    # ========================================================================

    try:
        repositories = await open_storage(app, settings)
        app.state.repositories = repositories

        logger.info("initializing_services")
        app.state.auth_service = AuthService(repositories.users, settings)
        app.state.response_cache = ResponseCache(
            ttl_seconds=settings.response_cache_ttl_seconds,
            max_size=settings.response_cache_max_size,
        )
        app.state.sonar_client = SonarClient(settings)
        app.state.learning_service = LearningService(
            repositories.history,
            repositories.content,
            sonar_client=app.state.sonar_client,
            cache=app.state.response_cache,
            settings=settings,
        )

        if settings.sonar_mock_mode:
            logger.warning("sonar_mock_mode_enabled", reason="no Sonar API key configured")

        if repositories.store is not None and settings.seed_demo_users:
            await seed_demo_users(app.state.auth_service)

        logger.info(
            "application_started",
            app_name=settings.app_name,
            version=settings.app_version,
            environment=settings.environment
        )

    except Exception as e:
        logger.error("application_startup_failed", error=str(e), exc_info=True)
        await close_resources(app)
        raise

    try:
        yield

    # ========================================================================
    # Shutdown: Cleanup Resources
    # ========================================================================

    finally:
        logger.info("application_shutting_down")
        await close_resources(app)
        logger.info("application_shutdown_complete")


async def close_resources(app: FastAPI) -> None:
    try:
        if app.state.sonar_client is not None:
            await app.state.sonar_client.close()

        if app.state.mongo_client is not None:
            logger.info("closing_mongo_client")
            await app.state.mongo_client.close()

    except Exception as e:
        logger.error("application_shutdown_failed", error=str(e), exc_info=True)


# ============================================================================
# Exception Handlers
# ============================================================================


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors."""
    logger.warning(
        "validation_error",
        path=request.url.path,
        errors=exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_encoder(exc.errors())}
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    logger.warning(
        "http_exception",
        path=request.url.path,
        status_code=exc.status_code,
        detail=exc.detail
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None)
    )


async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(
        "unexpected_exception",
        path=request.url.path,
        error=str(exc),
        exc_info=True
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"}
    )


# ============================================================================
# FastAPI Application
# ============================================================================


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Settings override (defaults to the cached environment settings)

    Returns:
        Configured application; resources are created by its lifespan
    """
    settings = settings or get_settings()

    configure_logging(
        log_level=settings.log_level,
        json_logs=settings.log_format == "json",
        service_name=settings.app_name,
        environment=settings.environment,
    )

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=(
            "AI-powered learning assistant API. Answers questions at the "
            "learner's level with cited sources, generates learning paths and "
            "keeps each user's history and saved content."
        ),
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        debug=settings.debug,
    )
    app.state.settings = settings
    app.state.limiter = configure_limiter(settings)

    # ========================================================================
    # Middleware Configuration
    # ========================================================================

    if settings.cors_enabled:
        logger.info("configuring_cors", origins=settings.cors_origins)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=settings.cors_allow_credentials,
            allow_methods=settings.cors_allow_methods,
            allow_headers=settings.cors_allow_headers,
        )

    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware, metrics_enabled=settings.metrics_enabled)

    if settings.security_headers_enabled:
        app.add_middleware(
            SecurityHeadersMiddleware,
            require_https=settings.security_require_https,
            hsts_max_age=settings.security_hsts_max_age,
        )

    # ========================================================================
    # Exception Handlers
    # ========================================================================

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    # ========================================================================
    # API Router Registration
    # ========================================================================

    app.include_router(auth.router, prefix=settings.api_prefix)
    app.include_router(learning.router, prefix=settings.api_prefix)
    app.include_router(history.router, prefix=settings.api_prefix)
    app.include_router(admin.router, prefix=settings.api_prefix)
    app.include_router(health.router, prefix=settings.api_prefix)
    app.include_router(health.monitoring_router)

    return app


app = create_app()


# ============================================================================
# Application Entry Point
# ============================================================================


def run() -> None:
    """
    Run the application with Uvicorn.

    In production, run several Uvicorn workers behind a process manager.
    """
    settings = get_settings()
    logger.info(
        "starting_uvicorn_server",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )

    uvicorn.run(
        "learnsphere.src.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


if __name__ == "__main__":
    run()
