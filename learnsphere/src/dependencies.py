"""
FastAPI dependency injection for authentication, services and request data.

Provides injectable dependencies for:
- User authentication (JWT bearer token validation)
- Authorization (admin role)
- Repository and service instances built during application startup
- Pagination and client information

Services live on ``app.state`` (see ``main.lifespan``), so every dependency
reads them from the incoming request.
"""

import structlog
from typing import Optional

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from learnsphere.src.config import Settings
from learnsphere.src.models.auth import CurrentUser
from learnsphere.src.repositories import Repositories
from learnsphere.src.services.auth_service import AuthService
from learnsphere.src.services.learning_service import LearningService
from learnsphere.src.services.response_cache import ResponseCache

logger = structlog.get_logger(__name__)

# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"}
    )


# ============================================================================
# APPLICATION STATE
# ============================================================================


def get_settings_dependency(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_repositories(request: Request) -> Repositories:
    return request.app.state.repositories


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_learning_service(request: Request) -> LearningService:
    return request.app.state.learning_service


def get_response_cache(request: Request) -> ResponseCache:
    return request.app.state.response_cache


# ============================================================================
# AUTHENTICATION DEPENDENCIES
# ============================================================================


async def get_token_from_header(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> str:
    """
    Extract JWT token from Authorization header.

    Args:
        credentials: HTTP bearer credentials

    Returns:
        JWT token string

    Raises:
        HTTPException: If the header is missing or not a bearer token
    """
    if not credentials or not credentials.credentials:
        logger.warning("auth_missing_credentials")
        raise _unauthorized("No token, authorization denied")

    if credentials.scheme.lower() != "bearer":
        logger.warning("auth_invalid_scheme", scheme=credentials.scheme)
        raise _unauthorized("No token, authorization denied")

    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_token_from_header),
    auth_service: AuthService = Depends(get_auth_service)
) -> CurrentUser:
    """
    Get current authenticated user from JWT token.

    Args:
        token: JWT token
        auth_service: Authentication service

    Returns:
        Current authenticated user

    Raises:
        HTTPException: 401 if the token is invalid or its user no longer exists

    Example:
        @router.get("/me")
        async def me(user: CurrentUser = Depends(get_current_user)):
            return {"email": user.email}
    """
    payload = auth_service.decode_token(token)
    if payload is None:
        logger.warning("auth_invalid_token")
        raise _unauthorized("Token is not valid")

    current_user = await auth_service.resolve_user(payload)
    if current_user is None:
        raise _unauthorized("User not found")

    logger.debug("user_authenticated", user_id=current_user.id, role=current_user.role.value)
    return current_user


async def require_admin(
    current_user: CurrentUser = Depends(get_current_user)
) -> CurrentUser:
    """
    Require admin role.

    Raises:
        HTTPException: 403 if the user is not an admin
    """
    if not current_user.is_admin():
        logger.warning("access_denied_admin_required", user_id=current_user.id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required"
        )
    return current_user


# ============================================================================
# UTILITY DEPENDENCIES
# ============================================================================


async def get_client_ip(request: Request) -> str:
    """
    Get client IP address from request.

    Checks X-Forwarded-For header first (for proxies),
    then falls back to client host.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, get the first one
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"


# ============================================================================
# PAGINATION DEPENDENCIES
# ============================================================================


class PaginationParams:
    """Page based pagination for list endpoints."""

    def __init__(self, page: int, limit: int, max_limit: int):
        """
        Initialize pagination parameters.

        Args:
            page: 1-based page number (values below 1 become 1)
            limit: Page size, clamped to 1..max_limit
            max_limit: Largest allowed page size
        """
        self.page = max(page, 1)
        self.limit = min(max(limit, 1), max_limit)

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


async def get_pagination_params(
    page: int = Query(1, description="Page number (1-based)"),
    limit: Optional[int] = Query(None, description="Items per page"),
    settings: Settings = Depends(get_settings_dependency)
) -> PaginationParams:
    """
    Get pagination parameters from query string.

    Example:
        @router.get("/history")
        async def list_history(pagination: PaginationParams = Depends(get_pagination_params)):
            ...
    """
    return PaginationParams(
        page=page,
        limit=limit if limit is not None else settings.pagination_default_limit,
        max_limit=settings.pagination_max_limit,
    )
