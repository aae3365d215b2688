"""
Admin router for service statistics and the answer cache.

All endpoints require a bearer token for a user with the admin role.
"""

import re
import structlog
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from learnsphere.src.dependencies import get_repositories, get_response_cache, require_admin
from learnsphere.src.models.auth import CurrentUser, ErrorResponse
from learnsphere.src.repositories import Repositories
from learnsphere.src.services.response_cache import ResponseCache

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        403: {"model": ErrorResponse, "description": "Forbidden"}
    }
)


@router.get("/stats", summary="Service Statistics")
async def stats(
    admin: CurrentUser = Depends(require_admin),
    repositories: Repositories = Depends(get_repositories),
    cache: ResponseCache = Depends(get_response_cache)
) -> Dict[str, Any]:
    """
    Registered user count and answer cache statistics.

    **Required Role:** admin
    """
    return {
        "users": await repositories.users.count_users(),
        "cache": cache.get_statistics(),
    }


@router.delete("/cache", summary="Clear Answer Cache")
async def clear_cache(
    pattern: Optional[str] = Query(None, max_length=200, description="Only drop keys matching this regular expression"),
    admin: CurrentUser = Depends(require_admin),
    cache: ResponseCache = Depends(get_response_cache)
) -> Dict[str, Any]:
    """
    Drop cached answers, all of them or those whose key matches ``pattern``.

    Keys look like ``query:<level>:<digest>`` and ``path:<level>:<digest>``,
    so a pattern such as ``^path:`` drops every cached learning path.

    **Required Role:** admin
    """
    if pattern:
        try:
            removed = cache.invalidate_pattern(pattern)
        except re.error as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid pattern: {e}"
            )
    else:
        removed = len(cache)
        cache.clear()

    logger.info("answer_cache_cleared", admin_id=admin.id, pattern=pattern, removed=removed)
    return {"success": True, "removed": removed}
