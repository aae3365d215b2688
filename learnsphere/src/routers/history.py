"""History router: the user's past queries and their follow-ups."""

import structlog
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from learnsphere.src.dependencies import (
    PaginationParams,
    get_current_user,
    get_learning_service,
    get_pagination_params,
)
from learnsphere.src.models.auth import CurrentUser, ErrorResponse
from learnsphere.src.models.history import HistoryDB, HistoryListResponse
from learnsphere.src.services.learning_service import LearningService

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/history",
    tags=["History"],
    responses={401: {"model": ErrorResponse, "description": "Unauthorized"}}
)


@router.get("", response_model=HistoryListResponse, summary="List History")
async def list_history(
    query: Optional[str] = Query(None, max_length=200, description="Case-insensitive text filter"),
    pagination: PaginationParams = Depends(get_pagination_params),
    current_user: CurrentUser = Depends(get_current_user),
    learning_service: LearningService = Depends(get_learning_service)
) -> HistoryListResponse:
    """
    List the user's history entries, newest first.

    ``query`` matches the question or answer text, ignoring case.
    """
    entries, page = await learning_service.list_history(
        current_user,
        page=pagination.page,
        limit=pagination.limit,
        search=query or None,
    )
    return HistoryListResponse(history=entries, pagination=page)


@router.get(
    "/{entry_id}",
    response_model=HistoryDB,
    summary="Get History Entry",
    responses={404: {"model": ErrorResponse, "description": "History item not found"}}
)
async def get_history_entry(
    entry_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    learning_service: LearningService = Depends(get_learning_service)
) -> HistoryDB:
    entry = await learning_service.get_history_entry(current_user, entry_id)
    if entry is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="History item not found")
    return entry
