"""
Learning router: queries, follow-ups, learning paths and saved content.

All endpoints require a bearer token.
"""

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
from learnsphere.src.models.content import ContentDB, ContentListResponse, ContentType
from learnsphere.src.models.learning import (
    FollowUpRequest,
    LearningPathRequest,
    LearningPathResponse,
    LearningQueryRequest,
    LearningResponse,
    QueryResponse,
    SaveContentRequest,
    SaveContentResponse,
)
from learnsphere.src.services.learning_service import LearningService, LearningServiceError

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/learning",
    tags=["Learning"],
    responses={
        401: {"model": ErrorResponse, "description": "Unauthorized"},
        422: {"description": "Validation Error"}
    }
)

UPSTREAM_ERROR = {502: {"model": ErrorResponse, "description": "Answer generation failed"}}


def _bad_gateway(error: LearningServiceError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(error))


# ============================================================================
# ANSWERS
# ============================================================================


@router.post("/query", response_model=QueryResponse, summary="Ask a Question", responses=UPSTREAM_ERROR)
async def query(
    payload: LearningQueryRequest,
    current_user: CurrentUser = Depends(get_current_user),
    learning_service: LearningService = Depends(get_learning_service)
) -> QueryResponse:
    """
    Answer a learning question at the requested knowledge level.

    The answer is recorded in the user's history under a new session id,
    which can be passed to ``/follow-up`` to continue the conversation.

    **Error Responses:**
    - 401: Missing or invalid token
    - 422: Empty or overlong query, unknown level
    - 502: The answer could not be generated
    """
    try:
        return await learning_service.query(current_user, payload)
    except LearningServiceError as e:
        raise _bad_gateway(e)


@router.post("/follow-up", response_model=LearningResponse, summary="Follow-up Question", responses=UPSTREAM_ERROR)
async def follow_up(
    payload: FollowUpRequest,
    current_user: CurrentUser = Depends(get_current_user),
    learning_service: LearningService = Depends(get_learning_service)
) -> LearningResponse:
    try:
        return await learning_service.follow_up(current_user, payload)
    except LearningServiceError as e:
        raise _bad_gateway(e)


@router.post("/path", response_model=LearningPathResponse, summary="Generate Learning Path", responses=UPSTREAM_ERROR)
async def learning_path(
    payload: LearningPathRequest,
    current_user: CurrentUser = Depends(get_current_user),
    learning_service: LearningService = Depends(get_learning_service)
) -> LearningPathResponse:
    """Generate a staged learning path for a topic and save it as content."""
    try:
        return await learning_service.create_learning_path(current_user, payload)
    except LearningServiceError as e:
        raise _bad_gateway(e)


# ============================================================================
# SAVED CONTENT
# ============================================================================


@router.post(
    "/save",
    response_model=SaveContentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save Content"
)
async def save_content(
    payload: SaveContentRequest,
    current_user: CurrentUser = Depends(get_current_user),
    learning_service: LearningService = Depends(get_learning_service)
) -> SaveContentResponse:
    response = await learning_service.save_content(current_user, payload)
    logger.info("content_saved", user_id=current_user.id, content_id=response.content_id)
    return response


@router.get("/content", response_model=ContentListResponse, summary="List Saved Content")
async def list_content(
    content_type: Optional[ContentType] = Query(None, alias="type", description="Filter by content type"),
    pagination: PaginationParams = Depends(get_pagination_params),
    current_user: CurrentUser = Depends(get_current_user),
    learning_service: LearningService = Depends(get_learning_service)
) -> ContentListResponse:
    """List the user's saved content, newest first (bodies omitted)."""
    items, page = await learning_service.list_content(
        current_user,
        content_type.value if content_type else None,
        page=pagination.page,
        limit=pagination.limit,
    )
    return ContentListResponse(content=items, pagination=page)


@router.get(
    "/content/{content_id}",
    response_model=ContentDB,
    summary="Get Saved Content",
    responses={404: {"model": ErrorResponse, "description": "Content not found"}}
)
async def get_content(
    content_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    learning_service: LearningService = Depends(get_learning_service)
) -> ContentDB:
    content = await learning_service.get_content(current_user, content_id)
    if content is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Content not found")
    return content
