"""
Learning service.

Ties prompt construction, the Sonar client (or canned answers in mock
mode), the response cache and the history/content repositories together
for the learning endpoints.
"""

import asyncio
import uuid
import structlog
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional, Tuple

import aiohttp

from learnsphere.src.config import Settings, get_settings
from learnsphere.src.models.auth import CurrentUser
from learnsphere.src.models.content import ContentDB, ContentSummary, ContentType, Pagination
from learnsphere.src.models.history import FollowUp, HistoryDB, LearningContext
from learnsphere.src.models.learning import (
    FollowUpRequest,
    LearningPathRequest,
    LearningQueryRequest,
    LearningPathResponse,
    LearningResponse,
    QueryResponse,
    SaveContentRequest,
    SaveContentResponse,
)
from learnsphere.src.services import mock_responses
from learnsphere.src.services.prompts import (
    analyze_query_intent,
    build_follow_up_prompt,
    build_learning_path_prompt,
    build_query_prompt,
)
from learnsphere.src.services.response_cache import ResponseCache, make_key
from learnsphere.src.services.sonar_client import SonarAPIError, SonarClient

logger = structlog.get_logger(__name__)

SONAR_FAILURES = (SonarAPIError, aiohttp.ClientError, asyncio.TimeoutError)


class LearningServiceError(Exception):
    """The answer could not be produced (Sonar unavailable outside development)."""


class LearningService:
    """Service behind the learning, content and history endpoints."""

    def __init__(
        self,
        history_repo,
        content_repo,
        sonar_client: Optional[SonarClient] = None,
        cache: Optional[ResponseCache] = None,
        settings: Optional[Settings] = None,
    ):
        self.history_repo = history_repo
        self.content_repo = content_repo
        self.settings = settings or get_settings()
        self.sonar_client = sonar_client or SonarClient(self.settings)
        self.cache = cache

    @property
    def mock_mode(self) -> bool:
        return self.settings.sonar_mock_mode

    async def _mock_delay(self) -> None:
        if self.settings.sonar_mock_delay_seconds > 0:
            await asyncio.sleep(self.settings.sonar_mock_delay_seconds)

    async def _answer(
        self,
        call: Callable[[], Awaitable[LearningResponse]],
        fallback: Callable[[], LearningResponse],
        failure_message: str,
    ) -> Tuple[LearningResponse, bool]:
        """
        Serve from mock mode, the Sonar API, or the development fallback.

        Returns the answer and whether it may be cached. A development
        fallback after a Sonar failure is not cacheable, so the live API is
        asked again once it recovers.
        """
        if self.mock_mode:
            await self._mock_delay()
            return fallback(), True

        try:
            return await call(), True
        except SONAR_FAILURES as e:
            logger.error("sonar_request_failed", error=str(e), error_type=type(e).__name__)
            if self.settings.is_development:
                logger.info("sonar_mock_fallback")
                return fallback(), False
            raise LearningServiceError(f"{failure_message}: {e}") from e

    def _cached(self, key: str) -> Optional[LearningResponse]:
        if self.cache is None or not self.settings.response_cache_enabled:
            return None
        cached = self.cache.get(key)
        if cached is None:
            return None
        return cached.model_copy(update={"timestamp": datetime.now(timezone.utc)}, deep=True)

    def _store(self, key: str, response: LearningResponse) -> None:
        if self.cache is not None and self.settings.response_cache_enabled:
            self.cache.set(key, response.model_copy(deep=True))

    # ========================================================================
    # Queries
    # ========================================================================

    async def query(self, user: CurrentUser, request: LearningQueryRequest) -> QueryResponse:
        """
        Answer a learning query and record it in the user's history.

        Args:
            user: Authenticated user
            request: Query and options

        Returns:
            Answer with a new session id

        Raises:
            LearningServiceError: If the Sonar API fails outside development
        """
        level = request.options.level.value
        cache_key = make_key("query", level, request.query)

        response = self._cached(cache_key)
        if response is None:
            prompt = build_query_prompt(
                request.query,
                level,
                analyze_query_intent(request.query),
                advanced=self.settings.use_advanced_prompts,
            )
            response, cacheable = await self._answer(
                lambda: self.sonar_client.ask(prompt, context=request.options.previous_context),
                lambda: mock_responses.get_mock_response(request.query),
                "Failed to get response from Perplexity",
            )
            if cacheable:
                self._store(cache_key, response)

        session_id = uuid.uuid4().hex
        await self.history_repo.create_entry(HistoryDB(
            id="",
            user_id=user.id,
            session_id=session_id,
            query=request.query,
            response=response.content,
            citations=response.citations,
            learning_context=LearningContext(level=level),
        ))

        logger.info(
            "learning_query_answered",
            user_id=user.id,
            session_id=session_id,
            level=level,
            citations=len(response.citations)
        )
        return QueryResponse(**response.model_dump(), session_id=session_id)

    async def follow_up(self, user: CurrentUser, request: FollowUpRequest) -> LearningResponse:
        """
        Answer a follow-up question within an existing conversation.

        Only the last ``max_previous_messages`` messages are forwarded. The
        exchange is appended to the history entry of ``session_id`` when the
        user owns one.
        """
        level = request.level.value
        limit = self.settings.max_previous_messages
        previous = [m.model_dump() for m in request.messages]
        previous = previous[-limit:] if limit else []

        prompt = build_follow_up_prompt(
            request.follow_up_query,
            level,
            advanced=self.settings.use_advanced_prompts,
            context_retention=self.settings.use_context_retention,
        )
        response, _ = await self._answer(
            lambda: self.sonar_client.ask_follow_up(prompt, previous),
            lambda: mock_responses.get_mock_response(request.follow_up_query),
            "Failed to get response for follow-up question",
        )

        if request.session_id:
            recorded = await self.history_repo.add_follow_up(
                request.session_id,
                user.id,
                FollowUp(
                    query=request.follow_up_query,
                    response=response.content,
                    citations=response.citations,
                ),
            )
            if not recorded:
                logger.warning("follow_up_session_not_found", session_id=request.session_id, user_id=user.id)

        logger.info("follow_up_answered", user_id=user.id, session_id=request.session_id)
        return response

    async def create_learning_path(self, user: CurrentUser, request: LearningPathRequest) -> LearningPathResponse:
        """Generate a learning path and save it to the user's content."""
        level = request.level.value
        cache_key = make_key("path", level, request.topic)

        response = self._cached(cache_key)
        if response is None:
            prompt = build_learning_path_prompt(
                request.topic,
                level,
                advanced=self.settings.use_advanced_prompts,
            )
            response, cacheable = await self._answer(
                lambda: self.sonar_client.generate_learning_path(prompt),
                lambda: mock_responses.generate_mock_learning_path(request.topic, level),
                "Failed to generate learning path",
            )
            response.follow_up_questions = []
            if cacheable:
                self._store(cache_key, response)

        saved = await self.content_repo.create_content(ContentDB(
            id="",
            user_id=user.id,
            type=ContentType.LEARNING_PATH,
            title=f"Learning Path: {request.topic}"[:200],
            content=response.content,
            metadata={
                "topic": request.topic,
                "level": level,
                "citations": [c.model_dump() for c in response.citations],
            },
        ))

        logger.info("learning_path_created", user_id=user.id, path_id=saved.id, level=level)
        return LearningPathResponse(
            **response.model_dump(),
            topic=request.topic,
            level=level,
            path_id=saved.id,
        )

    # ========================================================================
    # Saved content
    # ========================================================================

    async def save_content(self, user: CurrentUser, request: SaveContentRequest) -> SaveContentResponse:
        saved = await self.content_repo.create_content(ContentDB(
            id="",
            user_id=user.id,
            type=request.type,
            title=request.title,
            content=request.content,
            metadata=request.metadata,
        ))
        return SaveContentResponse(content_id=saved.id)

    async def list_content(
        self,
        user: CurrentUser,
        content_type: Optional[str],
        page: int,
        limit: int,
    ) -> Tuple[List[ContentSummary], Pagination]:
        """One page of the user's saved content, newest first."""
        skip = (page - 1) * limit
        items = await self.content_repo.list_content(user.id, content_type, skip=skip, limit=limit)
        total = await self.content_repo.count_content(user.id, content_type)

        summaries = [
            ContentSummary(
                id=item.id,
                title=item.title,
                type=item.type,
                created_at=item.created_at,
                metadata=item.metadata,
            )
            for item in items
        ]
        return summaries, Pagination.build(page, limit, total)

    async def get_content(self, user: CurrentUser, content_id: str) -> Optional[ContentDB]:
        return await self.content_repo.get_content(content_id, user.id)

    # ========================================================================
    # History
    # ========================================================================

    async def list_history(
        self,
        user: CurrentUser,
        page: int,
        limit: int,
        search: Optional[str] = None,
    ) -> Tuple[List[HistoryDB], Pagination]:
        """One page of the user's history, newest first, optionally filtered."""
        skip = (page - 1) * limit
        entries = await self.history_repo.list_entries(user.id, skip=skip, limit=limit, search=search)
        total = await self.history_repo.count_entries(user.id, search=search)
        return entries, Pagination.build(page, limit, total)

    async def get_history_entry(self, user: CurrentUser, entry_id: str) -> Optional[HistoryDB]:
        return await self.history_repo.get_entry(entry_id, user.id)
