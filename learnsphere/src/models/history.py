"""Learning history documents: one entry per query session."""

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from learnsphere.src.models.auth import KnowledgeLevel
from learnsphere.src.models.content import Pagination
from learnsphere.src.models.learning import Citation


def _now() -> datetime:
    return datetime.now(timezone.utc)


class FollowUp(BaseModel):
    """Follow-up exchange appended to a history entry."""
    query: str
    response: str
    citations: List[Citation] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=_now)


class LearningContext(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    level: KnowledgeLevel = KnowledgeLevel.INTERMEDIATE.value
    topic: Optional[str] = None
    subtopic: Optional[str] = None


class HistoryDB(BaseModel):
    """History document as stored by the repositories."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    user_id: str = Field(..., alias="userId")
    session_id: str = Field(..., alias="sessionId")
    query: str
    response: str
    citations: List[Citation] = Field(default_factory=list)
    follow_ups: List[FollowUp] = Field(default_factory=list, alias="followUps")
    query_timestamp: datetime = Field(default_factory=_now, alias="queryTimestamp")
    tags: List[str] = Field(default_factory=list)
    liked: bool = False
    user_notes: Optional[str] = Field(default=None, alias="userNotes")
    learning_context: LearningContext = Field(default_factory=LearningContext, alias="learningContext")


class HistoryListResponse(BaseModel):
    history: List[HistoryDB]
    pagination: Pagination
