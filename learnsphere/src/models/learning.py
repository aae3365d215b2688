"""
Learning query, follow-up, learning path and saved content schemas.

Field names follow Python conventions; aliases carry the camelCase names
the web client sends and expects (followUpQuestions, sessionId, ...).
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from learnsphere.src.models.auth import KnowledgeLevel
from learnsphere.src.models.content import ContentType


class Citation(BaseModel):
    """Source citation attached to a generated answer."""
    id: Optional[str] = None
    title: str = "Unknown Source"
    url: Optional[str] = None
    snippet: Optional[str] = None
    published_date: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @field_validator("title", mode="before")
    @classmethod
    def default_title(cls, v: Any) -> str:
        return v or "Unknown Source"


# ============================================================================
# Requests
# ============================================================================


class QueryOptions(BaseModel):
    """Options accompanying a learning query."""

    model_config = ConfigDict(populate_by_name=True)

    level: KnowledgeLevel = KnowledgeLevel.INTERMEDIATE
    preferences: Dict[str, Any] = Field(default_factory=dict)
    previous_context: List[Any] = Field(default_factory=list, alias="previousContext")


class LearningQueryRequest(BaseModel):
    """Learning query request schema."""
    query: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="Question to answer"
    )
    options: QueryOptions = Field(default_factory=QueryOptions)

    @field_validator("query")
    @classmethod
    def validate_query(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Query is required")
        return v.strip()

    model_config = {
        "json_schema_extra": {
            "example": {
                "query": "What is machine learning?",
                "options": {"level": "intermediate"}
            }
        }
    }


class ChatMessage(BaseModel):
    """One message of a prior conversation forwarded with a follow-up."""
    role: str = Field(..., pattern="^(system|user|assistant)$")
    content: str


class FollowUpRequest(BaseModel):
    """Follow-up question request schema."""

    model_config = ConfigDict(populate_by_name=True)

    follow_up_query: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        alias="followUpQuery",
        description="Follow-up question"
    )
    messages: List[ChatMessage] = Field(default_factory=list)
    session_id: Optional[str] = Field(default=None, alias="sessionId")
    level: KnowledgeLevel = KnowledgeLevel.INTERMEDIATE


class LearningPathRequest(BaseModel):
    """Learning path request schema."""
    topic: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Topic to build a learning path for"
    )
    level: KnowledgeLevel = KnowledgeLevel.INTERMEDIATE

    @field_validator("topic")
    @classmethod
    def validate_topic(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Topic is required")
        return v.strip()


class SaveContentRequest(BaseModel):
    """Save content request schema."""
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    type: ContentType = ContentType.NOTE
    metadata: Dict[str, Any] = Field(default_factory=dict)


# ============================================================================
# Responses
# ============================================================================


class LearningResponse(BaseModel):
    """Generated answer with citations and suggested follow-up questions."""

    model_config = ConfigDict(populate_by_name=True)

    content: str
    citations: List[Citation] = Field(default_factory=list)
    follow_up_questions: List[str] = Field(default_factory=list, alias="followUpQuestions")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class QueryResponse(LearningResponse):
    """Answer to a new learning query."""
    session_id: str = Field(..., alias="sessionId")


class LearningPathResponse(LearningResponse):
    """Generated learning path."""
    topic: str
    level: KnowledgeLevel
    path_id: str = Field(..., alias="pathId")


class SaveContentResponse(BaseModel):
    """Saved content acknowledgement."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    content_id: str = Field(..., alias="contentId")
    message: str = "Content saved successfully"
