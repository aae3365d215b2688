"""Saved content documents and list views."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ContentType(str, Enum):
    """Kinds of content a user can save."""

    NOTE = "note"
    LEARNING_PATH = "learning_path"
    ARTICLE = "article"
    SUMMARY = "summary"
    QUIZ = "quiz"
    FLASHCARDS = "flashcards"


class ContentDB(BaseModel):
    """Content document as stored by the repositories."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    id: str
    user_id: str = Field(..., alias="userId")
    type: ContentType = ContentType.NOTE.value
    title: str = Field(..., max_length=200)
    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    is_public: bool = Field(default=False, alias="isPublic")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), alias="createdAt")
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), alias="updatedAt")
    last_accessed: Optional[datetime] = Field(default=None, alias="lastAccessed")


class ContentSummary(BaseModel):
    """Content list entry (body omitted)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    type: ContentType
    created_at: datetime = Field(..., alias="createdAt")
    metadata: Dict[str, Any] = Field(default_factory=dict)


class Pagination(BaseModel):
    """Page metadata for list endpoints."""
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        pages = (total + limit - 1) // limit if limit else 0
        return cls(page=page, limit=limit, total=total, pages=pages)


class ContentListResponse(BaseModel):
    content: List[ContentSummary]
    pagination: Pagination
