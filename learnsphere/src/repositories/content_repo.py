"""
Content repository for MongoDB operations.

Stores notes, learning paths and other saved material, always scoped to the
owning user.
"""

import structlog
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase

from learnsphere.src.models.content import ContentDB
from learnsphere.src.repositories.user_repo import parse_object_id

logger = structlog.get_logger(__name__)


def _to_content(doc: Dict[str, Any]) -> ContentDB:
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    return ContentDB.model_validate(data)


def content_filter(user_id: str, content_type: Optional[str]) -> Dict[str, Any]:
    query: Dict[str, Any] = {"user_id": user_id}
    if content_type:
        query["type"] = content_type
    return query


class ContentRepository:
    """Repository for saved content documents in MongoDB."""

    collection_name = "content"

    def __init__(self, database: AsyncDatabase):
        self.collection = database[self.collection_name]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index(
            [("user_id", ASCENDING), ("type", ASCENDING), ("created_at", DESCENDING)]
        )

    async def create_content(self, content: ContentDB) -> ContentDB:
        """
        Insert a content document.

        Args:
            content: Content to store (its id is ignored and assigned by MongoDB)

        Returns:
            Stored content with its id
        """
        doc = content.model_dump(exclude={"id"})
        try:
            result = await self.collection.insert_one(doc)
        except Exception as e:
            logger.error("content_create_failed", error=str(e), user_id=content.user_id)
            raise

        logger.info(
            "content_created",
            content_id=str(result.inserted_id),
            user_id=content.user_id,
            content_type=content.type
        )
        return content.model_copy(update={"id": str(result.inserted_id)})

    async def list_content(
        self,
        user_id: str,
        content_type: Optional[str] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> List[ContentDB]:
        """List a user's content, newest first."""
        try:
            cursor = (
                self.collection.find(content_filter(user_id, content_type))
                .sort("created_at", DESCENDING)
                .skip(skip)
                .limit(limit)
            )
            docs = await cursor.to_list(length=None)
        except Exception as e:
            logger.error("content_list_failed", error=str(e), user_id=user_id)
            raise
        return [_to_content(doc) for doc in docs]

    async def count_content(self, user_id: str, content_type: Optional[str] = None) -> int:
        try:
            return await self.collection.count_documents(content_filter(user_id, content_type))
        except Exception as e:
            logger.error("content_count_failed", error=str(e), user_id=user_id)
            raise

    async def get_content(self, content_id: str, user_id: str) -> Optional[ContentDB]:
        """
        Get one of the user's content documents and stamp its access time.

        Returns:
            Content or None if not found or owned by someone else
        """
        oid = parse_object_id(content_id)
        if oid is None:
            return None
        try:
            doc = await self.collection.find_one_and_update(
                {"_id": oid, "user_id": user_id},
                {"$set": {"last_accessed": datetime.now(timezone.utc)}},
                return_document=ReturnDocument.AFTER,
            )
        except Exception as e:
            logger.error("content_get_failed", error=str(e), content_id=content_id)
            raise
        return _to_content(doc) if doc else None
