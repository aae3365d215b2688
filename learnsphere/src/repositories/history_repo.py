"""
History repository for MongoDB operations.

Each learning query creates one history entry keyed by a session id;
follow-up exchanges are appended to the entry of the same session.
"""

import re
import structlog
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING, DESCENDING, TEXT
from pymongo.asynchronous.database import AsyncDatabase

from learnsphere.src.models.history import FollowUp, HistoryDB
from learnsphere.src.repositories.user_repo import parse_object_id

logger = structlog.get_logger(__name__)


def _to_entry(doc: Dict[str, Any]) -> HistoryDB:
    data = dict(doc)
    data["id"] = str(data.pop("_id"))
    return HistoryDB.model_validate(data)


def search_filter(user_id: str, search: Optional[str]) -> Dict[str, Any]:
    """Build the list filter: the user's entries, optionally matching text."""
    query: Dict[str, Any] = {"user_id": user_id}
    if search:
        pattern = {"$regex": re.escape(search), "$options": "i"}
        query["$or"] = [{"query": pattern}, {"response": pattern}]
    return query


class HistoryRepository:
    """Repository for learning history documents in MongoDB."""

    collection_name = "history"

    def __init__(self, database: AsyncDatabase):
        self.collection = database[self.collection_name]

    async def ensure_indexes(self) -> None:
        await self.collection.create_index([("session_id", ASCENDING)], unique=True)
        await self.collection.create_index(
            [("user_id", ASCENDING), ("query_timestamp", DESCENDING)]
        )
        await self.collection.create_index([("query", TEXT), ("response", TEXT)])

    async def create_entry(self, entry: HistoryDB) -> HistoryDB:
        """
        Insert a history entry.

        Args:
            entry: Entry to store (its id is ignored and assigned by MongoDB)

        Returns:
            Stored entry with its id
        """
        doc = entry.model_dump(exclude={"id"})
        try:
            result = await self.collection.insert_one(doc)
        except Exception as e:
            logger.error("history_create_failed", error=str(e), user_id=entry.user_id)
            raise

        logger.info(
            "history_created",
            history_id=str(result.inserted_id),
            user_id=entry.user_id,
            session_id=entry.session_id
        )
        return entry.model_copy(update={"id": str(result.inserted_id)})

    async def add_follow_up(self, session_id: str, user_id: str, follow_up: FollowUp) -> bool:
        """
        Append a follow-up exchange to the user's entry for a session.

        Returns:
            True if an entry was updated, False if none matched
        """
        try:
            result = await self.collection.update_one(
                {"session_id": session_id, "user_id": user_id},
                {"$push": {"follow_ups": follow_up.model_dump()}},
            )
        except Exception as e:
            logger.error("history_follow_up_failed", error=str(e), session_id=session_id)
            raise

        updated = result.modified_count == 1
        if not updated:
            logger.debug("history_session_not_found", session_id=session_id, user_id=user_id)
        return updated

    async def list_entries(
        self,
        user_id: str,
        skip: int = 0,
        limit: int = 10,
        search: Optional[str] = None,
    ) -> List[HistoryDB]:
        """List a user's entries, newest first."""
        try:
            cursor = (
                self.collection.find(search_filter(user_id, search))
                .sort("query_timestamp", DESCENDING)
                .skip(skip)
                .limit(limit)
            )
            docs = await cursor.to_list(length=None)
        except Exception as e:
            logger.error("history_list_failed", error=str(e), user_id=user_id)
            raise
        return [_to_entry(doc) for doc in docs]

    async def count_entries(self, user_id: str, search: Optional[str] = None) -> int:
        try:
            return await self.collection.count_documents(search_filter(user_id, search))
        except Exception as e:
            logger.error("history_count_failed", error=str(e), user_id=user_id)
            raise

    async def get_entry(self, entry_id: str, user_id: str) -> Optional[HistoryDB]:
        """Get one of the user's entries by id."""
        oid = parse_object_id(entry_id)
        if oid is None:
            return None
        try:
            doc = await self.collection.find_one({"_id": oid, "user_id": user_id})
        except Exception as e:
            logger.error("history_get_failed", error=str(e), history_id=entry_id)
            raise
        return _to_entry(doc) if doc else None
