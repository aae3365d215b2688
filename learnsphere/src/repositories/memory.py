"""
In-memory repositories for development and tests.

Mirror the MongoDB repositories method for method so the application can run
without a database (``LEARNSPHERE_STORAGE_BACKEND=memory``). Data lives in a
process-local ``InMemoryStore`` and is lost on restart.
"""

import asyncio
import re
import uuid
import structlog
from datetime import datetime, timezone
from typing import Dict, List, Optional

from learnsphere.src.models.auth import UserDB, UserPreferences
from learnsphere.src.models.content import ContentDB
from learnsphere.src.models.history import FollowUp, HistoryDB

logger = structlog.get_logger(__name__)


def generate_id() -> str:
    return f"mem-{uuid.uuid4().hex[:24]}"


class InMemoryStore:
    """Process-local collections shared by the in-memory repositories."""

    def __init__(self):
        self.users: Dict[str, UserDB] = {}
        self.history: Dict[str, HistoryDB] = {}
        self.content: Dict[str, ContentDB] = {}
        self.lock = asyncio.Lock()

    def clear(self) -> None:
        self.users.clear()
        self.history.clear()
        self.content.clear()


class InMemoryUserRepository:
    """User repository backed by ``InMemoryStore``."""

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def ensure_indexes(self) -> None:
        return None

    async def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: str = "user",
        preferences: Optional[UserPreferences] = None,
        email_verified: bool = False,
    ) -> UserDB:
        async with self.store.lock:
            if any(u.email == email.lower() for u in self.store.users.values()):
                logger.warning("email_already_exists", email=email)
                raise ValueError("User already exists")

            user = UserDB(
                id=generate_id(),
                name=name,
                email=email.lower(),
                password_hash=password_hash,
                role=role,
                preferences=preferences or UserPreferences(),
                email_verified=email_verified,
            )
            self.store.users[user.id] = user

        logger.info("user_created", user_id=user.id, role=role, backend="memory")
        return user.model_copy(deep=True)

    async def get_user_by_id(self, user_id: str) -> Optional[UserDB]:
        user = self.store.users.get(user_id)
        return user.model_copy(deep=True) if user else None

    async def get_user_by_email(self, email: str) -> Optional[UserDB]:
        for user in self.store.users.values():
            if user.email == email.lower():
                return user.model_copy(deep=True)
        return None

    async def update_user(
        self,
        user_id: str,
        name: Optional[str] = None,
        password_hash: Optional[str] = None,
        preferences: Optional[UserPreferences] = None,
    ) -> Optional[UserDB]:
        async with self.store.lock:
            user = self.store.users.get(user_id)
            if not user:
                return None
            updates = {"updated_at": datetime.now(timezone.utc)}
            if name is not None:
                updates["name"] = name
            if password_hash is not None:
                updates["password_hash"] = password_hash
            if preferences is not None:
                updates["preferences"] = preferences
            user = user.model_copy(update=updates)
            self.store.users[user_id] = user

        logger.info("user_updated", user_id=user_id, fields=sorted(updates), backend="memory")
        return user.model_copy(deep=True)

    async def touch_last_active(self, user_id: str) -> None:
        user = self.store.users.get(user_id)
        if user:
            self.store.users[user_id] = user.model_copy(
                update={"last_active": datetime.now(timezone.utc)}
            )

    async def set_reset_token(self, user_id: str, token_hash: str, expires_at: datetime) -> None:
        user = self.store.users.get(user_id)
        if user:
            self.store.users[user_id] = user.model_copy(update={
                "reset_password_token": token_hash,
                "reset_password_expire": expires_at,
            })

    async def get_user_by_reset_token(self, token_hash: str) -> Optional[UserDB]:
        now = datetime.now(timezone.utc)
        for user in self.store.users.values():
            if (
                user.reset_password_token == token_hash
                and user.reset_password_expire is not None
                and user.reset_password_expire > now
            ):
                return user.model_copy(deep=True)
        return None

    async def clear_reset_token(self, user_id: str) -> None:
        user = self.store.users.get(user_id)
        if user:
            self.store.users[user_id] = user.model_copy(update={
                "reset_password_token": None,
                "reset_password_expire": None,
            })

    async def count_users(self) -> int:
        return len(self.store.users)


class InMemoryHistoryRepository:
    """History repository backed by ``InMemoryStore``."""

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def ensure_indexes(self) -> None:
        return None

    def _matching(self, user_id: str, search: Optional[str]) -> List[HistoryDB]:
        entries = [e for e in self.store.history.values() if e.user_id == user_id]
        if search:
            pattern = re.compile(re.escape(search), re.IGNORECASE)
            entries = [e for e in entries if pattern.search(e.query) or pattern.search(e.response)]
        return sorted(reversed(entries), key=lambda e: e.query_timestamp, reverse=True)

    async def create_entry(self, entry: HistoryDB) -> HistoryDB:
        async with self.store.lock:
            stored = entry.model_copy(update={"id": generate_id()}, deep=True)
            self.store.history[stored.id] = stored

        logger.info(
            "history_created",
            history_id=stored.id,
            user_id=stored.user_id,
            session_id=stored.session_id,
            backend="memory"
        )
        return stored.model_copy(deep=True)

    async def add_follow_up(self, session_id: str, user_id: str, follow_up: FollowUp) -> bool:
        async with self.store.lock:
            for entry_id, entry in self.store.history.items():
                if entry.session_id == session_id and entry.user_id == user_id:
                    self.store.history[entry_id] = entry.model_copy(
                        update={"follow_ups": [*entry.follow_ups, follow_up]}
                    )
                    return True

        logger.debug("history_session_not_found", session_id=session_id, user_id=user_id)
        return False

    async def list_entries(
        self,
        user_id: str,
        skip: int = 0,
        limit: int = 10,
        search: Optional[str] = None,
    ) -> List[HistoryDB]:
        entries = self._matching(user_id, search)[skip:skip + limit]
        return [e.model_copy(deep=True) for e in entries]

    async def count_entries(self, user_id: str, search: Optional[str] = None) -> int:
        return len(self._matching(user_id, search))

    async def get_entry(self, entry_id: str, user_id: str) -> Optional[HistoryDB]:
        entry = self.store.history.get(entry_id)
        if entry is None or entry.user_id != user_id:
            return None
        return entry.model_copy(deep=True)


class InMemoryContentRepository:
    """Content repository backed by ``InMemoryStore``."""

    def __init__(self, store: InMemoryStore):
        self.store = store

    async def ensure_indexes(self) -> None:
        return None

    def _matching(self, user_id: str, content_type: Optional[str]) -> List[ContentDB]:
        items = [
            c for c in self.store.content.values()
            if c.user_id == user_id and (not content_type or c.type == content_type)
        ]
        return sorted(reversed(items), key=lambda c: c.created_at, reverse=True)

    async def create_content(self, content: ContentDB) -> ContentDB:
        async with self.store.lock:
            stored = content.model_copy(update={"id": generate_id()}, deep=True)
            self.store.content[stored.id] = stored

        logger.info(
            "content_created",
            content_id=stored.id,
            user_id=stored.user_id,
            content_type=stored.type,
            backend="memory"
        )
        return stored.model_copy(deep=True)

    async def list_content(
        self,
        user_id: str,
        content_type: Optional[str] = None,
        skip: int = 0,
        limit: int = 10,
    ) -> List[ContentDB]:
        items = self._matching(user_id, content_type)[skip:skip + limit]
        return [c.model_copy(deep=True) for c in items]

    async def count_content(self, user_id: str, content_type: Optional[str] = None) -> int:
        return len(self._matching(user_id, content_type))

    async def get_content(self, content_id: str, user_id: str) -> Optional[ContentDB]:
        content = self.store.content.get(content_id)
        if content is None or content.user_id != user_id:
            return None
        content = content.model_copy(update={"last_accessed": datetime.now(timezone.utc)})
        self.store.content[content_id] = content
        return content.model_copy(deep=True)
