"""Persistence layer: MongoDB repositories and their in-memory counterparts."""

from dataclasses import dataclass
from typing import Any, Optional

from learnsphere.src.repositories.content_repo import ContentRepository
from learnsphere.src.repositories.history_repo import HistoryRepository
from learnsphere.src.repositories.memory import (
    InMemoryContentRepository,
    InMemoryHistoryRepository,
    InMemoryStore,
    InMemoryUserRepository,
)
from learnsphere.src.repositories.user_repo import UserRepository


@dataclass
class Repositories:
    """The three repositories the services work against."""
    users: Any
    history: Any
    content: Any
    store: Optional[InMemoryStore] = None

    async def ensure_indexes(self) -> None:
        for repo in (self.users, self.history, self.content):
            await repo.ensure_indexes()


def mongo_repositories(database) -> Repositories:
    return Repositories(
        users=UserRepository(database),
        history=HistoryRepository(database),
        content=ContentRepository(database),
    )


def memory_repositories(store: Optional[InMemoryStore] = None) -> Repositories:
    store = store or InMemoryStore()
    return Repositories(
        users=InMemoryUserRepository(store),
        history=InMemoryHistoryRepository(store),
        content=InMemoryContentRepository(store),
        store=store,
    )


__all__ = [
    "Repositories",
    "mongo_repositories",
    "memory_repositories",
    "UserRepository",
    "HistoryRepository",
    "ContentRepository",
    "InMemoryStore",
    "InMemoryUserRepository",
    "InMemoryHistoryRepository",
    "InMemoryContentRepository",
]
