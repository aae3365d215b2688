"""
User repository for MongoDB operations.

Provides async CRUD operations for users using pymongo's asyncio client.
E-mail addresses are stored lower-cased and protected by a unique index.
"""

import structlog
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError

from learnsphere.src.models.auth import UserDB, UserPreferences

logger = structlog.get_logger(__name__)


def parse_object_id(value: str) -> Optional[ObjectId]:
    """Return an ObjectId for a hex string, or None when the string is not one."""
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


def _to_user(doc: Dict[str, Any]) -> UserDB:
    return UserDB(
        id=str(doc["_id"]),
        name=doc["name"],
        email=doc["email"],
        password_hash=doc["password_hash"],
        role=doc.get("role", "user"),
        preferences=UserPreferences.model_validate(doc.get("preferences") or {}),
        email_verified=doc.get("email_verified", False),
        last_active=doc["last_active"],
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
        reset_password_token=doc.get("reset_password_token"),
        reset_password_expire=doc.get("reset_password_expire"),
    )


class UserRepository:
    """Repository for user documents in MongoDB."""

    collection_name = "users"

    def __init__(self, database: AsyncDatabase):
        """
        Initialize user repository.

        Args:
            database: pymongo async database handle
        """
        self.collection = database[self.collection_name]

    async def ensure_indexes(self) -> None:
        """Create the unique e-mail index and the reset token lookup index."""
        await self.collection.create_index([("email", ASCENDING)], unique=True)
        await self.collection.create_index(
            [("reset_password_token", ASCENDING)], sparse=True
        )

    async def create_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        role: str = "user",
        preferences: Optional[UserPreferences] = None,
        email_verified: bool = False,
    ) -> UserDB:
        """
        Create a new user.

        Args:
            name: Display name
            email: Email address
            password_hash: Hashed password
            role: Role name
            preferences: Learning preferences
            email_verified: Whether the address is already verified

        Returns:
            Created user

        Raises:
            ValueError: If the email already exists
        """
        now = datetime.now(timezone.utc)
        doc = {
            "name": name,
            "email": email.lower(),
            "password_hash": password_hash,
            "role": role,
            "preferences": (preferences or UserPreferences()).model_dump(mode="json"),
            "email_verified": email_verified,
            "last_active": now,
            "created_at": now,
            "updated_at": now,
        }

        try:
            result = await self.collection.insert_one(doc)
        except DuplicateKeyError:
            logger.warning("email_already_exists", email=email)
            raise ValueError("User already exists")
        except Exception as e:
            logger.error("user_create_failed", error=str(e), email=email)
            raise

        doc["_id"] = result.inserted_id
        logger.info("user_created", user_id=str(result.inserted_id), role=role)
        return _to_user(doc)

    async def get_user_by_id(self, user_id: str) -> Optional[UserDB]:
        """
        Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User or None if not found
        """
        oid = parse_object_id(user_id)
        if oid is None:
            logger.debug("user_id_invalid", user_id=user_id)
            return None

        try:
            doc = await self.collection.find_one({"_id": oid})
        except Exception as e:
            logger.error("user_get_by_id_failed", error=str(e), user_id=user_id)
            raise

        if not doc:
            logger.debug("user_not_found", user_id=user_id)
            return None
        return _to_user(doc)

    async def get_user_by_email(self, email: str) -> Optional[UserDB]:
        """
        Get user by email.

        Args:
            email: Email address (case-insensitive)

        Returns:
            User or None if not found
        """
        try:
            doc = await self.collection.find_one({"email": email.lower()})
        except Exception as e:
            logger.error("user_get_by_email_failed", error=str(e), email=email)
            raise

        if not doc:
            logger.debug("user_not_found", email=email)
            return None
        return _to_user(doc)

    async def update_user(
        self,
        user_id: str,
        name: Optional[str] = None,
        password_hash: Optional[str] = None,
        preferences: Optional[UserPreferences] = None,
    ) -> Optional[UserDB]:
        """
        Update user fields that are not None.

        Args:
            user_id: User ID
            name: New display name (optional)
            password_hash: New password hash (optional)
            preferences: New preferences (optional)

        Returns:
            Updated user or None if not found
        """
        oid = parse_object_id(user_id)
        if oid is None:
            return None

        updates: Dict[str, Any] = {"updated_at": datetime.now(timezone.utc)}
        if name is not None:
            updates["name"] = name
        if password_hash is not None:
            updates["password_hash"] = password_hash
        if preferences is not None:
            updates["preferences"] = preferences.model_dump(mode="json")

        try:
            doc = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": updates},
                return_document=ReturnDocument.AFTER,
            )
        except Exception as e:
            logger.error("user_update_failed", error=str(e), user_id=user_id)
            raise

        if not doc:
            logger.debug("user_not_found", user_id=user_id)
            return None

        logger.info("user_updated", user_id=user_id, fields=sorted(updates))
        return _to_user(doc)

    async def touch_last_active(self, user_id: str) -> None:
        """Stamp the user's last activity time."""
        oid = parse_object_id(user_id)
        if oid is None:
            return
        try:
            await self.collection.update_one(
                {"_id": oid}, {"$set": {"last_active": datetime.now(timezone.utc)}}
            )
        except Exception as e:
            logger.error("user_touch_failed", error=str(e), user_id=user_id)
            raise

    async def set_reset_token(self, user_id: str, token_hash: str, expires_at: datetime) -> None:
        """Store a hashed password reset token and its expiry."""
        oid = parse_object_id(user_id)
        if oid is None:
            return
        try:
            await self.collection.update_one(
                {"_id": oid},
                {"$set": {
                    "reset_password_token": token_hash,
                    "reset_password_expire": expires_at,
                }},
            )
        except Exception as e:
            logger.error("user_set_reset_token_failed", error=str(e), user_id=user_id)
            raise

    async def get_user_by_reset_token(self, token_hash: str) -> Optional[UserDB]:
        """Get the user holding an unexpired reset token."""
        try:
            doc = await self.collection.find_one({
                "reset_password_token": token_hash,
                "reset_password_expire": {"$gt": datetime.now(timezone.utc)},
            })
        except Exception as e:
            logger.error("user_get_by_reset_token_failed", error=str(e))
            raise
        return _to_user(doc) if doc else None

    async def clear_reset_token(self, user_id: str) -> None:
        oid = parse_object_id(user_id)
        if oid is None:
            return
        try:
            await self.collection.update_one(
                {"_id": oid},
                {"$unset": {"reset_password_token": "", "reset_password_expire": ""}},
            )
        except Exception as e:
            logger.error("user_clear_reset_token_failed", error=str(e), user_id=user_id)
            raise

    async def count_users(self) -> int:
        """Count total users."""
        try:
            return await self.collection.count_documents({})
        except Exception as e:
            logger.error("user_count_failed", error=str(e))
            raise
