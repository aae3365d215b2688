"""Demo accounts available out of the box in development."""

from typing import Dict, List

import structlog

from learnsphere.src.models.auth import UserPreferences

logger = structlog.get_logger(__name__)


DEMO_USERS: List[Dict] = [
    {
        "name": "Admin User",
        "email": "admin@learnsphere.dev",
        "password": "admin123",
        "role": "admin",
        "preferences": UserPreferences(
            level="advanced",
            topics_of_interest=["AI", "Machine Learning", "Education Technology"],
            learning_style="multimodal",
            content_format="detailed",
        ),
    },
    {
        "name": "Demo User",
        "email": "user@learnsphere.dev",
        "password": "demo123",
        "role": "user",
        "preferences": UserPreferences(
            level="intermediate",
            topics_of_interest=["Programming", "Science", "History"],
            learning_style="visual",
            content_format="example-based",
        ),
    },
]


async def seed_demo_users(auth_service) -> int:
    """
    Create the demo accounts that do not exist yet.

    Args:
        auth_service: AuthService whose repository and hasher are used

    Returns:
        Number of accounts created
    """
    created = 0
    for demo in DEMO_USERS:
        if await auth_service.user_repo.get_user_by_email(demo["email"]):
            continue
        try:
            await auth_service.user_repo.create_user(
                name=demo["name"],
                email=demo["email"],
                password_hash=auth_service.hash_password(demo["password"]),
                role=demo["role"],
                preferences=demo["preferences"],
                email_verified=True,
            )
        except ValueError:
            # Created concurrently by another worker
            continue
        created += 1

    logger.info("demo_users_seeded", created=created)
    return created
