"""
Rate limiting with slowapi.

The limiter is created at import time because route decorators need it; the
application factory switches it on or off and sets the auth limit from its
settings.
"""

import structlog

from slowapi import Limiter
from slowapi.util import get_remote_address

from learnsphere.src.config import Settings

logger = structlog.get_logger(__name__)

limiter = Limiter(key_func=get_remote_address)

_auth_limit = "20/minute"


def configure_limiter(settings: Settings) -> Limiter:
    """Apply the rate limit settings to the shared limiter."""
    global _auth_limit
    _auth_limit = settings.rate_limit_auth
    limiter.enabled = settings.rate_limit_enabled
    limiter.reset()

    logger.info(
        "rate_limiter_configured",
        enabled=settings.rate_limit_enabled,
        auth_limit=settings.rate_limit_auth
    )
    return limiter


def auth_rate_limit() -> str:
    """Current limit for the login, register and password reset endpoints."""
    return _auth_limit
