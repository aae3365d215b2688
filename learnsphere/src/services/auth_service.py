"""
Authentication service for user accounts and JWT token management.

Provides:
- Password hashing and verification (passlib + bcrypt)
- JWT token creation and validation
- Registration, login and profile updates
- Password change and reset flows
"""

import hashlib
import secrets
import structlog
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from jose import JWTError, jwt
from passlib.context import CryptContext
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from learnsphere.src.config import Settings, get_settings
from learnsphere.src.models.auth import (
    CurrentUser,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    Role,
    TokenPayload,
    UpdateProfileRequest,
    UserDB,
    UserResponse,
)

logger = structlog.get_logger(__name__)


class WeakPasswordError(Exception):
    """Password is shorter than the configured minimum length."""


def hash_reset_token(token: str) -> str:
    """Digest stored in place of a password reset token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class AuthService:
    """Service for authentication and account operations."""

    def __init__(self, user_repo, settings: Optional[Settings] = None):
        """
        Initialize auth service.

        Args:
            user_repo: User repository (MongoDB or in-memory)
            settings: Settings override (defaults to the cached settings)
        """
        self.user_repo = user_repo
        self.settings = settings or get_settings()

        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=self.settings.password_bcrypt_rounds
        )

    # ========================================================================
    # Passwords
    # ========================================================================

    def hash_password(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password
        """
        try:
            hashed = self.pwd_context.hash(password)
            logger.debug("password_hashed")
            return hashed
        except Exception as e:
            logger.error("password_hash_failed", error=str(e))
            raise

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Args:
            plain_password: Plain text password
            hashed_password: Hashed password

        Returns:
            True if password matches, False otherwise (including malformed hashes)
        """
        try:
            verified = self.pwd_context.verify(plain_password, hashed_password)
            logger.debug("password_verified", verified=verified)
            return verified
        except (ValueError, TypeError) as e:
            logger.warning("password_verify_failed", error=str(e))
            return False

    # ========================================================================
    # Tokens
    # ========================================================================

    def create_access_token(
        self,
        user_id: str,
        role: str,
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """
        Create JWT access token.

        Args:
            user_id: User ID
            role: User role
            expires_delta: Custom expiration time (optional)

        Returns:
            JWT token string
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=self.settings.jwt_access_token_expire_minutes)

        now = datetime.now(timezone.utc)
        expire = now + expires_delta

        payload = {
            "sub": user_id,
            "role": Role(role).value,
            "exp": int(expire.timestamp()),
            "iat": int(now.timestamp()),
            "iss": self.settings.jwt_issuer,
        }

        token = jwt.encode(
            payload,
            self.settings.jwt_secret_key,
            algorithm=self.settings.jwt_algorithm
        )

        logger.info(
            "access_token_created",
            user_id=user_id,
            expires_in=expires_delta.total_seconds()
        )
        return token

    def decode_token(self, token: str) -> Optional[TokenPayload]:
        """
        Decode and validate JWT token.

        Args:
            token: JWT token string

        Returns:
            Token payload or None if invalid, expired or issued elsewhere
        """
        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret_key,
                algorithms=[self.settings.jwt_algorithm],
                issuer=self.settings.jwt_issuer,
            )
            token_payload = TokenPayload.model_validate(payload)
        except JWTError as e:
            logger.warning("token_decode_failed", error=str(e))
            return None
        except ValidationError as e:
            logger.warning("token_claims_invalid", error=str(e))
            return None

        logger.debug("token_decoded", user_id=token_payload.sub)
        return token_payload

    def check_password_policy(self, password: str) -> None:
        minimum = self.settings.password_min_length
        if len(password) < minimum:
            raise WeakPasswordError(f"Password must be at least {minimum} characters")

    # ========================================================================
    # Accounts
    # ========================================================================

    async def register(self, request: RegisterRequest) -> Tuple[UserDB, str]:
        """
        Create an account and issue its first token.

        Args:
            request: Registration data

        Returns:
            Tuple of (created user, access token)

        Raises:
            WeakPasswordError: If the password is shorter than allowed
            ValueError: If a user with the email already exists
        """
        self.check_password_policy(request.password)
        if await self.user_repo.get_user_by_email(request.email):
            logger.warning("registration_duplicate_email", email=request.email)
            raise ValueError("User already exists")

        password_hash = await run_in_threadpool(self.hash_password, request.password)
        user = await self.user_repo.create_user(
            name=request.name,
            email=request.email,
            password_hash=password_hash,
            role=Role.USER.value,
            preferences=request.preferences,
        )

        token = self.create_access_token(user.id, user.role)
        logger.info("user_registered", user_id=user.id)
        return user, token

    async def authenticate_user(self, email: str, password: str) -> Optional[UserDB]:
        """
        Authenticate user with email and password.

        Returns:
            User if authenticated, None otherwise
        """
        user = await self.user_repo.get_user_by_email(email)

        if not user:
            logger.warning("authentication_failed_user_not_found", email=email)
            return None

        verified = await run_in_threadpool(self.verify_password, password, user.password_hash)
        if not verified:
            logger.warning("authentication_failed_invalid_password", user_id=user.id)
            return None

        logger.info("user_authenticated", user_id=user.id)
        return user

    async def login(self, login_request: LoginRequest) -> Optional[LoginResponse]:
        """
        Login user and create access token.

        Args:
            login_request: Login credentials

        Returns:
            Login response or None if authentication failed
        """
        user = await self.authenticate_user(login_request.email, login_request.password)
        if not user:
            return None

        await self.user_repo.touch_last_active(user.id)
        token = self.create_access_token(user.id, user.role)

        logger.info("login_success", user_id=user.id)
        return LoginResponse(token=token, user=UserResponse.from_db(user))

    async def resolve_user(self, payload: TokenPayload) -> Optional[CurrentUser]:
        """
        Load the user a decoded token refers to.

        Refreshes last_active when it is older than the configured interval.

        Returns:
            Current user or None if the user no longer exists
        """
        user = await self.user_repo.get_user_by_id(payload.sub)
        if not user:
            logger.warning("token_user_not_found", user_id=payload.sub)
            return None

        interval = timedelta(minutes=self.settings.last_active_update_minutes)
        if datetime.now(timezone.utc) - user.last_active > interval:
            await self.user_repo.touch_last_active(user.id)

        return CurrentUser.from_db(user)

    async def get_user(self, user_id: str) -> Optional[UserDB]:
        return await self.user_repo.get_user_by_id(user_id)

    async def update_profile(self, user_id: str, request: UpdateProfileRequest) -> Optional[UserDB]:
        """Apply a profile update; returns None when the user is gone."""
        return await self.user_repo.update_user(
            user_id,
            name=request.name,
            preferences=request.preferences,
        )

    async def change_password(self, user_id: str, current_password: str, new_password: str) -> Optional[bool]:
        """
        Change a user's password.

        Returns:
            True on success, False if the current password is wrong,
            None if the user does not exist

        Raises:
            WeakPasswordError: If the new password is shorter than allowed
        """
        self.check_password_policy(new_password)
        user = await self.user_repo.get_user_by_id(user_id)
        if not user:
            return None

        verified = await run_in_threadpool(self.verify_password, current_password, user.password_hash)
        if not verified:
            logger.warning("password_change_rejected", user_id=user_id)
            return False

        password_hash = await run_in_threadpool(self.hash_password, new_password)
        await self.user_repo.update_user(user_id, password_hash=password_hash)
        logger.info("password_changed", user_id=user_id)
        return True

    async def create_password_reset(self, email: str) -> Optional[str]:
        """
        Issue a password reset token.

        Only the SHA-256 digest of the token is stored.

        Returns:
            The plain reset token, or None if no user has this email
        """
        user = await self.user_repo.get_user_by_email(email)
        if not user:
            logger.warning("password_reset_unknown_email", email=email)
            return None

        token = secrets.token_hex(20)
        expires_at = datetime.now(timezone.utc) + timedelta(
            minutes=self.settings.password_reset_expire_minutes
        )
        await self.user_repo.set_reset_token(user.id, hash_reset_token(token), expires_at)

        logger.info("password_reset_issued", user_id=user.id)
        return token

    async def reset_password(self, token: str, new_password: str) -> Optional[str]:
        """
        Set a new password using a reset token.

        Returns:
            A fresh access token, or None if the token is unknown or expired

        Raises:
            WeakPasswordError: If the new password is shorter than allowed
        """
        self.check_password_policy(new_password)
        user = await self.user_repo.get_user_by_reset_token(hash_reset_token(token))
        if not user:
            logger.warning("password_reset_token_invalid")
            return None

        password_hash = await run_in_threadpool(self.hash_password, new_password)
        await self.user_repo.update_user(user.id, password_hash=password_hash)
        await self.user_repo.clear_reset_token(user.id)

        logger.info("password_reset_completed", user_id=user.id)
        return self.create_access_token(user.id, user.role)
