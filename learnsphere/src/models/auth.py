"""
Authentication and user models.

Provides Pydantic schemas for:
- User documents (storage) and user views (API)
- Registration, login and profile requests
- JWT tokens and payloads
- Password change and reset flows
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


# ============================================================================
# Enums
# ============================================================================


class Role(str, Enum):
    """User roles."""

    USER = "user"
    ADMIN = "admin"


class KnowledgeLevel(str, Enum):
    """Learner knowledge levels used to tune generated answers."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Stored Documents
# ============================================================================


class UserPreferences(BaseModel):
    """Learning preferences stored on the user document."""

    model_config = ConfigDict(populate_by_name=True)

    level: KnowledgeLevel = Field(
        default=KnowledgeLevel.INTERMEDIATE,
        description="Preferred explanation depth"
    )
    topics_of_interest: List[str] = Field(
        default_factory=list,
        alias="topicsOfInterest",
        description="Topics the learner follows"
    )
    learning_style: str = Field(
        default="visual",
        alias="learningStyle",
        description="Preferred learning style"
    )
    content_format: str = Field(
        default="balanced",
        alias="contentFormat",
        description="Preferred content format"
    )


class UserDB(BaseModel):
    """User document as stored by the repositories."""

    id: str
    name: str
    email: str
    password_hash: str
    role: Role = Role.USER
    preferences: UserPreferences = Field(default_factory=UserPreferences)
    email_verified: bool = False
    last_active: datetime = Field(default_factory=utcnow)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    reset_password_token: Optional[str] = None
    reset_password_expire: Optional[datetime] = None


# ============================================================================
# Pydantic Request Models
# ============================================================================


class RegisterRequest(BaseModel):
    """Registration request schema."""
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Display name"
    )
    email: EmailStr = Field(
        ...,
        description="Email address"
    )
    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="Password (minimum 6 characters)"
    )
    preferences: Optional[UserPreferences] = Field(
        None,
        description="Initial learning preferences"
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject blank names."""
        if not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    model_config = {
        "json_schema_extra": {
            "example": {
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "password": "secret123"
            }
        }
    }


class LoginRequest(BaseModel):
    """Login request schema."""
    email: EmailStr = Field(
        ...,
        description="Email address"
    )
    password: str = Field(
        ...,
        min_length=1,
        max_length=128,
        description="Password"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "email": "user@learnsphere.dev",
                "password": "demo123"
            }
        }
    }


class UpdateProfileRequest(BaseModel):
    """Profile update with optional fields."""
    name: Optional[str] = Field(
        None,
        min_length=1,
        max_length=100,
        description="Display name"
    )
    preferences: Optional[UserPreferences] = Field(
        None,
        description="Learning preferences"
    )


class ChangePasswordRequest(BaseModel):
    """Password change request."""

    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(
        ...,
        min_length=1,
        alias="currentPassword",
        description="Current password"
    )
    new_password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        alias="newPassword",
        description="New password (minimum 6 characters)"
    )


class ForgotPasswordRequest(BaseModel):
    """Password reset token request."""
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """New password submitted with a reset token."""
    password: str = Field(
        ...,
        min_length=6,
        max_length=128,
        description="New password (minimum 6 characters)"
    )


# ============================================================================
# Pydantic Response Models
# ============================================================================


class TokenResponse(BaseModel):
    """Token issued on registration or password reset."""
    success: bool = True
    token: str = Field(..., description="JWT access token")

    model_config = {
        "json_schema_extra": {
            "example": {
                "success": True,
                "token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9..."
            }
        }
    }


class UserResponse(BaseModel):
    """User information returned by the API (never includes the password hash)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    email: str
    role: Role
    preferences: UserPreferences
    email_verified: bool = Field(default=False, alias="emailVerified")
    last_active: Optional[datetime] = Field(default=None, alias="lastActive")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    @classmethod
    def from_db(cls, user: UserDB) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            preferences=user.preferences,
            email_verified=user.email_verified,
            last_active=user.last_active,
            created_at=user.created_at,
        )


class LoginResponse(BaseModel):
    """Successful login payload."""
    success: bool = True
    token: str
    user: UserResponse


class UserEnvelope(BaseModel):
    """Wrapper used by the profile endpoints."""
    success: bool = True
    user: UserResponse


class MessageResponse(BaseModel):
    """Generic success message."""
    success: bool = True
    message: str


class ForgotPasswordResponse(BaseModel):
    """Password reset token response.

    The token and URL are only echoed back outside production, where an
    e-mail would carry them instead.
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    message: str = "Password reset token generated"
    reset_token: Optional[str] = Field(default=None, alias="resetToken")
    reset_url: Optional[str] = Field(default=None, alias="resetUrl")


class ErrorResponse(BaseModel):
    """Error response schema."""
    detail: str = Field(..., description="Error message")

    model_config = {
        "json_schema_extra": {
            "example": {
                "detail": "Invalid credentials"
            }
        }
    }


# ============================================================================
# Token and Session Models
# ============================================================================


class TokenPayload(BaseModel):
    """Decoded JWT claims."""
    sub: str = Field(..., description="User ID")
    role: Role = Role.USER
    exp: int
    iat: int
    iss: Optional[str] = None


class CurrentUser(BaseModel):
    """Authenticated user attached to a request."""
    id: str
    name: str
    email: str
    role: Role
    preferences: UserPreferences = Field(default_factory=UserPreferences)

    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @classmethod
    def from_db(cls, user: UserDB) -> "CurrentUser":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            preferences=user.preferences,
        )
