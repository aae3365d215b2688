"""
Authentication router.

Provides REST API endpoints for:
- Registration and login
- Current user profile (read and update)
- Password change and password reset

Registration, login and the password reset endpoints are rate limited per
client address.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status

from learnsphere.src.config import Settings
from learnsphere.src.dependencies import (
    get_auth_service,
    get_client_ip,
    get_current_user,
    get_settings_dependency,
)
from learnsphere.src.middleware.rate_limit import auth_rate_limit, limiter
from learnsphere.src.models.auth import (
    ChangePasswordRequest,
    CurrentUser,
    ErrorResponse,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    UpdateProfileRequest,
    UserEnvelope,
    UserResponse,
)
from learnsphere.src.services.auth_service import AuthService, WeakPasswordError

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        422: {"description": "Validation Error"}
    }
)


def _user_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


def _weak_password(error: WeakPasswordError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(error))


# ============================================================================
# REGISTRATION AND LOGIN
# ============================================================================


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register",
    responses={
        409: {"model": ErrorResponse, "description": "User already exists"},
        429: {"description": "Too many requests"}
    }
)
@limiter.limit(auth_rate_limit)
async def register(
    request: Request,
    payload: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
    client_ip: str = Depends(get_client_ip)
) -> TokenResponse:
    """
    Create an account and return its first access token.

    **Authentication:** Not required (public endpoint)

    **Error Responses:**
    - 409: A user with this email already exists
    - 422: Validation error (invalid email, password shorter than the configured minimum)
    """
    logger.info("registration_attempt", email=payload.email, ip_address=client_ip)
    try:
        _, token = await auth_service.register(payload)
    except WeakPasswordError as e:
        raise _weak_password(e)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return TokenResponse(token=token)


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="User Login",
    responses={
        401: {
            "description": "Invalid credentials",
            "model": ErrorResponse,
            "content": {
                "application/json": {
                    "example": {"detail": "Invalid credentials"}
                }
            }
        },
        429: {"description": "Too many requests"}
    }
)
@limiter.limit(auth_rate_limit)
async def login(
    request: Request,
    login_request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
    client_ip: str = Depends(get_client_ip)
) -> LoginResponse:
    """
    Authenticate user and return JWT token with the user's profile.

    **Authentication:** Not required (public endpoint)
    """
    logger.info("login_attempt", email=login_request.email, ip_address=client_ip)

    response = await auth_service.login(login_request)
    if response is None:
        logger.warning("login_failed", email=login_request.email, ip_address=client_ip)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"}
        )

    return response


# ============================================================================
# PROFILE
# ============================================================================


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Current User",
    responses={404: {"model": ErrorResponse, "description": "User not found"}}
)
async def me(
    current_user: CurrentUser = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserResponse:
    """Return the authenticated user's profile (never the password hash)."""
    user = await auth_service.get_user(current_user.id)
    if user is None:
        raise _user_not_found()
    return UserResponse.from_db(user)


@router.put("/profile", response_model=UserEnvelope, summary="Update Profile")
async def update_profile(
    payload: UpdateProfileRequest,
    current_user: CurrentUser = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> UserEnvelope:
    """Update name and/or learning preferences; omitted fields are left unchanged."""
    user = await auth_service.update_profile(current_user.id, payload)
    if user is None:
        raise _user_not_found()

    logger.info("profile_updated", user_id=current_user.id)
    return UserEnvelope(user=UserResponse.from_db(user))


# ============================================================================
# PASSWORDS
# ============================================================================


@router.put(
    "/password",
    response_model=MessageResponse,
    summary="Change Password",
    responses={401: {"model": ErrorResponse, "description": "Current password is incorrect"}}
)
async def change_password(
    payload: ChangePasswordRequest,
    current_user: CurrentUser = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
) -> MessageResponse:
    try:
        changed = await auth_service.change_password(
            current_user.id,
            payload.current_password,
            payload.new_password,
        )
    except WeakPasswordError as e:
        raise _weak_password(e)

    if changed is None:
        raise _user_not_found()
    if not changed:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Current password is incorrect"
        )

    return MessageResponse(message="Password updated successfully")


@router.post(
    "/forgot-password",
    response_model=ForgotPasswordResponse,
    response_model_exclude_none=True,
    summary="Request Password Reset",
    responses={404: {"model": ErrorResponse, "description": "User not found"}}
)
@limiter.limit(auth_rate_limit)
async def forgot_password(
    request: Request,
    payload: ForgotPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings_dependency)
) -> ForgotPasswordResponse:
    """
    Issue a password reset token valid for a limited time.

    Outside production the token and the reset URL are returned in the
    response body; in production they are only delivered out of band.
    """
    token = await auth_service.create_password_reset(payload.email)
    if token is None:
        raise _user_not_found()

    if settings.is_production:
        return ForgotPasswordResponse()

    return ForgotPasswordResponse(
        reset_token=token,
        reset_url=str(request.url_for("reset_password", token=token)),
    )


@router.put(
    "/reset-password/{token}",
    response_model=TokenResponse,
    summary="Reset Password",
    responses={400: {"model": ErrorResponse, "description": "Invalid or expired reset token"}}
)
@limiter.limit(auth_rate_limit)
async def reset_password(
    request: Request,
    token: str,
    payload: ResetPasswordRequest,
    auth_service: AuthService = Depends(get_auth_service)
) -> TokenResponse:
    try:
        access_token = await auth_service.reset_password(token, payload.password)
    except WeakPasswordError as e:
        raise _weak_password(e)

    if access_token is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired reset token"
        )

    return TokenResponse(token=access_token)
