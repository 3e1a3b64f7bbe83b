from fastapi import APIRouter, Depends, status
from loguru import logger

from ..core.dependencies import get_auth_service, get_current_user
from ..core.exceptions import GalleryException, InternalError, ValidationError
from ..schemas import (
    AuthResponse,
    CurrentUserResponse,
    LoginRequest,
    SignupRequest,
    UserOut,
    UsernameAvailabilityResponse,
)
from ..services.auth import AuthService
from ..services.domain import AuthenticatedUser

router = APIRouter(prefix="/auth")


@router.post(
    "/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED
)
async def signup(
    request: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Register a new account and return a bearer token for it."""
    logger.info(f"Signup request for username {request.username}")

    try:
        user, token = await auth_service.signup(
            request.username, request.email, request.password
        )
    except GalleryException:
        raise
    except Exception as e:
        logger.error(f"Signup error for {request.username}: {e}")
        raise InternalError("An error occurred during registration")

    return AuthResponse(
        message="User registered successfully",
        token=token,
        user=UserOut(id=user.id, username=user.username, email=user.email),
    )


@router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    """Exchange username-or-email and password for a bearer token."""
    try:
        user, token = await auth_service.login(
            request.username_or_email, request.password
        )
    except GalleryException:
        raise
    except Exception as e:
        logger.error(f"Login error for {request.username_or_email}: {e}")
        raise InternalError("An error occurred during login")

    return AuthResponse(
        message="Login successful",
        token=token,
        user=UserOut(id=user.id, username=user.username, email=user.email),
    )


@router.get("/check-username/{username}", response_model=UsernameAvailabilityResponse)
async def check_username(
    username: str,
    auth_service: AuthService = Depends(get_auth_service),
):
    if len(username) < 3:
        raise ValidationError("Username must be at least 3 characters")

    if await auth_service.is_username_available(username):
        return UsernameAvailabilityResponse(
            available=True, message="Username is available"
        )
    return UsernameAvailabilityResponse(
        available=False, message="Username is already taken"
    )


@router.get("/me", response_model=CurrentUserResponse)
async def get_me(current_user: AuthenticatedUser = Depends(get_current_user)):
    return CurrentUserResponse(
        user=UserOut(
            id=current_user.id,
            username=current_user.username,
            email=current_user.email,
        )
    )
