from .auth import (
    AuthResponse,
    CurrentUserResponse,
    LoginRequest,
    SignupRequest,
    UserOut,
    UsernameAvailabilityResponse,
)
from .image import (
    CaptionResponse,
    CollectionResponse,
    ErrorResponse,
    ImageOut,
    ImageUploadResponse,
    LikesCountResponse,
    LikeToggleResponse,
    MessageResponse,
    StatsResponse,
)

__all__ = [
    "AuthResponse",
    "CaptionResponse",
    "CollectionResponse",
    "CurrentUserResponse",
    "ErrorResponse",
    "ImageOut",
    "ImageUploadResponse",
    "LikesCountResponse",
    "LikeToggleResponse",
    "LoginRequest",
    "MessageResponse",
    "SignupRequest",
    "StatsResponse",
    "UserOut",
    "UsernameAvailabilityResponse",
]
