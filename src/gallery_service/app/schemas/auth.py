import re
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")


class SignupRequest(BaseModel):
    username: str = Field(..., description="3-30 chars: letters, numbers, underscores")
    email: EmailStr = Field(..., description="Email address")
    password: str = Field(..., description="At least 6 characters")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        v = v.strip()
        if not 3 <= len(v) <= 30:
            raise ValueError("Username must be between 3 and 30 characters")
        if not USERNAME_PATTERN.match(v):
            raise ValueError(
                "Username can only contain letters, numbers, and underscores"
            )
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters long")
        return v


class LoginRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username_or_email: str = Field(..., alias="usernameOrEmail")
    password: str = Field(...)

    @field_validator("username_or_email")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username or email is required")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        if not v:
            raise ValueError("Password is required")
        return v


class UserOut(BaseModel):
    id: UUID
    username: str
    email: str


class AuthResponse(BaseModel):
    success: bool = Field(default=True)
    message: str
    token: str = Field(..., description="Bearer token for the Authorization header")
    user: UserOut


class CurrentUserResponse(BaseModel):
    success: bool = Field(default=True)
    user: UserOut


class UsernameAvailabilityResponse(BaseModel):
    success: bool = Field(default=True)
    available: bool
    message: str
