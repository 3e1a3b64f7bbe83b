from uuid import UUID

from loguru import logger
from tortoise.exceptions import IntegrityError
from tortoise.expressions import Q

from ..core.config import Settings, get_settings
from ..core.exceptions import AuthenticationError, ConflictError
from ..core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from ..models import User
from .domain import AuthenticatedUser


class AuthService:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    async def signup(self, username: str, email: str, password: str) -> tuple[User, str]:
        email = email.lower()

        existing = await User.filter(Q(username=username) | Q(email=email)).first()
        if existing:
            if existing.username == username:
                raise ConflictError("Username already exists")
            raise ConflictError("Email already exists")

        try:
            user = await User.create(
                username=username,
                email=email,
                password_hash=get_password_hash(password),
            )
        except IntegrityError:
            logger.warning(f"Concurrent signup collided for {username} / {email}")
            raise ConflictError("Username or email already exists")

        logger.info(f"Registered user {user.id} ({username})")
        return user, self.issue_token(user)

    async def login(self, username_or_email: str, password: str) -> tuple[User, str]:
        user = await User.filter(
            Q(username=username_or_email) | Q(email=username_or_email.lower())
        ).first()

        if user is None or not verify_password(password, user.password_hash):
            logger.warning(f"Failed login attempt for {username_or_email}")
            raise AuthenticationError("Invalid credentials")

        logger.info(f"User {user.id} logged in")
        return user, self.issue_token(user)

    async def is_username_available(self, username: str) -> bool:
        return not await User.filter(username=username).exists()

    def issue_token(self, user: User) -> str:
        return create_access_token(str(user.id), self.settings.jwt_config)

    async def authenticate_token(self, token: str) -> AuthenticatedUser:
        payload = decode_access_token(token, self.settings.jwt_config)
        if not payload:
            logger.warning("Invalid or expired JWT token")
            raise AuthenticationError("Invalid or expired token")

        subject = payload.get("sub")
        try:
            user_id = UUID(str(subject))
        except ValueError:
            logger.warning("JWT token carries a malformed 'sub' claim")
            raise AuthenticationError("Invalid token payload")

        user = await User.get_or_none(id=user_id)
        if user is None:
            logger.warning(f"User {user_id} not found")
            raise AuthenticationError("User not found")

        return AuthenticatedUser(id=user.id, username=user.username, email=user.email)
