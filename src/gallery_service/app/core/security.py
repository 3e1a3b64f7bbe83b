"""Password hashing and JWT token handling"""

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt
from loguru import logger
from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def _normalize_password(password: str) -> bytes:
    """Pre-hash with SHA256 so bcrypt's 72-byte input limit never truncates."""
    return hashlib.sha256(password.encode("utf-8")).hexdigest().encode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    normalized = _normalize_password(plain_password)
    return pwd_context.verify(normalized, hashed_password)


def get_password_hash(password: str) -> str:
    normalized = _normalize_password(password)
    return pwd_context.hash(normalized)


def create_access_token(user_id: str, jwt_config: dict) -> str:
    """Create a signed JWT access token for a user.

    Args:
        user_id: User ID to encode in the ``sub`` claim
        jwt_config: dict with keys:
            - secret_key: Secret key for signing
            - algorithm: JWT algorithm (e.g., "HS256")
            - access_token_expire_minutes: Token lifetime in minutes

    Returns:
        Encoded JWT token string
    """
    expire_minutes = jwt_config.get("access_token_expire_minutes", 10080)
    expire = datetime.now(timezone.utc) + timedelta(minutes=expire_minutes)

    payload = {
        "sub": str(user_id),
        "exp": expire,
    }

    encoded_jwt = jwt.encode(
        payload,
        jwt_config["secret_key"],
        algorithm=jwt_config.get("algorithm", "HS256"),
    )
    logger.debug(f"Created access token for user: {user_id}")
    return encoded_jwt


def decode_access_token(token: str, jwt_config: dict) -> dict[str, Any] | None:
    """Decode and validate a JWT access token.

    Returns:
        Decoded payload if valid, None if invalid or expired
    """
    try:
        return jwt.decode(
            token,
            jwt_config["secret_key"],
            algorithms=[jwt_config.get("algorithm", "HS256")],
        )
    except JWTError as e:
        logger.debug(f"Failed to decode JWT token: {e}")
        return None
