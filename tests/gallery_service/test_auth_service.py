from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from src.gallery_service.app.core.exceptions import AuthenticationError, ConflictError
from src.gallery_service.app.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from src.gallery_service.app.models import User


class TestPasswordHashing:
    def test_hash_verifies(self):
        hashed = get_password_hash("s3cret!")

        assert hashed != "s3cret!"
        assert verify_password("s3cret!", hashed)
        assert not verify_password("wrong", hashed)

    def test_long_passwords_are_not_truncated(self):
        base = "a" * 80
        hashed = get_password_hash(base + "1")

        assert not verify_password(base + "2", hashed)


class TestAccessTokens:
    def test_round_trip_carries_subject(self, test_settings):
        token = create_access_token("user-123", test_settings.jwt_config)

        payload = decode_access_token(token, test_settings.jwt_config)

        assert payload["sub"] == "user-123"

    def test_wrong_secret_is_rejected(self, test_settings):
        token = create_access_token("user-123", test_settings.jwt_config)
        other = {**test_settings.jwt_config, "secret_key": "another-secret"}

        assert decode_access_token(token, other) is None

    def test_expired_token_is_rejected(self, test_settings):
        config = test_settings.jwt_config
        token = jwt.encode(
            {"sub": "user-123", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            config["secret_key"],
            algorithm=config["algorithm"],
        )

        assert decode_access_token(token, config) is None

    def test_garbage_is_rejected(self, test_settings):
        assert decode_access_token("not.a.token", test_settings.jwt_config) is None


class TestSignup:
    async def test_creates_user_and_token(self, auth_service, test_settings):
        user, token = await auth_service.signup("alice", "Alice@Example.com", "secret1")

        stored = await User.get(id=user.id)
        assert stored.email == "alice@example.com"
        assert stored.password_hash != "secret1"
        assert verify_password("secret1", stored.password_hash)
        assert decode_access_token(token, test_settings.jwt_config)["sub"] == str(
            user.id
        )

    async def test_duplicate_username(self, auth_service):
        await auth_service.signup("alice", "alice@example.com", "secret1")

        with pytest.raises(ConflictError, match="Username already exists"):
            await auth_service.signup("alice", "other@example.com", "secret1")

    async def test_duplicate_email(self, auth_service):
        await auth_service.signup("alice", "alice@example.com", "secret1")

        with pytest.raises(ConflictError, match="Email already exists"):
            await auth_service.signup("alicia", "ALICE@example.com", "secret1")


class TestLogin:
    @pytest.mark.parametrize("identifier", ["bob", "bob@example.com", "BOB@example.com"])
    async def test_login_by_username_or_email(self, auth_service, identifier):
        created, _ = await auth_service.signup("bob", "bob@example.com", "secret1")

        user, token = await auth_service.login(identifier, "secret1")

        assert user.id == created.id
        assert token

    async def test_wrong_password(self, auth_service):
        await auth_service.signup("bob", "bob@example.com", "secret1")

        with pytest.raises(AuthenticationError, match="Invalid credentials"):
            await auth_service.login("bob", "nope")

    async def test_unknown_user(self, auth_service):
        with pytest.raises(AuthenticationError, match="Invalid credentials"):
            await auth_service.login("ghost", "secret1")


class TestUsernameAvailability:
    async def test_availability(self, auth_service, make_user):
        await make_user("taken_name")

        assert await auth_service.is_username_available("taken_name") is False
        assert await auth_service.is_username_available("free_name") is True


class TestAuthenticateToken:
    async def test_valid_token_resolves_user(self, auth_service):
        user, token = await auth_service.signup("carol", "carol@example.com", "secret1")

        identity = await auth_service.authenticate_token(token)

        assert identity.id == user.id
        assert identity.username == "carol"
        assert identity.email == "carol@example.com"

    async def test_invalid_token(self, auth_service):
        with pytest.raises(AuthenticationError, match="Invalid or expired token"):
            await auth_service.authenticate_token("garbage")

    async def test_malformed_subject(self, auth_service, test_settings):
        token = create_access_token("not-a-uuid", test_settings.jwt_config)

        with pytest.raises(AuthenticationError, match="Invalid token payload"):
            await auth_service.authenticate_token(token)

    async def test_deleted_user(self, auth_service):
        user, token = await auth_service.signup("dave", "dave@example.com", "secret1")
        await user.delete()

        with pytest.raises(AuthenticationError, match="User not found"):
            await auth_service.authenticate_token(token)
