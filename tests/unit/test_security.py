"""Unit tests for token handling and the ownership gate."""

import pytest
from jose import jwt

from earnings_api.core.config import settings
from earnings_api.core.exceptions import ForbiddenException, UnauthorizedException
from earnings_api.core.security import (
    SecurityUtils,
    ensure_owner,
    is_admin,
    principal_from_payload,
)
from conftest import ADMIN_PASSWORD, ADMIN_USERNAME


class TestTokens:

    def test_user_token_round_trip(self):
        token = SecurityUtils.create_access_token({"sub": "user-1", "role": "user", "email": "u@example.com"})

        principal = principal_from_payload(SecurityUtils.decode_token(token))

        assert principal["id"] == "user-1"
        assert principal["email"] == "u@example.com"
        assert not is_admin(principal)

    def test_admin_token(self):
        payload = SecurityUtils.decode_token(SecurityUtils.create_admin_token("root"))

        assert payload["sub"] == "admin:root"
        assert payload["username"] == "root"
        assert is_admin(principal_from_payload(payload))

    def test_expired_token(self):
        token = SecurityUtils.create_access_token({"sub": "user-1"}, expires_minutes=-1)

        with pytest.raises(UnauthorizedException) as exc_info:
            SecurityUtils.decode_token(token)
        assert exc_info.value.error_code == "TOKEN_EXPIRED"

    def test_wrong_signature(self):
        token = jwt.encode({"sub": "user-1", "type": "access"}, "another-secret", algorithm="HS256")

        with pytest.raises(UnauthorizedException) as exc_info:
            SecurityUtils.decode_token(token)
        assert exc_info.value.status_code == 401

    def test_token_without_access_type(self):
        token = jwt.encode({"sub": "user-1"}, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

        with pytest.raises(UnauthorizedException, match="Invalid token type"):
            SecurityUtils.decode_token(token)

    def test_garbage_token(self):
        with pytest.raises(UnauthorizedException):
            SecurityUtils.decode_token("not-a-jwt")


class TestAdminCredentials:

    def test_valid_credentials(self):
        assert SecurityUtils.authenticate_admin(ADMIN_USERNAME, ADMIN_PASSWORD) is True

    def test_wrong_password(self):
        assert SecurityUtils.authenticate_admin(ADMIN_USERNAME, "nope") is False

    def test_wrong_username(self):
        assert SecurityUtils.authenticate_admin("root", ADMIN_PASSWORD) is False

    def test_hash_round_trip(self):
        hashed = SecurityUtils.hash_password("s3cret")
        assert hashed != "s3cret"
        assert SecurityUtils.verify_password("s3cret", hashed)


class TestEnsureOwner:

    def test_owner_passes(self):
        ensure_owner({"id": "user-1", "role": "user"}, "user-1")

    def test_other_user_forbidden(self):
        with pytest.raises(ForbiddenException) as exc_info:
            ensure_owner({"id": "user-1", "role": "user"}, "user-2")
        assert exc_info.value.status_code == 403

    def test_admin_passes_for_anyone(self):
        ensure_owner({"id": "admin:admin", "role": "admin"}, "user-2")
