"""
Name: Identity Tests (passwords, tokens, permissions)

Responsibilities:
  - Argon2 hashing round trip and mismatch handling
  - JWT issue/decode, expiry and signature failures
  - Role -> permission matrix
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
import pytest
from clubfunds.crosscutting.error_responses import AppHTTPException
from clubfunds.domain.entities import SystemRole, User
from clubfunds.identity.auth import (
    AuthSettings,
    create_access_token,
    decode_access_token,
    extract_bearer_token,
    hash_password,
    verify_password,
)
from clubfunds.identity.principal import Principal
from clubfunds.identity.rbac import Permission, permissions_for_roles

pytestmark = pytest.mark.unit

SETTINGS = AuthSettings(jwt_secret="s" * 40, jwt_access_ttl_minutes=30)


def _user() -> User:
    return User(
        id=uuid4(),
        email="treasurer@club.example.org",
        username="treasurer",
        password_hash="",
    )


class TestPasswords:
    def test_hash_verifies(self):
        hashed = hash_password("correct horse")

        assert hashed != "correct horse"
        assert verify_password("correct horse", hashed) is True
        assert verify_password("wrong horse", hashed) is False

    def test_garbage_hash_is_a_mismatch(self):
        assert verify_password("anything", "not-an-argon2-hash") is False


class TestAccessTokens:
    def test_round_trip(self):
        user = _user()

        token, expires_in = create_access_token(user, SETTINGS)
        payload = decode_access_token(token, SETTINGS)

        assert expires_in == 1800
        assert payload.user_id == user.id
        assert payload.email == user.email

    def test_expired_token_is_unauthorized(self):
        issued = datetime.now(timezone.utc) - timedelta(hours=2)
        token, _ = create_access_token(_user(), SETTINGS, now=issued)

        with pytest.raises(AppHTTPException) as exc_info:
            decode_access_token(token, SETTINGS)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token expired."

    def test_foreign_signature_is_unauthorized(self):
        token = jwt.encode(
            {"sub": str(uuid4()), "email": "x@y.org", "exp": 9999999999},
            "another-secret-of-sufficient-length-123",
            algorithm="HS256",
        )

        with pytest.raises(AppHTTPException) as exc_info:
            decode_access_token(token, SETTINGS)

        assert exc_info.value.status_code == 401

    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Bearer abc.def", "abc.def"),
            ("bearer   abc ", "abc"),
            ("Basic abc", None),
            ("Bearer ", None),
            (None, None),
        ],
    )
    def test_extract_bearer_token(self, header, expected):
        assert extract_bearer_token(header) == expected


class TestPermissions:
    def test_member_can_only_handle_own_payments(self):
        granted = permissions_for_roles([SystemRole.USER.value])

        assert granted == {Permission.PAYMENTS_CREATE_OWN, Permission.PAYMENTS_READ_OWN}

    def test_financial_and_technical_admins_are_disjoint_on_money(self):
        fin = permissions_for_roles([SystemRole.FIN_ADMIN.value])
        tech = permissions_for_roles([SystemRole.TECH_ADMIN.value])

        assert Permission.EXPENSES_APPROVE in fin
        assert Permission.ROLES_MANAGE not in fin
        assert Permission.PAYMENTS_MANAGE not in tech
        assert Permission.AUDIT_READ in fin & tech

    def test_super_admin_wildcard(self):
        principal = Principal(
            user_id=uuid4(),
            email="chair@club.example.org",
            roles=frozenset({SystemRole.SUPER_ADMIN.value}),
            permissions=permissions_for_roles([SystemRole.SUPER_ADMIN.value]),
        )

        assert all(principal.can(p) for p in Permission)

    def test_unknown_role_grants_nothing(self):
        assert permissions_for_roles(["COACH"]) == frozenset()
