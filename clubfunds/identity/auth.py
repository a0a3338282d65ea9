"""
===============================================================================
TARJETA CRC - identity/auth.py
===============================================================================

Module:
    User authentication primitives (Argon2 + JWT)

Responsibilities:
    - Hash/verify passwords (Argon2).
    - Issue signed access tokens with expiry.
    - Decode and validate access tokens (signature, exp, required claims).
    - Extract the bearer token from the Authorization header.

Collaborators:
    - crosscutting.config.get_settings: secret and TTL.
    - crosscutting.error_responses: standard 401.

Design decisions:
    - Crypto lives at the identity edge, never in the domain.
    - Minimal claims: sub, email, iat, exp, typ. Roles are NOT in the token;
      they are read from the ledger on every request so a revoke takes
      effect immediately.
    - Never log tokens or passwords.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import unauthorized
from ..domain.entities import User

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

JWT_ALGORITHM: str = "HS256"

CLAIM_SUB: str = "sub"
CLAIM_EMAIL: str = "email"
CLAIM_IAT: str = "iat"
CLAIM_EXP: str = "exp"
CLAIM_TYP: str = "typ"

TOKEN_TYPE_ACCESS: str = "access"

_password_hasher = PasswordHasher()


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """Auth settings snapshot."""

    jwt_secret: str
    jwt_access_ttl_minutes: int


@dataclass(frozen=True, slots=True)
class TokenPayload:
    user_id: UUID
    email: str


def get_auth_settings() -> AuthSettings:
    s = get_settings()
    return AuthSettings(
        jwt_secret=s.jwt_secret,
        jwt_access_ttl_minutes=s.jwt_access_ttl_minutes,
    )


# ---------------------------------------------------------------------------
# Passwords (Argon2)
# ---------------------------------------------------------------------------


def hash_password(password: str) -> str:
    return _password_hasher.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    """Verify a password against the stored hash (False on any mismatch)."""
    try:
        return _password_hasher.verify(password_hash, password)
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


# ---------------------------------------------------------------------------
# JWT (issue / decode)
# ---------------------------------------------------------------------------


def create_access_token(
    user: User, settings: AuthSettings | None = None, *, now: datetime | None = None
) -> tuple[str, int]:
    """
    Create a signed access token.

    Returns:
        (token, expires_in_seconds)
    """
    auth_settings = settings or get_auth_settings()
    issued_at = now or datetime.now(timezone.utc)
    expires_in = int(auth_settings.jwt_access_ttl_minutes * 60)

    payload: dict[str, object] = {
        CLAIM_SUB: str(user.id),
        CLAIM_EMAIL: user.email,
        CLAIM_IAT: int(issued_at.timestamp()),
        CLAIM_EXP: int((issued_at + timedelta(seconds=expires_in)).timestamp()),
        CLAIM_TYP: TOKEN_TYPE_ACCESS,
    }

    token = jwt.encode(payload, auth_settings.jwt_secret, algorithm=JWT_ALGORITHM)
    return token, expires_in


def decode_access_token(
    token: str, settings: AuthSettings | None = None
) -> TokenPayload:
    """
    Decode and validate an access token.

    Raises:
        AppHTTPException(401) when expired, badly signed or malformed.
    """
    auth_settings = settings or get_auth_settings()

    try:
        payload = jwt.decode(
            token,
            auth_settings.jwt_secret,
            algorithms=[JWT_ALGORITHM],
            options={"require": [CLAIM_SUB, CLAIM_EMAIL, CLAIM_EXP]},
        )
    except jwt.ExpiredSignatureError as exc:
        raise unauthorized("Token expired.") from exc
    except jwt.InvalidTokenError as exc:
        raise unauthorized("Invalid token.") from exc

    if payload.get(CLAIM_TYP, TOKEN_TYPE_ACCESS) != TOKEN_TYPE_ACCESS:
        raise unauthorized("Invalid token type.")

    try:
        user_id = UUID(str(payload[CLAIM_SUB]))
    except ValueError as exc:
        raise unauthorized("Invalid token.") from exc

    return TokenPayload(user_id=user_id, email=str(payload[CLAIM_EMAIL]))


def extract_bearer_token(authorization: str | None) -> str | None:
    """Token from `Authorization: Bearer <token>`, or None."""
    if not authorization:
        return None
    parts = authorization.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer":
        return None
    token = parts[1].strip()
    return token or None
