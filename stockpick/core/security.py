"""JWT bearer tokens issued by the identity provider."""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from pydantic import BaseModel

from .config import settings
from .exceptions import AuthenticationError


# JWT Configuration
JWT_ALGORITHM = "HS256"
JWT_ISSUER = "stockpick"
JWT_AUDIENCE = "stockpick-api"


class TokenData(BaseModel):
    """Decoded JWT token data."""

    sub: str  # opaque user id
    exp: datetime
    iat: datetime
    iss: str
    aud: str
    jti: str
    email: Optional[str] = None
    is_admin: bool = False

    @property
    def user_id(self) -> str:
        return self.sub


def _as_datetime(value) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromtimestamp(value, tz=timezone.utc)


def create_access_token(
    user_id: str,
    email: Optional[str] = None,
    is_admin: bool = False,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed JWT access token.

    Production tokens come from the identity provider; this exists for
    local development and tests, signing with the same shared secret.
    """
    now = datetime.now(timezone.utc)
    expires = now + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))

    payload = {
        "sub": user_id,
        "exp": expires,
        "iat": now,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "jti": secrets.token_urlsafe(16),
        "is_admin": is_admin,
    }
    if email:
        payload["email"] = email

    return jwt.encode(payload, settings.auth_secret, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> TokenData:
    """Decode and validate JWT access token."""
    try:
        payload = jwt.decode(
            token,
            settings.auth_secret,
            algorithms=[JWT_ALGORITHM],
            issuer=JWT_ISSUER,
            audience=JWT_AUDIENCE,
            options={
                "require": ["exp", "iat", "sub", "iss", "aud", "jti"],
            },
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError(message="Token has expired", error_code="TOKEN_EXPIRED")
    except jwt.InvalidTokenError:
        raise AuthenticationError(message="Invalid token", error_code="INVALID_TOKEN")

    return TokenData(
        sub=payload["sub"],
        exp=_as_datetime(payload["exp"]),
        iat=_as_datetime(payload["iat"]),
        iss=payload["iss"],
        aud=payload["aud"],
        jti=payload["jti"],
        email=payload.get("email"),
        is_admin=bool(payload.get("is_admin", False)),
    )
