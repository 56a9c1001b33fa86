"""API dependencies for authentication and service access."""

from __future__ import annotations

from fastapi import Depends, Header, Request

from stockpick.context import AppContext
from stockpick.core.exceptions import AuthenticationError, AuthorizationError
from stockpick.core.security import TokenData, decode_access_token


__all__ = [
    "get_context",
    "require_admin",
    "require_user",
]


def get_context(request: Request) -> AppContext:
    """The AppContext attached to the running application."""
    return request.app.state.context


def _extract_token(authorization: str | None) -> str | None:
    """Extract the JWT from an ``Authorization: Bearer`` header."""
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token.strip():
            return token.strip()
    return None


async def require_user(
    authorization: str | None = Header(default=None),
) -> TokenData:
    """
    Require an authenticated user.

    Raises AuthenticationError if the bearer token is missing or invalid.
    """
    token = _extract_token(authorization)
    if not token:
        raise AuthenticationError(message="Authentication required")
    return decode_access_token(token)


async def require_admin(user: TokenData = Depends(require_user)) -> TokenData:
    """Require an authenticated user carrying the admin claim."""
    if not user.is_admin:
        raise AuthorizationError(message="Admin privileges required")
    return user
