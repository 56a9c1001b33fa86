"""Core infrastructure: settings, security, logging, exceptions."""

from .config import settings
from .exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    QuotaExceededError,
    StoreUnavailableError,
    ValidationError,
)
from .security import (
    TokenData,
    create_access_token,
    decode_access_token,
)


__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "ExternalServiceError",
    "NotFoundError",
    "QuotaExceededError",
    "StoreUnavailableError",
    "TokenData",
    "ValidationError",
    "create_access_token",
    "decode_access_token",
    "settings",
]
