"""Core utilities and security modules."""

from getlost.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    CapacityExhausted,
    ConflictError,
    InvalidTransition,
    NoAvailability,
    NotFoundError,
    RateLimitExceeded,
    ValidationError,
)
from getlost.core.permissions import Actor, Ownership, Permission, UserRole, authorize
from getlost.core.security import create_access_token, create_user_token, verify_token

__all__ = [
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "CapacityExhausted",
    "ConflictError",
    "InvalidTransition",
    "NoAvailability",
    "NotFoundError",
    "RateLimitExceeded",
    "ValidationError",
    "Actor",
    "Ownership",
    "Permission",
    "UserRole",
    "authorize",
    "create_access_token",
    "create_user_token",
    "verify_token",
]
