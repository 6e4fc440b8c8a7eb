"""Core utilities: errors, permissions, locking and security."""

from staybook.core.exceptions import (
    AppException,
    AuthenticationError,
    ConflictError,
    ForbiddenError,
    IllegalTransitionError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from staybook.core.permissions import Actor, Principal, UserRole, classify_actor

__all__ = [
    "AppException",
    "AuthenticationError",
    "ConflictError",
    "ForbiddenError",
    "IllegalTransitionError",
    "InvalidStateError",
    "NotFoundError",
    "ValidationError",
    "Actor",
    "Principal",
    "UserRole",
    "classify_actor",
]
