"""
Application exceptions module.

This module provides a clean separation of concerns for error handling:
- Base exceptions define the hierarchy
- CRUD exceptions handle lookups and client-side validation
- Auth exceptions handle sessions and permissions
- Backend exceptions handle feed loading and mutations against the directory backend
- HTTP mapping is handled separately in mosque_dashboard/core/error_handlers.py
"""

from mosque_dashboard.exceptions.base import AppException
from mosque_dashboard.exceptions.crud import (
    NotFoundError,
    ValidationError,
)
from mosque_dashboard.exceptions.auth import (
    AuthenticationError,
    InvalidTokenError,
    TokenExpiredError,
    InsufficientPermissionsError,
)
from mosque_dashboard.exceptions.backend import (
    BackendError,
    BackendUnavailableError,
    FeedFailure,
    MutationFailure,
)

__all__ = [
    # Base
    "AppException",
    # CRUD
    "NotFoundError",
    "ValidationError",
    # Auth
    "AuthenticationError",
    "InvalidTokenError",
    "TokenExpiredError",
    "InsufficientPermissionsError",
    # Backend
    "BackendError",
    "BackendUnavailableError",
    "FeedFailure",
    "MutationFailure",
]
