"""Authentication and authorization exceptions."""

from mosque_dashboard.exceptions.base import AppException


class AuthenticationError(AppException):
    """Base class for authentication-related errors."""

    pass


class InvalidTokenError(AuthenticationError):
    """Token is invalid, expired, or malformed."""

    def __init__(self, message: str = "Invalid or expired token"):
        """
        Initialize the InvalidTokenError with a descriptive message.

        Parameters:
            message (str): Error message describing the token problem. Defaults to "Invalid or expired token".
        """
        super().__init__(message)


class TokenExpiredError(InvalidTokenError):
    """Session token has expired (more specific than InvalidTokenError)."""

    def __init__(self, role: str = "admin"):
        """
        Initialize a TokenExpiredError for the role whose session ran out.

        Parameters:
            role (str): Role of the expired session (e.g., "admin" or "super_admin"); stored as `role`.
        """
        super().__init__(f"{role.replace('_', ' ').capitalize()} session has expired")
        self.role = role


class InsufficientPermissionsError(AuthenticationError):
    """Session doesn't have the rights required for this action."""

    def __init__(self, message: str = "Insufficient permissions"):
        """
        Initialize InsufficientPermissionsError with an optional message describing the permission failure.

        Parameters:
            message (str): Human-readable error message; defaults to "Insufficient permissions".
        """
        super().__init__(message)
