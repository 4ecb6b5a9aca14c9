from datetime import datetime, timezone
from typing import Any

import jwt
from jwt.exceptions import ExpiredSignatureError, PyJWTError
from loguru import logger

from mosque_dashboard.core.config import get_settings
from mosque_dashboard.exceptions import InvalidTokenError, TokenExpiredError
from mosque_dashboard.models.enums import AdminStatus, UserRole
from mosque_dashboard.models.session import DashboardSession


def decode_backend_token(token: str) -> dict[str, Any]:
    """
    Read the claims of a token issued by the directory backend.

    The signature is checked only when BACKEND_JWT_SECRET is configured; the
    backend remains the authority on every call either way.

    Returns:
        dict: The token claims (`userId`, `role`, `status`, `limited`, `exp`...).

    Raises:
        TokenExpiredError: If the signature is verified and the token has expired.
        InvalidTokenError: If the token is malformed or its signature does not match.
    """
    settings = get_settings()
    try:
        if settings.BACKEND_JWT_SECRET:
            return jwt.decode(
                token,
                settings.BACKEND_JWT_SECRET.get_secret_value(),
                algorithms=[settings.BACKEND_JWT_ALGORITHM],
            )
        return jwt.decode(token, options={"verify_signature": False})
    except ExpiredSignatureError:
        raise TokenExpiredError()
    except PyJWTError:
        raise InvalidTokenError()


def _admin_status(value: Any) -> AdminStatus | None:
    try:
        return AdminStatus(value) if value else None
    except ValueError:
        return None


def session_from_token(token: str, profile: dict[str, Any] | None = None) -> DashboardSession:
    """
    Build a DashboardSession from a backend token and, optionally, the login response's profile.

    Parameters:
        token (str): Backend-issued JWT.
        profile (dict | None): The `admin` / `super_admin` object returned next to the token; its
            fields fill in whatever the token claims leave out.

    Raises:
        InvalidTokenError: If the token has no recognizable role.
        TokenExpiredError: If the token's `exp` is in the past.
    """
    claims = decode_backend_token(token)
    profile = profile or {}

    try:
        role = UserRole(claims.get("role"))
    except ValueError:
        raise InvalidTokenError("Token does not carry a dashboard role")

    expires_at = None
    if claims.get("exp") is not None:
        expires_at = datetime.fromtimestamp(int(claims["exp"]), tz=timezone.utc)

    mosque_ref = claims.get("mosque_id") or profile.get("mosque_id")
    if isinstance(mosque_ref, dict):
        mosque_ref = mosque_ref.get("_id") or mosque_ref.get("id")

    limited = bool(claims.get("limited", False))
    status = _admin_status(claims.get("status") or profile.get("status"))
    if role == UserRole.ADMIN and status is None and not limited:
        status = AdminStatus.APPROVED

    session = DashboardSession(
        token=token,
        role=role,
        user_id=str(claims.get("userId") or profile.get("_id") or profile.get("id") or "") or None,
        name=claims.get("name") or profile.get("name"),
        email=claims.get("email") or profile.get("email"),
        admin_status=status,
        mosque_id=str(mosque_ref) if mosque_ref else None,
        limited=limited,
        expires_at=expires_at,
    )
    if session.is_expired():
        raise TokenExpiredError(role.value)
    return session


class SessionContext:
    """
    Owns the current dashboard session: created on a successful login,
    destroyed on logout or once it expires.
    """

    def __init__(self):
        self._session: DashboardSession | None = None

    def start(self, session: DashboardSession) -> DashboardSession:
        if self._session is not None:
            logger.info(f"Replacing {self._session.role.value} session with a new login")
        self._session = session
        return session

    def end(self) -> DashboardSession | None:
        ended, self._session = self._session, None
        return ended

    def current(self, now: datetime | None = None) -> DashboardSession | None:
        if self._session is not None and self._session.is_expired(now):
            logger.info(f"{self._session.role.value} session expired")
            self.end()
        return self._session

    @property
    def is_active(self) -> bool:
        return self.current() is not None
