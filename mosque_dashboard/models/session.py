from datetime import datetime, timezone
from sqlmodel import SQLModel

from mosque_dashboard.models.enums import AdminStatus, LoginOutcome, UserRole


class LoginRequest(SQLModel):
    email: str
    password: str


class DashboardSession(SQLModel):
    """
    An authenticated dashboard session built from a backend login response.

    `limited` sessions are handed to admins whose application is not approved
    (pending, rejected, removed...); they may only read their own status.
    """

    token: str
    role: UserRole
    user_id: str | None = None
    name: str | None = None
    email: str | None = None
    admin_status: AdminStatus | None = None
    mosque_id: str | None = None
    limited: bool = False
    expires_at: datetime | None = None

    def is_expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return now >= expires_at


class RejectionInfo(SQLModel):
    rejection_reason: str | None = None
    rejection_date: datetime | None = None
    rejection_count: int = 0
    can_reapply: bool = False


class LoginResult(SQLModel):
    """Tagged result of a login attempt; callers branch on `outcome`."""

    outcome: LoginOutcome
    message: str | None = None
    session: DashboardSession | None = None
    rejection: RejectionInfo | None = None

    @property
    def is_ok(self) -> bool:
        return self.outcome == LoginOutcome.OK
