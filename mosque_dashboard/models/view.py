from datetime import datetime
from pydantic import computed_field
from sqlmodel import SQLModel, Field

from mosque_dashboard.models.admin import AdminContact
from mosque_dashboard.models.enums import (
    AdminPresenceFilter,
    MosqueAdminStatus,
    NoticeLevel,
    StatusFilter,
)
from mosque_dashboard.models.mosque import MosqueBase, PrayerTimes


class ReconciledMosqueView(MosqueBase):
    """One mosque merged with every admin record that refers to it."""

    id: str
    verification_code: str = ""
    created_at: datetime | None = None
    prayer_times: PrayerTimes | None = None
    status: MosqueAdminStatus = MosqueAdminStatus.NO_ADMIN
    approved_admin: AdminContact | None = None
    pending_admins: list[AdminContact] = Field(default_factory=list)
    rejected_admins: list[AdminContact] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_approved_admin(self) -> bool:
        return self.approved_admin is not None


class MosqueQuery(SQLModel):
    search: str = ""
    status: StatusFilter = StatusFilter.ALL
    admin: AdminPresenceFilter = AdminPresenceFilter.ALL


class MosqueListPublic(SQLModel):
    total: int
    count: int
    mosques: list[ReconciledMosqueView]


class DashboardStats(SQLModel):
    total_mosques: int = 0
    with_admin: int = 0
    without_admin: int = 0
    pending_requests: int = 0
    rejected_admins: int = 0


class Notice(SQLModel):
    """Dismissible notification shown to the dashboard user."""

    level: NoticeLevel
    message: str
