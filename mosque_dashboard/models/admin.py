from datetime import datetime
from sqlmodel import SQLModel, Field

from mosque_dashboard.models.enums import AdminStatus


class AdminContact(SQLModel):
    id: str | None = None
    name: str = ""
    email: str = ""
    phone: str = ""


class AdminRecord(AdminContact):
    """
    An admin application from one of the approved, pending or rejected feeds.

    Approved and pending admins point at a single mosque through `mosque_id`;
    rejected admins keep every mosque they were turned down for in
    `previous_mosque_ids`. Both hold already-normalized identifiers.
    """

    status: AdminStatus
    mosque_id: str | None = None
    previous_mosque_ids: list[str] = Field(default_factory=list)
    rejection_reason: str | None = None
    rejection_date: datetime | None = None
    rejection_count: int = 0
    can_reapply: bool = False

    def contact(self) -> AdminContact:
        return AdminContact(id=self.id, name=self.name, email=self.email, phone=self.phone)


class AdminAssignment(SQLModel):
    admin_email: str
    admin_name: str | None = None
    admin_phone: str | None = None
    admin_password: str | None = None
    super_admin_notes: str | None = None
