"""
Query engine over the reconciled mosque list.

Everything here is pure and synchronous: filtering keeps feed order, and no
function raises on a view with blank optional fields.
"""

from datetime import datetime, timezone
from typing import Iterable

from mosque_dashboard.core.config import get_settings
from mosque_dashboard.exceptions import NotFoundError
from mosque_dashboard.models.admin import AdminContact
from mosque_dashboard.models.enums import (
    AdminPresenceFilter,
    MosqueAdminStatus,
    PriorityLevel,
    StatusFilter,
)
from mosque_dashboard.models.view import DashboardStats, MosqueQuery, ReconciledMosqueView

# Typing one of these shows every mosque instead of a literal (empty) match
ADMIN_STATUS_TERMS = frozenset({"admin", "no admin", "noadmin", "no_admin", "without admin"})


def normalize_term(term: str | None) -> str:
    return (term or "").strip().lower()


def _contact_fields(admin: AdminContact | None) -> list[str]:
    if admin is None:
        return []
    return [admin.name, admin.email, admin.phone]


def searchable_fields(view: ReconciledMosqueView) -> list[str]:
    fields = [
        view.name,
        view.location,
        view.verification_code,
        view.description,
        view.contact_email,
        view.contact_phone,
    ]
    for admin in view.pending_admins:
        fields.extend(_contact_fields(admin))
    for admin in view.rejected_admins:
        fields.extend(_contact_fields(admin))
    fields.extend(_contact_fields(view.approved_admin))
    return [(value or "").lower() for value in fields]


def matches_search(view: ReconciledMosqueView, term: str | None) -> bool:
    """
    Case-insensitive substring search across mosque and admin contact fields.

    An empty term, or one of ADMIN_STATUS_TERMS, matches every view.
    """
    normalized = normalize_term(term)
    if not normalized or normalized in ADMIN_STATUS_TERMS:
        return True
    return any(normalized in value for value in searchable_fields(view))


def matches_status(view: ReconciledMosqueView, status: StatusFilter) -> bool:
    if status == StatusFilter.ALL:
        return True
    return view.status == MosqueAdminStatus(status.value)


def matches_admin_filter(view: ReconciledMosqueView, admin: AdminPresenceFilter) -> bool:
    if admin == AdminPresenceFilter.HAS_ADMIN:
        return view.has_approved_admin
    if admin == AdminPresenceFilter.NO_ADMIN:
        return not view.has_approved_admin
    return True


def filter_mosques(
    views: Iterable[ReconciledMosqueView], query: MosqueQuery
) -> list[ReconciledMosqueView]:
    """
    Return the views that satisfy the search term AND both categorical filters.

    Parameters:
        views: Reconciled mosque views, in feed order.
        query: Search term, status filter and admin-presence filter.

    Returns:
        list[ReconciledMosqueView]: Matching views, feed order preserved.
    """
    return [
        view
        for view in views
        if matches_search(view, query.search)
        and matches_status(view, query.status)
        and matches_admin_filter(view, query.admin)
    ]


class SelectionSet:
    """Ordered set of selected mosque ids for bulk actions."""

    def __init__(self, ids: Iterable[str] = ()):
        self._ids: dict[str, None] = dict.fromkeys(ids)

    def __contains__(self, mosque_id: object) -> bool:
        return mosque_id in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self):
        return iter(self._ids)

    @property
    def ids(self) -> list[str]:
        return list(self._ids)

    def toggle(self, mosque_id: str) -> bool:
        """Flip one id; returns True when it is now selected."""
        if mosque_id in self._ids:
            del self._ids[mosque_id]
            return False
        self._ids[mosque_id] = None
        return True

    def select_all(self, visible_ids: Iterable[str]) -> None:
        """Select exactly the visible ids, or clear when they are all selected already."""
        visible = list(visible_ids)
        if len(self._ids) == len(visible):
            self._ids.clear()
        else:
            self._ids = dict.fromkeys(visible)

    def prune(self, visible_ids: Iterable[str]) -> list[str]:
        """Drop ids that are no longer visible; returns the dropped ids."""
        visible = set(visible_ids)
        dropped = [mosque_id for mosque_id in self._ids if mosque_id not in visible]
        for mosque_id in dropped:
            del self._ids[mosque_id]
        return dropped

    def discard(self, mosque_ids: Iterable[str]) -> None:
        for mosque_id in mosque_ids:
            self._ids.pop(mosque_id, None)

    def clear(self) -> None:
        self._ids.clear()


class QueryState:
    """Search, filters and selection for one dashboard session."""

    def __init__(self, query: MosqueQuery | None = None):
        self.query = query or MosqueQuery()
        self.selection = SelectionSet()
        self.visible: list[ReconciledMosqueView] = []

    def update(
        self,
        *,
        search: str | None = None,
        status: StatusFilter | None = None,
        admin: AdminPresenceFilter | None = None,
    ) -> MosqueQuery:
        changes = {
            key: value
            for key, value in (("search", search), ("status", status), ("admin", admin))
            if value is not None
        }
        self.query = self.query.model_copy(update=changes)
        return self.query

    def apply(self, views: Iterable[ReconciledMosqueView]) -> list[ReconciledMosqueView]:
        """Recompute the visible list and prune selected ids that fell out of it."""
        self.visible = filter_mosques(views, self.query)
        self.selection.prune(view.id for view in self.visible)
        return self.visible

    def select_all(self) -> list[str]:
        self.selection.select_all(view.id for view in self.visible)
        return self.selection.ids

    def toggle(self, mosque_id: str) -> bool:
        """
        Flip the selection of one visible mosque.

        Raises:
            NotFoundError: If the id is not in the current filtered result.
        """
        if not any(view.id == mosque_id for view in self.visible):
            raise NotFoundError("Mosque", mosque_id)
        return self.selection.toggle(mosque_id)


def dashboard_stats(views: Iterable[ReconciledMosqueView]) -> DashboardStats:
    stats = DashboardStats()
    pending_ids: set[str] = set()
    rejected_ids: set[str] = set()
    for view in views:
        stats.total_mosques += 1
        if view.has_approved_admin:
            stats.with_admin += 1
        else:
            stats.without_admin += 1
        for admin in view.pending_admins:
            pending_ids.add(admin.id or f"{view.id}:{admin.email}")
        for admin in view.rejected_admins:
            rejected_ids.add(admin.id or admin.email)
    stats.pending_requests = len(pending_ids)
    stats.rejected_admins = len(rejected_ids)
    return stats


def priority_for(view: ReconciledMosqueView, now: datetime | None = None) -> PriorityLevel:
    """
    How urgently a mosque needs attention, by age of its listing.

    Mosques without a creation timestamp count as brand new.
    """
    if view.created_at is None:
        return PriorityLevel.LOW
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    created = view.created_at
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    days = (now - created).days

    settings = get_settings()
    if days > settings.PRIORITY_HIGH_AFTER_DAYS:
        return PriorityLevel.HIGH
    if days > settings.PRIORITY_MEDIUM_AFTER_DAYS:
        return PriorityLevel.MEDIUM
    return PriorityLevel.LOW
