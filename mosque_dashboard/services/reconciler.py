"""
Reconciler: merges the mosque feed with the three admin feeds.

Every mosque yields exactly one `ReconciledMosqueView`. Admin records are
correlated to mosques through their (normalized) mosque reference; records
that point at no known mosque simply contribute to no view.
"""

from collections import defaultdict
from typing import Any, Iterable, Mapping

from loguru import logger

from mosque_dashboard.models.admin import AdminContact, AdminRecord
from mosque_dashboard.models.enums import AdminStatus, MosqueAdminStatus
from mosque_dashboard.models.mosque import MosqueRecord
from mosque_dashboard.models.view import ReconciledMosqueView


def normalize_mosque_ref(ref: Any) -> str | None:
    """
    Reduce any mosque reference shape to its bare identifier.

    Accepts a bare id, an embedded mosque object (`{"_id": ...}` or `{"id": ...}`),
    or a rejection-history entry (`{"mosque_id": <ref>, ...}` / `{"mosque": <ref>}`).

    Returns:
        str | None: The identifier, or None when the reference is empty.
    """
    if ref is None:
        return None
    if isinstance(ref, Mapping):
        # History entries carry their own subdocument `_id`; the mosque is nested
        for key in ("mosque_id", "mosque"):
            if key in ref:
                return normalize_mosque_ref(ref[key])
        return _record_id(ref)
    ref = str(ref).strip()
    return ref or None


def _record_id(raw: Mapping[str, Any]) -> str | None:
    for key in ("_id", "id"):
        if raw.get(key):
            return str(raw[key])
    return None


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _own_status(raw: Mapping[str, Any], default: AdminStatus) -> AdminStatus:
    try:
        return AdminStatus(raw.get("status") or default)
    except ValueError:
        return default


def parse_mosque(raw: Mapping[str, Any] | MosqueRecord) -> MosqueRecord:
    if isinstance(raw, MosqueRecord):
        return raw
    return MosqueRecord(
        id=_record_id(raw) or "",
        name=_text(raw.get("name") or raw.get("mosque_name")),
        location=_text(raw.get("location")),
        description=_text(raw.get("description")),
        contact_email=_text(raw.get("contact_email")),
        contact_phone=_text(raw.get("contact_phone")),
        verification_code=_text(raw.get("verification_code") or raw.get("registration_code")),
        created_at=raw.get("createdAt") or raw.get("created_at"),
        prayer_times=raw.get("prayer_times"),
    )


def parse_admin(raw: Mapping[str, Any] | AdminRecord, status: AdminStatus) -> AdminRecord:
    """
    Build an AdminRecord from one feed item, normalizing its mosque references.

    The record's own `status` is kept when it is a known one; the feed the
    item arrived on only supplies the default.
    """
    if isinstance(raw, AdminRecord):
        return raw

    previous: list[str] = []
    for entry in raw.get("previous_mosque_ids") or raw.get("previous_mosques") or []:
        mosque_id = normalize_mosque_ref(entry)
        if mosque_id and mosque_id not in previous:
            previous.append(mosque_id)

    return AdminRecord(
        id=_record_id(raw),
        name=_text(raw.get("name")),
        email=_text(raw.get("email")),
        phone=_text(raw.get("phone")),
        status=_own_status(raw, status),
        mosque_id=normalize_mosque_ref(raw.get("mosque_id")),
        previous_mosque_ids=previous,
        rejection_reason=raw.get("rejection_reason"),
        rejection_date=raw.get("rejection_date"),
        rejection_count=raw.get("rejection_count") or 0,
        can_reapply=bool(raw.get("can_reapply")),
    )


def _approved_by_mosque(admins: Iterable[AdminRecord]) -> dict[str, AdminContact]:
    approved: dict[str, AdminContact] = {}
    for admin in admins:
        # The approved feed can briefly still list removed admins
        if not admin.mosque_id or admin.status != AdminStatus.APPROVED:
            continue
        if admin.mosque_id in approved:
            # TODO: confirm with the backend team whether two approved admins
            # for one mosque can happen; until then the last record wins.
            logger.warning(
                f"Mosque {admin.mosque_id} has more than one approved admin; "
                f"keeping admin {admin.id}"
            )
        approved[admin.mosque_id] = admin.contact()
    return approved


def _pending_by_mosque(admins: Iterable[AdminRecord]) -> dict[str, list[AdminContact]]:
    pending: dict[str, list[AdminContact]] = defaultdict(list)
    for admin in admins:
        if admin.mosque_id:
            pending[admin.mosque_id].append(admin.contact())
    return pending


def _rejected_by_mosque(admins: Iterable[AdminRecord]) -> dict[str, list[AdminContact]]:
    # A rejected admin is filed under every mosque they were ever turned down for
    rejected: dict[str, list[AdminContact]] = defaultdict(list)
    for admin in admins:
        for mosque_id in admin.previous_mosque_ids:
            rejected[mosque_id].append(admin.contact())
    return rejected


def reconcile(
    mosques: Iterable[Mapping[str, Any] | MosqueRecord],
    approved_admins: Iterable[Mapping[str, Any] | AdminRecord] = (),
    pending_admins: Iterable[Mapping[str, Any] | AdminRecord] = (),
    rejected_admins: Iterable[Mapping[str, Any] | AdminRecord] = (),
) -> list[ReconciledMosqueView]:
    """
    Produce one reconciled view per mosque, in mosque feed order.

    Parameters:
        mosques: Mosque feed items (raw dicts or MosqueRecord).
        approved_admins: Approved admin feed; only records whose own status is approved
            count, and at most one is kept per mosque (last wins).
        pending_admins: Pending admin feed; grouped per mosque in arrival order.
        rejected_admins: Rejected admin feed; fanned out over each admin's previous mosques.

    Returns:
        list[ReconciledMosqueView]: Exactly one view per mosque record.
    """
    approved = _approved_by_mosque(parse_admin(a, AdminStatus.APPROVED) for a in approved_admins)
    pending = _pending_by_mosque(parse_admin(a, AdminStatus.PENDING) for a in pending_admins)
    rejected = _rejected_by_mosque(parse_admin(a, AdminStatus.REJECTED) for a in rejected_admins)

    views = []
    for raw in mosques:
        mosque = parse_mosque(raw)
        approved_admin = approved.get(mosque.id)
        views.append(
            ReconciledMosqueView(
                **mosque.model_dump(exclude={"prayer_times"}),
                prayer_times=mosque.prayer_times,
                status=(
                    MosqueAdminStatus.APPROVED
                    if approved_admin is not None
                    else MosqueAdminStatus.NO_ADMIN
                ),
                approved_admin=approved_admin,
                pending_admins=list(pending.get(mosque.id, [])),
                rejected_admins=list(rejected.get(mosque.id, [])),
            )
        )
    return views
