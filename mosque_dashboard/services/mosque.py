"""Mosque admin operations: prayer times and mosque details of the admin's own mosque."""

from loguru import logger

from mosque_dashboard.exceptions import (
    BackendError,
    BackendUnavailableError,
    InsufficientPermissionsError,
    MutationFailure,
    NotFoundError,
)
from mosque_dashboard.models.enums import AdminStatus, UserRole
from mosque_dashboard.models.mosque import MosqueUpdate, PrayerTimes
from mosque_dashboard.models.session import DashboardSession
from mosque_dashboard.services.backend_client import BackendClient, RawRecord
from mosque_dashboard.utils.validation import validate_prayer_times


def ensure_can_edit(session: DashboardSession, mosque_id: str) -> None:
    """
    Allow edits only by an approved, non-limited admin of this very mosque.

    Raises:
        InsufficientPermissionsError: For super admins, limited sessions, or another mosque.
    """
    if session.role != UserRole.ADMIN:
        raise InsufficientPermissionsError("Only mosque admins can edit mosque details")
    if session.limited or session.admin_status not in (None, AdminStatus.APPROVED):
        raise InsufficientPermissionsError("Your account is not approved to edit this mosque")
    if session.mosque_id != mosque_id:
        raise InsufficientPermissionsError("You can only edit your own mosque")


async def get_prayer_times(client: BackendClient, mosque_id: str) -> PrayerTimes:
    try:
        body = await client.get_prayer_times(mosque_id)
    except BackendError as e:
        if e.status_code == 404:
            raise NotFoundError("Mosque", mosque_id) from e
        raise
    return PrayerTimes.model_validate(body or {})


async def update_prayer_times(
    client: BackendClient,
    session: DashboardSession,
    mosque_id: str,
    prayer_times: PrayerTimes,
) -> RawRecord:
    """
    Replace the six prayer times of the session's mosque.

    Raises:
        InsufficientPermissionsError: If the session may not edit this mosque.
        ValidationError: If a time is missing or not `HH:MM AM/PM`.
        MutationFailure: If the backend refuses the update.
    """
    ensure_can_edit(session, mosque_id)
    prayer_times = validate_prayer_times(prayer_times)
    try:
        body = await client.update_prayer_times(mosque_id, prayer_times)
    except (BackendError, BackendUnavailableError) as e:
        raise MutationFailure(
            e.message, mosque_id=mosque_id, status_code=getattr(e, "status_code", None)
        ) from e
    logger.info(f"Prayer times updated for mosque {mosque_id}")
    return body


async def update_mosque(
    client: BackendClient,
    session: DashboardSession,
    mosque_id: str,
    mosque_in: MosqueUpdate,
) -> RawRecord:
    ensure_can_edit(session, mosque_id)
    if not mosque_in.model_fields_set:
        return {}
    try:
        body = await client.update_mosque(mosque_id, mosque_in)
    except (BackendError, BackendUnavailableError) as e:
        raise MutationFailure(
            e.message, mosque_id=mosque_id, status_code=getattr(e, "status_code", None)
        ) from e
    logger.info(f"Mosque {mosque_id} details updated: {sorted(mosque_in.model_fields_set)}")
    return body
