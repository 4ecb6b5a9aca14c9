"""Mosque admin router: prayer times and mosque details."""

from typing import Annotated

from fastapi import APIRouter, Depends

from mosque_dashboard.core.dependencies import (
    get_backend_client,
    get_current_session,
    get_session_client,
)
from mosque_dashboard.models.enums import NoticeLevel
from mosque_dashboard.models.mosque import MosqueUpdate, PrayerTimes
from mosque_dashboard.models.session import DashboardSession
from mosque_dashboard.models.view import Notice
from mosque_dashboard.services import mosque as mosque_service
from mosque_dashboard.services.backend_client import BackendClient

router = APIRouter(prefix="/mosques", tags=["mosques"])


@router.get("/{mosque_id}/prayer-times", response_model=PrayerTimes)
async def get_prayer_times(
    mosque_id: str,
    client: Annotated[BackendClient, Depends(get_backend_client)],
) -> PrayerTimes:
    """Public: prayer times are shown on the mosque's page without logging in."""
    return await mosque_service.get_prayer_times(client, mosque_id)


@router.put("/{mosque_id}/prayer-times", response_model=Notice)
async def update_prayer_times(
    mosque_id: str,
    prayer_times: PrayerTimes,
    session: Annotated[DashboardSession, Depends(get_current_session)],
    client: Annotated[BackendClient, Depends(get_session_client)],
) -> Notice:
    """
    Replace all six prayer times of the admin's own mosque.

    Every time must be given as `HH:MM AM/PM`. Limited sessions (pending,
    rejected, removed admins) and admins of other mosques get 403.
    """
    await mosque_service.update_prayer_times(client, session, mosque_id, prayer_times)
    return Notice(level=NoticeLevel.SUCCESS, message="Prayer times updated successfully")


@router.put("/{mosque_id}", response_model=Notice)
async def update_mosque(
    mosque_id: str,
    mosque_in: MosqueUpdate,
    session: Annotated[DashboardSession, Depends(get_current_session)],
    client: Annotated[BackendClient, Depends(get_session_client)],
) -> Notice:
    await mosque_service.update_mosque(client, session, mosque_id, mosque_in)
    return Notice(level=NoticeLevel.SUCCESS, message="Mosque details updated successfully")
