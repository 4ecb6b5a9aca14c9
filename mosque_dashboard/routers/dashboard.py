"""Super admin mosque management router."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from mosque_dashboard.core.dependencies import get_dashboard_service
from mosque_dashboard.models.admin import AdminAssignment
from mosque_dashboard.models.deletion import (
    BulkDeletionRequest,
    BulkDeletionResult,
    DeletionRequest,
)
from mosque_dashboard.models.enums import AdminPresenceFilter, NoticeLevel, StatusFilter
from mosque_dashboard.models.view import DashboardStats, MosqueListPublic, Notice
from mosque_dashboard.services.dashboard import DashboardService

router = APIRouter(prefix="/superadmin/mosques", tags=["superadmin"])


@router.get("", response_model=MosqueListPublic)
async def list_mosques(
    service: Annotated[DashboardService, Depends(get_dashboard_service)],
    search: str = Query(
        default="",
        description="Case-insensitive search in mosque details and admin contacts",
    ),
    status: StatusFilter = Query(
        default=StatusFilter.ALL, description="Derived status: all, approved or no_admin"
    ),
    admin: AdminPresenceFilter = Query(
        default=AdminPresenceFilter.ALL,
        description="Admin presence: all, has_admin or no_admin",
    ),
) -> MosqueListPublic:
    """
    Load the four directory feeds, reconcile them and return the filtered mosques.

    ### Filters:
    - **search**: substring match on name, location, verification code, description,
      contact email and phone, and on any pending, rejected or approved admin's
      name, email or phone. The phrases `admin`, `no admin`, `noadmin`, `no_admin`
      and `without admin` match every mosque.
    - **status**: `approved` or `no_admin` (derived from the approved admin feed)
    - **admin**: `has_admin` or `no_admin`

    Mosques keep the order of the backend's mosque feed. If any feed fails the
    whole load fails with 502 and `retry: true`.
    """
    await service.refresh()
    visible = service.query(search=search, status=status, admin=admin)
    return MosqueListPublic(total=len(service.views), count=len(visible), mosques=visible)


@router.get("/stats", response_model=DashboardStats)
async def get_stats(
    service: Annotated[DashboardService, Depends(get_dashboard_service)],
) -> DashboardStats:
    await service.refresh()
    return service.stats()


@router.delete("/{mosque_id}", response_model=Notice)
async def delete_mosque(
    mosque_id: str,
    deletion_in: DeletionRequest,
    service: Annotated[DashboardService, Depends(get_dashboard_service)],
) -> Notice:
    """
    Delete a mosque. A reason of at least 10 characters is required and is
    checked before anything is sent to the backend.
    """
    await service.delete_mosque(mosque_id, deletion_in.reason)
    return Notice(level=NoticeLevel.SUCCESS, message="Mosque deleted successfully")


@router.post("/bulk-delete", response_model=BulkDeletionResult)
async def bulk_delete_mosques(
    deletion_in: BulkDeletionRequest,
    service: Annotated[DashboardService, Depends(get_dashboard_service)],
) -> BulkDeletionResult:
    """Delete several mosques and report the outcome of each id separately."""
    return await service.bulk_delete(deletion_in.mosque_ids, deletion_in.reason)


@router.post("/{mosque_id}/assign-admin", response_model=Notice)
async def assign_admin(
    mosque_id: str,
    assignment: AdminAssignment,
    service: Annotated[DashboardService, Depends(get_dashboard_service)],
) -> Notice:
    await service.assign_admin(mosque_id, assignment)
    return Notice(level=NoticeLevel.SUCCESS, message="Admin assigned successfully")
