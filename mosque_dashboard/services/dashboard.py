"""
Session-scoped super admin dashboard.

`DashboardService` owns the reconciled mosque list, the query state and the
selection for one dashboard session. Routers create one per request; other
in-process consumers may keep one around and call `refresh` again to reload.
"""

import asyncio

from loguru import logger

from mosque_dashboard.exceptions import (
    BackendError,
    BackendUnavailableError,
    FeedFailure,
    MutationFailure,
    NotFoundError,
    ValidationError,
)
from mosque_dashboard.models.admin import AdminAssignment
from mosque_dashboard.models.deletion import BulkDeletionResult, DeletionOutcome
from mosque_dashboard.models.enums import (
    AdminPresenceFilter,
    NoticeLevel,
    StatusFilter,
)
from mosque_dashboard.models.view import (
    DashboardStats,
    MosqueQuery,
    Notice,
    ReconciledMosqueView,
)
from mosque_dashboard.services.backend_client import BackendClient, RawRecord
from mosque_dashboard.services.feed_loader import FeedLoader
from mosque_dashboard.services.query import QueryState, dashboard_stats
from mosque_dashboard.services.reconciler import reconcile
from mosque_dashboard.utils.validation import validate_assignment, validate_deletion_reason


def bulk_notice(deleted: int, failed: int) -> Notice:
    """Summarize a bulk delete as a success, warning or error notice."""
    if failed == 0:
        return Notice(
            level=NoticeLevel.SUCCESS,
            message=f"Successfully deleted {deleted} mosque{'s' if deleted != 1 else ''}",
        )
    if deleted == 0:
        return Notice(
            level=NoticeLevel.ERROR,
            message=f"Failed to delete {failed} mosque{'s' if failed != 1 else ''}",
        )
    return Notice(
        level=NoticeLevel.WARNING,
        message=f"Deleted {deleted} mosque{'s' if deleted != 1 else ''}, {failed} failed",
    )


class DashboardService:
    """
    The reconciled list plus search, filters and selection of one super admin session.

    Attributes:
        client (BackendClient): Client authenticated with the super admin's token.
        loader (FeedLoader): Issues numbered load cycles.
        state (QueryState): Current query, visible subset and selection.
        views (list[ReconciledMosqueView]): The full reconciled list, feed order.
        last_error (str | None): Message of the last failed load, cleared on success.
    """

    def __init__(self, client: BackendClient, state: QueryState | None = None):
        self.client = client
        self.loader = FeedLoader(client)
        self.state = state or QueryState()
        self.views: list[ReconciledMosqueView] = []
        self.last_error: str | None = None

    async def refresh(self) -> list[ReconciledMosqueView]:
        """
        Reload the four feeds and rebuild the reconciled list.

        A failed load clears the list and the selection before re-raising, so
        stale data is never shown as current. A load that finishes after a newer
        one was started is discarded, whether it succeeded or failed, and the
        current list is returned unchanged.

        Raises:
            FeedFailure: If any feed of the latest load could not be retrieved.
        """
        try:
            snapshot = await self.loader.load()
        except FeedFailure as e:
            if e.cycle is not None and not self.loader.is_current(e.cycle):
                logger.info(
                    f"Ignoring failure of feed load cycle {e.cycle}; "
                    f"cycle {self.loader.latest_cycle} is newer"
                )
                return self.views
            self.views = []
            self.state.visible = []
            self.state.selection.clear()
            self.last_error = e.message
            raise

        if not self.loader.is_current(snapshot.cycle):
            logger.info(
                f"Discarding feed load cycle {snapshot.cycle}; "
                f"cycle {self.loader.latest_cycle} is newer"
            )
            return self.views

        self.views = reconcile(
            snapshot.mosques,
            snapshot.approved_admins,
            snapshot.pending_admins,
            snapshot.rejected_admins,
        )
        self.last_error = None
        self.state.apply(self.views)
        return self.views

    def query(
        self,
        *,
        search: str | None = None,
        status: StatusFilter | None = None,
        admin: AdminPresenceFilter | None = None,
    ) -> list[ReconciledMosqueView]:
        """Change any of the search term and filters, then recompute the visible list."""
        self.state.update(search=search, status=status, admin=admin)
        return self.state.apply(self.views)

    def apply(self, query: MosqueQuery) -> list[ReconciledMosqueView]:
        self.state.query = query
        return self.state.apply(self.views)

    @property
    def visible(self) -> list[ReconciledMosqueView]:
        return self.state.visible

    @property
    def selected_ids(self) -> list[str]:
        return self.state.selection.ids

    def select_all(self) -> list[str]:
        return self.state.select_all()

    def toggle(self, mosque_id: str) -> bool:
        return self.state.toggle(mosque_id)

    def stats(self) -> DashboardStats:
        return dashboard_stats(self.views)

    def get_mosque(self, mosque_id: str) -> ReconciledMosqueView:
        for view in self.views:
            if view.id == mosque_id:
                return view
        raise NotFoundError("Mosque", mosque_id)

    def _remove(self, mosque_ids: list[str]) -> None:
        removed = set(mosque_ids)
        self.views = [view for view in self.views if view.id not in removed]
        self.state.visible = [view for view in self.state.visible if view.id not in removed]
        self.state.selection.discard(mosque_ids)

    async def delete_mosque(self, mosque_id: str, reason: str) -> RawRecord:
        """
        Delete one mosque on the backend, then drop it from the local list.

        Raises:
            ValidationError: If the reason is blank or too short; nothing is sent.
            MutationFailure: If the backend refuses; the local list is unchanged.
        """
        reason = validate_deletion_reason(reason)
        try:
            body = await self.client.delete_mosque(mosque_id, reason)
        except (BackendError, BackendUnavailableError) as e:
            raise MutationFailure(
                e.message,
                mosque_id=mosque_id,
                status_code=getattr(e, "status_code", None),
            ) from e

        self._remove([mosque_id])
        logger.info(f"Deleted mosque {mosque_id}")
        return body

    async def _delete_one(self, mosque_id: str, reason: str) -> DeletionOutcome:
        try:
            await self.client.delete_mosque(mosque_id, reason)
        except (BackendError, BackendUnavailableError) as e:
            logger.warning(f"Bulk delete of mosque {mosque_id} failed: {e.message}")
            return DeletionOutcome(mosque_id=mosque_id, deleted=False, error=e.message)
        return DeletionOutcome(mosque_id=mosque_id, deleted=True)

    async def bulk_delete(
        self, mosque_ids: list[str] | None = None, reason: str = ""
    ) -> BulkDeletionResult:
        """
        Delete several mosques, one backend call per id, and report each id's outcome.

        Parameters:
            mosque_ids (list[str] | None): Ids to delete; defaults to the current selection.
            reason (str): Deletion reason shared by every id.

        Returns:
            BulkDeletionResult: Per-id outcomes and a notice that is `success` when every
            id was deleted, `warning` when some were and `error` when none were.

        Raises:
            ValidationError: If the reason is invalid or there is nothing to delete.
        """
        reason = validate_deletion_reason(reason)
        ids = list(dict.fromkeys(mosque_ids if mosque_ids is not None else self.selected_ids))
        if not ids:
            raise ValidationError("Select at least one mosque to delete", field="mosque_ids")

        outcomes = await asyncio.gather(*(self._delete_one(mosque_id, reason) for mosque_id in ids))
        deleted = [o.mosque_id for o in outcomes if o.deleted]
        self._remove(deleted)

        result = BulkDeletionResult(
            outcomes=list(outcomes),
            notice=bulk_notice(len(deleted), len(outcomes) - len(deleted)),
        )
        logger.info(f"Bulk delete: {len(deleted)} of {len(ids)} mosques deleted")
        return result

    async def assign_admin(self, mosque_id: str, assignment: AdminAssignment) -> RawRecord:
        """
        Assign (or create and assign) an admin for a mosque.

        The local list is not patched; callers `refresh` to pick up the new admin.

        Raises:
            ValidationError: If the admin email is blank or malformed.
            MutationFailure: If the backend refuses the assignment.
        """
        assignment = validate_assignment(assignment)
        try:
            body = await self.client.assign_admin(mosque_id, assignment)
        except (BackendError, BackendUnavailableError) as e:
            raise MutationFailure(
                e.message,
                mosque_id=mosque_id,
                status_code=getattr(e, "status_code", None),
            ) from e
        logger.info(f"Assigned an admin to mosque {mosque_id}")
        return body
