"""Tests for the session-scoped dashboard service."""

import asyncio
import pytest
from unittest.mock import AsyncMock

from mosque_dashboard.exceptions import (
    BackendError,
    BackendUnavailableError,
    FeedFailure,
    MutationFailure,
    NotFoundError,
    ValidationError,
)
from mosque_dashboard.models.admin import AdminAssignment
from mosque_dashboard.models.enums import NoticeLevel, StatusFilter
from mosque_dashboard.services.dashboard import DashboardService, bulk_notice

REASON = "Duplicate listing, merged into another entry"


@pytest.fixture(name="service")
def service_fixture(backend_client):
    return DashboardService(backend_client)


def ids(views):
    return [v.id for v in views]


class TestRefresh:
    @pytest.mark.asyncio
    async def test_builds_reconciled_list(self, service):
        views = await service.refresh()

        assert ids(views) == ["m1", "m2", "m3"]
        assert ids(service.visible) == ["m1", "m2", "m3"]
        assert service.last_error is None

    @pytest.mark.asyncio
    async def test_failure_clears_list_and_selection(self, service, backend_client):
        await service.refresh()
        service.select_all()
        backend_client.list_approved_admins.side_effect = BackendUnavailableError()

        with pytest.raises(FeedFailure):
            await service.refresh()

        assert service.views == []
        assert service.visible == []
        assert service.selected_ids == []
        assert service.last_error.startswith("Failed to load mosques")

    @pytest.mark.asyncio
    async def test_retry_after_failure(self, service, backend_client, approved_feed):
        backend_client.list_approved_admins.side_effect = BackendUnavailableError()
        with pytest.raises(FeedFailure):
            await service.refresh()

        backend_client.list_approved_admins.side_effect = None
        backend_client.list_approved_admins.return_value = approved_feed
        views = await service.refresh()

        assert len(views) == 3
        assert service.last_error is None

    @pytest.mark.asyncio
    async def test_superseded_load_is_discarded(self, service, backend_client, mosque_feed):
        """A slow first load finishing after a newer one must not overwrite it."""
        release_first = asyncio.Event()
        calls = 0

        async def list_mosques(*args, **kwargs):
            nonlocal calls
            calls += 1
            if calls == 1:
                await release_first.wait()
                return mosque_feed[:1]
            return mosque_feed

        backend_client.list_mosques = AsyncMock(side_effect=list_mosques)

        first = asyncio.create_task(service.refresh())
        await asyncio.sleep(0)
        await service.refresh()
        release_first.set()
        await first

        assert ids(service.views) == ["m1", "m2", "m3"]

    @pytest.mark.asyncio
    async def test_superseded_load_failure_keeps_current_list(
        self, service, backend_client, mosque_feed
    ):
        """A slow first load failing after a newer one succeeded must not wipe it."""
        release_first = asyncio.Event()
        calls = 0

        async def list_mosques(*args, **kwargs):
            nonlocal calls
            calls += 1
            if calls == 1:
                await release_first.wait()
                raise BackendUnavailableError("slow first cycle failed")
            return mosque_feed

        backend_client.list_mosques = AsyncMock(side_effect=list_mosques)

        first = asyncio.create_task(service.refresh())
        await asyncio.sleep(0)
        await service.refresh()
        service.select_all()
        release_first.set()
        result = await first

        assert ids(result) == ["m1", "m2", "m3"]
        assert ids(service.views) == ["m1", "m2", "m3"]
        assert service.selected_ids == ["m1", "m2", "m3"]
        assert service.last_error is None

    @pytest.mark.asyncio
    async def test_refresh_keeps_query(self, service):
        service.query(status=StatusFilter.NO_ADMIN)
        await service.refresh()
        assert ids(service.visible) == ["m2", "m3"]


class TestQuery:
    @pytest.mark.asyncio
    async def test_query_and_selection(self, service):
        await service.refresh()

        assert ids(service.query(search="omar")) == ["m2", "m3"]
        assert service.select_all() == ["m2", "m3"]

        service.query(search="huda")
        assert service.selected_ids == ["m2"]

    @pytest.mark.asyncio
    async def test_toggle_unknown_mosque(self, service):
        await service.refresh()
        with pytest.raises(NotFoundError):
            service.toggle("nope")

    @pytest.mark.asyncio
    async def test_toggle_hidden_mosque_is_refused(self, service):
        await service.refresh()
        assert ids(service.query(status=StatusFilter.NO_ADMIN)) == ["m2", "m3"]

        with pytest.raises(NotFoundError):
            service.toggle("m1")
        assert service.selected_ids == []

    @pytest.mark.asyncio
    async def test_bulk_delete_of_selection_never_reaches_hidden_mosques(
        self, service, backend_client
    ):
        await service.refresh()
        service.query(status=StatusFilter.NO_ADMIN)
        service.toggle("m2")

        result = await service.bulk_delete(reason=REASON)

        assert result.deleted_ids == ["m2"]
        backend_client.delete_mosque.assert_awaited_once_with("m2", REASON)

    @pytest.mark.asyncio
    async def test_stats(self, service):
        await service.refresh()
        stats = service.stats()
        assert stats.total_mosques == 3
        assert stats.with_admin == 1


class TestDeleteMosque:
    @pytest.mark.asyncio
    async def test_removes_after_confirmation(self, service, backend_client):
        await service.refresh()
        service.toggle("m2")

        await service.delete_mosque("m2", f"  {REASON}  ")

        backend_client.delete_mosque.assert_awaited_once_with("m2", REASON)
        assert ids(service.views) == ["m1", "m3"]
        assert ids(service.visible) == ["m1", "m3"]
        assert service.selected_ids == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reason", ["", "   ", "too short"])
    async def test_invalid_reason_sends_nothing(self, service, backend_client, reason):
        await service.refresh()

        with pytest.raises(ValidationError) as exc_info:
            await service.delete_mosque("m2", reason)

        assert exc_info.value.field == "reason"
        backend_client.delete_mosque.assert_not_awaited()
        assert len(service.views) == 3

    @pytest.mark.asyncio
    async def test_backend_refusal_leaves_list_unchanged(self, service, backend_client):
        await service.refresh()
        backend_client.delete_mosque.side_effect = BackendError("Mosque not found", status_code=404)

        with pytest.raises(MutationFailure) as exc_info:
            await service.delete_mosque("m2", REASON)

        assert exc_info.value.message == "Mosque not found"
        assert exc_info.value.status_code == 404
        assert exc_info.value.mosque_id == "m2"
        assert len(service.views) == 3


class TestBulkDelete:
    @pytest.mark.asyncio
    async def test_all_succeed(self, service, backend_client):
        await service.refresh()
        service.select_all()

        result = await service.bulk_delete(reason=REASON)

        assert result.deleted_ids == ["m1", "m2", "m3"]
        assert result.failed == {}
        assert result.notice.level == NoticeLevel.SUCCESS
        assert service.views == []
        assert service.selected_ids == []
        assert backend_client.delete_mosque.await_count == 3

    @pytest.mark.asyncio
    async def test_partial_failure_is_reported_per_id(self, service, backend_client):
        await service.refresh()

        async def delete(mosque_id, reason):
            if mosque_id == "m2":
                raise BackendError("Mosque has an active admin", status_code=409)
            return {}

        backend_client.delete_mosque = AsyncMock(side_effect=delete)

        result = await service.bulk_delete(["m1", "m2"], REASON)

        assert result.deleted_ids == ["m1"]
        assert result.failed == {"m2": "Mosque has an active admin"}
        assert result.notice.level == NoticeLevel.WARNING
        assert ids(service.views) == ["m2", "m3"]

    @pytest.mark.asyncio
    async def test_all_fail(self, service, backend_client):
        await service.refresh()
        backend_client.delete_mosque.side_effect = BackendUnavailableError()

        result = await service.bulk_delete(["m1", "m3"], REASON)

        assert result.deleted_ids == []
        assert result.notice.level == NoticeLevel.ERROR
        assert len(service.views) == 3

    @pytest.mark.asyncio
    async def test_duplicate_ids_deleted_once(self, service, backend_client):
        result = await service.bulk_delete(["m1", "m1"], REASON)
        assert [o.mosque_id for o in result.outcomes] == ["m1"]
        backend_client.delete_mosque.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_nothing_selected(self, service, backend_client):
        with pytest.raises(ValidationError) as exc_info:
            await service.bulk_delete(reason=REASON)
        assert exc_info.value.field == "mosque_ids"
        backend_client.delete_mosque.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_invalid_reason(self, service, backend_client):
        with pytest.raises(ValidationError):
            await service.bulk_delete(["m1"], "short")
        backend_client.delete_mosque.assert_not_awaited()


class TestBulkNotice:
    def test_messages(self):
        assert bulk_notice(1, 0).message == "Successfully deleted 1 mosque"
        assert bulk_notice(0, 2).message == "Failed to delete 2 mosques"
        assert bulk_notice(2, 1).message == "Deleted 2 mosques, 1 failed"


class TestAssignAdmin:
    @pytest.mark.asyncio
    async def test_assign(self, service, backend_client):
        assignment = AdminAssignment(admin_email=" Sara@Gmail.com ", admin_name="Sara")

        await service.assign_admin("m2", assignment)

        mosque_id, sent = backend_client.assign_admin.await_args.args
        assert mosque_id == "m2"
        assert sent.admin_email == "sara@gmail.com"
        assert sent.admin_name == "Sara"

    @pytest.mark.asyncio
    async def test_blank_email(self, service, backend_client):
        with pytest.raises(ValidationError) as exc_info:
            await service.assign_admin("m2", AdminAssignment(admin_email="  "))
        assert exc_info.value.message == "Please enter admin email"
        backend_client.assign_admin.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_backend_refusal(self, service, backend_client):
        backend_client.assign_admin.side_effect = BackendError(
            "Mosque already has an admin", status_code=400
        )
        with pytest.raises(MutationFailure) as exc_info:
            await service.assign_admin("m1", AdminAssignment(admin_email="sara@gmail.com"))
        assert exc_info.value.status_code == 400
