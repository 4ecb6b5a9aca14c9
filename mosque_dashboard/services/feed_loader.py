"""Parallel retrieval of the four feeds the reconciler needs."""

import asyncio
from dataclasses import dataclass, field

from loguru import logger

from mosque_dashboard.exceptions import AppException, FeedFailure
from mosque_dashboard.services.backend_client import BackendClient, RawRecord

FEED_NAMES = ("mosques", "approved admins", "pending admins", "rejected admins")


@dataclass(frozen=True)
class FeedSnapshot:
    """The four feeds as returned by a single load cycle."""

    cycle: int
    mosques: list[RawRecord] = field(default_factory=list)
    approved_admins: list[RawRecord] = field(default_factory=list)
    pending_admins: list[RawRecord] = field(default_factory=list)
    rejected_admins: list[RawRecord] = field(default_factory=list)


async def load_feeds(client: BackendClient, cycle: int = 0) -> FeedSnapshot:
    """
    Fetch mosques and the approved, pending and rejected admin feeds concurrently.

    All four requests are in flight at once; the first failure cancels the
    others and aborts the load. No partial snapshot is ever returned.

    Parameters:
        client (BackendClient): Client authenticated as a super admin.
        cycle (int): Load cycle number stamped on the snapshot.

    Returns:
        FeedSnapshot: The raw feed items, unmodified.

    Raises:
        FeedFailure: If any of the four retrievals fails.
    """
    tasks = [
        asyncio.create_task(client.list_mosques()),
        asyncio.create_task(client.list_approved_admins()),
        asyncio.create_task(client.list_pending_admins()),
        asyncio.create_task(client.list_rejected_admins()),
    ]
    try:
        mosques, approved, pending, rejected = await asyncio.gather(*tasks)
    except Exception as e:
        failed = None
        for name, task in zip(FEED_NAMES, tasks):
            if not task.done():
                task.cancel()
            elif not task.cancelled() and task.exception() is e:
                failed = name
        logger.error(f"Feed load cycle {cycle} failed on {failed or 'a feed'}: {e}")
        message = e.message if isinstance(e, AppException) else str(e)
        raise FeedFailure(
            f"Failed to load mosques: {message}", feed=failed, cycle=cycle
        ) from e

    logger.info(
        f"Feed load cycle {cycle}: {len(mosques)} mosques, {len(approved)} approved, "
        f"{len(pending)} pending, {len(rejected)} rejected"
    )
    return FeedSnapshot(
        cycle=cycle,
        mosques=mosques,
        approved_admins=approved,
        pending_admins=pending,
        rejected_admins=rejected,
    )


class FeedLoader:
    """
    Numbers every load so a slow, superseded response can be told apart from the latest one.
    """

    def __init__(self, client: BackendClient):
        self.client = client
        self._latest_cycle = 0

    @property
    def latest_cycle(self) -> int:
        return self._latest_cycle

    def is_current(self, cycle: int) -> bool:
        return cycle == self._latest_cycle

    async def load(self) -> FeedSnapshot:
        self._latest_cycle += 1
        return await load_feeds(self.client, cycle=self._latest_cycle)
