"""Periodic refresh of list and dashboard views.

Ticks are fired on a fixed interval without waiting for the previous fetch,
so responses can arrive out of order. Each fetch carries a generation number
and a response is only applied when nothing newer has been applied already.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Generic, TypeVar

from storekeeper.client.api import StoreError
from storekeeper.config import get_settings

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from storekeeper.client.api import StorekeeperClient
    from storekeeper.models.enums import RequestStatus
    from storekeeper.schemas.dashboard import DashboardStats
    from storekeeper.schemas.request import RequestSummaryResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RefreshPoller(Generic[T]):
    def __init__(
        self,
        fetch: Callable[[], Awaitable[T]],
        *,
        interval: float | None = None,
        on_update: Callable[[T], None] | None = None,
        name: str = "poller",
    ) -> None:
        self._fetch = fetch
        self.interval = get_settings().request_poll_interval_seconds if interval is None else interval
        self._on_update = on_update
        self.name = name
        self.state: T | None = None
        self._issued = 0
        self._applied = 0
        self._loop_task: asyncio.Task[None] | None = None
        self._inflight: set[asyncio.Task[bool]] = set()

    @property
    def running(self) -> bool:
        return self._loop_task is not None and not self._loop_task.done()

    async def refresh(self) -> bool:
        """Run one fetch. Returns True if its result became the current state."""
        self._issued += 1
        generation = self._issued
        try:
            result = await self._fetch()
        except StoreError as exc:
            logger.warning("%s refresh failed, keeping previous state: %s", self.name, exc.message)
            return False
        if generation < self._applied:
            logger.debug("%s dropped stale response (generation %d < %d)", self.name, generation, self._applied)
            return False
        self._applied = generation
        self.state = result
        if self._on_update is not None:
            self._on_update(result)
        return True

    async def _tick(self) -> bool:
        try:
            return await self.refresh()
        except Exception:
            logger.exception("%s refresh crashed", self.name)
            return False

    async def _run(self) -> None:
        while True:
            task = asyncio.create_task(self._tick())
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)
            await asyncio.sleep(self.interval)

    def start(self) -> None:
        if self.running:
            return
        self._loop_task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        tasks = list(self._inflight)
        if self._loop_task is not None:
            tasks.append(self._loop_task)
            self._loop_task = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)


def request_list_poller(
    client: StorekeeperClient,
    *,
    status: RequestStatus | None = None,
    on_update: Callable[[list[RequestSummaryResponse]], None] | None = None,
) -> RefreshPoller[list[RequestSummaryResponse]]:
    """Poll a request list tab on the configured request interval."""

    async def fetch() -> list[RequestSummaryResponse]:
        return await client.get_requests(status=status)

    return RefreshPoller(fetch, on_update=on_update, name=f"requests[{status or 'all'}]")


def dashboard_poller(
    client: StorekeeperClient,
    *,
    on_update: Callable[[DashboardStats], None] | None = None,
) -> RefreshPoller[DashboardStats]:
    return RefreshPoller(
        client.get_dashboard_stats,
        interval=get_settings().dashboard_poll_interval_seconds,
        on_update=on_update,
        name="dashboard",
    )
