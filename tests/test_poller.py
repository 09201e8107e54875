from __future__ import annotations

import asyncio
import logging

import pytest

from storekeeper.client.api import StoreError
from storekeeper.client.polling import RefreshPoller, dashboard_poller, request_list_poller
from storekeeper.config import get_settings
from storekeeper.models.enums import RequestStatus


async def test_refresh_applies_result() -> None:
    updates: list[int] = []

    async def fetch() -> int:
        return 7

    poller = RefreshPoller(fetch, interval=10, on_update=updates.append)
    assert await poller.refresh() is True
    assert poller.state == 7
    assert updates == [7]


async def test_stale_response_never_overwrites_newer_state() -> None:
    slow_release = asyncio.Event()
    calls = 0

    async def fetch() -> str:
        nonlocal calls
        calls += 1
        if calls == 1:
            await slow_release.wait()
            return "stale"
        return "fresh"

    poller = RefreshPoller(fetch, interval=10)
    slow = asyncio.create_task(poller.refresh())
    await asyncio.sleep(0)
    assert await poller.refresh() is True
    assert poller.state == "fresh"

    slow_release.set()
    assert await slow is False
    assert poller.state == "fresh"


async def test_store_error_keeps_previous_state(caplog: pytest.LogCaptureFixture) -> None:
    results: list[object] = [["a"], StoreError("boom", status_code=503)]

    async def fetch() -> list[str]:
        result = results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result  # type: ignore[return-value]

    poller = RefreshPoller(fetch, interval=10, name="requests")
    await poller.refresh()
    with caplog.at_level(logging.WARNING, logger="storekeeper.client.polling"):
        assert await poller.refresh() is False
    assert poller.state == ["a"]
    assert "requests refresh failed" in caplog.text


async def test_start_ticks_until_stopped() -> None:
    ticks = 0

    async def fetch() -> int:
        nonlocal ticks
        ticks += 1
        return ticks

    poller = RefreshPoller(fetch, interval=0.01)
    poller.start()
    assert poller.running
    await asyncio.sleep(0.05)
    await poller.stop()
    assert not poller.running
    seen = ticks
    assert seen >= 2
    await asyncio.sleep(0.03)
    assert ticks == seen


class _StubClient:
    def __init__(self) -> None:
        self.statuses: list[RequestStatus | None] = []

    async def get_requests(self, *, status: RequestStatus | None = None) -> list[str]:
        self.statuses.append(status)
        return [f"{status}-1"]

    async def get_dashboard_stats(self) -> dict[str, int]:
        return {"pending_requests": 3}


async def test_interval_defaults_to_request_poll_setting() -> None:
    async def fetch() -> int:
        return 1

    assert RefreshPoller(fetch).interval == get_settings().request_poll_interval_seconds


async def test_request_list_poller_fetches_its_status_tab() -> None:
    client = _StubClient()
    poller = request_list_poller(client, status=RequestStatus.PENDING)  # type: ignore[arg-type]
    assert poller.interval == get_settings().request_poll_interval_seconds
    assert poller.name == "requests[pending]"
    assert await poller.refresh() is True
    assert client.statuses == [RequestStatus.PENDING]
    assert poller.state == ["pending-1"]


async def test_dashboard_poller_uses_dashboard_interval() -> None:
    seen: list[object] = []
    poller = dashboard_poller(_StubClient(), on_update=seen.append)  # type: ignore[arg-type]
    assert poller.interval == get_settings().dashboard_poll_interval_seconds
    await poller.refresh()
    assert seen == [{"pending_requests": 3}]
