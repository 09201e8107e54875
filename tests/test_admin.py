"""Supervisor contacts and runtime settings."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker

from storekeeper import worker

if TYPE_CHECKING:
    from httpx import AsyncClient
    from sqlalchemy.ext.asyncio import AsyncSession

ADMIN_HEADERS = {"X-User-Id": "1", "X-Role": "superadmin"}
ISSUER_HEADERS = {"X-User-Id": "2", "X-Role": "issuer"}


# ---------------------------------------------------------------------------
# Supervisors
# ---------------------------------------------------------------------------


async def test_supervisor_crud(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        "/supervisors", json={"name": " Yaw Tetteh ", "email": "Yaw@Example.com"}, headers=ADMIN_HEADERS
    )
    assert resp.status_code == 201, resp.text
    yaw = resp.json()
    assert (yaw["name"], yaw["email"]) == ("Yaw Tetteh", "yaw@example.com")
    await async_client.post(
        "/supervisors", json={"name": "Ama Mensah", "email": "ama@example.com"}, headers=ADMIN_HEADERS
    )

    listing = (await async_client.get("/supervisors", headers=ADMIN_HEADERS)).json()
    assert [s["name"] for s in listing] == ["Ama Mensah", "Yaw Tetteh"]

    resp = await async_client.put(
        f"/supervisors/{yaw['id']}", json={"name": "Yaw T.", "email": "yaw.t@example.com"}, headers=ADMIN_HEADERS
    )
    assert resp.status_code == 200
    assert resp.json()["email"] == "yaw.t@example.com"
    assert resp.json()["updated_at"] is not None

    assert (await async_client.delete(f"/supervisors/{yaw['id']}", headers=ADMIN_HEADERS)).status_code == 204
    assert (await async_client.delete(f"/supervisors/{yaw['id']}", headers=ADMIN_HEADERS)).status_code == 404

    logs = (
        await async_client.get(
            "/audit-logs", params={"entity_type": "SUPERVISOR", "entity_id": yaw["id"]}, headers=ADMIN_HEADERS
        )
    ).json()["items"]
    assert [e["action"] for e in logs] == ["DELETE", "UPDATE", "CREATE"]


async def test_supervisor_email_is_unique(async_client: AsyncClient) -> None:
    first = (
        await async_client.post("/supervisors", json={"name": "A", "email": "a@example.com"}, headers=ADMIN_HEADERS)
    ).json()
    resp = await async_client.post("/supervisors", json={"name": "B", "email": "A@example.com"}, headers=ADMIN_HEADERS)
    assert resp.status_code == 409

    second = (
        await async_client.post("/supervisors", json={"name": "B", "email": "b@example.com"}, headers=ADMIN_HEADERS)
    ).json()
    resp = await async_client.put(
        f"/supervisors/{second['id']}", json={"name": "B", "email": "a@example.com"}, headers=ADMIN_HEADERS
    )
    assert resp.status_code == 409
    # Keeping your own address is fine.
    resp = await async_client.put(
        f"/supervisors/{first['id']}", json={"name": "A2", "email": "a@example.com"}, headers=ADMIN_HEADERS
    )
    assert resp.status_code == 200


async def test_blank_supervisor_name_is_400(async_client: AsyncClient) -> None:
    body = {"name": "   ", "email": "x@example.com"}
    resp = await async_client.post("/supervisors", json=body, headers=ADMIN_HEADERS)
    assert resp.status_code == 400


async def test_supervisors_are_superadmin_only(async_client: AsyncClient) -> None:
    assert (await async_client.get("/supervisors", headers=ISSUER_HEADERS)).status_code == 403
    resp = await async_client.post("/supervisors", json={"name": "A", "email": "a@example.com"}, headers=ISSUER_HEADERS)
    assert resp.status_code == 403


async def test_low_stock_scan_names_supervisors(
    async_client: AsyncClient,
    db_session: AsyncSession,
    caplog: pytest.LogCaptureFixture,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    await async_client.post("/supervisors", json={"name": "Ama", "email": "ama@example.com"}, headers=ADMIN_HEADERS)
    await async_client.post(
        "/items", json={"name": "Closure", "quantity": 1, "low_stock_threshold": 2}, headers=ADMIN_HEADERS
    )

    # The scan opens its own session; point it at the test transaction.
    factory = async_sessionmaker(bind=db_session.bind, expire_on_commit=False)
    monkeypatch.setattr(worker, "get_session_factory", lambda: factory)
    with caplog.at_level(logging.WARNING, logger="storekeeper.worker"):
        assert await worker.scan_low_stock() == 1
    assert "notify ama@example.com" in caplog.text


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


async def test_setting_upsert_and_listing(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        "/settings/from_name", json={"value": "Main store", "description": "Alert sender"}, headers=ADMIN_HEADERS
    )
    assert resp.status_code == 200, resp.text
    assert resp.json() == {
        "key": "from_name",
        "value": "Main store",
        "description": "Alert sender",
        "updated_at": resp.json()["updated_at"],
    }

    resp = await async_client.post("/settings/from_name", json={"value": "Depot"}, headers=ADMIN_HEADERS)
    assert resp.json()["value"] == "Depot"
    assert resp.json()["description"] == "Alert sender"
    await async_client.post("/settings/currency", json={"value": "GHS"}, headers=ADMIN_HEADERS)

    data = (await async_client.get("/settings", headers=ISSUER_HEADERS)).json()
    assert data["values"] == {"currency": "GHS", "from_name": "Depot"}
    assert [row["key"] for row in data["all"]] == ["currency", "from_name"]


async def test_setting_changes_are_audited(async_client: AsyncClient) -> None:
    await async_client.post("/settings/from_name", json={"value": "Main store"}, headers=ADMIN_HEADERS)
    await async_client.post("/settings/from_name", json={"value": "Depot"}, headers=ADMIN_HEADERS)

    logs = (await async_client.get("/audit-logs", params={"entity_type": "SETTING"}, headers=ADMIN_HEADERS)).json()
    assert [e["action"] for e in logs["items"]] == ["UPDATE", "CREATE"]
    assert logs["items"][0]["before_json"]["value"] == "Main store"
    assert logs["items"][0]["after_json"]["value"] == "Depot"


async def test_only_superadmin_changes_settings(async_client: AsyncClient) -> None:
    resp = await async_client.post("/settings/from_name", json={"value": "x"}, headers=ISSUER_HEADERS)
    assert resp.status_code == 403


async def test_setting_key_must_be_simple(async_client: AsyncClient) -> None:
    resp = await async_client.post("/settings/bad key!", json={"value": "x"}, headers=ADMIN_HEADERS)
    assert resp.status_code == 422
