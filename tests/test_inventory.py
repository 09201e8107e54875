"""Catalog, category and direct-issue tests."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import pytest

if TYPE_CHECKING:
    from httpx import AsyncClient

ADMIN_HEADERS = {"X-User-Id": "1", "X-Role": "superadmin"}
ISSUER_HEADERS = {"X-User-Id": "2", "X-Role": "issuer"}
REQUESTER_HEADERS = {"X-User-Id": "3", "X-Role": "requester"}


async def _category(client: AsyncClient, name: str) -> dict[str, Any]:
    resp = await client.post("/categories", json={"name": name}, headers=ADMIN_HEADERS)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def _item(client: AsyncClient, **body: Any) -> dict[str, Any]:
    resp = await client.post("/items", json=body, headers=ISSUER_HEADERS)
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


async def test_category_crud_with_item_counts(async_client: AsyncClient) -> None:
    cables = await _category(async_client, "Cables")
    await _item(async_client, name="Drop cable", quantity=10, category_id=cables["id"])
    await _item(async_client, name="ADSS", quantity=10, category_id=cables["id"])

    listing = (await async_client.get("/categories", headers=REQUESTER_HEADERS)).json()
    assert [(c["name"], c["item_count"]) for c in listing] == [("Cables", 2)]

    resp = await async_client.put(
        f"/categories/{cables['id']}", json={"name": "Fibre cables"}, headers=ADMIN_HEADERS
    )
    assert resp.status_code == 200
    assert resp.json()["name"] == "Fibre cables"
    assert resp.json()["item_count"] == 2


async def test_duplicate_category_name_is_conflict(async_client: AsyncClient) -> None:
    await _category(async_client, "Tools")
    resp = await async_client.post("/categories", json={"name": "Tools"}, headers=ADMIN_HEADERS)
    assert resp.status_code == 409


async def test_deleting_category_keeps_items(async_client: AsyncClient) -> None:
    tools = await _category(async_client, "Tools")
    splicer = await _item(async_client, name="Fusion splicer", quantity=2, category_id=tools["id"])
    resp = await async_client.delete(f"/categories/{tools['id']}", headers=ADMIN_HEADERS)
    assert resp.status_code == 204

    resp = await async_client.get(f"/items/{splicer['id']}", headers=ADMIN_HEADERS)
    assert resp.status_code == 200
    assert resp.json()["category_name"] is None


async def test_requester_cannot_change_catalog(async_client: AsyncClient) -> None:
    resp = await async_client.post("/categories", json={"name": "Nope"}, headers=REQUESTER_HEADERS)
    assert resp.status_code == 403
    resp = await async_client.post("/items", json={"name": "Nope", "quantity": 1}, headers=REQUESTER_HEADERS)
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


async def test_create_item_applies_default_threshold(async_client: AsyncClient) -> None:
    item = await _item(async_client, name="Pigtail", quantity=50, unit_price="1.10")
    assert item["low_stock_threshold"] == 5
    assert item["is_low_stock"] is False
    assert item["unit_price"] == "1.10"


async def test_create_item_with_unknown_category_is_400(async_client: AsyncClient) -> None:
    resp = await async_client.post(
        "/items", json={"name": "Ghost", "quantity": 1, "category_id": 999_999}, headers=ISSUER_HEADERS
    )
    assert resp.status_code == 400


async def test_update_item_requires_reason_and_records_it(async_client: AsyncClient) -> None:
    item = await _item(async_client, name="Closure", quantity=10)
    body = {"name": "Closure", "quantity": 8}

    resp = await async_client.put(f"/items/{item['id']}", json=body, headers=ISSUER_HEADERS)
    assert resp.status_code == 400

    resp = await async_client.put(
        f"/items/{item['id']}", json={**body, "update_reason": "Stock count"}, headers=ISSUER_HEADERS
    )
    assert resp.status_code == 200
    assert resp.json()["quantity"] == 8
    assert resp.json()["update_reasons"].startswith("Stock count at ")

    resp = await async_client.put(
        f"/items/{item['id']}", json={**body, "update_reason": "Recount"}, headers=ISSUER_HEADERS
    )
    assert " | Recount at " in resp.json()["update_reasons"]


async def test_low_stock_listing(async_client: AsyncClient, caplog: pytest.LogCaptureFixture) -> None:
    await _item(async_client, name="Plenty", quantity=100, low_stock_threshold=10)
    with caplog.at_level(logging.WARNING, logger="storekeeper.services.inventory"):
        scarce = await _item(async_client, name="Scarce", quantity=3, low_stock_threshold=3)
    assert scarce["is_low_stock"] is True
    assert "Low stock" in caplog.text

    resp = await async_client.get("/items/low-stock", headers=REQUESTER_HEADERS)
    assert [i["name"] for i in resp.json()] == ["Scarce"]


async def test_delete_missing_item_is_404(async_client: AsyncClient) -> None:
    resp = await async_client.delete("/items/999999", headers=ADMIN_HEADERS)
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Items out
# ---------------------------------------------------------------------------


async def test_issue_item_decrements_stock(async_client: AsyncClient) -> None:
    item = await _item(async_client, name="OTDR", quantity=3, low_stock_threshold=1)
    resp = await async_client.post(
        "/items-out", json={"person_name": "Kofi", "item_id": item["id"], "quantity": 2}, headers=ISSUER_HEADERS
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["item_name"] == "OTDR"

    stock = (await async_client.get(f"/items/{item['id']}", headers=ISSUER_HEADERS)).json()
    assert stock["quantity"] == 1
    issued = (await async_client.get("/items-out", headers=ISSUER_HEADERS)).json()
    assert [(i["person_name"], i["quantity"]) for i in issued] == [("Kofi", 2)]


async def test_issue_more_than_stock_is_rejected(async_client: AsyncClient) -> None:
    item = await _item(async_client, name="Splicer", quantity=1)
    resp = await async_client.post(
        "/items-out", json={"person_name": "Kofi", "item_id": item["id"], "quantity": 2}, headers=ISSUER_HEADERS
    )
    assert resp.status_code == 400
    assert "Insufficient stock" in resp.json()["detail"]
