"""Seed script for development data.

Run with:  python -m storekeeper.seed
Goes through the HTTP API, so the server must already be running.
"""

from __future__ import annotations

import asyncio
import sys

import httpx

from storekeeper.config import get_settings

BASE_URL = get_settings().api_base_url

HEADERS = {
    "Content-Type": "application/json",
    "X-User-Id": "1",
    "X-Role": "superadmin",
}

USERS = [
    {"first_name": "Store", "last_name": "Admin", "username": "admin", "email": "admin@example.com", "role": "superadmin"},
    {"first_name": "Grace", "last_name": "Okafor", "username": "gokafor", "email": "grace@example.com", "role": "approver"},
    {"first_name": "Daniel", "last_name": "Mensah", "username": "dmensah", "email": "daniel@example.com", "role": "approver"},
    {"first_name": "Ivy", "last_name": "Boateng", "username": "iboateng", "email": "ivy@example.com", "role": "issuer"},
    {"first_name": "Ray", "last_name": "Owusu", "username": "rowusu", "email": "ray@example.com", "role": "requester"},
]

CATEGORIES = [
    {"name": "Cables", "description": "Fibre and copper cabling"},
    {"name": "Connectors", "description": "Splice closures, patch cords, pigtails"},
    {"name": "Tools", "description": "Hand tools and test equipment"},
]

SUPERVISORS = [
    {"name": "Yaw Tetteh", "email": "yaw.tetteh@example.com"},
]

# (category name, item)
ITEMS = [
    ("Cables", {"name": "Drop cable 1-core", "quantity": 400, "low_stock_threshold": 50, "unit_price": "0.85"}),
    ("Cables", {"name": "ADSS 24-core", "quantity": 12, "low_stock_threshold": 5, "unit_price": "3.20"}),
    ("Connectors", {"name": "SC/APC pigtail", "quantity": 150, "low_stock_threshold": 30, "unit_price": "1.10"}),
    ("Connectors", {"name": "Splice closure", "quantity": 4, "low_stock_threshold": 5, "unit_price": "24.00"}),
    ("Tools", {"name": "Fusion splicer", "quantity": 2, "low_stock_threshold": 1}),
    ("Tools", {"name": "OTDR", "quantity": 1, "low_stock_threshold": 1}),
]


async def _safe_post(client: httpx.AsyncClient, url: str, json: dict, label: str) -> dict | None:
    resp = await client.post(url, json=json, headers=HEADERS)
    if resp.status_code in (200, 201):
        print(f"  [OK] {label}")
        return resp.json()
    if resp.status_code == 409:
        print(f"  [SKIP] {label} (already exists)")
        return None
    print(f"  [ERROR] {label}: {resp.status_code} {resp.text[:200]}")
    return None


async def _get(client: httpx.AsyncClient, url: str) -> list[dict]:
    resp = await client.get(url, headers=HEADERS)
    resp.raise_for_status()
    return resp.json()


async def seed_users(client: httpx.AsyncClient) -> None:
    print("\n--- Seeding users ---")
    for user in USERS:
        await _safe_post(client, f"{BASE_URL}/users", user, f"User: {user['username']} ({user['role']})")


async def seed_supervisors(client: httpx.AsyncClient) -> None:
    print("\n--- Seeding supervisors ---")
    for supervisor in SUPERVISORS:
        await _safe_post(client, f"{BASE_URL}/supervisors", supervisor, f"Supervisor: {supervisor['email']}")


async def seed_categories(client: httpx.AsyncClient) -> dict[str, int]:
    print("\n--- Seeding categories ---")
    for category in CATEGORIES:
        await _safe_post(client, f"{BASE_URL}/categories", category, f"Category: {category['name']}")
    return {c["name"]: c["id"] for c in await _get(client, f"{BASE_URL}/categories")}


async def seed_items(client: httpx.AsyncClient, category_ids: dict[str, int]) -> None:
    print("\n--- Seeding items ---")
    existing = {i["name"] for i in await _get(client, f"{BASE_URL}/items")}
    for category_name, item in ITEMS:
        if item["name"] in existing:
            print(f"  [SKIP] Item: {item['name']} (already exists)")
            continue
        body = {**item, "category_id": category_ids.get(category_name)}
        await _safe_post(client, f"{BASE_URL}/items", body, f"Item: {item['name']}")


async def seed_requests(client: httpx.AsyncClient) -> None:
    print("\n--- Seeding requests ---")
    listing = await client.get(f"{BASE_URL}/requests", headers=HEADERS, params={"limit": 1})
    if listing.status_code == 200 and listing.json()["total"] > 0:
        print("  [SKIP] Requests already exist")
        return

    approver_ids = [a["id"] for a in await _get(client, f"{BASE_URL}/approvers")]
    await _safe_post(
        client,
        f"{BASE_URL}/requests",
        {
            "kind": "material_request",
            "created_by": "Ray Owusu",
            "team_leader_name": "Kofi Asante",
            "team_leader_phone": "0244000111",
            "project_name": "Airport Residential FTTH",
            "isp_name": "Metro Fibre",
            "location": "Airport Residential",
            "deployment_type": "Deployment",
            "received_by": "Kofi Asante",
            "items": [
                {"name": "Drop cable 1-core", "requested": 120},
                {"name": "SC/APC pigtail", "requested": 24},
            ],
            "approver_ids": approver_ids,
        },
        "Request: Airport Residential FTTH (pending)",
    )
    await _safe_post(
        client,
        f"{BASE_URL}/requests",
        {
            "kind": "item_return",
            "created_by": "Ray Owusu",
            "project_name": "Osu Maintenance",
            "location": "Osu",
            "reason": "Leftover from completed job",
            "items": [{"name": "Splice closure", "returned": 2}],
            "approver_ids": approver_ids,
        },
        "Return: Osu Maintenance (pending)",
    )


async def main() -> None:
    print("=" * 60)
    print("  Storekeeper: development seed script")
    print("=" * 60)

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            resp = await client.get(f"{BASE_URL}/health")
            if resp.status_code != 200:
                print(f"API health check failed: {resp.status_code}")
                sys.exit(1)
            print("\n[OK] API is healthy")
        except httpx.ConnectError:
            print("ERROR: Cannot connect to API at", BASE_URL)
            sys.exit(1)

        await seed_users(client)
        await seed_supervisors(client)
        category_ids = await seed_categories(client)
        await seed_items(client, category_ids)
        await seed_requests(client)

    print("\n" + "=" * 60)
    print("  Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
