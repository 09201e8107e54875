from __future__ import annotations

import warnings
from typing import TYPE_CHECKING
from unittest.mock import AsyncMock

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from storekeeper.db import get_session
from storekeeper.exceptions import MissingFieldsError, NoItemsError
from storekeeper.main import app

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


def test_submission_errors_are_unprocessable() -> None:
    assert MissingFieldsError(["location"]).status_code == 422
    assert NoItemsError().status_code == 422


async def test_invalid_body_renders_422_without_status_deprecations() -> None:
    async def _unused_session() -> AsyncIterator[AsyncSession]:
        yield AsyncMock(spec=AsyncSession)

    app.dependency_overrides[get_session] = _unused_session
    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
                response = await client.post(
                    "/requests",
                    json={"kind": "not_a_kind"},
                    headers={"X-User-Id": "1", "X-Role": "requester"},
                )
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 422
    assert response.json()["error"] == "ValidationError"
    assert not [w for w in caught if "HTTP_422" in str(w.message)]
