"""Async HTTP client for the Storekeeper API.

Every failure, whether the server answered with a non-2xx status or the
request never got an answer, surfaces as ``StoreError``. Nothing is retried.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import TypeAdapter

from storekeeper.config import get_settings
from storekeeper.models.enums import RequestKind, RequestStatus, UserRole
from storekeeper.schemas.dashboard import ActivityFeed, DashboardStats
from storekeeper.schemas.inventory import CategoryResponse, ItemResponse
from storekeeper.schemas.request import (
    ApproverResponse,
    RequestDetailResponse,
    RequestListResponse,
    RequestSummaryResponse,
)

if TYPE_CHECKING:
    from types import TracebackType

    from storekeeper.schemas.request import (
        ApprovePayload,
        FinalizePayload,
        ItemReturnCreate,
        ItemReturnUpdate,
        MaterialRequestCreate,
        MaterialRequestUpdate,
        RejectPayload,
    )

logger = logging.getLogger(__name__)

_approvers = TypeAdapter(list[ApproverResponse])
_items = TypeAdapter(list[ItemResponse])
_categories = TypeAdapter(list[CategoryResponse])


class StoreError(Exception):
    """A call to the store failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    if isinstance(body, dict) and body.get("detail"):
        return str(body["detail"])
    return response.reason_phrase


class StorekeeperClient:
    """Thin async wrapper over the REST API, authenticated with the dev headers."""

    def __init__(
        self,
        user_id: int,
        role: UserRole = UserRole.REQUESTER,
        *,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url or get_settings().api_base_url,
            headers={"X-User-Id": str(user_id), "X-Role": str(role)},
            transport=transport,
            timeout=timeout,
        )

    async def __aenter__(self) -> StorekeeperClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            response = await self._http.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise StoreError(f"Could not reach the store: {exc}") from exc
        if response.is_error:
            message = _error_message(response)
            logger.warning("%s %s returned %d: %s", method, url, response.status_code, message)
            raise StoreError(message, status_code=response.status_code)
        if response.status_code == httpx.codes.NO_CONTENT:
            return None
        return response.json()

    # -- requests -----------------------------------------------------------

    async def get_requests(
        self,
        *,
        status: RequestStatus | None = None,
        kind: RequestKind | None = None,
        search: str | None = None,
        limit: int = 200,
    ) -> list[RequestSummaryResponse]:
        """Requests in the store's order (newest first)."""
        params: dict[str, Any] = {"limit": limit}
        if status is not None:
            params["status"] = str(status)
        if kind is not None:
            params["kind"] = str(kind)
        if search:
            params["search"] = search
        data = await self._request("GET", "/requests", params=params)
        return RequestListResponse.model_validate(data).items

    async def get_request_details(self, request_id: int) -> RequestDetailResponse:
        data = await self._request("GET", f"/requests/{request_id}")
        return RequestDetailResponse.model_validate(data)

    async def create_request(self, payload: MaterialRequestCreate | ItemReturnCreate) -> RequestDetailResponse:
        data = await self._request("POST", "/requests", json=payload.model_dump(mode="json"))
        return RequestDetailResponse.model_validate(data)

    async def update_request(
        self, request_id: int, payload: MaterialRequestUpdate | ItemReturnUpdate
    ) -> RequestDetailResponse:
        data = await self._request("PUT", f"/requests/{request_id}", json=payload.model_dump(mode="json"))
        return RequestDetailResponse.model_validate(data)

    async def approve_request(self, request_id: int, payload: ApprovePayload) -> RequestDetailResponse:
        data = await self._request("POST", f"/requests/{request_id}/approve", json=payload.model_dump(mode="json"))
        return RequestDetailResponse.model_validate(data)

    async def reject_request(self, request_id: int, payload: RejectPayload) -> RequestDetailResponse:
        data = await self._request("POST", f"/requests/{request_id}/reject", json=payload.model_dump(mode="json"))
        return RequestDetailResponse.model_validate(data)

    async def finalize_request(self, request_id: int, payload: FinalizePayload) -> RequestDetailResponse:
        data = await self._request("POST", f"/requests/{request_id}/finalize", json=payload.model_dump(mode="json"))
        return RequestDetailResponse.model_validate(data)

    # -- reference data -----------------------------------------------------

    async def get_approvers(self) -> list[ApproverResponse]:
        return _approvers.validate_python(await self._request("GET", "/approvers"))

    async def get_items(self) -> list[ItemResponse]:
        return _items.validate_python(await self._request("GET", "/items"))

    async def get_categories(self) -> list[CategoryResponse]:
        return _categories.validate_python(await self._request("GET", "/categories"))

    # -- dashboard ----------------------------------------------------------

    async def get_dashboard_stats(self) -> DashboardStats:
        return DashboardStats.model_validate(await self._request("GET", "/dashboard/stats"))

    async def get_recent_activity(self) -> ActivityFeed:
        return ActivityFeed.model_validate(await self._request("GET", "/dashboard/activity"))
