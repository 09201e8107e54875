# ruff: noqa: B008, TC001
from __future__ import annotations

from fastapi import APIRouter, Query, status

from storekeeper.api.deps import AuthDep
from storekeeper.db import SessionDep
from storekeeper.models.enums import RequestKind, RequestStatus
from storekeeper.schemas.request import (
    ApprovePayload,
    CreateRequestPayload,
    FinalizePayload,
    RejectPayload,
    RequestDetailResponse,
    RequestListResponse,
    UpdateRequestPayload,
)
from storekeeper.services import request as request_service

requests_router = APIRouter(prefix="/requests", tags=["requests"])


@requests_router.post("", response_model=RequestDetailResponse, status_code=status.HTTP_201_CREATED)
async def create_request(
    payload: CreateRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> RequestDetailResponse:
    """Submit a material request or item return to the selected approvers."""
    return await request_service.create_request(session, auth, payload)


@requests_router.get("", response_model=RequestListResponse)
async def list_requests(
    session: SessionDep,
    auth: AuthDep,
    status_filter: RequestStatus | None = Query(default=None, alias="status"),
    kind: RequestKind | None = Query(default=None),
    search: str | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
) -> RequestListResponse:
    """List requests newest first with optional status, kind and search filters."""
    return await request_service.list_requests(session, auth, status_filter, kind, search, offset, limit)


@requests_router.get("/{request_id}", response_model=RequestDetailResponse)
async def get_request(
    request_id: int,
    session: SessionDep,
    _auth: AuthDep,
) -> RequestDetailResponse:
    return await request_service.get_request(session, request_id)


@requests_router.put("/{request_id}", response_model=RequestDetailResponse)
async def update_request(
    request_id: int,
    payload: UpdateRequestPayload,
    session: SessionDep,
    auth: AuthDep,
) -> RequestDetailResponse:
    """Edit a pending request. Items are replaced in full."""
    return await request_service.update_request(session, auth, request_id, payload)


@requests_router.post("/{request_id}/approve", response_model=RequestDetailResponse)
async def approve_request(
    request_id: int,
    payload: ApprovePayload,
    session: SessionDep,
    auth: AuthDep,
) -> RequestDetailResponse:
    """Approve a pending request (assigned approver or superadmin)."""
    return await request_service.approve_request(session, auth, request_id, payload)


@requests_router.post("/{request_id}/reject", response_model=RequestDetailResponse)
async def reject_request(
    request_id: int,
    payload: RejectPayload,
    session: SessionDep,
    auth: AuthDep,
) -> RequestDetailResponse:
    """Reject a pending or approved request with a reason."""
    return await request_service.reject_request(session, auth, request_id, payload)


@requests_router.post("/{request_id}/finalize", response_model=RequestDetailResponse)
async def finalize_request(
    request_id: int,
    payload: FinalizePayload,
    session: SessionDep,
    auth: AuthDep,
) -> RequestDetailResponse:
    """Issue an approved request and adjust stock."""
    return await request_service.finalize_request(session, auth, request_id, payload)
