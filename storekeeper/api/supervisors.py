# ruff: noqa: TC001
from __future__ import annotations

from fastapi import APIRouter, status

from storekeeper.api.deps import SuperadminDep
from storekeeper.db import SessionDep
from storekeeper.schemas.admin import SupervisorPayload, SupervisorResponse
from storekeeper.services import supervisor as supervisor_service

supervisors_router = APIRouter(prefix="/supervisors", tags=["admin"])


@supervisors_router.get("", response_model=list[SupervisorResponse])
async def list_supervisors(session: SessionDep, _auth: SuperadminDep) -> list[SupervisorResponse]:
    """People who are told when stock runs low."""
    return await supervisor_service.list_supervisors(session)


@supervisors_router.post("", response_model=SupervisorResponse, status_code=status.HTTP_201_CREATED)
async def create_supervisor(payload: SupervisorPayload, session: SessionDep, auth: SuperadminDep) -> SupervisorResponse:
    return await supervisor_service.create_supervisor(session, auth, payload)


@supervisors_router.put("/{supervisor_id}", response_model=SupervisorResponse)
async def update_supervisor(
    supervisor_id: int,
    payload: SupervisorPayload,
    session: SessionDep,
    auth: SuperadminDep,
) -> SupervisorResponse:
    return await supervisor_service.update_supervisor(session, auth, supervisor_id, payload)


@supervisors_router.delete("/{supervisor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_supervisor(supervisor_id: int, session: SessionDep, auth: SuperadminDep) -> None:
    await supervisor_service.delete_supervisor(session, auth, supervisor_id)
