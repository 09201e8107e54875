# ruff: noqa: TC001
from __future__ import annotations

from fastapi import APIRouter, status

from storekeeper.api.deps import AuthDep, SuperadminDep
from storekeeper.db import SessionDep
from storekeeper.schemas.request import ApproverResponse
from storekeeper.schemas.user import CreateUserPayload, UpdateUserPayload, UpdateUserRolePayload, UserResponse
from storekeeper.services import user as user_service

users_router = APIRouter(prefix="/users", tags=["users"])
approvers_router = APIRouter(prefix="/approvers", tags=["users"])


@users_router.get("", response_model=list[UserResponse])
async def list_users(session: SessionDep, _auth: SuperadminDep) -> list[UserResponse]:
    return await user_service.list_users(session)


@users_router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(payload: CreateUserPayload, session: SessionDep, auth: SuperadminDep) -> UserResponse:
    """Create a user account (superadmin only)."""
    return await user_service.create_user(session, auth, payload)


@users_router.put("/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: int,
    payload: UpdateUserRolePayload,
    session: SessionDep,
    auth: SuperadminDep,
) -> UserResponse:
    return await user_service.update_user_role(session, auth, user_id, payload.role)


@users_router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    payload: UpdateUserPayload,
    session: SessionDep,
    auth: SuperadminDep,
) -> UserResponse:
    """Edit name, email and role (superadmin only)."""
    return await user_service.update_user(session, auth, user_id, payload)


@users_router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: int, session: SessionDep, auth: SuperadminDep) -> None:
    """Delete a user. Superadmins cannot delete themselves."""
    await user_service.delete_user(session, auth, user_id)


@approvers_router.get("", response_model=list[ApproverResponse])
async def list_approvers(session: SessionDep, _auth: AuthDep) -> list[ApproverResponse]:
    """Users a request can be sent to, ordered by last then first name."""
    return await user_service.list_approvers(session)
