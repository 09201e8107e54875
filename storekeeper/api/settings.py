# ruff: noqa: TC001
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Path

from storekeeper.api.deps import AuthDep, SuperadminDep
from storekeeper.db import SessionDep
from storekeeper.schemas.admin import SettingResponse, SettingsResponse, SettingValuePayload
from storekeeper.services import setting as setting_service

settings_router = APIRouter(prefix="/settings", tags=["admin"])

SettingKey = Annotated[str, Path(min_length=1, max_length=255, pattern=r"^[A-Za-z0-9_.-]+$")]


@settings_router.get("", response_model=SettingsResponse)
async def list_settings(session: SessionDep, _auth: AuthDep) -> SettingsResponse:
    return await setting_service.list_settings(session)


@settings_router.post("/{key}", response_model=SettingResponse)
async def update_setting(
    key: SettingKey,
    payload: SettingValuePayload,
    session: SessionDep,
    auth: SuperadminDep,
) -> SettingResponse:
    """Set a value, creating the key if needed (superadmin only)."""
    return await setting_service.upsert_setting(session, auth, key, payload)
