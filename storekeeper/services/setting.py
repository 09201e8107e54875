from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from storekeeper.models.admin import AppSetting
from storekeeper.models.base import persisted_id
from storekeeper.models.enums import AuditAction, AuditEntityType
from storekeeper.schemas.admin import SettingResponse, SettingsResponse
from storekeeper.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from storekeeper.schemas.admin import SettingValuePayload
    from storekeeper.schemas.auth import AuthContext


def _build_setting_response(setting: AppSetting) -> SettingResponse:
    return SettingResponse(
        key=setting.key_name,
        value=setting.value,
        description=setting.description,
        updated_at=setting.updated_at,
    )


async def list_settings(session: AsyncSession) -> SettingsResponse:
    result = await session.execute(select(AppSetting).order_by(col(AppSetting.key_name)))
    rows = [_build_setting_response(s) for s in result.scalars().all()]
    return SettingsResponse(values={row.key: row.value for row in rows}, all=rows)


async def upsert_setting(
    session: AsyncSession,
    auth: AuthContext,
    key: str,
    payload: SettingValuePayload,
) -> SettingResponse:
    """Set a value, creating the key if it does not exist yet.

    An omitted description leaves the stored one unchanged.
    """
    result = await session.execute(select(AppSetting).where(col(AppSetting.key_name) == key).with_for_update())
    setting = result.scalar_one_or_none()
    before = model_to_audit_dict(setting) if setting is not None else None

    if setting is None:
        setting = AppSetting(key_name=key, value=payload.value, description=payload.description)
        session.add(setting)
        action = AuditAction.CREATE
    else:
        setting.value = payload.value
        if payload.description is not None:
            setting.description = payload.description
        action = AuditAction.UPDATE
    setting.updated_at = datetime.now(UTC)
    await session.flush()

    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.SETTING,
        entity_id=persisted_id(setting),
        action=action,
        before_json=before,
        after_json=model_to_audit_dict(setting),
    )
    await session.commit()
    await session.refresh(setting)
    return _build_setting_response(setting)
