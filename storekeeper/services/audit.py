from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlmodel import col

from storekeeper.models.audit import AuditLog
from storekeeper.schemas.audit import AuditLogListResponse, AuditLogResponse

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlmodel import SQLModel

    from storekeeper.models.enums import AuditAction, AuditEntityType
    from storekeeper.schemas.auth import AuthContext


def model_to_audit_dict(model: SQLModel) -> dict[str, Any]:
    """Serialize a SQLModel instance to a JSON-safe dict for audit logging."""
    data: dict[str, Any] = {}
    for key, value in model.model_dump().items():
        if isinstance(value, (datetime, date)):
            data[key] = value.isoformat()
        elif isinstance(value, Decimal):
            data[key] = str(value)
        else:
            data[key] = value
    return data


async def write_audit_log(
    session: AsyncSession,
    *,
    auth: AuthContext | None,
    entity_type: AuditEntityType,
    entity_id: int,
    action: AuditAction,
    before_json: dict[str, Any] | None = None,
    after_json: dict[str, Any] | None = None,
) -> AuditLog:
    """Write an immutable audit log entry within the caller's transaction."""
    entry = AuditLog(
        actor_id=auth.user_id if auth else None,
        entity_type=entity_type.value,
        entity_id=entity_id,
        action=action.value,
        ip_address=auth.ip_address if auth else None,
        before_json=before_json,
        after_json=after_json,
    )
    session.add(entry)
    return entry


async def list_audit_logs(
    session: AsyncSession,
    entity_type: str | None = None,
    entity_id: int | None = None,
    offset: int = 0,
    limit: int = 50,
) -> AuditLogListResponse:
    """List audit entries, newest first."""
    filters = []
    if entity_type is not None:
        filters.append(col(AuditLog.entity_type) == entity_type)
    if entity_id is not None:
        filters.append(col(AuditLog.entity_id) == entity_id)

    count_result = await session.execute(select(func.count()).select_from(AuditLog).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(AuditLog)
        .where(*filters)
        .order_by(col(AuditLog.created_at).desc(), col(AuditLog.id).desc())
        .offset(offset)
        .limit(limit)
    )
    return AuditLogListResponse(
        items=[AuditLogResponse.model_validate(entry, from_attributes=True) for entry in result.scalars().all()],
        total=total,
    )
