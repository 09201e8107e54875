from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlmodel import col

from storekeeper.exceptions import AppError, NotFoundError
from storekeeper.models.admin import Supervisor
from storekeeper.models.base import persisted_id
from storekeeper.models.enums import AuditAction, AuditEntityType
from storekeeper.schemas.admin import SupervisorResponse
from storekeeper.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from storekeeper.schemas.admin import SupervisorPayload
    from storekeeper.schemas.auth import AuthContext


def _build_supervisor_response(supervisor: Supervisor) -> SupervisorResponse:
    return SupervisorResponse(
        id=persisted_id(supervisor),
        name=supervisor.name,
        email=supervisor.email,
        created_at=supervisor.created_at,
        updated_at=supervisor.updated_at,
    )


def _clean(payload: SupervisorPayload) -> tuple[str, str]:
    name = payload.name.strip()
    email = payload.email.strip().lower()
    if not name or not email:
        raise AppError("Name and email are required", status_code=400)
    return name, email


async def _get_supervisor_or_404(session: AsyncSession, supervisor_id: int) -> Supervisor:
    result = await session.execute(select(Supervisor).where(col(Supervisor.id) == supervisor_id))
    supervisor = result.scalar_one_or_none()
    if supervisor is None:
        raise NotFoundError("Supervisor not found")
    return supervisor


async def _ensure_email_free(session: AsyncSession, email: str, exclude_id: int | None = None) -> None:
    query = select(Supervisor.id).where(col(Supervisor.email) == email)
    if exclude_id is not None:
        query = query.where(col(Supervisor.id) != exclude_id)
    result = await session.execute(query)
    if result.first() is not None:
        raise AppError("A supervisor with this email already exists", status_code=409)


async def list_supervisors(session: AsyncSession) -> list[SupervisorResponse]:
    """Low-stock contacts ordered by name."""
    result = await session.execute(select(Supervisor).order_by(col(Supervisor.name), col(Supervisor.id)))
    return [_build_supervisor_response(s) for s in result.scalars().all()]


async def list_supervisor_emails(session: AsyncSession) -> list[str]:
    result = await session.execute(select(Supervisor.email).order_by(col(Supervisor.name), col(Supervisor.id)))
    return list(result.scalars().all())


async def create_supervisor(session: AsyncSession, auth: AuthContext, payload: SupervisorPayload) -> SupervisorResponse:
    name, email = _clean(payload)
    await _ensure_email_free(session, email)
    supervisor = Supervisor(name=name, email=email)
    session.add(supervisor)
    await session.flush()

    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.SUPERVISOR,
        entity_id=persisted_id(supervisor),
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(supervisor),
    )
    await session.commit()
    await session.refresh(supervisor)
    return _build_supervisor_response(supervisor)


async def update_supervisor(
    session: AsyncSession,
    auth: AuthContext,
    supervisor_id: int,
    payload: SupervisorPayload,
) -> SupervisorResponse:
    supervisor = await _get_supervisor_or_404(session, supervisor_id)
    name, email = _clean(payload)
    await _ensure_email_free(session, email, exclude_id=supervisor_id)
    before = model_to_audit_dict(supervisor)

    supervisor.name = name
    supervisor.email = email
    supervisor.updated_at = datetime.now(UTC)
    await session.flush()

    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.SUPERVISOR,
        entity_id=supervisor_id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(supervisor),
    )
    await session.commit()
    await session.refresh(supervisor)
    return _build_supervisor_response(supervisor)


async def delete_supervisor(session: AsyncSession, auth: AuthContext, supervisor_id: int) -> None:
    supervisor = await _get_supervisor_or_404(session, supervisor_id)
    before = model_to_audit_dict(supervisor)
    await session.delete(supervisor)
    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.SUPERVISOR,
        entity_id=supervisor_id,
        action=AuditAction.DELETE,
        before_json=before,
    )
    await session.commit()
