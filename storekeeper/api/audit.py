# ruff: noqa: B008
from __future__ import annotations

from fastapi import APIRouter, Query

from storekeeper.api.deps import SuperadminDep
from storekeeper.db import SessionDep
from storekeeper.models.enums import AuditEntityType
from storekeeper.schemas.audit import AuditLogListResponse
from storekeeper.services import audit as audit_service

audit_router = APIRouter(prefix="/audit-logs", tags=["audit"])


@audit_router.get("", response_model=AuditLogListResponse)
async def list_audit_logs(
    session: SessionDep,
    _auth: SuperadminDep,
    entity_type: AuditEntityType | None = Query(default=None),
    entity_id: int | None = Query(default=None),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=50, ge=1, le=200),
) -> AuditLogListResponse:
    """Audit trail with optional entity filters, newest first."""
    return await audit_service.list_audit_logs(
        session, entity_type.value if entity_type else None, entity_id, offset, limit
    )
