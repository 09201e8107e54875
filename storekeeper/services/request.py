from __future__ import annotations

import logging
from collections import defaultdict
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import exists, func, or_, select
from sqlmodel import col

from storekeeper.exceptions import AppError, NotFoundError, PermissionDeniedError
from storekeeper.models.base import persisted_id
from storekeeper.models.enums import AuditAction, AuditEntityType, DeploymentType, RequestKind, RequestStatus, UserRole
from storekeeper.models.inventory import Item
from storekeeper.models.request import Approval, MaterialRequest, Rejection, RequestApprover, RequestItem
from storekeeper.models.user import User
from storekeeper.schemas.request import (
    ApprovalResponse,
    ItemReturnUpdate,
    MaterialRequestCreate,
    MaterialRequestUpdate,
    RejectionResponse,
    RequestDetailResponse,
    RequestItemResponse,
    RequestListResponse,
    RequestSummaryResponse,
    ReturnedItemRow,
)
from storekeeper.services import lifecycle
from storekeeper.services.audit import model_to_audit_dict, write_audit_log
from storekeeper.services.inventory import find_item_by_name, warn_if_newly_low
from storekeeper.services.user import build_approver_response, get_approvers_by_ids

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy.ext.asyncio import AsyncSession

    from storekeeper.schemas.auth import AuthContext
    from storekeeper.schemas.request import (
        ApprovePayload,
        CreateRequestPayload,
        FinalizeItem,
        FinalizePayload,
        ItemRow,
        RejectPayload,
        UpdateRequestPayload,
    )

logger = logging.getLogger(__name__)

_DECIDING_ROLES = frozenset({UserRole.APPROVER, UserRole.ISSUER, UserRole.SUPERADMIN})
_ISSUING_ROLES = frozenset({UserRole.ISSUER, UserRole.SUPERADMIN})


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_summary(
    request: MaterialRequest,
    item_count: int = 0,
    approver_names: str | None = None,
    reject_reason: str | None = None,
) -> RequestSummaryResponse:
    """Map a request model to its list-view schema."""
    return RequestSummaryResponse(
        id=persisted_id(request),
        kind=RequestKind(request.kind),
        created_by=request.created_by,
        team_leader_name=request.team_leader_name,
        team_leader_phone=request.team_leader_phone,
        project_name=request.project_name,
        isp_name=request.isp_name,
        location=request.location,
        deployment_type=DeploymentType(request.deployment_type) if request.deployment_type else None,
        reason=request.reason,
        release_by=request.release_by,
        received_by=request.received_by,
        status=RequestStatus(request.status),
        created_at=request.created_at,
        updated_at=request.updated_at,
        approved_at=request.approved_at,
        completed_at=request.completed_at,
        rejected_at=request.rejected_at,
        item_count=item_count,
        approver_names=approver_names,
        reject_reason=reject_reason,
    )


async def _get_request_or_404(
    session: AsyncSession,
    request_id: int,
    *,
    for_update: bool = False,
) -> MaterialRequest:
    """Fetch a request by ID. Raises 404 if not found."""
    query = select(MaterialRequest).where(col(MaterialRequest.id) == request_id)
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    request = result.scalar_one_or_none()
    if request is None:
        raise NotFoundError("Request not found")
    return request


async def _item_counts(session: AsyncSession, request_ids: Sequence[int]) -> dict[int, int]:
    result = await session.execute(
        select(RequestItem.request_id, func.count())
        .where(col(RequestItem.request_id).in_(request_ids))
        .group_by(col(RequestItem.request_id))
    )
    return {request_id: count for request_id, count in result.all()}


async def _approver_users(session: AsyncSession, request_ids: Sequence[int]) -> dict[int, list[User]]:
    result = await session.execute(
        select(RequestApprover.request_id, User)
        .join(User, col(User.id) == col(RequestApprover.user_id))
        .where(col(RequestApprover.request_id).in_(request_ids))
        .order_by(col(User.last_name), col(User.first_name), col(User.id))
    )
    users: dict[int, list[User]] = defaultdict(list)
    for request_id, user in result.all():
        users[request_id].append(user)
    return users


async def _latest_reject_reasons(session: AsyncSession, request_ids: Sequence[int]) -> dict[int, str]:
    result = await session.execute(
        select(Rejection)
        .where(col(Rejection.request_id).in_(request_ids))
        .order_by(col(Rejection.created_at), col(Rejection.id))
    )
    # Later rows overwrite earlier ones, leaving the newest reason per request.
    return {rejection.request_id: rejection.reason for rejection in result.scalars().all()}


def _join_names(users: Sequence[User]) -> str | None:
    return ", ".join(u.full_name for u in users) or None


async def _build_detail(session: AsyncSession, request: MaterialRequest) -> RequestDetailResponse:
    """Assemble the full detail view: lines, decisions and approvers."""
    request_id = persisted_id(request)

    lines_result = await session.execute(
        select(RequestItem, Item.name, Item.quantity)
        .join(Item, col(Item.id) == col(RequestItem.item_id))
        .where(col(RequestItem.request_id) == request_id)
        .order_by(col(RequestItem.position), col(RequestItem.id))
    )
    lines = []
    for line, item_name, stock in lines_result.all():
        lines.append(
            RequestItemResponse(
                id=persisted_id(line),
                item_id=line.item_id,
                item_name=item_name,
                position=line.position,
                quantity_requested=line.quantity_requested,
                quantity_received=line.quantity_received,
                quantity_returned=line.quantity_returned,
                current_stock=stock,
            )
        )

    approvals_result = await session.execute(
        select(Approval)
        .where(col(Approval.request_id) == request_id)
        .order_by(col(Approval.created_at).desc(), col(Approval.id).desc())
    )
    rejections_result = await session.execute(
        select(Rejection)
        .where(col(Rejection.request_id) == request_id)
        .order_by(col(Rejection.created_at).desc(), col(Rejection.id).desc())
    )
    rejections = list(rejections_result.scalars().all())
    approvers = (await _approver_users(session, [request_id])).get(request_id, [])

    summary = _build_summary(
        request,
        item_count=len(lines),
        approver_names=_join_names(approvers),
        reject_reason=rejections[0].reason if rejections else None,
    )
    return RequestDetailResponse(
        **summary.model_dump(),
        items=lines,
        approvals=[ApprovalResponse.model_validate(a, from_attributes=True) for a in approvals_result.scalars().all()],
        rejections=[RejectionResponse.model_validate(r, from_attributes=True) for r in rejections],
        approvers=[build_approver_response(u) for u in approvers],
        can_edit=lifecycle.is_editable(request.status),
    )


async def _resolve_lines(session: AsyncSession, rows: Sequence[ItemRow]) -> list[RequestItem]:
    """Turn form rows into request lines, resolving item names against the catalog.

    Material request quantities go to ``quantity_requested`` and return
    quantities to ``quantity_returned``; the two are never mixed. Rows naming
    the same item are merged into one line at the first row's position, so a
    request holds at most one line per item.
    """
    by_item: dict[int, RequestItem] = {}
    for row in rows:
        item = await find_item_by_name(session, row.name)
        if item is None:
            raise AppError(f"Item not found: {row.name.strip()}", status_code=400)
        item_id = persisted_id(item)
        line = by_item.get(item_id)
        if line is None:
            line = by_item[item_id] = RequestItem(item_id=item_id, position=len(by_item))
        if isinstance(row, ReturnedItemRow):
            line.quantity_returned = (line.quantity_returned or 0) + row.returned
        else:
            line.quantity_requested = (line.quantity_requested or 0) + row.requested
    return list(by_item.values())


async def _replace_lines(session: AsyncSession, request_id: int, lines: list[RequestItem]) -> None:
    existing = await session.execute(select(RequestItem).where(col(RequestItem.request_id) == request_id))
    for line in existing.scalars().all():
        await session.delete(line)
    await session.flush()
    for line in lines:
        line.request_id = request_id
    session.add_all(lines)


async def _is_assigned_approver(session: AsyncSession, request_id: int, user_id: int) -> bool:
    result = await session.execute(
        select(RequestApprover.id).where(
            col(RequestApprover.request_id) == request_id,
            col(RequestApprover.user_id) == user_id,
        )
    )
    return result.first() is not None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


async def create_request(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateRequestPayload,
) -> RequestDetailResponse:
    """Create a material request or item return in ``pending``.

    Flow:
    1. Validate required fields, approver selection and item rows (in that order).
    2. Check every selected approver exists and every item name resolves.
    3. Insert the request, its lines (in submitted order) and its approver set.
    4. Audit log, commit and return the detail view.
    """
    payload = lifecycle.validate_submission(payload)
    approvers = await get_approvers_by_ids(session, payload.approver_ids)
    lines = await _resolve_lines(session, payload.items)

    if isinstance(payload, MaterialRequestCreate):
        request = MaterialRequest(
            kind=RequestKind.MATERIAL_REQUEST.value,
            created_by=payload.created_by.strip(),
            team_leader_name=payload.team_leader_name.strip(),
            team_leader_phone=(payload.team_leader_phone or "").strip() or None,
            project_name=payload.project_name.strip(),
            isp_name=(payload.isp_name or "").strip() or None,
            location=payload.location.strip(),
            deployment_type=payload.deployment_type.value,
            received_by=payload.received_by.strip(),
            status=RequestStatus.PENDING.value,
        )
    else:
        request = MaterialRequest(
            kind=RequestKind.ITEM_RETURN.value,
            created_by=payload.created_by.strip(),
            project_name=payload.project_name.strip(),
            location=payload.location.strip(),
            reason=payload.reason.strip(),
            status=RequestStatus.PENDING.value,
        )
    session.add(request)
    await session.flush()

    request_id = persisted_id(request)
    for line in lines:
        line.request_id = request_id
    session.add_all(lines)
    session.add_all(RequestApprover(request_id=request_id, user_id=persisted_id(u)) for u in approvers)
    await session.flush()

    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.REQUEST,
        entity_id=request_id,
        action=AuditAction.CREATE,
        after_json={**model_to_audit_dict(request), "approver_ids": payload.approver_ids},
    )
    await session.commit()
    await session.refresh(request)
    logger.info("Request %d (%s) created and sent to %d approver(s)", request_id, request.kind, len(approvers))
    return await _build_detail(session, request)


async def get_request(session: AsyncSession, request_id: int) -> RequestDetailResponse:
    """Get a single request with its lines, approvals, rejections and approvers."""
    request = await _get_request_or_404(session, request_id)
    return await _build_detail(session, request)


async def list_requests(
    session: AsyncSession,
    auth: AuthContext,
    status_filter: RequestStatus | None = None,
    kind: RequestKind | None = None,
    search: str | None = None,
    offset: int = 0,
    limit: int = 50,
) -> RequestListResponse:
    """List requests newest first.

    Approvers only see pending requests that were sent to them; every other
    status is visible to everyone. ``search`` is a case-insensitive substring
    match over the people, project, reason and approver name fields.
    """
    filters = []
    if status_filter is not None:
        filters.append(col(MaterialRequest.status) == status_filter.value)
    if kind is not None:
        filters.append(col(MaterialRequest.kind) == kind.value)
    if auth.role == UserRole.APPROVER:
        assigned = exists().where(
            col(RequestApprover.request_id) == col(MaterialRequest.id),
            col(RequestApprover.user_id) == auth.user_id,
        )
        filters.append(or_(col(MaterialRequest.status) != RequestStatus.PENDING.value, assigned))

    term = (search or "").strip()
    if term:
        approver_match = exists().where(
            col(RequestApprover.request_id) == col(MaterialRequest.id),
            col(User.id) == col(RequestApprover.user_id),
            (col(User.first_name) + " " + col(User.last_name)).icontains(term, autoescape=True),
        )
        filters.append(
            or_(
                col(MaterialRequest.team_leader_name).icontains(term, autoescape=True),
                col(MaterialRequest.team_leader_phone).icontains(term, autoescape=True),
                col(MaterialRequest.project_name).icontains(term, autoescape=True),
                col(MaterialRequest.created_by).icontains(term, autoescape=True),
                col(MaterialRequest.reason).icontains(term, autoescape=True),
                approver_match,
            )
        )

    count_result = await session.execute(select(func.count()).select_from(MaterialRequest).where(*filters))
    total = count_result.scalar_one()

    result = await session.execute(
        select(MaterialRequest)
        .where(*filters)
        .order_by(col(MaterialRequest.created_at).desc(), col(MaterialRequest.id).desc())
        .offset(offset)
        .limit(limit)
    )
    requests = list(result.scalars().all())
    ids = [persisted_id(r) for r in requests]

    counts = await _item_counts(session, ids)
    approvers = await _approver_users(session, ids)
    reasons = await _latest_reject_reasons(session, ids)

    return RequestListResponse(
        items=[
            _build_summary(
                r,
                item_count=counts.get(persisted_id(r), 0),
                approver_names=_join_names(approvers.get(persisted_id(r), [])),
                reject_reason=reasons.get(persisted_id(r)),
            )
            for r in requests
        ],
        total=total,
    )


async def update_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: int,
    payload: UpdateRequestPayload,
) -> RequestDetailResponse:
    """Edit a pending request. Items are replaced wholesale.

    ``created_by``, ``release_by`` and ``received_by`` are not part of the
    update payloads and so never change here.
    """
    request = await _get_request_or_404(session, request_id, for_update=True)
    lifecycle.ensure_editable(request.status)
    if payload.kind != request.kind:
        raise AppError(f"Request {request_id} is a {request.kind}, not a {payload.kind}", status_code=400)

    rows = lifecycle.validate_edit(payload)
    lines = await _resolve_lines(session, rows)
    before = model_to_audit_dict(request)

    if isinstance(payload, MaterialRequestUpdate):
        request.team_leader_name = payload.team_leader_name.strip()
        request.team_leader_phone = (payload.team_leader_phone or "").strip() or None
        request.project_name = payload.project_name.strip()
        request.isp_name = (payload.isp_name or "").strip() or None
        request.location = payload.location.strip()
        request.deployment_type = payload.deployment_type.value
    elif isinstance(payload, ItemReturnUpdate):
        request.project_name = payload.project_name.strip()
        request.location = payload.location.strip()
        request.reason = payload.reason.strip()

    request.updated_at = datetime.now(UTC)
    await _replace_lines(session, request_id, lines)
    await session.flush()

    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.REQUEST,
        entity_id=request_id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(request),
    )
    await session.commit()
    await session.refresh(request)
    return await _build_detail(session, request)


async def approve_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: int,
    payload: ApprovePayload,
) -> RequestDetailResponse:
    """Record a signed approval. The first approval moves the request to ``approved``."""
    request = await _get_request_or_404(session, request_id, for_update=True)
    lifecycle.ensure_transition(request.status, RequestStatus.APPROVED)

    if auth.role == UserRole.APPROVER:
        if not await _is_assigned_approver(session, request_id, auth.user_id):
            raise PermissionDeniedError("This request was not sent to you")
    elif auth.role != UserRole.SUPERADMIN:
        raise PermissionDeniedError("Approver access required")

    before = model_to_audit_dict(request)
    now = datetime.now(UTC)
    session.add(Approval(request_id=request_id, approver_name=payload.approver_name.strip(), signature=payload.signature))
    request.status = RequestStatus.APPROVED.value
    request.approved_at = now
    await session.flush()

    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.REQUEST,
        entity_id=request_id,
        action=AuditAction.APPROVE,
        before_json=before,
        after_json={**model_to_audit_dict(request), "approver_name": payload.approver_name.strip()},
    )
    await session.commit()
    await session.refresh(request)
    return await _build_detail(session, request)


async def reject_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: int,
    payload: RejectPayload,
) -> RequestDetailResponse:
    """Reject a pending or approved request. A reason and rejector name are required."""
    if auth.role not in _DECIDING_ROLES:
        raise PermissionDeniedError("Manager access required")
    reason = payload.reason.strip()
    rejector_name = payload.rejector_name.strip()
    if not reason:
        raise AppError("Rejection reason is required", status_code=400)
    if not rejector_name:
        raise AppError("Rejector name is required", status_code=400)

    request = await _get_request_or_404(session, request_id, for_update=True)
    lifecycle.ensure_transition(request.status, RequestStatus.REJECTED)

    before = model_to_audit_dict(request)
    session.add(Rejection(request_id=request_id, rejector_name=rejector_name, reason=reason))
    request.status = RequestStatus.REJECTED.value
    request.rejected_at = datetime.now(UTC)
    await session.flush()

    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.REQUEST,
        entity_id=request_id,
        action=AuditAction.REJECT,
        before_json=before,
        after_json={**model_to_audit_dict(request), "reason": reason},
    )
    await session.commit()
    await session.refresh(request)
    return await _build_detail(session, request)


async def finalize_request(
    session: AsyncSession,
    auth: AuthContext,
    request_id: int,
    payload: FinalizePayload,
) -> RequestDetailResponse:
    """Issue an approved request and mark it ``completed``.

    For a material request each received quantity is deducted from stock;
    for an item return it is added back. Lines with nothing received leave
    stock untouched. Any shortfall aborts the whole operation.
    """
    if auth.role not in _ISSUING_ROLES:
        raise PermissionDeniedError("Issuer access required")

    request = await _get_request_or_404(session, request_id, for_update=True)
    lifecycle.ensure_transition(request.status, RequestStatus.COMPLETED)

    lines_result = await session.execute(select(RequestItem).where(col(RequestItem.request_id) == request_id))
    lines = {line.item_id: line for line in lines_result.scalars().all()}
    before = model_to_audit_dict(request)
    now = datetime.now(UTC)

    item_ids = [entry.item_id for entry in payload.items]
    if len(set(item_ids)) != len(item_ids):
        raise AppError("Each item may only appear once when finalizing", status_code=400)

    # Check every line and lock its item before touching stock.
    planned: list[tuple[FinalizeItem, RequestItem, Item | None]] = []
    for entry in payload.items:
        line = lines.get(entry.item_id)
        if line is None:
            raise AppError(f"Item {entry.item_id} is not part of request {request_id}", status_code=400)
        item = None
        if entry.quantity_received > 0:
            item_result = await session.execute(select(Item).where(col(Item.id) == entry.item_id).with_for_update())
            item = item_result.scalar_one_or_none()
            if item is None:
                raise NotFoundError("Item not found")
            if request.kind == RequestKind.MATERIAL_REQUEST and entry.quantity_received > item.quantity:
                raise AppError(
                    f"Insufficient stock for item ID {entry.item_id}. Only {item.quantity} units available.",
                    status_code=400,
                )
        planned.append((entry, line, item))

    for entry, line, item in planned:
        if item is not None:
            if request.kind == RequestKind.MATERIAL_REQUEST:
                item.quantity -= entry.quantity_received
            else:
                item.quantity += entry.quantity_received
            item.updated_at = now
        line.quantity_received = entry.quantity_received
        if entry.quantity_returned is not None:
            line.quantity_returned = entry.quantity_returned

    request.release_by = payload.release_by.strip()
    request.status = RequestStatus.COMPLETED.value
    request.completed_at = now
    await session.flush()

    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.REQUEST,
        entity_id=request_id,
        action=AuditAction.FINALIZE,
        before_json=before,
        after_json=model_to_audit_dict(request),
    )
    await session.commit()
    await session.refresh(request)
    logger.info("Request %d finalized by %s", request_id, request.release_by)
    if request.kind == RequestKind.MATERIAL_REQUEST:
        for entry, _, item in planned:
            if item is not None:
                warn_if_newly_low(item, item.quantity + entry.quantity_received)
    return await _build_detail(session, request)
