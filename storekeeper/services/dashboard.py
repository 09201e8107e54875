"""Dashboard counters and the recent request activity feed."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from storekeeper.config import get_settings
from storekeeper.models.base import persisted_id
from storekeeper.models.enums import RequestKind, RequestStatus
from storekeeper.models.inventory import Category, Item, ItemOut
from storekeeper.models.request import MaterialRequest
from storekeeper.schemas.dashboard import ActivityEntry, ActivityFeed, DashboardStats

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


async def _count(session: AsyncSession, model: type, *filters: object) -> int:
    result = await session.execute(select(func.count()).select_from(model).where(*filters))  # type: ignore[arg-type]
    return result.scalar_one()


async def get_stats(session: AsyncSession) -> DashboardStats:
    return DashboardStats(
        total_items=await _count(session, Item),
        total_categories=await _count(session, Category),
        items_out=await _count(session, ItemOut),
        low_stock_items=await _count(session, Item, col(Item.quantity) <= col(Item.low_stock_threshold)),
        pending_requests=await _count(
            session, MaterialRequest, col(MaterialRequest.status) == RequestStatus.PENDING.value
        ),
    )


async def get_recent_activity(session: AsyncSession, limit: int | None = None) -> ActivityFeed:
    """Latest requests ordered by their most recent lifecycle timestamp.

    GREATEST skips NULLs on PostgreSQL, and ``created_at`` is always set.
    """
    if limit is None:
        limit = get_settings().recent_activity_limit

    occurred_at = func.greatest(
        col(MaterialRequest.completed_at),
        col(MaterialRequest.rejected_at),
        col(MaterialRequest.approved_at),
        col(MaterialRequest.updated_at),
        col(MaterialRequest.created_at),
    ).label("occurred_at")

    result = await session.execute(
        select(MaterialRequest, occurred_at)
        .order_by(occurred_at.desc(), col(MaterialRequest.id).desc())
        .limit(limit)
    )
    entries = []
    for request, when in result.all():
        entries.append(
            ActivityEntry(
                request_id=persisted_id(request),
                kind=RequestKind(request.kind),
                project_name=request.project_name,
                created_by=request.created_by,
                status=RequestStatus(request.status),
                occurred_at=when,
            )
        )
    return ActivityFeed(items=entries)
