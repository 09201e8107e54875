# ruff: noqa: B008
from __future__ import annotations

from fastapi import APIRouter, Query

from storekeeper.api.deps import AuthDep
from storekeeper.db import SessionDep
from storekeeper.schemas.dashboard import ActivityFeed, DashboardStats
from storekeeper.services import dashboard as dashboard_service

dashboard_router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@dashboard_router.get("/stats", response_model=DashboardStats)
async def get_stats(session: SessionDep, _auth: AuthDep) -> DashboardStats:
    return await dashboard_service.get_stats(session)


@dashboard_router.get("/activity", response_model=ActivityFeed)
async def get_recent_activity(
    session: SessionDep,
    _auth: AuthDep,
    limit: int | None = Query(default=None, ge=1, le=100),
) -> ActivityFeed:
    """Most recently touched requests, newest first."""
    return await dashboard_service.get_recent_activity(session, limit)
