# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from storekeeper.models.enums import RequestKind, RequestStatus


class DashboardStats(BaseModel):
    """Headline counters for the dashboard."""

    total_items: int
    total_categories: int
    items_out: int
    low_stock_items: int
    pending_requests: int


class ActivityEntry(BaseModel):
    """One request in the recent activity feed."""

    request_id: int
    kind: RequestKind
    project_name: str
    created_by: str
    status: RequestStatus
    occurred_at: datetime


class ActivityFeed(BaseModel):
    items: list[ActivityEntry]
