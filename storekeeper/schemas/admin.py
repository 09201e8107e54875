# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Supervisors
# ---------------------------------------------------------------------------


class SupervisorPayload(BaseModel):
    """Request body for adding or editing a low-stock contact."""

    name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)


class SupervisorResponse(BaseModel):
    id: int
    name: str
    email: str
    created_at: datetime
    updated_at: datetime | None


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class SettingValuePayload(BaseModel):
    value: str
    description: str | None = None


class SettingResponse(BaseModel):
    key: str
    value: str
    description: str | None
    updated_at: datetime | None


class SettingsResponse(BaseModel):
    """All settings, both as a key/value map and as full rows."""

    values: dict[str, str]
    all: list[SettingResponse]
