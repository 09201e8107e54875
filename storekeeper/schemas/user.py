# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from storekeeper.models.enums import UserRole


class CreateUserPayload(BaseModel):
    """Request body for creating a user."""

    first_name: str = Field(min_length=1, max_length=255)
    last_name: str = Field(min_length=1, max_length=255)
    username: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    role: UserRole = UserRole.REQUESTER


class UserResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    full_name: str
    username: str
    email: str
    role: UserRole
    created_at: datetime


class UpdateUserPayload(BaseModel):
    """Request body for editing a user. The username never changes."""

    first_name: str = Field(min_length=1, max_length=255)
    last_name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    role: UserRole


class UpdateUserRolePayload(BaseModel):
    role: UserRole
