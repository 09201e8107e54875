from __future__ import annotations

import sqlalchemy as sa
from sqlmodel import Field

from storekeeper.models.base import IntIdBase, TimestampMixin, UpdatedAtMixin


class Supervisor(IntIdBase, TimestampMixin, UpdatedAtMixin, table=True):
    """A person who is told when stock runs low."""

    __tablename__ = "supervisor"
    __table_args__ = (sa.UniqueConstraint("email", name="uq_supervisor_email"),)

    name: str = Field(max_length=255)
    email: str = Field(max_length=255)


class AppSetting(IntIdBase, UpdatedAtMixin, table=True):
    """Runtime key/value setting editable by administrators."""

    __tablename__ = "app_setting"
    __table_args__ = (sa.UniqueConstraint("key_name", name="uq_app_setting_key_name"),)

    key_name: str = Field(max_length=255)
    value: str = Field(sa_type=sa.Text)  # ty: ignore[invalid-argument-type]
    description: str | None = Field(default=None, sa_type=sa.Text)  # ty: ignore[invalid-argument-type]
