from __future__ import annotations

import sqlalchemy as sa
from sqlmodel import Field

from storekeeper.models.base import IntIdBase, TimestampMixin
from storekeeper.models.enums import UserRole


class User(IntIdBase, TimestampMixin, table=True):
    """A person who requests, approves or issues stock."""

    __tablename__ = "app_user"
    __table_args__ = (
        sa.UniqueConstraint("username", name="uq_user_username"),
        sa.UniqueConstraint("email", name="uq_user_email"),
    )

    first_name: str = Field(max_length=255)
    last_name: str = Field(max_length=255)
    username: str = Field(max_length=255)
    email: str = Field(max_length=255)
    role: str = Field(
        default=UserRole.REQUESTER, max_length=50, index=True, sa_column_kwargs={"server_default": "requester"}
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
