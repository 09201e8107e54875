# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from storekeeper.models.base import IntIdBase, TimestampMixin, UpdatedAtMixin
from storekeeper.models.enums import RequestKind, RequestStatus


class MaterialRequest(IntIdBase, TimestampMixin, UpdatedAtMixin, table=True):
    """A material issuance or item return moving through the approval workflow.

    ``updated_at`` only tracks edits made while pending; each lifecycle
    transition has its own timestamp.
    """

    __tablename__ = "request"
    __table_args__ = (
        sa.Index("ix_request_status_created", "status", "created_at"),
        sa.CheckConstraint("kind IN ('material_request', 'item_return')", name="ck_request_kind"),
    )

    kind: str = Field(
        default=RequestKind.MATERIAL_REQUEST, max_length=50, sa_column_kwargs={"server_default": "material_request"}
    )
    created_by: str = Field(max_length=255)
    team_leader_name: str | None = Field(default=None, max_length=255)
    team_leader_phone: str | None = Field(default=None, max_length=50)
    project_name: str = Field(max_length=255)
    isp_name: str | None = Field(default=None, max_length=255)
    location: str
    deployment_type: str | None = Field(default=None, max_length=100)
    reason: str | None = None
    release_by: str | None = Field(default=None, max_length=255)
    received_by: str | None = Field(default=None, max_length=255)
    status: str = Field(
        default=RequestStatus.PENDING, max_length=50, index=True, sa_column_kwargs={"server_default": "pending"}
    )
    approved_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    completed_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    rejected_at: datetime | None = Field(default=None, sa_type=sa.DateTime(timezone=True))  # ty: ignore[invalid-argument-type]


class RequestItem(IntIdBase, table=True):
    """One line of a request: which item and how many."""

    __tablename__ = "request_item"
    __table_args__ = (
        sa.CheckConstraint("quantity_requested IS NULL OR quantity_requested > 0", name="ck_request_item_requested"),
        sa.CheckConstraint("quantity_received IS NULL OR quantity_received >= 0", name="ck_request_item_received"),
        sa.CheckConstraint("quantity_returned IS NULL OR quantity_returned >= 0", name="ck_request_item_returned"),
        sa.UniqueConstraint("request_id", "item_id", name="uq_request_item_item"),
    )

    request_id: int = Field(
        sa_column=sa.Column(sa.Integer, sa.ForeignKey("request.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    item_id: int = Field(
        sa_column=sa.Column(sa.Integer, sa.ForeignKey("item.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    position: int = 0
    quantity_requested: int | None = None
    quantity_received: int | None = None
    quantity_returned: int | None = None


class RequestApprover(IntIdBase, table=True):
    """An approver a request was sent to."""

    __tablename__ = "request_approver"
    __table_args__ = (sa.UniqueConstraint("request_id", "user_id", name="uq_request_approver"),)

    request_id: int = Field(
        sa_column=sa.Column(sa.Integer, sa.ForeignKey("request.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    user_id: int = Field(
        sa_column=sa.Column(sa.Integer, sa.ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True),
    )


class Approval(IntIdBase, TimestampMixin, table=True):
    """A signed approval of a request."""

    __tablename__ = "approval"

    request_id: int = Field(
        sa_column=sa.Column(sa.Integer, sa.ForeignKey("request.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    approver_name: str = Field(max_length=255)
    signature: str | None = None


class Rejection(IntIdBase, TimestampMixin, table=True):
    """Why and by whom a request was rejected."""

    __tablename__ = "rejection"

    request_id: int = Field(
        sa_column=sa.Column(sa.Integer, sa.ForeignKey("request.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    rejector_name: str = Field(max_length=255)
    reason: str
