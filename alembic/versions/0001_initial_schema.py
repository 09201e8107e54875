"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-17 09:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamp(name: str, *, nullable: bool = False) -> sa.Column:
    if nullable:
        return sa.Column(name, sa.DateTime(timezone=True), nullable=True)
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    op.create_table(
        "app_user",
        sa.Column("id", sa.Integer(), primary_key=True),
        _timestamp("created_at"),
        sa.Column("first_name", sa.String(length=255), nullable=False),
        sa.Column("last_name", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=50), server_default="requester", nullable=False),
        sa.UniqueConstraint("username", name="uq_user_username"),
        sa.UniqueConstraint("email", name="uq_user_email"),
    )
    op.create_index("ix_app_user_role", "app_user", ["role"])

    op.create_table(
        "category",
        sa.Column("id", sa.Integer(), primary_key=True),
        _timestamp("created_at"),
        _timestamp("updated_at", nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.UniqueConstraint("name", name="uq_category_name"),
    )

    op.create_table(
        "item",
        sa.Column("id", sa.Integer(), primary_key=True),
        _timestamp("created_at"),
        _timestamp("updated_at", nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(), nullable=True),
        sa.Column("category_id", sa.Integer(), sa.ForeignKey("category.id", ondelete="SET NULL"), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("low_stock_threshold", sa.Integer(), nullable=False),
        sa.Column("vendor_name", sa.String(length=255), nullable=True),
        sa.Column("unit_price", sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column("update_reasons", sa.String(), nullable=True),
        sa.CheckConstraint("quantity >= 0", name="ck_item_quantity_non_negative"),
        sa.CheckConstraint("low_stock_threshold >= 0", name="ck_item_threshold_non_negative"),
    )
    op.create_index("ix_item_name", "item", ["name"])
    op.create_index("ix_item_category_id", "item", ["category_id"])

    op.create_table(
        "item_out",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("person_name", sa.String(length=255), nullable=False),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("item.id", ondelete="CASCADE"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        _timestamp("issued_at"),
    )
    op.create_index("ix_item_out_item_id", "item_out", ["item_id"])

    op.create_table(
        "request",
        sa.Column("id", sa.Integer(), primary_key=True),
        _timestamp("created_at"),
        _timestamp("updated_at", nullable=True),
        sa.Column("kind", sa.String(length=50), server_default="material_request", nullable=False),
        sa.Column("created_by", sa.String(length=255), nullable=False),
        sa.Column("team_leader_name", sa.String(length=255), nullable=True),
        sa.Column("team_leader_phone", sa.String(length=50), nullable=True),
        sa.Column("project_name", sa.String(length=255), nullable=False),
        sa.Column("isp_name", sa.String(length=255), nullable=True),
        sa.Column("location", sa.String(), nullable=False),
        sa.Column("deployment_type", sa.String(length=100), nullable=True),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("release_by", sa.String(length=255), nullable=True),
        sa.Column("received_by", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=50), server_default="pending", nullable=False),
        _timestamp("approved_at", nullable=True),
        _timestamp("completed_at", nullable=True),
        _timestamp("rejected_at", nullable=True),
        sa.CheckConstraint("kind IN ('material_request', 'item_return')", name="ck_request_kind"),
    )
    op.create_index("ix_request_status", "request", ["status"])
    op.create_index("ix_request_status_created", "request", ["status", "created_at"])

    op.create_table(
        "request_item",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("request_id", sa.Integer(), sa.ForeignKey("request.id", ondelete="CASCADE"), nullable=False),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("item.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("quantity_requested", sa.Integer(), nullable=True),
        sa.Column("quantity_received", sa.Integer(), nullable=True),
        sa.Column("quantity_returned", sa.Integer(), nullable=True),
        sa.CheckConstraint("quantity_requested IS NULL OR quantity_requested > 0", name="ck_request_item_requested"),
        sa.CheckConstraint("quantity_received IS NULL OR quantity_received >= 0", name="ck_request_item_received"),
        sa.CheckConstraint("quantity_returned IS NULL OR quantity_returned >= 0", name="ck_request_item_returned"),
    )
    op.create_index("ix_request_item_request_id", "request_item", ["request_id"])
    op.create_index("ix_request_item_item_id", "request_item", ["item_id"])

    op.create_table(
        "request_approver",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("request_id", sa.Integer(), sa.ForeignKey("request.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False),
        sa.UniqueConstraint("request_id", "user_id", name="uq_request_approver"),
    )
    op.create_index("ix_request_approver_request_id", "request_approver", ["request_id"])
    op.create_index("ix_request_approver_user_id", "request_approver", ["user_id"])

    op.create_table(
        "approval",
        sa.Column("id", sa.Integer(), primary_key=True),
        _timestamp("created_at"),
        sa.Column("request_id", sa.Integer(), sa.ForeignKey("request.id", ondelete="CASCADE"), nullable=False),
        sa.Column("approver_name", sa.String(length=255), nullable=False),
        sa.Column("signature", sa.String(), nullable=True),
    )
    op.create_index("ix_approval_request_id", "approval", ["request_id"])

    op.create_table(
        "rejection",
        sa.Column("id", sa.Integer(), primary_key=True),
        _timestamp("created_at"),
        sa.Column("request_id", sa.Integer(), sa.ForeignKey("request.id", ondelete="CASCADE"), nullable=False),
        sa.Column("rejector_name", sa.String(length=255), nullable=False),
        sa.Column("reason", sa.String(), nullable=False),
    )
    op.create_index("ix_rejection_request_id", "rejection", ["request_id"])

    op.create_table(
        "audit_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("actor_id", sa.Integer(), nullable=True),
        sa.Column("entity_type", sa.String(length=50), nullable=False),
        sa.Column("entity_id", sa.Integer(), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("ip_address", sa.String(length=45), nullable=True),
        sa.Column("before_json", sa.JSON(), nullable=True),
        sa.Column("after_json", sa.JSON(), nullable=True),
        _timestamp("created_at"),
    )
    op.create_index("ix_audit_entity", "audit_log", ["entity_type", "entity_id"])
    op.create_index("ix_audit_log_created_at", "audit_log", ["created_at"])


def downgrade() -> None:
    for table in (
        "audit_log",
        "rejection",
        "approval",
        "request_approver",
        "request_item",
        "request",
        "item_out",
        "item",
        "category",
        "app_user",
    ):
        op.drop_table(table)
