"""supervisors, settings and one line per item

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-18 09:00:00

"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0002"
down_revision: str | None = "0001"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # Fold duplicate lines into the earliest one before the constraint goes on.
    op.execute(
        """
        UPDATE request_item AS keep
        SET quantity_requested = totals.requested,
            quantity_returned = totals.returned
        FROM (
            SELECT request_id, item_id, MIN(id) AS keep_id,
                   SUM(quantity_requested) AS requested, SUM(quantity_returned) AS returned
            FROM request_item
            GROUP BY request_id, item_id
            HAVING COUNT(*) > 1
        ) AS totals
        WHERE keep.id = totals.keep_id
        """
    )
    op.execute(
        """
        DELETE FROM request_item AS dup
        USING request_item AS keep
        WHERE dup.request_id = keep.request_id AND dup.item_id = keep.item_id AND dup.id > keep.id
        """
    )
    op.create_unique_constraint("uq_request_item_item", "request_item", ["request_id", "item_id"])

    op.create_table(
        "supervisor",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.UniqueConstraint("email", name="uq_supervisor_email"),
    )

    app_setting = op.create_table(
        "app_setting",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("key_name", sa.String(length=255), nullable=False),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.UniqueConstraint("key_name", name="uq_app_setting_key_name"),
    )
    op.bulk_insert(
        app_setting,
        [
            {"key_name": "from_name", "value": "Storekeeper", "description": "Sender name for low stock alerts"},
            {
                "key_name": "from_email",
                "value": "storekeeper@example.com",
                "description": "Sender address for low stock alerts",
            },
        ],
    )


def downgrade() -> None:
    op.drop_table("app_setting")
    op.drop_table("supervisor")
    op.drop_constraint("uq_request_item_item", "request_item", type_="unique")
