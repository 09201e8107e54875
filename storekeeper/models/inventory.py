# ruff: noqa: TC003
from __future__ import annotations

from datetime import UTC, datetime
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from storekeeper.models.base import IntIdBase, TimestampMixin, UpdatedAtMixin


def _now_utc() -> datetime:
    return datetime.now(UTC)


class Category(IntIdBase, TimestampMixin, UpdatedAtMixin, table=True):
    """Grouping for catalog items (e.g. Cables, Tools)."""

    __tablename__ = "category"
    __table_args__ = (sa.UniqueConstraint("name", name="uq_category_name"),)

    name: str = Field(max_length=255)
    description: str | None = None


class Item(IntIdBase, TimestampMixin, UpdatedAtMixin, table=True):
    """A stocked inventory item."""

    __tablename__ = "item"
    __table_args__ = (
        sa.CheckConstraint("quantity >= 0", name="ck_item_quantity_non_negative"),
        sa.CheckConstraint("low_stock_threshold >= 0", name="ck_item_threshold_non_negative"),
    )

    name: str = Field(max_length=255, index=True)
    description: str | None = None
    category_id: int | None = Field(
        default=None,
        sa_column=sa.Column(sa.Integer, sa.ForeignKey("category.id", ondelete="SET NULL"), nullable=True, index=True),
    )
    quantity: int = Field(default=0)
    low_stock_threshold: int = Field(default=5)
    vendor_name: str | None = Field(default=None, max_length=255)
    unit_price: Decimal | None = Field(default=None, max_digits=10, decimal_places=2)
    update_reasons: str | None = None


class ItemOut(IntIdBase, table=True):
    """A direct stock issue to a person, outside the request workflow."""

    __tablename__ = "item_out"

    person_name: str = Field(max_length=255)
    item_id: int = Field(
        sa_column=sa.Column(sa.Integer, sa.ForeignKey("item.id", ondelete="CASCADE"), nullable=False, index=True),
    )
    quantity: int
    issued_at: datetime = Field(
        default_factory=_now_utc,
        sa_type=sa.DateTime(timezone=True),  # ty: ignore[invalid-argument-type]
        sa_column_kwargs={"server_default": sa.func.now()},
    )
