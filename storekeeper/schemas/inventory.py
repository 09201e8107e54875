# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class CategoryPayload(BaseModel):
    """Request body for creating or updating a category."""

    name: str = Field(min_length=1, max_length=255)
    description: str | None = None


class CategoryResponse(BaseModel):
    id: int
    name: str
    description: str | None
    item_count: int = 0
    created_at: datetime
    updated_at: datetime | None


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


class CreateItemPayload(BaseModel):
    """Request body for adding an item to the catalog."""

    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    category_id: int | None = None
    quantity: int = Field(ge=0)
    low_stock_threshold: int | None = Field(default=None, ge=0)
    vendor_name: str | None = Field(default=None, max_length=255)
    unit_price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)


class UpdateItemPayload(CreateItemPayload):
    """Request body for editing an item. A reason is always required."""

    update_reason: str = ""


class ItemResponse(BaseModel):
    id: int
    name: str
    description: str | None
    category_id: int | None
    category_name: str | None
    quantity: int
    low_stock_threshold: int
    vendor_name: str | None
    unit_price: Decimal | None
    update_reasons: str | None
    is_low_stock: bool
    created_at: datetime
    updated_at: datetime | None


# ---------------------------------------------------------------------------
# Items out
# ---------------------------------------------------------------------------


class IssueItemPayload(BaseModel):
    """Request body for handing stock directly to a person."""

    person_name: str = Field(min_length=1, max_length=255)
    item_id: int
    quantity: int = Field(gt=0)


class ItemOutResponse(BaseModel):
    id: int
    person_name: str
    item_id: int
    item_name: str
    category_name: str | None
    quantity: int
    issued_at: datetime
