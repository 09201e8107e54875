from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import func, select
from sqlmodel import col

from storekeeper.config import get_settings
from storekeeper.exceptions import AppError, NotFoundError
from storekeeper.models.base import persisted_id
from storekeeper.models.enums import AuditAction, AuditEntityType
from storekeeper.models.inventory import Category, Item, ItemOut
from storekeeper.schemas.inventory import CategoryResponse, ItemOutResponse, ItemResponse
from storekeeper.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from storekeeper.schemas.auth import AuthContext
    from storekeeper.schemas.inventory import CategoryPayload, CreateItemPayload, IssueItemPayload, UpdateItemPayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def is_low_stock(item: Item) -> bool:
    return item.quantity <= item.low_stock_threshold


def _build_item_response(item: Item, category_name: str | None) -> ItemResponse:
    return ItemResponse(
        id=persisted_id(item),
        name=item.name,
        description=item.description,
        category_id=item.category_id,
        category_name=category_name,
        quantity=item.quantity,
        low_stock_threshold=item.low_stock_threshold,
        vendor_name=item.vendor_name,
        unit_price=item.unit_price,
        update_reasons=item.update_reasons,
        is_low_stock=is_low_stock(item),
        created_at=item.created_at,
        updated_at=item.updated_at,
    )


def _build_category_response(category: Category, item_count: int) -> CategoryResponse:
    return CategoryResponse(
        id=persisted_id(category),
        name=category.name,
        description=category.description,
        item_count=item_count,
        created_at=category.created_at,
        updated_at=category.updated_at,
    )


async def _get_item_or_404(session: AsyncSession, item_id: int, *, for_update: bool = False) -> Item:
    query = select(Item).where(col(Item.id) == item_id)
    if for_update:
        query = query.with_for_update()
    result = await session.execute(query)
    item = result.scalar_one_or_none()
    if item is None:
        raise NotFoundError("Item not found")
    return item


async def _get_category_or_404(session: AsyncSession, category_id: int) -> Category:
    result = await session.execute(select(Category).where(col(Category.id) == category_id))
    category = result.scalar_one_or_none()
    if category is None:
        raise NotFoundError("Category not found")
    return category


async def _category_name(session: AsyncSession, category_id: int | None) -> str | None:
    if category_id is None:
        return None
    result = await session.execute(select(Category.name).where(col(Category.id) == category_id))
    return result.scalar_one_or_none()


async def _ensure_category_exists(session: AsyncSession, category_id: int | None) -> None:
    if category_id is not None and await _category_name(session, category_id) is None:
        raise AppError("Category does not exist", status_code=400)


async def _ensure_category_name_free(session: AsyncSession, name: str, exclude_id: int | None = None) -> None:
    query = select(Category.id).where(col(Category.name) == name)
    if exclude_id is not None:
        query = query.where(col(Category.id) != exclude_id)
    result = await session.execute(query)
    if result.first() is not None:
        raise AppError("Category with this name already exists", status_code=409)


async def find_item_by_name(session: AsyncSession, name: str) -> Item | None:
    """Resolve a catalog item by its exact name (first match by id)."""
    result = await session.execute(select(Item).where(col(Item.name) == name.strip()).order_by(col(Item.id)))
    return result.scalars().first()


def warn_if_newly_low(item: Item, previous_quantity: int | None) -> None:
    """Log a low-stock alert when stock drops to or below the threshold."""
    if not is_low_stock(item):
        return
    if previous_quantity is None or item.quantity < previous_quantity:
        logger.warning(
            "Low stock: item %s (%s) has %d left, threshold %d",
            item.id,
            item.name,
            item.quantity,
            item.low_stock_threshold,
        )


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


async def list_categories(session: AsyncSession) -> list[CategoryResponse]:
    """List categories, newest first, with the number of items in each."""
    counts_result = await session.execute(
        select(Item.category_id, func.count())
        .where(col(Item.category_id).is_not(None))
        .group_by(col(Item.category_id))
    )
    counts = {category_id: count for category_id, count in counts_result.all()}

    result = await session.execute(select(Category).order_by(col(Category.created_at).desc(), col(Category.id).desc()))
    return [_build_category_response(c, counts.get(c.id, 0)) for c in result.scalars().all()]


async def create_category(session: AsyncSession, auth: AuthContext, payload: CategoryPayload) -> CategoryResponse:
    await _ensure_category_name_free(session, payload.name.strip())
    category = Category(name=payload.name.strip(), description=payload.description or None)
    session.add(category)
    await session.flush()

    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.CATEGORY,
        entity_id=persisted_id(category),
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(category),
    )
    await session.commit()
    await session.refresh(category)
    return _build_category_response(category, 0)


async def update_category(
    session: AsyncSession,
    auth: AuthContext,
    category_id: int,
    payload: CategoryPayload,
) -> CategoryResponse:
    category = await _get_category_or_404(session, category_id)
    await _ensure_category_name_free(session, payload.name.strip(), exclude_id=category_id)
    before = model_to_audit_dict(category)

    category.name = payload.name.strip()
    category.description = payload.description or None
    category.updated_at = datetime.now(UTC)
    await session.flush()

    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.CATEGORY,
        entity_id=category_id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(category),
    )
    await session.commit()
    await session.refresh(category)

    count_result = await session.execute(select(func.count()).select_from(Item).where(col(Item.category_id) == category_id))
    return _build_category_response(category, count_result.scalar_one())


async def delete_category(session: AsyncSession, auth: AuthContext, category_id: int) -> None:
    category = await _get_category_or_404(session, category_id)
    before = model_to_audit_dict(category)
    await session.delete(category)
    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.CATEGORY,
        entity_id=category_id,
        action=AuditAction.DELETE,
        before_json=before,
    )
    await session.commit()


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


async def list_items(session: AsyncSession, *, low_stock_only: bool = False) -> list[ItemResponse]:
    """List catalog items newest first, optionally only those at or below threshold."""
    query = select(Item, Category.name).join(Category, col(Item.category_id) == col(Category.id), isouter=True)
    if low_stock_only:
        query = query.where(col(Item.quantity) <= col(Item.low_stock_threshold))
    result = await session.execute(query.order_by(col(Item.created_at).desc(), col(Item.id).desc()))
    return [_build_item_response(item, category_name) for item, category_name in result.all()]


async def get_item(session: AsyncSession, item_id: int) -> ItemResponse:
    item = await _get_item_or_404(session, item_id)
    return _build_item_response(item, await _category_name(session, item.category_id))


async def create_item(session: AsyncSession, auth: AuthContext, payload: CreateItemPayload) -> ItemResponse:
    await _ensure_category_exists(session, payload.category_id)

    threshold = payload.low_stock_threshold
    if threshold is None:
        threshold = get_settings().default_low_stock_threshold

    item = Item(
        name=payload.name.strip(),
        description=payload.description or None,
        category_id=payload.category_id,
        quantity=payload.quantity,
        low_stock_threshold=threshold,
        vendor_name=payload.vendor_name or None,
        unit_price=payload.unit_price,
    )
    session.add(item)
    await session.flush()

    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.ITEM,
        entity_id=persisted_id(item),
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(item),
    )
    await session.commit()
    await session.refresh(item)
    warn_if_newly_low(item, None)
    return _build_item_response(item, await _category_name(session, item.category_id))


async def update_item(
    session: AsyncSession,
    auth: AuthContext,
    item_id: int,
    payload: UpdateItemPayload,
) -> ItemResponse:
    """Edit an item. Each edit appends ``"<reason> at <timestamp>"`` to its history."""
    reason = payload.update_reason.strip()
    if not reason:
        raise AppError("Update reason is required", status_code=400)

    item = await _get_item_or_404(session, item_id, for_update=True)
    await _ensure_category_exists(session, payload.category_id)
    before = model_to_audit_dict(item)
    previous_quantity = item.quantity

    now = datetime.now(UTC)
    entry = f"{reason} at {now.isoformat(timespec='seconds')}"
    item.update_reasons = f"{item.update_reasons} | {entry}" if item.update_reasons else entry
    item.name = payload.name.strip()
    item.description = payload.description or None
    item.category_id = payload.category_id
    item.quantity = payload.quantity
    if payload.low_stock_threshold is not None:
        item.low_stock_threshold = payload.low_stock_threshold
    item.vendor_name = payload.vendor_name or None
    item.unit_price = payload.unit_price
    item.updated_at = now

    await session.flush()
    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.ITEM,
        entity_id=item_id,
        action=AuditAction.UPDATE,
        before_json=before,
        after_json=model_to_audit_dict(item),
    )
    await session.commit()
    await session.refresh(item)
    warn_if_newly_low(item, previous_quantity)
    return _build_item_response(item, await _category_name(session, item.category_id))


async def delete_item(session: AsyncSession, auth: AuthContext, item_id: int) -> None:
    item = await _get_item_or_404(session, item_id)
    before = model_to_audit_dict(item)
    await session.delete(item)
    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.ITEM,
        entity_id=item_id,
        action=AuditAction.DELETE,
        before_json=before,
    )
    await session.commit()


# ---------------------------------------------------------------------------
# Items out
# ---------------------------------------------------------------------------


async def list_items_out(session: AsyncSession) -> list[ItemOutResponse]:
    result = await session.execute(
        select(ItemOut, Item.name, Category.name)
        .join(Item, col(ItemOut.item_id) == col(Item.id))
        .join(Category, col(Item.category_id) == col(Category.id), isouter=True)
        .order_by(col(ItemOut.issued_at).desc(), col(ItemOut.id).desc())
    )
    responses = []
    for item_out, item_name, category_name in result.all():
        responses.append(
            ItemOutResponse(
                id=persisted_id(item_out),
                person_name=item_out.person_name,
                item_id=item_out.item_id,
                item_name=item_name,
                category_name=category_name,
                quantity=item_out.quantity,
                issued_at=item_out.issued_at,
            )
        )
    return responses


async def issue_item(session: AsyncSession, auth: AuthContext, payload: IssueItemPayload) -> ItemOutResponse:
    """Hand stock to a person directly. The item row is locked while stock is checked."""
    item = await _get_item_or_404(session, payload.item_id, for_update=True)
    if payload.quantity > item.quantity:
        raise AppError(
            f"Insufficient stock. Only {item.quantity} units available. Requested: {payload.quantity}",
            status_code=400,
        )

    previous_quantity = item.quantity
    item.quantity -= payload.quantity
    item.updated_at = datetime.now(UTC)
    item_out = ItemOut(person_name=payload.person_name.strip(), item_id=payload.item_id, quantity=payload.quantity)
    session.add(item_out)
    await session.flush()

    await write_audit_log(
        session,
        auth=auth,
        entity_type=AuditEntityType.ITEM_OUT,
        entity_id=persisted_id(item_out),
        action=AuditAction.ISSUE,
        after_json={**model_to_audit_dict(item_out), "item_name": item.name},
    )
    await session.commit()
    await session.refresh(item_out)
    warn_if_newly_low(item, previous_quantity)
    return ItemOutResponse(
        id=persisted_id(item_out),
        person_name=item_out.person_name,
        item_id=item_out.item_id,
        item_name=item.name,
        category_name=await _category_name(session, item.category_id),
        quantity=item_out.quantity,
        issued_at=item_out.issued_at,
    )
