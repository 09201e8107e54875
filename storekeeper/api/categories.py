# ruff: noqa: TC001
from __future__ import annotations

from fastapi import APIRouter, status

from storekeeper.api.deps import AuthDep, StockManagerDep
from storekeeper.db import SessionDep
from storekeeper.schemas.inventory import CategoryPayload, CategoryResponse
from storekeeper.services import inventory as inventory_service

categories_router = APIRouter(prefix="/categories", tags=["categories"])


@categories_router.get("", response_model=list[CategoryResponse])
async def list_categories(session: SessionDep, _auth: AuthDep) -> list[CategoryResponse]:
    """List categories with the number of items in each."""
    return await inventory_service.list_categories(session)


@categories_router.post("", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(payload: CategoryPayload, session: SessionDep, auth: StockManagerDep) -> CategoryResponse:
    return await inventory_service.create_category(session, auth, payload)


@categories_router.put("/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: int,
    payload: CategoryPayload,
    session: SessionDep,
    auth: StockManagerDep,
) -> CategoryResponse:
    return await inventory_service.update_category(session, auth, category_id, payload)


@categories_router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(category_id: int, session: SessionDep, auth: StockManagerDep) -> None:
    """Delete a category. Its items are kept without a category."""
    await inventory_service.delete_category(session, auth, category_id)
