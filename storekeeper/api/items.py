# ruff: noqa: TC001
from __future__ import annotations

from fastapi import APIRouter, status

from storekeeper.api.deps import AuthDep, StockManagerDep
from storekeeper.db import SessionDep
from storekeeper.schemas.inventory import (
    CreateItemPayload,
    IssueItemPayload,
    ItemOutResponse,
    ItemResponse,
    UpdateItemPayload,
)
from storekeeper.services import inventory as inventory_service

items_router = APIRouter(prefix="/items", tags=["items"])
items_out_router = APIRouter(prefix="/items-out", tags=["items"])


@items_router.get("", response_model=list[ItemResponse])
async def list_items(session: SessionDep, _auth: AuthDep) -> list[ItemResponse]:
    """List the item catalog with current stock."""
    return await inventory_service.list_items(session)


@items_router.get("/low-stock", response_model=list[ItemResponse])
async def list_low_stock_items(session: SessionDep, _auth: AuthDep) -> list[ItemResponse]:
    """Items whose quantity is at or below their threshold."""
    return await inventory_service.list_items(session, low_stock_only=True)


@items_router.get("/{item_id}", response_model=ItemResponse)
async def get_item(item_id: int, session: SessionDep, _auth: AuthDep) -> ItemResponse:
    return await inventory_service.get_item(session, item_id)


@items_router.post("", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
async def create_item(payload: CreateItemPayload, session: SessionDep, auth: StockManagerDep) -> ItemResponse:
    return await inventory_service.create_item(session, auth, payload)


@items_router.put("/{item_id}", response_model=ItemResponse)
async def update_item(
    item_id: int,
    payload: UpdateItemPayload,
    session: SessionDep,
    auth: StockManagerDep,
) -> ItemResponse:
    """Update an item. A reason for the change is required."""
    return await inventory_service.update_item(session, auth, item_id, payload)


@items_router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(item_id: int, session: SessionDep, auth: StockManagerDep) -> None:
    await inventory_service.delete_item(session, auth, item_id)


@items_out_router.get("", response_model=list[ItemOutResponse])
async def list_items_out(session: SessionDep, _auth: AuthDep) -> list[ItemOutResponse]:
    """Direct issuances, newest first."""
    return await inventory_service.list_items_out(session)


@items_out_router.post("", response_model=ItemOutResponse, status_code=status.HTTP_201_CREATED)
async def issue_item(payload: IssueItemPayload, session: SessionDep, auth: StockManagerDep) -> ItemOutResponse:
    """Hand stock to a person outside the request workflow."""
    return await inventory_service.issue_item(session, auth, payload)
