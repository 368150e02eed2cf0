"""
Inventory endpoints for hard/soft items and bundles.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tourmerch.core.security import CurrentUser, get_current_user
from tourmerch.db.session import get_db
from tourmerch.schemas.inventory import (
    BundleCreate,
    BundleCreatedResponse,
    BundleDetailResponse,
    InventoryCreate,
    InventoryItemResponse,
    InventoryUpdate,
    InventoryWriteResponse,
    StockAdjust,
)
from tourmerch.schemas.user import MessageResponse
from tourmerch.services import inventory_service

router = APIRouter(prefix="/inventory", tags=["Inventory"])


@router.post("", response_model=InventoryWriteResponse, status_code=status.HTTP_201_CREATED)
async def create_item_endpoint(
    item_data: InventoryCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    item = await inventory_service.create_item(db, item_data, user)
    return InventoryWriteResponse(message="Inventory item added", inventory=item)


@router.get("", response_model=list[InventoryItemResponse])
async def list_items_endpoint(
    tour_id: int = Query(..., gt=0),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Every item of a tour; soft items carry sizes, bundles carry components."""
    return await inventory_service.list_items(db, tour_id, user)


@router.post("/update", response_model=InventoryWriteResponse)
async def adjust_stock_endpoint(
    adjust_data: StockAdjust,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    item = await inventory_service.adjust_stock(db, adjust_data, user)
    return InventoryWriteResponse(message="Inventory updated successfully", inventory=item)


@router.post("/bundles", response_model=BundleCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_bundle_endpoint(
    bundle_data: BundleCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    created = await inventory_service.create_bundle(db, bundle_data, user)
    return BundleCreatedResponse(message="Bundle created", **created)


@router.get("/bundles/{bundle_id}", response_model=BundleDetailResponse)
async def get_bundle_endpoint(
    bundle_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await inventory_service.get_bundle(db, bundle_id, user)


@router.put("/{item_id}", response_model=InventoryWriteResponse)
async def update_item_endpoint(
    item_id: int,
    item_data: InventoryUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    item = await inventory_service.update_item(db, item_id, item_data, user)
    return InventoryWriteResponse(message="Inventory item updated", inventory=item)


@router.delete("/{item_id}", response_model=MessageResponse)
async def delete_item_endpoint(
    item_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete an item; bundles containing it are deleted as well."""
    bundles_deleted = await inventory_service.delete_item(db, item_id, user)
    if bundles_deleted:
        return MessageResponse(
            message=f"Inventory item deleted successfully, along with {bundles_deleted} bundle(s)."
        )
    return MessageResponse(message="Inventory item deleted successfully.")
