"""
Sale endpoints with oversell-safe stock decrements.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tourmerch.core.security import CurrentUser, get_current_user
from tourmerch.db.session import get_db
from tourmerch.schemas.sale import (
    BundleSaleCreate,
    SaleCreate,
    SaleListItem,
    SaleRecordedResponse,
    TourSalesTotal,
)
from tourmerch.services.sales_service import (
    list_sales,
    record_bundle_sale,
    record_sale,
    tour_sales_total,
)

router = APIRouter(prefix="/sales", tags=["Sales"])


@router.post("", response_model=SaleRecordedResponse, status_code=status.HTTP_201_CREATED)
async def record_sale_endpoint(
    sale_data: SaleCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Record a sale of a hard item, a sized soft item or a bundle.

    Stock is decremented with a conditional update in the same transaction as
    the sale insert; a request that would drive stock below zero is rejected
    with 400 and leaves nothing behind.
    """
    sale = await record_sale(db, sale_data, user)
    return SaleRecordedResponse(message="Sale recorded successfully!", sale=sale)


@router.get("", response_model=list[SaleListItem])
async def list_sales_endpoint(
    show_id: int = Query(..., gt=0),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await list_sales(db, show_id, user)


@router.get("/tour", response_model=TourSalesTotal)
async def tour_sales_total_endpoint(
    tour_id: int = Query(..., gt=0),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    total = await tour_sales_total(db, tour_id, user)
    return TourSalesTotal(tour_id=tour_id, total_sales=total)


@router.post("/bundle", response_model=SaleRecordedResponse, status_code=status.HTTP_201_CREATED)
async def record_bundle_sale_endpoint(
    sale_data: BundleSaleCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Sell a bundle at its list price."""
    sale = await record_bundle_sale(db, sale_data, user)
    return SaleRecordedResponse(message="Bundle sold successfully", sale=sale)
