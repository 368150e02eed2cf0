"""
Show closing and summary reads.

Closing a show freezes its sales into a ShowSummary row: totals by payment
method, the three best sellers and a per-item/size breakdown. The row is
written once; later sales against the show do not change it. A show with a
summary is closed, so closing it again is a conflict.
"""

from decimal import Decimal

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from tourmerch.core.logging import get_logger
from tourmerch.core.metrics import record_show_closed
from tourmerch.core.security import CurrentUser
from tourmerch.db.session import transaction
from tourmerch.models import InventoryItem, Sale, Show, ShowSummary, Tour
from tourmerch.services.cache_service import get_cached_summary, set_cached_summary
from tourmerch.services.show_service import get_owned_show

logger = get_logger(__name__)

DELETED_ITEM_NAME = "Deleted item"
BEST_SELLER_LIMIT = 3


def _money(value) -> Decimal:
    return Decimal(str(value or 0)).quantize(Decimal("0.01"))


async def _sales_totals(db: AsyncSession, show_id: int) -> dict:
    cash = case((Sale.payment_method == "cash", Sale.total_amount), else_=0)
    card = case((Sale.payment_method == "card", Sale.total_amount), else_=0)
    result = await db.execute(
        select(
            func.sum(Sale.total_amount),
            func.count(Sale.id),
            func.sum(cash),
            func.sum(card),
        ).where(Sale.show_id == show_id)
    )
    total_sales, total_transactions, total_cash, total_card = result.one()
    return {
        "total_sales": _money(total_sales),
        "total_transactions": int(total_transactions or 0),
        "total_cash": _money(total_cash),
        "total_card": _money(total_card),
    }


async def _best_sellers(db: AsyncSession, show_id: int) -> list[dict]:
    total_sold = func.sum(Sale.quantity_sold).label("total_sold")
    result = await db.execute(
        select(InventoryItem.name, total_sold)
        .select_from(Sale)
        .outerjoin(InventoryItem, Sale.inventory_id == InventoryItem.id)
        .where(Sale.show_id == show_id)
        .group_by(InventoryItem.name)
        .order_by(total_sold.desc(), InventoryItem.name.asc())
        .limit(BEST_SELLER_LIMIT)
    )
    return [
        {"name": name or DELETED_ITEM_NAME, "total_sold": int(sold)}
        for name, sold in result.all()
    ]


async def _items_sold(db: AsyncSession, show_id: int) -> list[dict]:
    total_sold = func.sum(Sale.quantity_sold).label("total_sold")
    result = await db.execute(
        select(InventoryItem.name, Sale.size, total_sold)
        .select_from(Sale)
        .outerjoin(InventoryItem, Sale.inventory_id == InventoryItem.id)
        .where(Sale.show_id == show_id)
        .group_by(InventoryItem.name, Sale.size)
        .order_by(total_sold.desc(), InventoryItem.name.asc(), Sale.size.asc())
    )
    return [
        {"name": name or DELETED_ITEM_NAME, "size": size, "total_sold": int(sold)}
        for name, size, sold in result.all()
    ]


async def close_show(db: AsyncSession, show_id: int, user: CurrentUser) -> ShowSummary:
    await get_owned_show(db, show_id, user)

    existing = await db.execute(select(ShowSummary.id).where(ShowSummary.show_id == show_id))
    if existing.first():
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Show is already closed",
        )

    try:
        async with transaction(db, "Failed to close show"):
            totals = await _sales_totals(db, show_id)
            summary = ShowSummary(
                show_id=show_id,
                best_selling_items=await _best_sellers(db, show_id),
                items_sold=await _items_sold(db, show_id),
                **totals,
            )
            db.add(summary)
            await db.flush()
    except HTTPException:
        record_show_closed(success=False)
        raise

    await db.refresh(summary)
    record_show_closed(success=True)
    logger.info(
        "show_closed",
        show_id=show_id,
        total_sales=str(summary.total_sales),
        transactions=summary.total_transactions,
    )
    return summary


async def get_summary(db: AsyncSession, show_id: int, user: CurrentUser) -> dict:
    """The summary of a closed show joined with its show and tour labels."""
    result = await db.execute(
        select(Show.venue, Show.date, Tour.name, Tour.band_name)
        .join(Tour, Show.tour_id == Tour.id)
        .where(Show.id == show_id, Tour.user_id == user.id)
    )
    show_row = result.first()
    if not show_row:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized or show not found",
        )

    cached = await get_cached_summary(show_id)
    if cached:
        return cached

    summary = (
        await db.execute(select(ShowSummary).where(ShowSummary.show_id == show_id))
    ).scalar_one_or_none()
    if not summary:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No summary found for this show",
        )

    venue, show_date, tour_name, band_name = show_row
    payload = {
        "id": summary.id,
        "show_id": summary.show_id,
        "total_sales": summary.total_sales,
        "total_cash": summary.total_cash,
        "total_card": summary.total_card,
        "total_transactions": summary.total_transactions,
        "best_selling_items": summary.best_selling_items,
        "items_sold": summary.items_sold,
        "created_at": summary.created_at,
        "venue": venue,
        "date": show_date,
        "tour_name": tour_name,
        "band_name": band_name,
    }
    await set_cached_summary(show_id, payload)
    return payload


async def list_closed_shows(db: AsyncSession, user: CurrentUser) -> list[dict]:
    result = await db.execute(
        select(
            Show.id.label("show_id"),
            Show.venue,
            Show.date,
            Tour.id.label("tour_id"),
            Tour.name.label("tour_name"),
            Tour.band_name,
            ShowSummary.total_sales,
            ShowSummary.total_transactions,
        )
        .select_from(ShowSummary)
        .join(Show, ShowSummary.show_id == Show.id)
        .join(Tour, Show.tour_id == Tour.id)
        .where(Tour.user_id == user.id)
        .order_by(Show.date.desc(), Show.id.desc())
    )
    return [dict(row._mapping) for row in result.all()]
