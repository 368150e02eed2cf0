"""
Sale recording with stock decrements that can never oversell.

CONCURRENCY STRATEGY: Conditional Decrement
===========================================

Problem:
  Two sellers ring up the last three posters at the same time. Both read
  quantity=3, both subtract, stock ends at -3.

Solution:
  The decrement and the availability check are one statement:

    UPDATE inventory SET quantity = quantity - :n
    WHERE id = :id AND quantity >= :n

  (and the same against inventory_sizes for a soft item's size row). The
  database serializes writers on the row, so the second writer sees the
  already-decremented quantity, matches zero rows and the sale is rejected.
  No read-then-write window exists and no retry loop is needed.

  The decrement and the sale insert share one transaction. If anything fails
  after the decrement, the rollback restores the stock, so a sale row and
  its stock movement are always visible together or not at all.

Bundles:
  A bundle sale decrements every component by the sold quantity. Soft
  components use the requested size, or the size with the lowest positive
  stock when none was given. A component that cannot be decremented is
  logged and skipped while the sale is still recorded; setting
  BUNDLE_SALE_STRICT=true rejects the whole sale instead.
"""

import time
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from tourmerch.core.config import get_settings
from tourmerch.core.logging import get_logger
from tourmerch.core.metrics import bundle_component_shortfalls, record_sale_outcome, sale_latency
from tourmerch.core.security import CurrentUser
from tourmerch.db.session import transaction
from tourmerch.models import BundleItem, InventoryItem, InventorySize, Sale, Show
from tourmerch.schemas.sale import BundleSaleCreate, SaleCreate
from tourmerch.services.inventory_service import sizes_by_item
from tourmerch.services.show_service import get_owned_show
from tourmerch.services.tour_service import get_owned_tour

logger = get_logger(__name__)


def _insufficient(detail: str = "Insufficient inventory") -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


async def decrement_item_stock(db: AsyncSession, item_id: int, quantity: int) -> bool:
    """Take ``quantity`` off a hard item. False when stock is too low."""
    result = await db.execute(
        update(InventoryItem)
        .where(InventoryItem.id == item_id, InventoryItem.quantity >= quantity)
        .values(quantity=InventoryItem.quantity - quantity)
    )
    return result.rowcount > 0


async def decrement_size_stock(db: AsyncSession, item_id: int, size: str, quantity: int) -> bool:
    """Take ``quantity`` off one size row of a soft item. False when stock is too low."""
    result = await db.execute(
        update(InventorySize)
        .where(
            InventorySize.inventory_id == item_id,
            InventorySize.size == size,
            InventorySize.quantity >= quantity,
        )
        .values(quantity=InventorySize.quantity - quantity)
    )
    return result.rowcount > 0


async def _default_size(db: AsyncSession, item_id: int) -> Optional[str]:
    """The in-stock size with the lowest quantity."""
    result = await db.execute(
        select(InventorySize.size)
        .where(InventorySize.inventory_id == item_id, InventorySize.quantity > 0)
        .order_by(InventorySize.quantity.asc(), InventorySize.id.asc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def _deduct_bundle(
    db: AsyncSession,
    bundle: InventoryItem,
    quantity: int,
    size: Optional[str],
    strict: bool,
) -> None:
    result = await db.execute(
        select(InventoryItem)
        .join(BundleItem, BundleItem.item_id == InventoryItem.id)
        .where(BundleItem.bundle_id == bundle.id)
        .order_by(BundleItem.id.asc())
    )
    components = list(result.scalars().all())
    if not components:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No items found in bundle",
        )

    for component in components:
        if component.type == "soft":
            selected_size = size or await _default_size(db, component.id)
            deducted = bool(selected_size) and await decrement_size_stock(
                db, component.id, selected_size, quantity
            )
        else:
            selected_size = None
            deducted = await decrement_item_stock(db, component.id, quantity)

        if deducted:
            logger.debug(
                "bundle_component_deducted",
                bundle_id=bundle.id,
                item_id=component.id,
                size=selected_size,
            )
            continue

        bundle_component_shortfalls.inc()
        logger.warning(
            "bundle_component_insufficient",
            bundle_id=bundle.id,
            item_id=component.id,
            size=selected_size,
            requested=quantity,
            strict=strict,
        )
        if strict:
            raise _insufficient(f"Insufficient inventory for bundle component '{component.name}'")


async def _insert_sale(
    db: AsyncSession,
    data: SaleCreate,
    amount: Decimal,
    size: Optional[str],
) -> Sale:
    sale = Sale(
        inventory_id=data.inventory_id,
        show_id=data.show_id,
        quantity_sold=data.quantity_sold,
        total_amount=amount,
        payment_method=data.payment_method,
        size=size,
    )
    db.add(sale)
    await db.flush()
    return sale


async def record_sale(db: AsyncSession, data: SaleCreate, user: CurrentUser) -> Sale:
    """
    Decrement stock for a sale and record it, atomically.

    Free sales are always recorded with a zero amount.
    """
    settings = get_settings()
    start = time.perf_counter()

    adjusted_price = Decimal("0") if data.payment_method == "free" else data.total_amount

    try:
        show = await get_owned_show(db, data.show_id, user)

        result = await db.execute(
            select(InventoryItem)
            .where(InventoryItem.id == data.inventory_id)
            .execution_options(populate_existing=True)
        )
        item = result.scalar_one_or_none()
        if not item:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid inventory ID",
            )
        if item.tour_id != show.tour_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Inventory item does not belong to this show's tour",
            )
        if item.type == "soft" and not data.size:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Size is required for soft items",
            )

        async with transaction(db, "Failed to record sale"):
            if item.type == "hard":
                if not await decrement_item_stock(db, item.id, data.quantity_sold):
                    raise _insufficient()
            elif item.type == "soft":
                if not await decrement_size_stock(db, item.id, data.size, data.quantity_sold):
                    raise _insufficient()
            else:
                await _deduct_bundle(
                    db, item, data.quantity_sold, data.size, settings.BUNDLE_SALE_STRICT
                )

            sale = await _insert_sale(
                db, data, adjusted_price, data.size if item.type == "soft" else None
            )
    except HTTPException as e:
        outcome = "insufficient" if e.detail and "Insufficient" in str(e.detail) else "error"
        record_sale_outcome(data.payment_method, outcome)
        if outcome == "insufficient":
            logger.warning(
                "sale_rejected_insufficient_stock",
                inventory_id=data.inventory_id,
                show_id=data.show_id,
                requested=data.quantity_sold,
                size=data.size,
            )
        raise
    finally:
        sale_latency.observe(time.perf_counter() - start)

    await db.refresh(sale)
    record_sale_outcome(data.payment_method, "success")
    logger.info(
        "sale_recorded",
        sale_id=sale.id,
        inventory_id=item.id,
        item_type=item.type,
        show_id=show.id,
        quantity=sale.quantity_sold,
        amount=str(sale.total_amount),
        payment_method=sale.payment_method,
    )
    return sale


async def record_bundle_sale(db: AsyncSession, data: BundleSaleCreate, user: CurrentUser) -> Sale:
    """Sell a bundle at its list price times the quantity."""
    result = await db.execute(
        select(InventoryItem).where(
            InventoryItem.id == data.bundle_id,
            InventoryItem.type == "bundle",
        )
    )
    bundle = result.scalar_one_or_none()
    if not bundle:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Bundle not found",
        )

    sale_data = SaleCreate(
        inventory_id=bundle.id,
        show_id=data.show_id,
        quantity_sold=data.quantity_sold,
        total_amount=bundle.price * data.quantity_sold,
        payment_method=data.payment_method,
        size=data.size,
    )
    return await record_sale(db, sale_data, user)


async def list_sales(db: AsyncSession, show_id: int, user: CurrentUser) -> list[dict]:
    """Sales of an owned show, newest first, with item details."""
    await get_owned_show(db, show_id, user)

    result = await db.execute(
        select(Sale, InventoryItem.name, InventoryItem.type, InventoryItem.price)
        .outerjoin(InventoryItem, Sale.inventory_id == InventoryItem.id)
        .where(Sale.show_id == show_id)
        .order_by(Sale.created_at.desc(), Sale.id.desc())
    )
    rows = result.all()

    soft_ids = list({sale.inventory_id for sale, _, item_type, _ in rows if item_type == "soft"})
    sizes = await sizes_by_item(db, soft_ids)

    return [
        {
            "id": sale.id,
            "inventory_id": sale.inventory_id,
            "quantity_sold": sale.quantity_sold,
            "total_amount": sale.total_amount,
            "payment_method": sale.payment_method,
            "size": sale.size,
            "created_at": sale.created_at,
            "item_name": name,
            "type": item_type,
            "price": price,
            "sizes": sizes.get(sale.inventory_id, []) if item_type == "soft" else None,
        }
        for sale, name, item_type, price in rows
    ]


async def tour_sales_total(db: AsyncSession, tour_id: int, user: CurrentUser) -> Decimal:
    await get_owned_tour(db, tour_id, user)

    result = await db.execute(
        select(func.coalesce(func.sum(Sale.total_amount), 0))
        .join(Show, Sale.show_id == Show.id)
        .where(Show.tour_id == tour_id)
    )
    return Decimal(str(result.scalar() or 0))
