"""
Tour service: ownership-scoped CRUD and the cascading tour purge.
"""

from typing import Iterable

from sqlalchemy import delete, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from tourmerch.core.logging import get_logger
from tourmerch.core.security import CurrentUser
from tourmerch.db.session import transaction
from tourmerch.models import (
    BundleItem,
    InventoryItem,
    InventorySize,
    Sale,
    Show,
    ShowSummary,
    Tour,
)
from tourmerch.schemas.tour import TourCreate, TourUpdate
from tourmerch.services.cache_service import invalidate_summary_cache

logger = get_logger(__name__)


async def get_owned_tour(db: AsyncSession, tour_id: int, user: CurrentUser) -> Tour:
    """Fetch a tour the caller owns. Missing and foreign tours are both 404."""
    result = await db.execute(
        select(Tour).where(Tour.id == tour_id, Tour.user_id == user.id)
    )
    tour = result.scalar_one_or_none()
    if not tour:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Tour not found or unauthorized",
        )
    return tour


async def create_tour(db: AsyncSession, tour_data: TourCreate, user: CurrentUser) -> Tour:
    tour = Tour(
        user_id=user.id,
        name=tour_data.name,
        band_name=tour_data.band_name,
        start_date=tour_data.start_date,
        end_date=tour_data.end_date,
    )
    async with transaction(db, "Failed to create tour"):
        db.add(tour)
        await db.flush()
    await db.refresh(tour)

    logger.info("tour_created", tour_id=tour.id, user_id=user.id, name=tour.name)
    return tour


async def list_tours(db: AsyncSession, user: CurrentUser) -> list[Tour]:
    """The caller's tours, newest first."""
    result = await db.execute(
        select(Tour)
        .where(Tour.user_id == user.id)
        .order_by(Tour.created_at.desc(), Tour.id.desc())
    )
    return list(result.scalars().all())


async def update_tour(
    db: AsyncSession, tour_id: int, tour_data: TourUpdate, user: CurrentUser
) -> Tour:
    """Patch a tour; fields left out of the request keep their value."""
    tour = await get_owned_tour(db, tour_id, user)

    changes = tour_data.model_dump(exclude_unset=True, exclude_none=True)

    start = changes.get("start_date", tour.start_date)
    end = changes.get("end_date", tour.end_date)
    if start and end and end < start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="end_date must not be before start_date",
        )

    async with transaction(db, "Failed to update tour"):
        for field, value in changes.items():
            setattr(tour, field, value)
        await db.flush()
    await db.refresh(tour)

    logger.info("tour_updated", tour_id=tour.id, fields=sorted(changes))
    return tour


async def purge_tours(db: AsyncSession, tour_ids: Iterable[int]) -> dict:
    """
    Delete tours and everything hanging off them, children before parents.

    Runs inside the caller's transaction; does not commit.
    """
    tour_ids = list(tour_ids)
    if not tour_ids:
        return {"tours": 0, "shows": 0, "sales": 0, "inventory": 0}

    show_ids = list(
        (await db.execute(select(Show.id).where(Show.tour_id.in_(tour_ids)))).scalars().all()
    )
    item_ids = list(
        (await db.execute(
            select(InventoryItem.id).where(InventoryItem.tour_id.in_(tour_ids))
        )).scalars().all()
    )

    sales_deleted = 0
    if show_ids:
        await db.execute(delete(ShowSummary).where(ShowSummary.show_id.in_(show_ids)))
        sales_result = await db.execute(delete(Sale).where(Sale.show_id.in_(show_ids)))
        sales_deleted = sales_result.rowcount
        await db.execute(delete(Show).where(Show.id.in_(show_ids)))

    if item_ids:
        await db.execute(
            update(Sale).where(Sale.inventory_id.in_(item_ids)).values(inventory_id=None)
        )
        await db.execute(
            delete(BundleItem).where(
                or_(BundleItem.bundle_id.in_(item_ids), BundleItem.item_id.in_(item_ids))
            )
        )
        await db.execute(delete(InventorySize).where(InventorySize.inventory_id.in_(item_ids)))
        await db.execute(delete(InventoryItem).where(InventoryItem.id.in_(item_ids)))

    await db.execute(delete(Tour).where(Tour.id.in_(tour_ids)))

    return {
        "tours": len(tour_ids),
        "shows": len(show_ids),
        "sales": sales_deleted,
        "inventory": len(item_ids),
    }


async def delete_tour(db: AsyncSession, tour_id: int, user: CurrentUser) -> None:
    await get_owned_tour(db, tour_id, user)

    async with transaction(db, "Failed to delete tour"):
        counts = await purge_tours(db, [tour_id])

    await invalidate_summary_cache()
    logger.info("tour_deleted", tour_id=tour_id, user_id=user.id, **counts)
