"""
Show service handling CRUD operations.

A show's open/closed state is not stored on the row: a show is closed once a
ShowSummary exists for it.
"""

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from tourmerch.core.logging import get_logger
from tourmerch.core.security import CurrentUser
from tourmerch.db.session import transaction
from tourmerch.models import Sale, Show, ShowSummary, Tour
from tourmerch.schemas.show import ShowCreate
from tourmerch.services.cache_service import invalidate_show_summary
from tourmerch.services.tour_service import get_owned_tour

logger = get_logger(__name__)


async def get_owned_show(db: AsyncSession, show_id: int, user: CurrentUser) -> Show:
    """Fetch a show whose tour belongs to the caller, else 404."""
    result = await db.execute(
        select(Show)
        .join(Tour, Show.tour_id == Tour.id)
        .where(Show.id == show_id, Tour.user_id == user.id)
    )
    show = result.scalar_one_or_none()
    if not show:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Show not found or unauthorized",
        )
    return show


async def create_show(db: AsyncSession, show_data: ShowCreate, user: CurrentUser) -> Show:
    await get_owned_tour(db, show_data.tour_id, user)

    show = Show(
        tour_id=show_data.tour_id,
        date=show_data.date,
        venue=show_data.venue,
        city=show_data.city,
        state=show_data.state,
    )
    async with transaction(db, "Failed to create show"):
        db.add(show)
        await db.flush()
    await db.refresh(show)

    logger.info("show_created", show_id=show.id, tour_id=show.tour_id, venue=show.venue)
    return show


async def list_open_shows(db: AsyncSession, tour_id: int, user: CurrentUser) -> list[Show]:
    """Shows of an owned tour that have no summary yet, earliest first."""
    await get_owned_tour(db, tour_id, user)

    result = await db.execute(
        select(Show)
        .outerjoin(ShowSummary, ShowSummary.show_id == Show.id)
        .where(Show.tour_id == tour_id, ShowSummary.id.is_(None))
        .order_by(Show.date.asc(), Show.id.asc())
    )
    return list(result.scalars().all())


async def delete_show(db: AsyncSession, show_id: int, user: CurrentUser) -> None:
    """Delete a show together with its sales and summary."""
    await get_owned_show(db, show_id, user)

    async with transaction(db, "Failed to delete show"):
        await db.execute(delete(ShowSummary).where(ShowSummary.show_id == show_id))
        sales = await db.execute(delete(Sale).where(Sale.show_id == show_id))
        await db.execute(delete(Show).where(Show.id == show_id))

    await invalidate_show_summary(show_id)
    logger.info("show_deleted", show_id=show_id, sales_deleted=sales.rowcount)
