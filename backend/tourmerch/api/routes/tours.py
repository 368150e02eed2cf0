"""
Tour endpoints, scoped to the authenticated owner.
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from tourmerch.core.security import CurrentUser, get_current_user
from tourmerch.db.session import get_db
from tourmerch.schemas.tour import TourCreate, TourResponse, TourUpdate, TourUpdateResponse
from tourmerch.schemas.user import MessageResponse
from tourmerch.services.tour_service import (
    create_tour,
    delete_tour,
    get_owned_tour,
    list_tours,
    update_tour,
)

router = APIRouter(prefix="/tours", tags=["Tours"])


@router.post("", response_model=TourResponse, status_code=status.HTTP_201_CREATED)
async def create_tour_endpoint(
    tour_data: TourCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await create_tour(db, tour_data, user)


@router.get("", response_model=list[TourResponse])
async def list_tours_endpoint(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """The caller's tours, newest first. Empty list when there are none."""
    return await list_tours(db, user)


@router.get("/{tour_id}", response_model=TourResponse)
async def get_tour_endpoint(
    tour_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await get_owned_tour(db, tour_id, user)


@router.put("/{tour_id}", response_model=TourUpdateResponse)
async def update_tour_endpoint(
    tour_id: int,
    tour_data: TourUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    tour = await update_tour(db, tour_id, tour_data, user)
    return TourUpdateResponse(message="Tour updated successfully", tour=tour)


@router.delete("/{tour_id}", response_model=MessageResponse)
async def delete_tour_endpoint(
    tour_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a tour with its shows, sales, summaries and inventory."""
    await delete_tour(db, tour_id, user)
    return MessageResponse(message="Tour deleted successfully")
