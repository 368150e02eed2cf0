"""
Show endpoints, including closing a show and reading its summary.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from tourmerch.core.security import CurrentUser, get_current_user
from tourmerch.db.session import get_db
from tourmerch.schemas.show import (
    ClosedShowResponse,
    ShowCreate,
    ShowCreatedResponse,
    ShowResponse,
    ShowSummaryResponse,
)
from tourmerch.schemas.user import MessageResponse
from tourmerch.services.show_service import create_show, delete_show, get_owned_show, list_open_shows
from tourmerch.services.summary_service import close_show, get_summary, list_closed_shows

router = APIRouter(prefix="/shows", tags=["Shows"])


@router.post("", response_model=ShowCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_show_endpoint(
    show_data: ShowCreate,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    show = await create_show(db, show_data, user)
    return ShowCreatedResponse(message="Show created!", show=show)


@router.get("", response_model=list[ShowResponse])
async def list_open_shows_endpoint(
    tour_id: int = Query(..., gt=0),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Shows of a tour that have not been closed yet."""
    return await list_open_shows(db, tour_id, user)


@router.get("/closed", response_model=list[ClosedShowResponse])
async def list_closed_shows_endpoint(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await list_closed_shows(db, user)


@router.get("/{show_id}", response_model=ShowResponse)
async def get_show_endpoint(
    show_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await get_owned_show(db, show_id, user)


@router.delete("/{show_id}", response_model=MessageResponse)
async def delete_show_endpoint(
    show_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await delete_show(db, show_id, user)
    return MessageResponse(message="Show deleted successfully.")


@router.post("/{show_id}/close", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def close_show_endpoint(
    show_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Freeze the show's sales into a summary. A show can only be closed once."""
    await close_show(db, show_id, user)
    return MessageResponse(message="Show closed successfully")


@router.get("/{show_id}/summary", response_model=ShowSummaryResponse)
async def get_summary_endpoint(
    show_id: int,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await get_summary(db, show_id, user)
