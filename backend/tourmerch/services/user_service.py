"""
User profile service: read, partial update and cascading account deletion.
"""

from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, UploadFile, status

from tourmerch.core.logging import get_logger
from tourmerch.core.security import CurrentUser, hash_password
from tourmerch.db.session import transaction
from tourmerch.models import Tour, User
from tourmerch.schemas.user import UserUpdate
from tourmerch.services.cache_service import invalidate_summary_cache
from tourmerch.services.tour_service import purge_tours
from tourmerch.services.upload_service import delete_uploaded_file, save_profile_picture

logger = get_logger(__name__)


async def get_user(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        )
    return user


async def update_user(
    db: AsyncSession,
    current: CurrentUser,
    changes: UserUpdate,
    profile_pic: Optional[UploadFile] = None,
) -> User:
    """
    Patch the caller's profile. Omitted fields keep their value; a new
    password is re-hashed; a new picture replaces and removes the old file.
    """
    user = await get_user(db, current.id)

    if changes.email and changes.email != user.email:
        taken = await db.execute(
            select(User.id).where(User.email == changes.email, User.id != user.id)
        )
        if taken.first():
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Email already registered",
            )

    previous_pic = user.profile_pic
    new_pic = None
    if profile_pic is not None and profile_pic.filename:
        new_pic = await save_profile_picture(profile_pic, user.id)

    try:
        async with transaction(db, "Failed to update user"):
            if changes.name is not None:
                user.name = changes.name
            if changes.email is not None:
                user.email = changes.email
            if changes.password:
                user.hashed_password = hash_password(changes.password)
            if changes.bio is not None:
                user.bio = changes.bio
            if new_pic:
                user.profile_pic = new_pic
            await db.flush()
    except HTTPException:
        delete_uploaded_file(new_pic)
        raise
    await db.refresh(user)

    if new_pic and previous_pic != new_pic:
        delete_uploaded_file(previous_pic)

    logger.info(
        "user_updated",
        user_id=user.id,
        fields=sorted(changes.model_dump(exclude_none=True)),
        picture_changed=bool(new_pic),
    )
    return user


async def delete_user(db: AsyncSession, user_id: int, current: CurrentUser) -> None:
    """Delete an account with its tours, shows, sales, summaries and inventory."""
    if user_id != current.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Unauthorized: You can only delete your own account",
        )

    user = await get_user(db, user_id)
    profile_pic = user.profile_pic

    async with transaction(db, "Failed to delete user"):
        tour_ids = (await db.execute(select(Tour.id).where(Tour.user_id == user_id))).scalars().all()
        counts = await purge_tours(db, tour_ids)
        await db.execute(delete(User).where(User.id == user_id))

    delete_uploaded_file(profile_pic)
    await invalidate_summary_cache()
    logger.info("user_deleted", user_id=user_id, **counts)
