"""
User endpoints: signup, login, profile read/update and account deletion.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Path, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from tourmerch.core.security import CurrentUser, get_current_user, require_role
from tourmerch.db.session import get_db
from tourmerch.schemas.user import (
    AuthResponse,
    MessageResponse,
    UserCreate,
    UserLogin,
    UserResponse,
    UserUpdate,
    UserUpdateResponse,
)
from tourmerch.services.auth_service import authenticate_user, register_user
from tourmerch.services.user_service import delete_user, get_user, update_user

router = APIRouter(prefix="/users", tags=["Users"])


@router.post("", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def create_account(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Create an account and receive a signed token."""
    user, token = await register_user(db, user_data)
    return AuthResponse(message="User created!", user=user, token=token)


@router.post("/login", response_model=AuthResponse)
async def login(login_data: UserLogin, db: AsyncSession = Depends(get_db)):
    """Authenticate and receive a JWT access token."""
    user, token = await authenticate_user(db, login_data)
    return AuthResponse(message="Login successful", user=user, token=token)


@router.get("/{user_id}", response_model=UserResponse)
async def read_user(
    user_id: int = Path(..., gt=0),
    current: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await get_user(db, user_id)


@router.put("", response_model=UserUpdateResponse)
async def update_profile(
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    password: Optional[str] = Form(None),
    bio: Optional[str] = Form(None),
    profile_pic: Optional[UploadFile] = File(None),
    current: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Partially update the caller's profile from a multipart form.
    Fields that are not sent keep their current value.
    """
    try:
        changes = UserUpdate(name=name, email=email, password=password, bio=bio)
    except ValidationError as e:
        raise RequestValidationError(e.errors())

    user = await update_user(db, current, changes, profile_pic)
    return UserUpdateResponse(message="User updated successfully", user=user)


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_account(
    user_id: int = Path(..., gt=0),
    current: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete your own account and every tour, show, sale and item under it."""
    await delete_user(db, user_id, current)
    return MessageResponse(message="User and all related data deleted successfully")


@router.delete("", response_model=MessageResponse)
async def admin_delete_account(
    current: CurrentUser = Depends(require_role("admin")),
    db: AsyncSession = Depends(get_db),
):
    await delete_user(db, current.id, current)
    return MessageResponse(message="User deleted successfully")
