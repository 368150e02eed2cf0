"""
Authentication service handling account creation and login.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import HTTPException, status

from tourmerch.core.logging import get_logger
from tourmerch.core.security import VALID_ROLES, create_user_token, hash_password, verify_password
from tourmerch.db.session import transaction
from tourmerch.models import User
from tourmerch.schemas.user import UserCreate, UserLogin

logger = get_logger(__name__)


async def register_user(db: AsyncSession, user_data: UserCreate) -> tuple[User, str]:
    """
    Create an account with a hashed password and sign a token for it.
    Unknown roles fall back to "user". Raises 409 if the email is taken.
    """
    result = await db.execute(select(User).where(User.email == user_data.email))
    if result.scalar_one_or_none():
        logger.warning("registration_failed", reason="email_exists", email=user_data.email)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email already registered",
        )

    role = user_data.role if user_data.role in VALID_ROLES else "user"
    user = User(
        name=user_data.name,
        email=user_data.email,
        hashed_password=hash_password(user_data.password),
        role=role,
    )
    async with transaction(db, "Failed to create user"):
        db.add(user)
        await db.flush()
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id, email=user.email, role=user.role)
    return user, create_user_token(user)


async def authenticate_user(db: AsyncSession, login_data: UserLogin) -> tuple[User, str]:
    """
    Check credentials and return the user with a fresh token.
    Raises 401 if credentials are invalid.
    """
    result = await db.execute(select(User).where(User.email == login_data.email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.warning("login_failed", email=login_data.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    logger.info("user_logged_in", user_id=user.id)
    return user, create_user_token(user)
