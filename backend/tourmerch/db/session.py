"""
Async engine, session factory and transaction helper.

Multi-statement operations (sales, bundle creation, show closing, cascading
deletes) run inside ``transaction()`` so that either every statement commits
or none of them is visible.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tourmerch.core.config import get_settings
from tourmerch.core.logging import get_logger

logger = get_logger(__name__)
settings = get_settings()


def _engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # SQLite pools do not accept sizing arguments
        return {}
    return {
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_timeout": settings.DB_POOL_TIMEOUT,
        "pool_recycle": settings.DB_POOL_RECYCLE,
        "pool_pre_ping": True,
    }


engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    **_engine_options(settings.DATABASE_URL),
)
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def transaction(db: AsyncSession, error_detail: str):
    """
    Commit the session when the block succeeds, roll it back otherwise.

    HTTP errors raised inside the block pass through unchanged after the
    rollback. Uniqueness violations become 409; any other failure is logged
    and surfaced as a generic 500 carrying ``error_detail``.
    """
    try:
        yield
        await db.commit()
    except HTTPException:
        await db.rollback()
        raise
    except IntegrityError as e:
        await db.rollback()
        logger.warning("transaction_conflict", detail=error_detail, error=str(e.orig))
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Conflicting record already exists",
        )
    except Exception as e:
        await db.rollback()
        logger.error("transaction_failed", detail=error_detail, error=str(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=error_detail,
        )
