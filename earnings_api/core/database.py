"""
Database configuration and session management
Uses SQLAlchemy with async support

Two stores are wired here: the earnings store (withdrawals, adjustments,
winners, admin logs) and the referral store (users, referral links,
referrals). Without REFERRAL_DATABASE_URL both live in the same database.
"""

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker, AsyncEngine
from sqlalchemy.pool import NullPool
from fastapi import Depends
from typing import AsyncGenerator, Optional
import logging

from .config import settings

logger = logging.getLogger(__name__)

def _create_engine(url: str) -> AsyncEngine:
    if url.startswith("sqlite"):
        # SQLite doesn't support connection pooling parameters
        return create_async_engine(
            url,
            echo=settings.DATABASE_ECHO,
            poolclass=NullPool,
        )
    return create_async_engine(
        url,
        echo=settings.DATABASE_ECHO,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_timeout=settings.DATABASE_POOL_TIMEOUT,
        pool_pre_ping=True,  # Verify connections before use
    )

engine = _create_engine(settings.database_url_async)

referral_engine: Optional[AsyncEngine] = None
if settings.has_separate_referral_store:
    referral_engine = _create_engine(settings.referral_database_url_async)

# Create session factories
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autocommit=False,
    autoflush=False,
)

ReferralSessionLocal = None
if referral_engine is not None:
    ReferralSessionLocal = async_sessionmaker(
        referral_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

# Database dependency
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Create and yield database session
    Ensures proper cleanup after use
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

async def get_referral_db(
    db: AsyncSession = Depends(get_db)
) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a session on the referral store
    Reuses the request's earnings session when no separate store is configured
    """
    if ReferralSessionLocal is None:
        yield db
        return

    async with ReferralSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

async def init_db() -> None:
    """Initialize database tables"""
    from earnings_api.models import Base, EARNINGS_TABLES

    async with engine.begin() as conn:
        if referral_engine is None:
            await conn.run_sync(Base.metadata.create_all)
        else:
            # The referral store is owned elsewhere; only create our own tables
            await conn.run_sync(Base.metadata.create_all, tables=EARNINGS_TABLES)
    logger.info("Database tables created successfully")

async def close_db() -> None:
    """Close database connections"""
    await engine.dispose()
    if referral_engine is not None:
        await referral_engine.dispose()
    logger.info("Database connections closed")
