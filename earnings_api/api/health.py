"""Liveness and store connectivity checks"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from earnings_api.core.config import settings
from earnings_api.core.database import get_db
from earnings_api.core.exceptions import StoreException

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}

@router.get("/api/test")
async def test_database(db: AsyncSession = Depends(get_db)):
    """Round-trip to the earnings store"""
    try:
        result = await db.execute(text("SELECT CURRENT_TIMESTAMP"))
        now = result.scalar()
    except SQLAlchemyError as e:
        logger.error(f"Database check failed: {e}")
        raise StoreException("Database connection failed")

    return {
        "success": True,
        "message": "Database connected!",
        "time": str(now),
    }
