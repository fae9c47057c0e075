"""API routes aggregation"""

from fastapi import APIRouter

from .earnings.router import router as earnings_router
from .admin.router import router as admin_router

api_router = APIRouter()

api_router.include_router(earnings_router, prefix="/earnings", tags=["Earnings"])
api_router.include_router(admin_router, prefix="/admin", tags=["Admin"])
