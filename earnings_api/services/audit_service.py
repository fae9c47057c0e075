"""Audit logging service"""

from typing import Dict, Any, List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import Request
import logging

from earnings_api.models import AdminLog

logger = logging.getLogger(__name__)

class AuditService:
    """Service for logging admin actions"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def log_admin_action(
        self,
        admin_username: str,
        action: str,
        entity_type: str,
        entity_id: str,
        description: Optional[str] = None,
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
        request: Optional[Request] = None
    ) -> AdminLog:
        """Log an admin action in the caller's transaction"""
        ip_address = None
        user_agent = None

        if request is not None:
            forwarded = request.headers.get("X-Forwarded-For")
            if forwarded:
                ip_address = forwarded.split(",")[0].strip()
            elif request.client:
                ip_address = request.client.host
            user_agent = request.headers.get("User-Agent")

        log = AdminLog(
            admin_username=admin_username,
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id),
            description=description,
            old_values=old_values,
            new_values=new_values,
            ip_address=ip_address,
            user_agent=user_agent
        )

        self.db.add(log)
        await self.db.flush()
        logger.info(f"Admin {admin_username} performed {action} on {entity_type} {entity_id}")

        return log

    async def get_admin_logs(
        self,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        limit: int = 100,
        offset: int = 0
    ) -> List[AdminLog]:
        """Get admin logs with filters"""
        stmt = select(AdminLog)

        if entity_type:
            stmt = stmt.where(AdminLog.entity_type == entity_type)
        if entity_id:
            stmt = stmt.where(AdminLog.entity_id == str(entity_id))

        stmt = stmt.order_by(AdminLog.created_at.desc()).offset(offset).limit(limit)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
