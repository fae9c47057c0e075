"""
Earnings service layer
Read-side queries for the user dashboard
"""

from typing import Any, Dict, List, Optional
from sqlalchemy import select, case, literal
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from earnings_api.core.config import settings
from earnings_api.core.exceptions import UnauthorizedException, ForbiddenException, NotFoundException
from earnings_api.core.security import SecurityUtils, principal_from_payload, is_admin
from earnings_api.models import User, ReferralLink, Referral, ReferralStatus
from earnings_api.services.balance import BalanceService
from earnings_api.utils.helpers import to_decimal

logger = logging.getLogger(__name__)

class EarningsService:
    """Earnings service for user-facing reads"""

    def __init__(self, db: AsyncSession, referral_db: Optional[AsyncSession] = None):
        self.db = db
        self.referral_db = referral_db or db
        self.balance_service = BalanceService(db, self.referral_db)

    async def get_user(self, user_id: str) -> User:
        user = await self.referral_db.get(User, user_id)
        if not user:
            raise NotFoundException("User not found")
        return user

    async def validate_token(self, token: str, uid: Optional[str] = None) -> User:
        """
        Resolve a signed token to its user

        Raises:
            UnauthorizedException: Bad token or unknown user
            ForbiddenException: Token belongs to someone other than ``uid``
        """
        principal = principal_from_payload(SecurityUtils.decode_token(token))
        if is_admin(principal):
            raise ForbiddenException("Admin tokens cannot be used as user tokens")
        if uid and uid != principal["id"]:
            logger.warning(f"Token for {principal['id']} presented with uid {uid}")
            raise ForbiddenException("Token does not belong to this user")

        user = await self.referral_db.get(User, principal["id"])
        if not user:
            raise UnauthorizedException("User not found", error_code="USER_NOT_FOUND")
        return user

    async def dashboard(self, user_id: str) -> Dict[str, Any]:
        breakdown = await self.balance_service.operator_breakdown(user_id)
        balance = await self.balance_service.compute(user_id)
        return {
            "total_earnings": balance.lifetime_earnings,
            "current_balance": balance.available_balance,
            "total_withdrawn": balance.total_withdrawn,
            "total_adjustments": balance.total_adjustments,
            "user_earnings": breakdown,
        }

    async def earnings_history(self, user_id: str, operator: Optional[str] = None) -> List[Dict[str, Any]]:
        """Referral rows with the amount each earned, newest first"""
        reward = to_decimal(settings.REWARD_PER_REFERRAL)
        amount_earned = case(
            (Referral.status == ReferralStatus.APPROVED.value, literal(reward)),
            else_=literal(0),
        )
        stmt = (
            select(
                Referral.id,
                ReferralLink.operator,
                Referral.referred_name.label("referred_person_name"),
                amount_earned.label("amount_earned"),
                Referral.status,
                Referral.created_at,
            )
            .join(ReferralLink, Referral.referral_link_id == ReferralLink.id)
            .where(ReferralLink.user_id == user_id)
            .order_by(Referral.created_at.desc())
        )
        if operator:
            stmt = stmt.where(ReferralLink.operator == operator)

        result = await self.referral_db.execute(stmt)
        return [dict(row._mapping) for row in result]

    async def referral_links(self, user_id: str) -> List[ReferralLink]:
        result = await self.referral_db.execute(
            select(ReferralLink)
            .where(ReferralLink.user_id == user_id)
            .order_by(ReferralLink.created_at.desc())
        )
        return list(result.scalars().all())
