"""
Balance computation

available balance = lifetime earnings - committed withdrawals, where
lifetime earnings = reward x approved referrals + manual adjustments and
committed withdrawals are those in pending, approved or paid status.
Everything is recomputed from rows on each call. A rejected withdrawal
simply drops out of the committed set, which restores the balance.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, List, Optional
from sqlalchemy import select, func, case
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from earnings_api.core.config import settings
from earnings_api.models import (
    ReferralLink, Referral, ReferralStatus, EarningsAdjustment, Withdrawal,
    WithdrawalStatus, COMMITTED_STATUSES,
)
from earnings_api.utils.helpers import quantize_amount, to_decimal

logger = logging.getLogger(__name__)

@dataclass
class BalanceSummary:
    """Earnings position of one user"""

    referral_earnings: Decimal = Decimal("0.00")
    total_adjustments: Decimal = Decimal("0.00")
    total_withdrawn: Decimal = Decimal("0.00")
    pending_withdrawals: int = 0

    @property
    def lifetime_earnings(self) -> Decimal:
        return quantize_amount(self.referral_earnings + self.total_adjustments)

    @property
    def available_balance(self) -> Decimal:
        return quantize_amount(self.lifetime_earnings - self.total_withdrawn)

@dataclass
class OperatorEarnings:
    operator: str
    total_referrals: int
    approved_referrals_count: int
    total_amount: Decimal = field(default=Decimal("0.00"))

def _approved_count():
    return func.count(case((Referral.status == ReferralStatus.APPROVED.value, Referral.id)))

class BalanceService:
    """Derives earnings and balances from referral, adjustment and withdrawal rows"""

    def __init__(self, db: AsyncSession, referral_db: Optional[AsyncSession] = None):
        self.db = db
        self.referral_db = referral_db or db
        self.reward = to_decimal(settings.REWARD_PER_REFERRAL)

    async def operator_breakdown(self, user_id: str) -> List[OperatorEarnings]:
        """Referral counts and earned amount per operator"""
        result = await self.referral_db.execute(
            select(
                ReferralLink.operator,
                func.count(Referral.id).label("total_referrals"),
                _approved_count().label("approved_referrals_count"),
            )
            .select_from(ReferralLink)
            .outerjoin(Referral, Referral.referral_link_id == ReferralLink.id)
            .where(ReferralLink.user_id == user_id)
            .group_by(ReferralLink.operator)
            .order_by(ReferralLink.operator)
        )
        return [
            OperatorEarnings(
                operator=row.operator,
                total_referrals=int(row.total_referrals or 0),
                approved_referrals_count=int(row.approved_referrals_count or 0),
                total_amount=quantize_amount(self.reward * int(row.approved_referrals_count or 0)),
            )
            for row in result
        ]

    async def approved_referrals(self, user_id: str, operator: Optional[str] = None) -> int:
        stmt = (
            select(func.count(Referral.id))
            .select_from(Referral)
            .join(ReferralLink, Referral.referral_link_id == ReferralLink.id)
            .where(
                ReferralLink.user_id == user_id,
                Referral.status == ReferralStatus.APPROVED.value,
            )
        )
        if operator:
            stmt = stmt.where(ReferralLink.operator == operator)
        return int((await self.referral_db.execute(stmt)).scalar() or 0)

    async def adjustments_total(self, user_id: str) -> Decimal:
        result = await self.db.execute(
            select(func.coalesce(func.sum(EarningsAdjustment.amount), 0))
            .where(EarningsAdjustment.user_id == user_id)
        )
        return quantize_amount(result.scalar())

    async def withdrawn_total(self, user_id: str, operator: Optional[str] = None) -> Decimal:
        stmt = (
            select(func.coalesce(func.sum(Withdrawal.requested_amount), 0))
            .where(
                Withdrawal.user_id == user_id,
                Withdrawal.status.in_(COMMITTED_STATUSES),
            )
        )
        if operator:
            stmt = stmt.where(Withdrawal.operator == operator)
        return quantize_amount((await self.db.execute(stmt)).scalar())

    async def pending_count(self, user_id: str) -> int:
        result = await self.db.execute(
            select(func.count(Withdrawal.id)).where(
                Withdrawal.user_id == user_id,
                Withdrawal.status == WithdrawalStatus.PENDING.value,
            )
        )
        return int(result.scalar() or 0)

    async def compute(self, user_id: str, operator: Optional[str] = None) -> BalanceSummary:
        """
        Compute the balance triple for a user

        Args:
            user_id: User to compute for
            operator: Restrict to one operator's referrals and withdrawals;
                adjustments are user-level and only count when unscoped

        Returns:
            BalanceSummary with lifetime earnings, withdrawn and available amounts
        """
        approved = await self.approved_referrals(user_id, operator)
        adjustments = Decimal("0.00") if operator else await self.adjustments_total(user_id)

        return BalanceSummary(
            referral_earnings=quantize_amount(self.reward * approved),
            total_adjustments=adjustments,
            total_withdrawn=await self.withdrawn_total(user_id, operator),
            pending_withdrawals=await self.pending_count(user_id),
        )

    async def summaries_for_users(self, user_ids: Optional[Iterable[str]] = None) -> Dict[str, BalanceSummary]:
        """Bulk balances keyed by user id, for admin listings"""
        ids = list(user_ids) if user_ids is not None else None
        summaries: Dict[str, BalanceSummary] = {}

        def bucket(user_id: str) -> BalanceSummary:
            return summaries.setdefault(user_id, BalanceSummary())

        approved_stmt = (
            select(ReferralLink.user_id, _approved_count().label("approved"))
            .select_from(ReferralLink)
            .outerjoin(Referral, Referral.referral_link_id == ReferralLink.id)
            .group_by(ReferralLink.user_id)
        )
        adjustments_stmt = (
            select(EarningsAdjustment.user_id, func.sum(EarningsAdjustment.amount).label("total"))
            .group_by(EarningsAdjustment.user_id)
        )
        withdrawn_stmt = (
            select(Withdrawal.user_id, func.sum(Withdrawal.requested_amount).label("total"))
            .where(Withdrawal.status.in_(COMMITTED_STATUSES))
            .group_by(Withdrawal.user_id)
        )
        pending_stmt = (
            select(Withdrawal.user_id, func.count(Withdrawal.id).label("pending"))
            .where(Withdrawal.status == WithdrawalStatus.PENDING.value)
            .group_by(Withdrawal.user_id)
        )
        if ids is not None:
            approved_stmt = approved_stmt.where(ReferralLink.user_id.in_(ids))
            adjustments_stmt = adjustments_stmt.where(EarningsAdjustment.user_id.in_(ids))
            withdrawn_stmt = withdrawn_stmt.where(Withdrawal.user_id.in_(ids))
            pending_stmt = pending_stmt.where(Withdrawal.user_id.in_(ids))
            for user_id in ids:
                bucket(user_id)

        for row in await self.referral_db.execute(approved_stmt):
            bucket(row.user_id).referral_earnings = quantize_amount(self.reward * int(row.approved or 0))
        for row in await self.db.execute(adjustments_stmt):
            bucket(row.user_id).total_adjustments = quantize_amount(row.total)
        for row in await self.db.execute(withdrawn_stmt):
            bucket(row.user_id).total_withdrawn = quantize_amount(row.total)
        for row in await self.db.execute(pending_stmt):
            bucket(row.user_id).pending_withdrawals = int(row.pending or 0)

        return summaries
