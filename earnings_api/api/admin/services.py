"""
Admin earnings service layer
User overviews, manual adjustments, referral moderation and exports
"""

from typing import Any, Dict, List, Optional, Tuple
from decimal import Decimal
from sqlalchemy import select, case, literal
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import Request
import uuid
import logging

from earnings_api.core.config import settings
from earnings_api.core.exceptions import (
    ForbiddenException, NotFoundException, ValidationException,
    InsufficientBalanceException, InvalidStatusTransitionException,
)
from earnings_api.core.monitoring import earnings_adjustments
from earnings_api.models import (
    User, ReferralLink, Referral, ReferralStatus,
    EarningsAdjustment, AdjustmentType,
)
from earnings_api.services.audit_service import AuditService
from earnings_api.services.balance import BalanceService, BalanceSummary
from earnings_api.services.state_machine import ReferralStateMachine
from earnings_api.services.withdrawal_service import WithdrawalService
from earnings_api.utils.helpers import quantize_amount, to_decimal
from earnings_api.api.earnings.services import EarningsService

logger = logging.getLogger(__name__)

EXPORT_TYPES = ("withdrawals", "users", "earnings", "adjustments")

WITHDRAWAL_FIELDS = [
    "id", "user_id", "operator", "requested_amount", "status", "requested_at",
    "processed_at", "processed_by", "admin_notes", "rejection_reason",
]
USER_FIELDS = [
    "id", "email", "display_name", "total_earnings", "total_withdrawn",
    "current_balance", "pending_withdrawals",
]
EARNINGS_FIELDS = [
    "id", "user_id", "operator", "referral_code", "referred_person_name",
    "amount_earned", "status", "created_at",
]
ADJUSTMENT_FIELDS = [
    "id", "user_id", "amount", "adjustment_type", "reason", "admin_username", "created_at",
]

def balance_view(summary: BalanceSummary) -> Dict[str, Any]:
    return {
        "total_earnings": summary.lifetime_earnings,
        "total_adjustments": summary.total_adjustments,
        "total_withdrawn": summary.total_withdrawn,
        "current_balance": summary.available_balance,
        "pending_withdrawals": summary.pending_withdrawals,
    }

class AdminEarningsService:
    """Admin-side reads and writes over earnings data"""

    def __init__(self, db: AsyncSession, referral_db: Optional[AsyncSession] = None):
        self.db = db
        self.referral_db = referral_db or db
        self.balance_service = BalanceService(db, self.referral_db)
        self.earnings_service = EarningsService(db, self.referral_db)
        self.withdrawal_service = WithdrawalService(db, self.referral_db)
        self.audit_service = AuditService(db)
        self.referral_state_machine = ReferralStateMachine()

    async def users_with_balances(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        """Every known user with their balance figures, by email"""
        stmt = select(User).order_by(User.email, User.id)
        if user_id:
            stmt = stmt.where(User.id == user_id)
        users = list((await self.referral_db.execute(stmt)).scalars().all())
        summaries = await self.balance_service.summaries_for_users([user.id for user in users])

        rows = []
        for user in users:
            summary = summaries.get(user.id, BalanceSummary())
            rows.append({
                "id": user.id,
                "email": user.email,
                "display_name": user.display_name,
                "total_earnings": summary.lifetime_earnings,
                "total_withdrawn": summary.total_withdrawn,
                "current_balance": summary.available_balance,
                "pending_withdrawals": summary.pending_withdrawals,
            })
        return rows

    async def list_adjustments(self, user_id: Optional[str] = None) -> List[EarningsAdjustment]:
        stmt = select(EarningsAdjustment)
        if user_id:
            stmt = stmt.where(EarningsAdjustment.user_id == user_id)
        result = await self.db.execute(stmt.order_by(EarningsAdjustment.created_at.desc()))
        return list(result.scalars().all())

    async def user_detail(self, user_id: str) -> Dict[str, Any]:
        """Everything the admin panel shows for one user"""
        user = await self.earnings_service.get_user(user_id)
        summary = await self.balance_service.compute(user_id)

        return {
            "user": user,
            "earnings": balance_view(summary),
            "user_earnings": await self.balance_service.operator_breakdown(user_id),
            "earnings_history": await self.earnings_service.earnings_history(user_id),
            "withdrawals": await self.withdrawal_service.list_for_user(user_id),
            "referral_links": await self.earnings_service.referral_links(user_id),
            "adjustments": await self.list_adjustments(user_id),
        }

    async def adjust_earnings(
        self,
        user_id: str,
        amount: Decimal,
        adjustment_type: AdjustmentType,
        reason: str,
        admin_username: str,
        username: Optional[str] = None,
        request: Optional[Request] = None
    ) -> Tuple[EarningsAdjustment, BalanceSummary]:
        """
        Record a manual credit or debit

        Debits may not take the available balance below zero.

        Raises:
            NotFoundException: If the user does not exist
            InsufficientBalanceException: If a debit exceeds the available balance
        """
        await self.earnings_service.get_user(user_id)
        amount = quantize_amount(amount)
        if amount <= 0:
            raise ValidationException("Invalid adjustment amount")

        before = await self.balance_service.compute(user_id)
        if adjustment_type == AdjustmentType.DEBIT:
            if amount > before.available_balance:
                raise InsufficientBalanceException(before.available_balance, settings.CURRENCY_SYMBOL)
            signed = -amount
        else:
            signed = amount

        adjustment = EarningsAdjustment(
            user_id=user_id,
            amount=signed,
            adjustment_type=adjustment_type.value,
            reason=reason,
            admin_username=admin_username,
        )
        self.db.add(adjustment)
        await self.db.flush()

        await self.audit_service.log_admin_action(
            admin_username=admin_username,
            action="adjust_earnings",
            entity_type="user",
            entity_id=user_id,
            description=f"{adjustment_type.value.capitalize()} of {amount:.2f} for {username or user_id}: {reason}",
            old_values={"current_balance": f"{before.available_balance:.2f}"},
            new_values={"adjustment": f"{signed:.2f}", "reason": reason},
            request=request,
        )
        await self.db.refresh(adjustment)

        earnings_adjustments.labels(adjustment_type=adjustment_type.value).inc()
        logger.info(f"Adjustment {adjustment.id} of {signed} for {user_id} by {admin_username}")

        after = await self.balance_service.compute(user_id)
        return adjustment, after

    async def update_referral_status(
        self,
        referral_id: uuid.UUID,
        new_status: ReferralStatus,
        admin_username: str,
        request: Optional[Request] = None
    ) -> Referral:
        """
        Approve or reject a pending referral

        Raises:
            ForbiddenException: If referrals live in a separate read-only store
            NotFoundException: If the referral does not exist
            InvalidStatusTransitionException: If it was already decided
        """
        if settings.has_separate_referral_store:
            raise ForbiddenException("Referral store is read-only for this service")

        referral = await self.referral_db.get(Referral, referral_id)
        if not referral:
            raise NotFoundException("Referral not found")

        old_status = referral.status
        if not self.referral_state_machine.can_transition(old_status, new_status.value):
            raise InvalidStatusTransitionException("referral", old_status, new_status.value)

        referral.status = new_status.value
        await self.audit_service.log_admin_action(
            admin_username=admin_username,
            action="update_referral_status",
            entity_type="referral",
            entity_id=str(referral.id),
            description=f"Referral {new_status.value}",
            old_values={"status": old_status},
            new_values={"status": new_status.value},
            request=request,
        )
        await self.referral_db.refresh(referral)
        logger.info(f"Referral {referral.id} {new_status.value} by {admin_username}")
        return referral

    async def _earnings_records(self, user_id: Optional[str] = None) -> List[Dict[str, Any]]:
        reward = to_decimal(settings.REWARD_PER_REFERRAL)
        stmt = (
            select(
                Referral.id,
                ReferralLink.user_id,
                ReferralLink.operator,
                ReferralLink.referral_code,
                Referral.referred_name.label("referred_person_name"),
                case(
                    (Referral.status == ReferralStatus.APPROVED.value, literal(reward)),
                    else_=literal(0),
                ).label("amount_earned"),
                Referral.status,
                Referral.created_at,
            )
            .join(ReferralLink, Referral.referral_link_id == ReferralLink.id)
            .order_by(Referral.created_at.desc())
        )
        if user_id:
            stmt = stmt.where(ReferralLink.user_id == user_id)
        result = await self.referral_db.execute(stmt)
        return [dict(row._mapping) for row in result]

    async def export_records(
        self,
        export_type: str,
        user_id: Optional[str] = None
    ) -> Tuple[List[Dict[str, Any]], List[str]]:
        """
        Rows and header for a CSV export

        Raises:
            ValidationException: Unknown export type
        """
        if export_type == "withdrawals":
            withdrawals = await self.withdrawal_service.list_all(user_id=user_id)
            return [w.to_dict() for w in withdrawals], WITHDRAWAL_FIELDS
        if export_type == "users":
            return await self.users_with_balances(user_id), USER_FIELDS
        if export_type == "earnings":
            return await self._earnings_records(user_id), EARNINGS_FIELDS
        if export_type == "adjustments":
            adjustments = await self.list_adjustments(user_id)
            return [a.to_dict() for a in adjustments], ADJUSTMENT_FIELDS

        raise ValidationException(f"Invalid export type. Use one of: {', '.join(EXPORT_TYPES)}")
