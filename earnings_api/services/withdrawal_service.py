"""
Withdrawal service layer
Handles withdrawal requests and their admin resolution
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from fastapi import Request
import uuid
import logging

from earnings_api.core.config import settings
from earnings_api.core.exceptions import (
    NotFoundException, PendingWithdrawalExistsException,
    InsufficientBalanceException, InvalidStatusTransitionException,
    ValidationException,
)
from earnings_api.core.monitoring import withdrawals_requested, withdrawals_refused, withdrawals_resolved
from earnings_api.models import Withdrawal, WithdrawalStatus
from earnings_api.utils.helpers import quantize_amount, utc_now
from .audit_service import AuditService
from .balance import BalanceService
from .state_machine import WithdrawalStateMachine

logger = logging.getLogger(__name__)

@dataclass
class WithdrawalRequestResult:
    withdrawal: Withdrawal
    remaining_balance: Decimal

class WithdrawalService:
    """Withdrawal service for business logic"""

    def __init__(self, db: AsyncSession, referral_db: Optional[AsyncSession] = None):
        self.db = db
        self.balance_service = BalanceService(db, referral_db)
        self.audit_service = AuditService(db)
        self.state_machine = WithdrawalStateMachine()

    async def has_pending(self, user_id: str) -> bool:
        result = await self.db.execute(
            select(Withdrawal.id).where(
                Withdrawal.user_id == user_id,
                Withdrawal.status == WithdrawalStatus.PENDING.value,
            ).limit(1)
        )
        return result.first() is not None

    async def request_withdrawal(
        self,
        user_id: str,
        operator: str,
        amount: Decimal
    ) -> WithdrawalRequestResult:
        """
        Create a pending withdrawal

        Args:
            user_id: Authenticated user
            operator: Normalised operator name
            amount: Positive amount to withdraw

        Returns:
            Created withdrawal and the balance left after it

        Raises:
            ValidationException: If the amount is not positive
            PendingWithdrawalExistsException: If a pending request exists
            InsufficientBalanceException: If amount exceeds available balance
        """
        amount = quantize_amount(amount)
        if amount <= 0:
            raise ValidationException("Invalid withdrawal amount")

        if await self.has_pending(user_id):
            withdrawals_refused.labels(reason="pending_exists").inc()
            logger.warning(f"Withdrawal refused for {user_id}: pending request exists")
            raise PendingWithdrawalExistsException()

        balance = await self.balance_service.compute(user_id)
        available = balance.available_balance
        if amount > available:
            withdrawals_refused.labels(reason="insufficient_balance").inc()
            logger.warning(f"Withdrawal refused for {user_id}: requested {amount}, available {available}")
            raise InsufficientBalanceException(available, settings.CURRENCY_SYMBOL)

        withdrawal = Withdrawal(
            user_id=user_id,
            operator=operator,
            requested_amount=amount,
            status=WithdrawalStatus.PENDING.value,
            requested_at=utc_now(),
        )
        self.db.add(withdrawal)
        try:
            await self.db.flush()
        except IntegrityError:
            # A concurrent request won the one-pending-per-user index
            await self.db.rollback()
            withdrawals_refused.labels(reason="pending_exists").inc()
            logger.warning(f"Withdrawal refused for {user_id}: concurrent pending request")
            raise PendingWithdrawalExistsException()

        await self.db.refresh(withdrawal)
        withdrawals_requested.labels(operator=operator).inc()
        logger.info(f"Withdrawal {withdrawal.id} requested by {user_id}: {amount} via {operator}")

        return WithdrawalRequestResult(
            withdrawal=withdrawal,
            remaining_balance=quantize_amount(available - amount),
        )

    async def get_withdrawal(self, withdrawal_id: uuid.UUID) -> Withdrawal:
        withdrawal = await self.db.get(Withdrawal, withdrawal_id)
        if not withdrawal:
            raise NotFoundException("Withdrawal not found")
        return withdrawal

    async def list_for_user(self, user_id: str) -> List[Withdrawal]:
        result = await self.db.execute(
            select(Withdrawal)
            .where(Withdrawal.user_id == user_id)
            .order_by(Withdrawal.requested_at.desc())
        )
        return list(result.scalars().all())

    async def list_all(self, status: Optional[str] = None, user_id: Optional[str] = None) -> List[Withdrawal]:
        stmt = select(Withdrawal)
        if status:
            stmt = stmt.where(Withdrawal.status == status)
        if user_id:
            stmt = stmt.where(Withdrawal.user_id == user_id)
        result = await self.db.execute(stmt.order_by(Withdrawal.requested_at.desc()))
        return list(result.scalars().all())

    async def resolve(
        self,
        withdrawal_id: uuid.UUID,
        new_status: str,
        admin_username: str,
        admin_notes: Optional[str] = None,
        rejection_reason: Optional[str] = None,
        request: Optional[Request] = None
    ) -> Withdrawal:
        """
        Approve or reject a pending withdrawal

        Raises:
            NotFoundException: If the withdrawal does not exist
            InvalidStatusTransitionException: If it is no longer pending
        """
        withdrawal = await self.get_withdrawal(withdrawal_id)
        old_status = withdrawal.status

        if not self.state_machine.can_transition(old_status, new_status):
            raise InvalidStatusTransitionException("withdrawal", old_status, new_status)

        withdrawal.status = new_status
        withdrawal.processed_at = utc_now()
        withdrawal.processed_by = admin_username
        withdrawal.admin_notes = admin_notes
        if new_status == WithdrawalStatus.REJECTED.value:
            withdrawal.rejection_reason = rejection_reason

        await self.audit_service.log_admin_action(
            admin_username=admin_username,
            action="resolve_withdrawal",
            entity_type="withdrawal",
            entity_id=str(withdrawal.id),
            description=f"Withdrawal {new_status}",
            old_values={"status": old_status},
            new_values={
                "status": new_status,
                "admin_notes": admin_notes,
                "rejection_reason": withdrawal.rejection_reason,
            },
            request=request,
        )
        await self.db.refresh(withdrawal)

        withdrawals_resolved.labels(status=new_status).inc()
        logger.info(f"Withdrawal {withdrawal.id} {new_status} by {admin_username}")
        return withdrawal
