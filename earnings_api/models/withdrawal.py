"""Withdrawal request model"""

from sqlalchemy import Column, String, Numeric, DateTime, Text, Index, CheckConstraint, text
from sqlalchemy.sql import func
import enum

from .base import BaseModel, UUIDModel, utcnow

class WithdrawalStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"

# Statuses whose amount is deducted from the available balance
COMMITTED_STATUSES = (
    WithdrawalStatus.PENDING.value,
    WithdrawalStatus.APPROVED.value,
    WithdrawalStatus.PAID.value,
)

class Withdrawal(BaseModel, UUIDModel):
    """User cash-out request, resolved by an admin"""

    __tablename__ = "withdrawals"

    user_id = Column(String(128), nullable=False, index=True)
    operator = Column(String(50), nullable=False)
    requested_amount = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), nullable=False, default=WithdrawalStatus.PENDING.value)

    requested_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), index=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)
    processed_by = Column(String(150), nullable=True)
    admin_notes = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("requested_amount > 0", name="check_withdrawal_amount_positive"),
        # One pending request per user
        Index(
            "uq_withdrawals_one_pending_per_user",
            "user_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
        Index("idx_withdrawals_user_status", "user_id", "status"),
    )
