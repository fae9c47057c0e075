"""Admin earnings schemas"""

from pydantic import Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import date, datetime
from decimal import Decimal
import uuid

from earnings_api.models import AdjustmentType, WithdrawalStatus, ReferralStatus
from earnings_api.schemas.base import BaseSchema, CamelSchema, SuccessResponse, MessageResponse, Money
from earnings_api.utils.validators import parse_amount, sanitize_text, validate_user_id
from earnings_api.api.earnings.schemas import (
    UserOut,
    OperatorEarningsRow,
    EarningsHistoryRow,
    WithdrawalRow,
    ReferralLinkRow,
    WinnerRow,
)

class AdminLogin(CamelSchema):
    username: str = Field(..., min_length=1, max_length=150)
    password: str = Field(..., min_length=1)

class AdminOut(CamelSchema):
    username: str

class AdminLoginResponse(SuccessResponse):
    admin_token: str
    admin: AdminOut

class WithdrawalResolve(CamelSchema):
    """Approve or reject a pending withdrawal"""
    status: str = Field(..., description="approved, rejected")
    admin_notes: Optional[str] = None
    rejection_reason: Optional[str] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        allowed = (WithdrawalStatus.APPROVED.value, WithdrawalStatus.REJECTED.value)
        if v not in allowed:
            raise ValueError(f"Status must be one of: {', '.join(allowed)}")
        return v

    @field_validator("admin_notes", "rejection_reason")
    @classmethod
    def clean_text(cls, v):
        return sanitize_text(v) if v else v

class EarningsAdjustmentCreate(CamelSchema):
    """Manual credit or debit on a user's earnings"""
    user_id: str
    username: Optional[str] = Field(None, description="Display name, recorded in the audit entry")
    adjustment_amount: Decimal = Field(..., description="Positive amount; the type gives the sign")
    adjustment_type: AdjustmentType
    reason: str = Field(..., min_length=1, max_length=1000)

    @field_validator("user_id")
    @classmethod
    def validate_user(cls, v):
        return validate_user_id(v)

    @field_validator("adjustment_amount", mode="before")
    @classmethod
    def validate_amount(cls, v):
        if v is None or isinstance(v, bool):
            raise ValueError("Invalid adjustment amount")
        return parse_amount(v)

    @field_validator("username")
    @classmethod
    def clean_username(cls, v):
        return sanitize_text(v, max_length=150) if v else v

    @field_validator("reason")
    @classmethod
    def clean_reason(cls, v):
        cleaned = sanitize_text(v)
        if not cleaned:
            raise ValueError("Reason is required")
        return cleaned

class ReferralStatusUpdate(CamelSchema):
    status: ReferralStatus

class SetWinners(CamelSchema):
    winner1: str
    winner2: str
    message: Optional[str] = Field(None, max_length=500)

    @field_validator("winner1", "winner2")
    @classmethod
    def validate_winner(cls, v):
        return validate_user_id(v)

    @field_validator("message")
    @classmethod
    def clean_message(cls, v):
        return sanitize_text(v, max_length=500) if v else v

# Rows

class AdminUserRow(BaseSchema):
    id: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    total_earnings: Money
    total_withdrawn: Money
    current_balance: Money
    pending_withdrawals: int

class AdjustmentRow(BaseSchema):
    id: uuid.UUID
    user_id: str
    amount: Money
    adjustment_type: str
    reason: str
    admin_username: str
    created_at: Optional[datetime] = None

class ReferralRow(BaseSchema):
    id: uuid.UUID
    referral_link_id: uuid.UUID
    referred_name: str
    status: str
    created_at: Optional[datetime] = None

class AuditLogRow(BaseSchema):
    id: uuid.UUID
    admin_username: str
    action: str
    entity_type: str
    entity_id: str
    description: Optional[str] = None
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    created_at: Optional[datetime] = None

class BalanceOut(CamelSchema):
    total_earnings: Money
    total_adjustments: Money
    total_withdrawn: Money
    current_balance: Money
    pending_withdrawals: int

# Responses

class AdminUsersResponse(SuccessResponse):
    users: List[AdminUserRow]

class AdminUserDetailResponse(SuccessResponse):
    user: UserOut
    earnings: BalanceOut
    user_earnings: List[OperatorEarningsRow]
    earnings_history: List[EarningsHistoryRow]
    withdrawals: List[WithdrawalRow]
    referral_links: List[ReferralLinkRow]
    adjustments: List[AdjustmentRow]

class AdminWithdrawalsResponse(SuccessResponse):
    withdrawals: List[WithdrawalRow]

class WithdrawalResolvedResponse(SuccessResponse):
    withdrawal: WithdrawalRow

class AdjustmentCreatedResponse(MessageResponse):
    adjustment: AdjustmentRow
    balance: BalanceOut

class ReferralStatusResponse(SuccessResponse):
    referral: ReferralRow

class SetWinnersResponse(SuccessResponse):
    week_start: date
    week_end: date
    winners: List[WinnerRow]

class AuditLogResponse(SuccessResponse):
    logs: List[AuditLogRow]
